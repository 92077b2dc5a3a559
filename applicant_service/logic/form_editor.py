"""Form state for the applicant form and its personal reference blocks.

`NestedCollectionEditor` holds the ordered personal reference blocks of one
applicant form. Blocks are never removed: "Destroy" flags a block and hides
it, and the flagged block is still submitted so the server can delete the
stored reference (or ignore a block that was never saved). Each block keeps
the index it was created with; indices are never reused within an editor, so
submitted field names cannot collide.

The same model builds the new and edit form views and rebuilds the form from
a failed submission.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from applicant_service.models.records import ApplicantRecord

FIELDSET_LEGEND = "Personal Reference"
ADD_BLOCK_LABEL = "Add another personal reference"
REMOVE_BLOCK_LABEL = "Destroy"


class UnknownBlockError(KeyError):
    pass


class HiddenBlockError(ValueError):
    pass


@dataclass
class FormBlock:
    index: int
    id: Optional[str] = None
    name: str = ""
    email_address: str = ""
    destroy: bool = False

    @property
    def hidden(self) -> bool:
        return self.destroy

    def fields(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "name": self.name,
            "email_address": self.email_address,
            "_destroy": self.destroy,
        }
        if self.id is not None:
            out["id"] = self.id
        return out


class NestedCollectionEditor:
    def __init__(self, name: str = "", blocks: Iterable[FormBlock] = ()) -> None:
        self.name = name
        self._blocks: List[FormBlock] = list(blocks)
        self._next_index = max((b.index for b in self._blocks), default=-1) + 1

    @classmethod
    def for_new(cls, initial_blocks: int = 1) -> "NestedCollectionEditor":
        editor = cls()
        for _ in range(initial_blocks):
            editor.add_block()
        return editor

    @classmethod
    def for_edit(cls, applicant: ApplicantRecord) -> "NestedCollectionEditor":
        blocks = [
            FormBlock(index=i, id=ref.personal_reference_id, name=ref.name, email_address=ref.email_address)
            for i, ref in enumerate(applicant.personal_references)
        ]
        return cls(name=applicant.name, blocks=blocks)

    @classmethod
    def from_submitted(cls, submitted: Mapping[str, Any]) -> "NestedCollectionEditor":
        """Rebuild the form exactly as submitted, flagged blocks included."""
        blocks = []
        for i, group in enumerate(submitted.get("personal_references_attributes") or []):
            blocks.append(
                FormBlock(
                    index=i,
                    id=group.get("id"),
                    name=str(group.get("name") or ""),
                    email_address=str(group.get("email_address") or ""),
                    destroy=bool(group.get("_destroy")),
                )
            )
        return cls(name=str(submitted.get("name") or ""), blocks=blocks)

    @property
    def blocks(self) -> List[FormBlock]:
        return list(self._blocks)

    @property
    def visible_blocks(self) -> List[FormBlock]:
        return [b for b in self._blocks if not b.hidden]

    @property
    def remove_button_count(self) -> int:
        return len(self.visible_blocks)

    def block(self, index: int) -> FormBlock:
        for b in self._blocks:
            if b.index == index:
                return b
        raise UnknownBlockError(index)

    def add_block(self) -> FormBlock:
        """Append a blank block at the end of the form."""
        block = FormBlock(index=self._next_index)
        self._next_index += 1
        self._blocks.append(block)
        return block

    def mark_for_removal(self, index: int) -> FormBlock:
        """Flag a block for destruction and hide it; its values are kept."""
        block = self.block(index)
        block.destroy = True
        return block

    def fill(self, index: int, *, name: Optional[str] = None, email_address: Optional[str] = None) -> FormBlock:
        block = self.block(index)
        if block.hidden:
            raise HiddenBlockError(f"block {index} is hidden")
        if name is not None:
            block.name = name
        if email_address is not None:
            block.email_address = email_address
        return block

    def to_payload(self) -> Dict[str, Any]:
        """Return the request body a submit of this form sends."""
        return {
            "applicant": {
                "name": self.name,
                "personal_references_attributes": {str(b.index): b.fields() for b in self._blocks},
            }
        }

    def to_view(self, *, heading: str, submit_label: str) -> Dict[str, Any]:
        return {
            "heading": heading,
            "submit_label": submit_label,
            "name": self.name,
            "fieldset_legend": FIELDSET_LEGEND,
            "add_label": ADD_BLOCK_LABEL,
            "remove_label": REMOVE_BLOCK_LABEL,
            "remove_button_count": self.remove_button_count,
            "blocks": [dict(b.fields(), index=b.index, hidden=b.hidden) for b in self._blocks],
        }


__all__ = [
    "FormBlock",
    "NestedCollectionEditor",
    "UnknownBlockError",
    "HiddenBlockError",
    "FIELDSET_LEGEND",
    "ADD_BLOCK_LABEL",
    "REMOVE_BLOCK_LABEL",
]
