"""Configuration utilities for the Applicant Service.

This module loads application configuration with the following rules:
- Primary source: `applicant_config.json` at the project root.
- Overrides: environment variables, then optional text files under `config/`.
- Validation: Pydantic models enforce required fields and value constraints.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator


CONFIG_DIR = Path("config")
ROOT_CONFIG = Path("applicant_config.json")
DEFAULT_MIGRATIONS_DIR = Path(__file__).resolve().parents[1] / "migrations"
DEFAULT_DATABASE_URL = "sqlite+pysqlite:///:memory:"
logger = logging.getLogger(__name__)


def _read_config_file(rel_path: str) -> Optional[str]:
    path = CONFIG_DIR / rel_path
    try:
        if path.exists():
            return path.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Failed to read override %s: %s", path, e)
        return None
    return None


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(key, default)


def _truthy(text: Optional[str]) -> bool:
    return str(text).strip().lower() in {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    url: str
    auto_apply_migrations: bool = Field(default=True)
    migrations_dir: str = Field(default=str(DEFAULT_MIGRATIONS_DIR))

    @field_validator("url")
    @classmethod
    def url_must_be_non_empty(cls, v: str) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("database.url must be a non-empty string")
        return v


class FormsConfig(BaseModel):
    # New child groups whose fields are all blank are dropped instead of validated
    reject_all_blank: bool = Field(default=True)
    initial_blocks: int = Field(default=1, ge=0)


class AppConfig(BaseModel):
    database: DatabaseConfig
    forms: FormsConfig


def _read_json_file(path: Path) -> dict:
    try:
        if path.exists():
            return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error("Failed to read JSON config %s: %s", path, e)
    return {}


def load_config() -> AppConfig:
    """Load configuration with validation.

    Precedence (highest first):
    1) Environment variables
    2) Text files in `config/` (optional)
    3) applicant_config.json at project root
    4) Safe defaults for development
    """

    base = _read_json_file(ROOT_CONFIG)

    def _base(path: str, default: Optional[str] = None) -> Optional[str]:
        cur: object = base
        for key in path.split("."):
            if not isinstance(cur, dict) or key not in cur:
                return default
            cur = cur[key]
        return str(cur) if cur is not None else default

    url = (
        _env("TEST_DATABASE_URL")
        or _env("DATABASE_URL")
        or _read_config_file("database.url")
        or _base("database.url")
        or DEFAULT_DATABASE_URL
    )
    auto_apply_text = _env("AUTO_APPLY_MIGRATIONS") or _read_config_file("database.auto_apply_migrations") or _base("database.auto_apply_migrations", "true")
    migrations_dir = _env("MIGRATIONS_DIR") or _read_config_file("database.migrations_dir") or _base("database.migrations_dir", str(DEFAULT_MIGRATIONS_DIR))

    reject_all_blank_text = _env("FORMS_REJECT_ALL_BLANK") or _read_config_file("forms.reject_all_blank") or _base("forms.reject_all_blank", "true")
    initial_blocks_text = _env("FORMS_INITIAL_BLOCKS") or _read_config_file("forms.initial_blocks") or _base("forms.initial_blocks", "1")

    try:
        cfg = AppConfig(
            database=DatabaseConfig(
                url=url,
                auto_apply_migrations=_truthy(auto_apply_text),
                migrations_dir=str(migrations_dir),
            ),
            forms=FormsConfig(
                reject_all_blank=_truthy(reject_all_blank_text),
                initial_blocks=int(str(initial_blocks_text).strip()),
            ),
        )
        return cfg
    except (PydanticValidationError, ValueError) as e:
        logger.error("Invalid application configuration: %s", e)
        raise


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "FormsConfig",
    "load_config",
]
