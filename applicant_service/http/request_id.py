"""Request ID middleware.

Echoes the caller's X-Request-Id or assigns a new UUID, exposes it to route
handlers as `request.state.request_id` and returns it on the response.
"""

from __future__ import annotations

import uuid


class RequestIdMiddleware:
    def __init__(self, app, header_name: str = "X-Request-Id") -> None:  # type: ignore[no-untyped-def]
        self.app = app
        self.header_name = header_name
        self._header_key = header_name.lower().encode("latin-1")

    def _inbound(self, scope) -> str | None:  # type: ignore[no-untyped-def]
        for k, v in scope.get("headers") or []:
            if k.lower() == self._header_key and v.strip():
                return v.decode("latin-1").strip()
        return None

    async def __call__(self, scope, receive, send):  # type: ignore[no-untyped-def]
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        request_id = self._inbound(scope) or str(uuid.uuid4())
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_wrapper(message):  # type: ignore[no-untyped-def]
            if message.get("type") == "http.response.start":
                headers = [(k, v) for k, v in (message.get("headers") or []) if k.lower() != self._header_key]
                headers.append((self.header_name.encode("latin-1"), request_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        await self.app(scope, receive, send_wrapper)


__all__ = ["RequestIdMiddleware"]
