"""Per-request context.

Unlike headers and routes, the context is mutable: it is created when
the request arrives, receives its parsed body exactly once, and records
how far the request has progressed through the pipeline. Each context
belongs to exactly one request task and is discarded with it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from wren._internal.asgi import Scope
from wren.http.body import ParsedBody
from wren.http.headers import Headers


class RequestState(IntEnum):
    """Lifecycle of a single request. Only ever moves forward."""

    RECEIVED = 0
    BODY_INGESTED = 1
    ROUTED = 2
    HANDLER_EXECUTED = 3
    RESPONSE_SENT = 4


@dataclass(slots=True)
class RequestContext:
    """State for one request, passed from ingestion through dispatch.

    Metadata is fixed at creation. The body slot is filled once by the
    pipeline before any hook or handler runs::

        ctx.body            # EmptyBody | JSONBody | MalformedBody
        ctx.body.value      # parsed JSON, or None for empty/malformed
    """

    method: str
    path: str
    headers: Headers
    query_string: bytes = b""
    http_version: str = "1.1"
    client: tuple[str, int] | None = None
    state: RequestState = RequestState.RECEIVED

    _body: ParsedBody | None = field(default=None, repr=False)

    # -- Body slot --

    @property
    def body(self) -> ParsedBody:
        """The parsed body. Raises ``RuntimeError`` before ingestion."""
        if self._body is None:
            msg = f"Body of {self.method} {self.path} has not been ingested yet."
            raise RuntimeError(msg)
        return self._body

    @property
    def has_body(self) -> bool:
        return self._body is not None

    def attach_body(self, parsed: ParsedBody) -> None:
        """Attach the parsed body. May only be called once per request."""
        if self._body is not None:
            msg = f"Body of {self.method} {self.path} is already attached."
            raise RuntimeError(msg)
        self._body = parsed
        self.advance(RequestState.BODY_INGESTED)

    # -- Lifecycle --

    def advance(self, state: RequestState) -> None:
        """Move the lifecycle forward to *state*.

        Skipping states is allowed (an oversized body never reaches
        ``ROUTED``); going backwards or sending twice is not.
        """
        if state <= self.state:
            msg = f"Cannot move request from {self.state.name} to {state.name}."
            raise RuntimeError(msg)
        self.state = state

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """The Content-Length header as int, ``None`` if absent or invalid."""
        value = self.headers.get("content-length")
        if value is None:
            return None
        try:
            length = int(value)
        except ValueError:
            return None
        return length if length >= 0 else None

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope) -> RequestContext:
        """Create a context from an ASGI HTTP scope."""
        client = scope.get("client")
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            headers=Headers(scope.get("headers", ())),
            query_string=scope.get("query_string", b""),
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
        )

    def describe(self) -> dict[str, Any]:
        """Summary used in log records and debug error payloads."""
        return {"method": self.method, "path": self.path, "state": self.state.name}
