"""Wren exception hierarchy.

Shared across the ingestor, route table, handler pipeline, and app so
every module raises and catches the same types.
"""

from dataclasses import dataclass


class WrenError(Exception):
    """Base for all wren-specific errors."""


class ConfigurationError(WrenError):
    """Raised when app configuration is invalid.

    Typically raised by ``AppConfig`` validation or ``App`` setup misuse.
    """


@dataclass(frozen=True)
class HTTPError(WrenError):
    """An error that maps directly to an HTTP status code.

    Raised by the ingestor, hooks, or handlers. The request pipeline
    catches these and dispatches to the matching ``@app.error()`` handler.

    Not slotted: subclasses must stay instances of the class the frozen
    ``__setattr__`` closes over, or ``contextlib`` cannot set
    ``__traceback__`` when one passes through a ``with`` block.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BodyTooLarge(HTTPError):  # noqa: N818
    """413 — the request body exceeded the configured byte limit."""

    def __init__(self, limit: int, detail: str = "") -> None:
        super().__init__(
            status=413,
            detail=detail or f"Request body exceeds {limit} bytes",
        )


class StreamTimeout(HTTPError):  # noqa: N818
    """408 — the request body was not received within the read timeout."""

    def __init__(self, timeout: float, detail: str = "") -> None:
        super().__init__(
            status=408,
            detail=detail or f"Request body not received within {timeout:g}s",
        )


class MalformedJSON(WrenError):  # noqa: N818
    """The body bytes are not UTF-8 encoded JSON.

    Never escapes the ingestor: it is converted into ``MalformedBody``.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ConnectionAborted(WrenError):  # noqa: N818
    """The client disconnected before the request body was complete."""
