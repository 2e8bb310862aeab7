"""Ordered route table with a terminal fallback.

The table is a tuple scanned front to back; the first entry whose
method and path both match exactly wins. Anything unmatched goes to
the fallback handler, which by default answers 404.
"""

from collections.abc import Iterable

from wren._internal.types import Handler
from wren.errors import ConfigurationError
from wren.http.context import RequestContext
from wren.http.response import Response
from wren.routing.route import RouteEntry


def not_found(ctx: RequestContext) -> Response:  # noqa: ARG001
    """Default terminal handler: 404 with a fixed plain-text body."""
    return Response(body="Not Found", status=404)


class RouteTable:
    """Immutable, ordered route table.

    Usage::

        table = RouteTable([
            RouteEntry("GET", "/products", list_products),
            RouteEntry("POST", "/products", create_product),
        ])
        handler = table.resolve("GET", "/products")

    Thread safety:
        Read-only after construction, so concurrent requests share it
        without locks.
    """

    __slots__ = ("_entries", "_fallback")

    def __init__(
        self,
        entries: Iterable[RouteEntry] = (),
        fallback: Handler = not_found,
    ) -> None:
        entries = tuple(entries)
        for entry in entries:
            if not entry.path.startswith("/"):
                msg = f"Route path must start with '/': {entry.path!r}"
                raise ConfigurationError(msg)
            if entry.method != entry.method.upper():
                msg = f"Route method must be upper-case: {entry.method!r}"
                raise ConfigurationError(msg)
        object.__setattr__(self, "_entries", entries)
        object.__setattr__(self, "_fallback", fallback)

    def __setattr__(self, name: str, value: object) -> None:
        msg = "RouteTable is immutable."
        raise AttributeError(msg)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"RouteTable({len(self._entries)} routes)"

    @property
    def entries(self) -> tuple[RouteEntry, ...]:
        """Entries in declaration order."""
        return self._entries

    @property
    def fallback(self) -> Handler:
        """Terminal handler for unmatched requests."""
        return self._fallback

    def match(self, method: str, path: str) -> RouteEntry | None:
        """Return the first entry matching *method* and *path* exactly."""
        for entry in self._entries:
            if entry.matches(method, path):
                return entry
        return None

    def resolve(self, method: str, path: str) -> Handler:
        """Return the matched handler, or the fallback."""
        entry = self.match(method, path)
        if entry is None:
            return self._fallback
        return entry.handler
