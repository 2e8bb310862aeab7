"""RouteEntry frozen dataclass."""

from dataclasses import dataclass

from wren._internal.types import Handler


@dataclass(frozen=True, slots=True)
class RouteEntry:
    """A single (method, path, handler) routing rule.

    Matching is exact on both method and path. Created during app
    setup, collected into a ``RouteTable`` at freeze time.
    """

    method: str
    path: str
    handler: Handler
    name: str | None = None

    def matches(self, method: str, path: str) -> bool:
        return self.method == method and self.path == path
