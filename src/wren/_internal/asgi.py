"""Raw ASGI callable types.

Only the request pipeline, the ingestor, and the test client touch these.
Handlers see ``RequestContext`` and ``Response``, never ASGI messages.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

Scope: TypeAlias = MutableMapping[str, Any]
Message: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]
