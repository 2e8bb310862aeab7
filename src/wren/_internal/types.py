"""Shared type aliases used across wren modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Route handler: receives the RequestContext, returns a response value
Handler: TypeAlias = Callable[..., Any]

# Error handler: receives (context, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]
