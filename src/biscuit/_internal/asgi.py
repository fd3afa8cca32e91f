"""Typed ASGI definitions.

Raw ASGI callables as seen by the cookie middleware. Users never see
these.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

# Raw ASGI 3.0 types
Scope: TypeAlias = MutableMapping[str, Any]
Message: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[Message]]
Send: TypeAlias = Callable[[Message], Awaitable[None]]
ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]


def scope_headers(scope: Scope) -> tuple[tuple[bytes, bytes], ...]:
    """Return the scope's raw header pairs as a tuple."""
    return tuple(tuple(pair) for pair in scope.get("headers", ()))  # type: ignore[misc]
