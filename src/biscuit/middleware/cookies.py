"""Cookie middleware: one CookieJar per request.

Loads the request's ``Cookie`` headers into a fresh ``CookieJar``, makes
it available via ``get_cookies()`` for the duration of the request, and
appends one ``Set-Cookie`` header per pending change when the response
starts.

Works with any ASGI 3.0 application::

    from biscuit.config import CookieConfig
    from biscuit.middleware.cookies import CookieMiddleware, get_cookies

    app = CookieMiddleware.from_config(app, CookieConfig(secret_key="..."))

    # In a handler:
    jar = get_cookies()
    jar.add_private(Cookie("user_id", "42"))
"""

from __future__ import annotations

import logging
from contextvars import ContextVar

from biscuit._internal.asgi import ASGIApp, Message, Receive, Scope, Send, scope_headers
from biscuit.config import CookieConfig, resolve_key
from biscuit.http.headers import Headers, delta_headers
from biscuit.http.jar import CookieJar
from biscuit.security.keys import AnyKey

logger = logging.getLogger("biscuit.middleware")

# -- Jar ContextVar --

_jar_var: ContextVar[CookieJar | None] = ContextVar("biscuit_cookies", default=None)


def get_cookies() -> CookieJar:
    """Return the current request's cookie jar.

    Raises ``LookupError`` if called outside a request with
    ``CookieMiddleware`` active.
    """
    jar = _jar_var.get()
    if jar is None:
        msg = (
            "No active cookie jar. Ensure CookieMiddleware wraps the "
            "application before accessing cookies."
        )
        raise LookupError(msg)
    return jar


# -- Middleware --


class CookieMiddleware:
    """ASGI middleware that manages a request-scoped ``CookieJar``.

    Non-HTTP scopes (lifespan, websocket) pass straight through.
    """

    __slots__ = ("_app", "_key")

    def __init__(self, app: ASGIApp, key: AnyKey) -> None:
        self._app = app
        self._key = key

    @classmethod
    def from_config(cls, app: ASGIApp, config: CookieConfig) -> CookieMiddleware:
        """Wrap *app*, resolving the process key from *config*."""
        return cls(app, resolve_key(config))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self._app(scope, receive, send)
            return

        headers = Headers(scope_headers(scope))
        jar = CookieJar.from_header(self._key, headers.cookie_header())

        async def send_with_cookies(message: Message) -> None:
            if message["type"] == "http.response.start":
                pending = delta_headers(jar)
                if pending:
                    logger.debug(
                        "Emitting %d Set-Cookie header(s) for %s",
                        len(pending),
                        scope.get("path", ""),
                    )
                    # UTF-8 values, read back by Headers.cookie_header().
                    raw = [
                        (name.lower().encode("latin-1"), value.encode("utf-8"))
                        for name, value in pending
                    ]
                    message["headers"] = [*message.get("headers", ()), *raw]
            await send(message)

        token = _jar_var.set(jar)
        try:
            await self._app(scope, receive, send_with_cookies)
        finally:
            _jar_var.reset(token)
