"""Biscuit — request-scoped HTTP cookies with private and signed values.

Reads cookies from an incoming request, tracks every change made while
handling it, and emits exactly one ``Set-Cookie`` per changed cookie.

Basic usage::

    from biscuit import Cookie, CookieJar, Key, delta_headers

    key = Key.derive_from(b"configured secret")
    jar = CookieJar.from_header(key, "session=abc123")

    jar.add_private(Cookie("user_id", "42"))
    jar.remove(Cookie.named("session"))

    headers = delta_headers(jar)

ASGI applications::

    from biscuit import CookieConfig, CookieMiddleware, get_cookies

    app = CookieMiddleware.from_config(app, CookieConfig(secret_key="..."))
"""

__version__ = "0.1.0"
__all__ = [
    "BiscuitError",
    "ConfigurationError",
    "Cookie",
    "CookieConfig",
    "CookieJar",
    "CookieMiddleware",
    "DisabledKey",
    "Key",
    "KeyGenerationError",
    "SameSite",
    "delta_headers",
    "get_cookies",
    "resolve_key",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import biscuit`` fast and avoids loading ``cryptography``
    until a key or jar is actually needed.
    """
    if name in ("Cookie", "SameSite"):
        from biscuit.http import cookies as _cookies

        return getattr(_cookies, name)

    if name == "CookieJar":
        from biscuit.http.jar import CookieJar

        return CookieJar

    if name == "delta_headers":
        from biscuit.http.headers import delta_headers

        return delta_headers

    if name in ("Key", "DisabledKey"):
        from biscuit.security import keys as _keys

        return getattr(_keys, name)

    if name in ("CookieConfig", "resolve_key"):
        from biscuit import config as _config

        return getattr(_config, name)

    if name in ("CookieMiddleware", "get_cookies"):
        from biscuit.middleware import cookies as _mw

        return getattr(_mw, name)

    if name in ("BiscuitError", "ConfigurationError", "KeyGenerationError"):
        from biscuit import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
