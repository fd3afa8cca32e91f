"""Middleware — ASGI integration for the cookie jar.

Built-in middleware:
    CookieMiddleware -- One CookieJar per request, Set-Cookie on response
"""

from biscuit.middleware.cookies import CookieMiddleware, get_cookies

__all__ = [
    "CookieMiddleware",
    "get_cookies",
]
