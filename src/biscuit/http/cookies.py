"""Cookie record, parsing, and Set-Cookie serialization.

Consolidates the read side (parse_cookies, used when loading a jar) and
the write side (Cookie.to_header_value, used by header projection) in
one module. Names and values are passed through as-is; no
percent-encoding is applied.
"""

from contextlib import suppress
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime
from enum import StrEnum
from typing import Self

type CookieIdentity = tuple[str, str | None, str | None]


class SameSite(StrEnum):
    """The ``SameSite`` cookie attribute."""

    STRICT = "Strict"
    LAX = "Lax"
    NONE = "None"


@dataclass(slots=True)
class Cookie:
    """A single HTTP cookie.

    Every attribute except ``name`` and ``value`` is optional, and
    ``None`` means "unset" so that defaulting can tell an explicit
    ``False`` from an omitted value.
    """

    name: str
    value: str = ""
    path: str | None = None
    domain: str | None = None
    same_site: SameSite | None = None
    http_only: bool | None = None
    secure: bool | None = None
    expires: datetime | None = None
    max_age: int | None = None  # seconds

    @classmethod
    def named(cls, name: str) -> Self:
        """Return a cookie with an empty value, e.g. for removal."""
        return cls(name=name)

    @property
    def identity(self) -> CookieIdentity:
        """The ``(name, path, domain)`` triple used for diffing."""
        return (self.name, self.path, self.domain)

    def copy(self) -> Self:
        return replace(self)

    def to_header_value(self) -> str:
        """Serialize to a ``Set-Cookie`` header value string."""
        parts = [f"{self.name}={self.value}"]
        if self.http_only:
            parts.append("HttpOnly")
        if self.same_site is not None:
            parts.append(f"SameSite={self.same_site}")
        if self.secure or (self.same_site is SameSite.NONE and self.secure is None):
            # Browsers reject SameSite=None without Secure.
            parts.append("Secure")
        if self.path is not None:
            parts.append(f"Path={self.path}")
        if self.domain is not None:
            parts.append(f"Domain={self.domain}")
        if self.max_age is not None:
            parts.append(f"Max-Age={self.max_age}")
        if self.expires is not None:
            parts.append(f"Expires={format_datetime(self.expires.astimezone(UTC), usegmt=True)}")
        return "; ".join(parts)


def parse_cookies(header: str) -> list[Cookie]:
    """Parse a ``Cookie`` header value into cookie records.

    Returns an empty list for empty or missing headers. Pairs without
    ``=`` are silently skipped.
    """
    if not header:
        return []
    cookies: list[Cookie] = []
    for pair in header.split(";"):
        pair = pair.strip()
        if "=" in pair:
            name, _, value = pair.partition("=")
            name = name.strip()
            if name:
                cookies.append(Cookie(name=name, value=value.strip()))
    return cookies


def parse_set_cookie(header: str) -> Cookie | None:
    """Parse a ``Set-Cookie`` header value back into a ``Cookie``.

    Unknown attributes are ignored. Returns ``None`` when the leading
    ``name=value`` pair is missing or has an empty name.
    """
    first, *attrs = header.split(";")
    if "=" not in first:
        return None
    name, _, value = first.partition("=")
    name = name.strip()
    if not name:
        return None

    cookie = Cookie(name=name, value=value.strip())
    for attr in attrs:
        key, _, arg = attr.strip().partition("=")
        key = key.strip().lower()
        arg = arg.strip()
        if key == "path":
            cookie.path = arg
        elif key == "domain":
            cookie.domain = arg
        elif key == "httponly":
            cookie.http_only = True
        elif key == "secure":
            cookie.secure = True
        elif key == "samesite":
            for member in SameSite:
                if member.value.lower() == arg.lower():
                    cookie.same_site = member
        elif key == "max-age":
            # Malformed attribute values are ignored, as browsers do.
            with suppress(ValueError):
                cookie.max_age = int(arg)
        elif key == "expires":
            with suppress(TypeError, ValueError):
                cookie.expires = parsedate_to_datetime(arg)
    return cookie
