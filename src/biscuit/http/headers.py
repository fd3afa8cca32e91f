"""Request header access and Set-Cookie header projection.

``Headers`` is an immutable, case-insensitive view over raw ASGI header
byte pairs, used to pull ``Cookie`` headers off an incoming request.

``set_cookie_header`` and ``delta_headers`` turn a jar's pending changes
into outgoing ``Set-Cookie`` headers, one per change.
"""

from collections.abc import Iterator, Mapping

from biscuit.http.cookies import Cookie
from biscuit.http.jar import CookieJar


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive HTTP headers.

    ``__getitem__`` returns the first matching value.
    ``get_list`` returns all values for a header (e.g. multiple ``Cookie``).
    """

    __slots__ = ("_raw",)

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        object.__setattr__(self, "_raw", tuple(raw))

    def __getitem__(self, key: str) -> str:
        key_lower = key.lower().encode("latin-1")
        for name, value in self._raw:
            if name.lower() == key_lower:
                return value.decode("latin-1")
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        key_lower = key.lower().encode("latin-1")
        return any(name.lower() == key_lower for name, _ in self._raw)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._raw:
            key = name.decode("latin-1").lower()
            if key not in seen:
                seen.add(key)
                yield key

    def __len__(self) -> int:
        return len(set(self))

    def __repr__(self) -> str:
        # Cookie values may be secrets; show header names only.
        return f"Headers({list(self)!r})"

    def get_list(self, key: str) -> list[str]:
        """Return all values for *key*."""
        key_lower = key.lower().encode("latin-1")
        return [value.decode("latin-1") for name, value in self._raw if name.lower() == key_lower]

    def cookie_header(self) -> str:
        """Return every ``Cookie`` header joined into one value.

        HTTP/2 clients may split cookies across several headers. Values
        are decoded as UTF-8, matching how ``CookieMiddleware`` encodes
        ``Set-Cookie``, so non-ASCII values survive a round trip.
        """
        return "; ".join(
            value.decode("utf-8", errors="replace")
            for name, value in self._raw
            if name.lower() == b"cookie"
        )


# -- Header projection --


def set_cookie_header(cookie: Cookie) -> tuple[str, str]:
    """Project *cookie* into a ``Set-Cookie`` header pair."""
    return ("Set-Cookie", cookie.to_header_value())


def delta_headers(jar: CookieJar) -> tuple[tuple[str, str], ...]:
    """Return one ``Set-Cookie`` header per pending change in *jar*.

    Cookies without a pending change produce nothing; the client
    already holds them.
    """
    return tuple(set_cookie_header(cookie) for cookie in jar.delta())
