"""Request-scoped cookie jar with change tracking.

The jar holds two maps keyed by cookie identity ``(name, path, domain)``:

- **original** -- cookies the client sent with the request. Loaded once
  via ``add_original()`` and never touched by ``add``/``remove``.
- **delta** -- pending mutations. Each identity maps to exactly one
  entry, either an upsert or a removal tombstone. A later mutation
  replaces an earlier one.

Reads consult delta before original, so a pending removal hides an
original cookie and a pending upsert masks it. At response time only
``delta()`` is projected into ``Set-Cookie`` headers; cookies the client
already has are not resent.

Usage::

    jar = CookieJar.from_header(key, request.headers.get("cookie", ""))

    jar.add(Cookie("theme", "dark"))
    jar.add_private(Cookie("user_id", "42"))
    jar.remove(Cookie.named("session"))

    for name, value in delta_headers(jar):
        ...

Private cookies
    Values added with ``add_private`` are sealed with authenticated
    encryption (see ``biscuit.security.private``), so clients can neither
    read nor forge them. ``get_private`` returns ``None`` for anything that
    fails to authenticate.

Thread safety:
    A jar is owned by a single request. An internal lock still guards
    both maps so that handlers sharing a jar across threads under
    free-threading cannot corrupt it.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

from biscuit.http.cookies import Cookie, CookieIdentity, SameSite, parse_cookies
from biscuit.security import private, signed
from biscuit.security.keys import AnyKey

PRIVATE_COOKIE_LIFETIME = timedelta(weeks=1)
_REMOVAL_BACKDATE = timedelta(days=365)


# -- Attribute defaults --


def set_defaults(cookie: Cookie) -> None:
    """Fill unset attributes on *cookie* in place.

    Defaults:

    * ``path``: ``"/"``
    * ``same_site``: ``Strict``
    """
    if cookie.path is None:
        cookie.path = "/"
    if cookie.same_site is None:
        cookie.same_site = SameSite.STRICT


def set_private_defaults(cookie: Cookie, now: datetime | None = None) -> None:
    """Fill unset attributes on a private *cookie* in place.

    Defaults:

    * ``path``: ``"/"``
    * ``same_site``: ``Strict``
    * ``http_only``: ``True``
    * ``expires``: one week from *now*
    """
    set_defaults(cookie)
    if cookie.http_only is None:
        cookie.http_only = True
    if cookie.expires is None:
        cookie.expires = (now or datetime.now(UTC)) + PRIVATE_COOKIE_LIFETIME


def make_removal(cookie: Cookie, now: datetime | None = None) -> Cookie:
    """Build a removal tombstone with the same identity as *cookie*."""
    return Cookie(
        name=cookie.name,
        value="",
        path=cookie.path,
        domain=cookie.domain,
        max_age=0,
        expires=(now or datetime.now(UTC)) - _REMOVAL_BACKDATE,
    )


def _shadows(change: CookieIdentity, original: CookieIdentity) -> bool:
    """Whether a pending change targets an original cookie.

    Cookies parsed from a request header carry no path or domain, so an
    unset attribute on the original matches any value on the change.
    """
    name, path, domain = original
    return (
        change[0] == name
        and (path is None or change[1] == path)
        and (domain is None or change[2] == domain)
    )


# -- Jar --


class CookieJar:
    """Cookies from one request plus the changes made while handling it."""

    __slots__ = ("_delta", "_key", "_lock", "_original")

    def __init__(self, key: AnyKey) -> None:
        self._key = key
        self._original: dict[CookieIdentity, Cookie] = {}
        # identity -> (cookie, removed)
        self._delta: dict[CookieIdentity, tuple[Cookie, bool]] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_header(cls, key: AnyKey, header: str) -> CookieJar:
        """Build a jar loaded with the cookies in a ``Cookie`` header value."""
        jar = cls(key)
        for cookie in parse_cookies(header):
            jar.add_original(cookie)
        return jar

    # -- Reads --

    def get(self, name: str) -> Cookie | None:
        """Return the cookie named *name*, or ``None`` if absent or removed.

        Lookup is by name only: the most recent pending change for *name*
        wins, whatever its path or domain. ``iter()`` matches changes to
        originals by identity instead, so removing ``x`` at ``/other``
        hides an original ``x`` at ``/`` from ``get`` but not from
        ``iter``.
        """
        with self._lock:
            for cookie, removed in reversed(self._delta.values()):
                if cookie.name == name:
                    return None if removed else cookie.copy()
            for cookie in self._original.values():
                if cookie.name == name:
                    return cookie.copy()
        return None

    def get_private(self, name: str) -> Cookie | None:
        """Return the decrypted private cookie *name*.

        Returns ``None`` if the cookie is missing or fails to decrypt.
        """
        cookie = self.get(name)
        if cookie is None:
            return None
        return private.decrypt(self._key, cookie)

    def get_signed(self, name: str) -> Cookie | None:
        """Return the verified signed cookie *name*, or ``None``."""
        cookie = self.get(name)
        if cookie is None:
            return None
        return signed.verify(self._key, cookie)

    def iter(self) -> Iterator[Cookie]:
        """Yield the jar's current view of the client's cookies.

        Includes every pending upsert plus each original cookie without
        a pending change. Removed cookies are skipped. Order is not
        guaranteed.
        """
        with self._lock:
            pending = list(self._delta.values())
            untouched = [
                c
                for ident, c in self._original.items()
                if not any(_shadows(d, ident) for d in self._delta)
            ]
        for cookie, removed in pending:
            if not removed:
                yield cookie.copy()
        for cookie in untouched:
            yield cookie.copy()

    def __iter__(self) -> Iterator[Cookie]:
        return self.iter()

    # -- Writes --

    def _put(self, cookie: Cookie, *, removed: bool = False) -> None:
        with self._lock:
            # Re-insert so the latest mutation sits at the end.
            self._delta.pop(cookie.identity, None)
            self._delta[cookie.identity] = (cookie, removed)

    def add(self, cookie: Cookie) -> None:
        """Add *cookie*, filling ``path`` and ``same_site`` if unset."""
        cookie = cookie.copy()
        set_defaults(cookie)
        self._put(cookie)

    def add_private(self, cookie: Cookie) -> None:
        """Add *cookie* with its value sealed by authenticated encryption.

        Unset attributes default to ``path="/"``, ``SameSite=Strict``,
        ``HttpOnly`` and an expiry one week from now. Set ``secure`` as
        well when serving over HTTPS.
        """
        cookie = cookie.copy()
        set_private_defaults(cookie)
        self._put(private.encrypt(self._key, cookie))

    def add_signed(self, cookie: Cookie) -> None:
        """Add *cookie* with a signature appended to its value."""
        cookie = cookie.copy()
        set_defaults(cookie)
        self._put(signed.sign(self._key, cookie))

    def remove(self, cookie: Cookie) -> None:
        """Remove *cookie* and queue a removal for the client.

        The removal must carry the same ``path`` and ``domain`` the cookie
        was set with, or the client will keep it. ``path`` defaults to
        ``"/"``; ``domain`` is not defaulted.
        """
        cookie = cookie.copy()
        if cookie.path is None:
            cookie.path = "/"
        self._put(make_removal(cookie), removed=True)

    def remove_private(self, cookie: Cookie) -> None:
        """Remove a private cookie. Same semantics as ``remove``."""
        self.remove(cookie)

    def remove_signed(self, cookie: Cookie) -> None:
        """Remove a signed cookie. Same semantics as ``remove``."""
        self.remove(cookie)

    # -- Request/response plumbing --

    def add_original(self, cookie: Cookie) -> None:
        """Record a cookie the client sent. No defaults are applied."""
        cookie = cookie.copy()
        with self._lock:
            self._original[cookie.identity] = cookie

    def add_original_private(self, cookie: Cookie) -> None:
        """Record a private cookie the client sent.

        The value is stored sealed; decryption happens in ``get_private``.
        """
        self.add_original(cookie)

    def reset_delta(self) -> None:
        """Drop all pending changes."""
        with self._lock:
            self._delta.clear()

    def delta(self) -> list[Cookie]:
        """Return every pending change, tombstones included."""
        with self._lock:
            return [cookie.copy() for cookie, _ in self._delta.values()]

    def __repr__(self) -> str:
        names = sorted({c.name for c in self.iter()})
        return f"CookieJar({names!r})"
