"""Signed cookie codec: readable values with tamper detection.

Values are signed with ``itsdangerous`` using HMAC-SHA256 keyed by
``Key.signing``. The cookie name is the signer's salt, so a signature
minted for one cookie does not verify under another name.

Signed values stay readable by the client; use the private codec when
the content itself must be hidden. With a ``DisabledKey`` both
directions are pass-through.
"""

import hashlib
import logging

from itsdangerous import BadSignature, Signer

from biscuit.http.cookies import Cookie
from biscuit.security.audit import emit_security_event
from biscuit.security.keys import AnyKey, Key

logger = logging.getLogger("biscuit.security")


def _signer(key: Key, name: str) -> Signer:
    return Signer(
        key.signing,
        salt=f"biscuit.signed.{name}",
        key_derivation="hmac",
        digest_method=hashlib.sha256,
    )


def sign(key: AnyKey, cookie: Cookie) -> Cookie:
    """Return a copy of *cookie* with a signature appended to its value."""
    signed = cookie.copy()
    if not key.enabled:
        return signed
    signed.value = _signer(key, cookie.name).sign(cookie.value).decode("utf-8")
    return signed


def verify(key: AnyKey, cookie: Cookie) -> Cookie | None:
    """Verify *cookie* and return a copy carrying the unsigned value.

    Returns ``None`` when the signature is missing or does not match.
    """
    if not key.enabled:
        return cookie.copy()

    try:
        value = _signer(key, cookie.name).unsign(cookie.value).decode("utf-8")
    except (BadSignature, UnicodeDecodeError):
        logger.debug("Rejected signed cookie %r", cookie.name)
        emit_security_event("cookie.signed.rejected", cookie_name=cookie.name)
        return None

    verified = cookie.copy()
    verified.value = value
    return verified
