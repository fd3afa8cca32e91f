"""Private cookie codec: authenticated encryption of cookie values.

Values are sealed with AES-256-GCM under ``Key.encryption``. The cookie
name is passed as associated data, so a value encrypted for one name
fails to open under any other. The envelope is::

    base64(nonce[12] || ciphertext || tag[16])

Every failure (bad base64, short envelope, wrong tag, wrong name,
non-UTF-8 plaintext) collapses to ``None`` so a client probing cookie
values learns nothing about why a value was rejected.

With a ``DisabledKey`` both directions are pass-through.
"""

import base64
import binascii
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from biscuit.http.cookies import Cookie
from biscuit.security.audit import emit_security_event
from biscuit.security.keys import AnyKey

logger = logging.getLogger("biscuit.security")

NONCE_LENGTH = 12
TAG_LENGTH = 16


def encrypt(key: AnyKey, cookie: Cookie) -> Cookie:
    """Return a copy of *cookie* whose value is sealed under *key*."""
    sealed = cookie.copy()
    if not key.enabled:
        return sealed

    nonce = os.urandom(NONCE_LENGTH)
    ciphertext = AESGCM(key.encryption).encrypt(
        nonce, cookie.value.encode("utf-8"), cookie.name.encode("utf-8")
    )
    sealed.value = base64.b64encode(nonce + ciphertext).decode("ascii")
    return sealed


def _open(key: AnyKey, cookie: Cookie) -> str | None:
    try:
        data = base64.b64decode(cookie.value.encode("ascii"), validate=True)
    except (binascii.Error, UnicodeEncodeError):
        return None
    if len(data) < NONCE_LENGTH + TAG_LENGTH:
        return None

    nonce, ciphertext = data[:NONCE_LENGTH], data[NONCE_LENGTH:]
    try:
        plaintext = AESGCM(key.encryption).decrypt(nonce, ciphertext, cookie.name.encode("utf-8"))
        return plaintext.decode("utf-8")
    except (InvalidTag, UnicodeDecodeError):
        return None


def decrypt(key: AnyKey, cookie: Cookie) -> Cookie | None:
    """Authenticate and decrypt *cookie*.

    Returns a copy carrying the plaintext value, or ``None`` if the value
    fails authentication for any reason.
    """
    if not key.enabled:
        return cookie.copy()

    plaintext = _open(key, cookie)
    if plaintext is None:
        logger.debug("Rejected private cookie %r", cookie.name)
        emit_security_event("cookie.private.rejected", cookie_name=cookie.name)
        return None

    opened = cookie.copy()
    opened.value = plaintext
    return opened
