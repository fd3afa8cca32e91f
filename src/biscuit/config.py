"""Cookie configuration and process key resolution.

CookieConfig is a frozen dataclass, immutable after creation. Resolve it
into the process-wide key once at startup::

    config = CookieConfig(secret_key=os.environ["COOKIE_SECRET"])
    key = resolve_key(config)

Generate a suitable secret with ``openssl rand -base64 32``.
"""

import base64
import binascii
import logging
import re
from dataclasses import dataclass

from biscuit.security.keys import DISABLED_KEY, AnyKey, Key

logger = logging.getLogger("biscuit.security")

_ENCODED_KEY_LENGTHS = frozenset({32, 64})
_HEX_RE = re.compile(r"[0-9A-Fa-f]+")


@dataclass(frozen=True, slots=True)
class CookieConfig:
    """Cookie configuration. Immutable after creation.

    ``secret_key`` may be base64 or hex encoded 256/512-bit material, or
    any other non-empty string. When empty, a random key is generated
    and private cookies stop decrypting after a restart.
    """

    secret_key: str = ""
    private_cookies: bool = True
    debug: bool = False

    def __repr__(self) -> str:
        return (
            f"CookieConfig(secret_key={'<set>' if self.secret_key else '<unset>'}, "
            f"private_cookies={self.private_cookies}, debug={self.debug})"
        )


def _hex(text: str) -> bytes:
    # bytes.fromhex skips whitespace, which would merge distinct secrets.
    if not _HEX_RE.fullmatch(text):
        raise ValueError("not hex")
    return bytes.fromhex(text)


def decode_secret(secret_key: str) -> bytes:
    """Turn a configured secret into raw bytes.

    Tries base64 (standard, then URL-safe) and hex, accepting a result
    only if it is 32 or 64 bytes long. Every decoder is strict, so a
    secret containing characters outside its alphabet is never
    truncated into some other secret's bytes. Anything else is used as
    UTF-8.
    """
    text = secret_key.strip()
    for decode in (
        lambda s: base64.b64decode(s, validate=True),
        lambda s: base64.b64decode(s, altchars=b"-_", validate=True),
        _hex,
    ):
        try:
            raw = decode(text)
        except (binascii.Error, ValueError):
            continue
        if len(raw) in _ENCODED_KEY_LENGTHS:
            return raw
    return secret_key.encode("utf-8")


def resolve_key(config: CookieConfig) -> AnyKey:
    """Build the process key described by *config*.

    Raises ``KeyGenerationError`` if no secret is configured and the OS
    cannot supply randomness.
    """
    if not config.private_cookies:
        logger.debug("Private cookies disabled; private values pass through unencrypted.")
        return DISABLED_KEY

    if config.secret_key:
        return Key.derive_from(decode_secret(config.secret_key))

    key = Key.generate()
    level = logging.INFO if config.debug else logging.WARNING
    logger.log(
        level,
        "No secret_key configured; using a generated key. Private and signed "
        "cookies will not survive a restart. Set one with: openssl rand -base64 32",
    )
    return key
