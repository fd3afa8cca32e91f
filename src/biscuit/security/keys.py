"""Key manager for private and signed cookies.

A ``Key`` carries 512 bits of material split into two 256-bit halves:
``signing`` (HMAC-SHA256, used by the signed codec) and ``encryption``
(AES-256-GCM, used by the private codec). Keys are created once at
startup and shared read-only by every jar.

``DisabledKey`` is the stand-in used when private cookies are turned
off. It has no material, and both codecs treat it as a pass-through,
so handler code runs identically either way.

Usage::

    from biscuit.security.keys import Key

    key = Key.derive_from(b"a long configured secret")
    key = Key.generate()  # fresh per process; cookies won't survive restarts
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import ClassVar, Self

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from biscuit.errors import ConfigurationError, KeyGenerationError

KEY_HALF_LENGTH = 32
KEY_LENGTH = KEY_HALF_LENGTH * 2

# Domain-separation label for HKDF; changing it invalidates every issued cookie.
_HKDF_INFO = b"COOKIE;SIGNED:HMAC-SHA256;PRIVATE:AEAD-AES-256-GCM"


def _random_material() -> bytes:
    try:
        return os.urandom(KEY_LENGTH)
    except NotImplementedError as exc:
        raise KeyGenerationError("No cryptographic randomness source is available.") from exc


@dataclass(frozen=True, slots=True)
class Key:
    """Immutable key material for private and signed cookies."""

    enabled: ClassVar[bool] = True

    material: bytes = field(repr=False)

    def __post_init__(self) -> None:
        if len(self.material) != KEY_LENGTH:
            msg = f"Key material must be exactly {KEY_LENGTH} bytes, got {len(self.material)}."
            raise ConfigurationError(msg)

    @property
    def signing(self) -> bytes:
        """The 256-bit HMAC key."""
        return self.material[:KEY_HALF_LENGTH]

    @property
    def encryption(self) -> bytes:
        """The 256-bit AEAD key."""
        return self.material[KEY_HALF_LENGTH:]

    @classmethod
    def from_bytes(cls, material: bytes) -> Self:
        """Build a key from exactly 64 bytes of raw material."""
        return cls(bytes(material))

    @classmethod
    def generate(cls) -> Self:
        """Generate a fresh random key.

        Raises ``KeyGenerationError`` if the OS has no CSPRNG. There is
        no fallback to weaker randomness.
        """
        return cls(_random_material())

    @classmethod
    def try_generate(cls) -> Self | None:
        """Like ``generate()``, but return ``None`` instead of raising."""
        try:
            return cls.generate()
        except KeyGenerationError:
            return None

    @classmethod
    def derive_from(cls, secret: bytes) -> Self:
        """Derive a key deterministically from *secret* with HKDF-SHA256.

        The same secret always yields the same key. Use a secret with at
        least 256 bits of entropy, e.g. ``openssl rand -base64 32``.
        """
        if not secret:
            raise ConfigurationError("Cannot derive a cookie key from an empty secret.")
        hkdf = HKDF(algorithm=hashes.SHA256(), length=KEY_LENGTH, salt=None, info=_HKDF_INFO)
        return cls(hkdf.derive(secret))


@dataclass(frozen=True, slots=True)
class DisabledKey:
    """Placeholder key used when private cookies are disabled."""

    enabled: ClassVar[bool] = False

    @classmethod
    def generate(cls) -> DisabledKey:
        return DISABLED_KEY

    @classmethod
    def try_generate(cls) -> DisabledKey | None:
        return DISABLED_KEY

    @classmethod
    def derive_from(cls, secret: bytes) -> DisabledKey:  # noqa: ARG003
        return DISABLED_KEY


DISABLED_KEY = DisabledKey()

type AnyKey = Key | DisabledKey
