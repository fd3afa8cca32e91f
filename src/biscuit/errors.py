"""Biscuit exception hierarchy.

Shared across the key manager, config, and middleware so every module
raises and catches the same types. Jar operations never raise: failed
decryption or verification surfaces as ``None``.
"""


class BiscuitError(Exception):
    """Base for all biscuit-specific errors."""


class ConfigurationError(BiscuitError):
    """Raised when cookie configuration is invalid.

    Typically raised at startup while resolving the process key.
    """


class KeyGenerationError(BiscuitError):
    """Raised when the OS cannot supply cryptographic randomness.

    Fatal: the process must not continue with a weak or missing key.
    Use ``Key.try_generate()`` for a non-fatal path.
    """
