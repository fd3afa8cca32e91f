"""Security primitives for cookies — keys, codecs, and audit events.

Private cookies (encrypted, unreadable by the client)::

    from biscuit.security import private

    sealed = private.encrypt(key, cookie)
    opened = private.decrypt(key, sealed)  # None if tampered

Signed cookies (readable, tamper-evident)::

    from biscuit.security import signed

    stamped = signed.sign(key, cookie)
    checked = signed.verify(key, stamped)  # None if tampered
"""

from biscuit.security.audit import SecurityEvent, emit_security_event, set_security_event_sink
from biscuit.security.keys import DISABLED_KEY, DisabledKey, Key

__all__ = [
    "DISABLED_KEY",
    "DisabledKey",
    "Key",
    "SecurityEvent",
    "emit_security_event",
    "set_security_event_sink",
]
