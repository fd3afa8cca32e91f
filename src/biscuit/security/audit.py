"""Security audit events for cookie integrity failures.

Small opt-in event channel. Applications can register a sink to forward
rejected private or signed cookies to logs, metrics, or a SIEM. Events
carry the cookie name only; values and failure reasons are never
included.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any

logger = logging.getLogger("biscuit.security")


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    """A structured security event."""

    name: str
    timestamp: float = field(default_factory=time)
    cookie_name: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


type SecurityEventSink = Callable[[SecurityEvent], None]


_sink_lock = threading.Lock()
_sink: SecurityEventSink | None = None


def set_security_event_sink(sink: SecurityEventSink | None) -> None:
    """Set a process-wide sink for security events.

    Pass ``None`` to disable event delivery.
    """
    global _sink
    with _sink_lock:
        _sink = sink


def emit_security_event(
    name: str,
    *,
    cookie_name: str | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Emit a best-effort security event to the configured sink.

    Never raises: a failing sink is logged and otherwise ignored, so
    callers such as ``CookieJar.get_private`` stay total.
    """
    with _sink_lock:
        sink = _sink
    if sink is None:
        return
    try:
        sink(SecurityEvent(name=name, cookie_name=cookie_name, details=details or {}))
    except Exception:
        logger.exception("Security event sink failed for %r", name)
