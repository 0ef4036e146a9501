# farmstore Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from farmstore.core.ports.clock import ClockPort
from farmstore.core.ports.email import (
    EmailAddress,
    EmailError,
    EmailKind,
    EmailMessage,
    EmailPort,
    EmailResult,
    EmailSendError,
    EmailStatus,
)

__all__ = [
    # Clock
    "ClockPort",
    # Email
    "EmailAddress",
    "EmailError",
    "EmailKind",
    "EmailMessage",
    "EmailPort",
    "EmailResult",
    "EmailSendError",
    "EmailStatus",
]
