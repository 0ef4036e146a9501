"""
Email Dispatch Interface.

Protocol-based interface for handing transactional emails to the remote
mail-sending function. The newsletter lifecycle only composes messages and
inspects the result; delivery belongs to the gateway.

Implementation strategies:
1. DevEmailAdapter: Logs emails to console (dev/test)
2. HttpDispatchGateway: POSTs to the hosted send-email function

All strategies implement the same EmailPort interface.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    """Email send result status."""

    SENT = "sent"
    QUEUED = "queued"  # Accepted by gateway, not delivered yet
    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter or dry-run


class EmailKind(Enum):
    """Which newsletter message is being dispatched (envelope flag)."""

    CONFIRMATION = "confirmation"
    WELCOME = "welcome"


@dataclass(frozen=True)
class EmailAddress:
    """
    Email address with optional display name.

    Examples:
        EmailAddress("kupec@example.com")
        EmailAddress("kupec@example.com", "Jana Novak")
    """

    email: str
    name: str | None = None

    def __str__(self) -> str:
        """Format as RFC 5322 address."""
        if self.name:
            safe_name = self.name.replace('"', '\\"')
            return f'"{safe_name}" <{self.email}>'
        return self.email


@dataclass(frozen=True)
class EmailMessage:
    """
    Email message to be dispatched.

    Carries both HTML and plain text bodies; the gateway wraps them into
    the JSON envelope the mail function expects.
    """

    recipient: EmailAddress
    subject: str
    body_html: str
    body_text: str
    kind: EmailKind
    sender: EmailAddress | None = None  # None = gateway default sender
    reply_to: EmailAddress | None = None
    discount_code: str | None = None

    def __post_init__(self) -> None:
        if not self.recipient.email:
            raise ValueError("Recipient email is required")
        if not self.subject:
            raise ValueError("Subject is required")
        if not self.body_html and not self.body_text:
            raise ValueError("At least one of body_html or body_text is required")


@dataclass
class EmailResult:
    """Result of a dispatch attempt."""

    status: EmailStatus
    message_id: str | None = None
    error: str | None = None
    sent_at: datetime | None = None
    recipient: str = ""
    message: str = ""  # Gateway's own human-readable message

    @property
    def ok(self) -> bool:
        """Anything but FAILED counts as handed over."""
        return self.status != EmailStatus.FAILED

    @classmethod
    def success(
        cls,
        recipient: str,
        message_id: str | None = None,
        message: str = "",
    ) -> EmailResult:
        return cls(
            status=EmailStatus.SENT,
            message_id=message_id,
            recipient=recipient,
            sent_at=datetime.now(UTC),
            message=message,
        )

    @classmethod
    def skipped(cls, recipient: str, reason: str = "Dev mode") -> EmailResult:
        return cls(
            status=EmailStatus.SKIPPED,
            recipient=recipient,
            error=reason,
        )

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        return cls(
            status=EmailStatus.FAILED,
            recipient=recipient,
            error=error,
        )


class EmailPort(Protocol):
    """
    Email dispatch interface.

    Implementations:
    - DevEmailAdapter: Logs to console (dev/test)
    - HttpDispatchGateway: hosted send-email function
    """

    def send(self, message: EmailMessage) -> EmailResult:
        """
        Dispatch an email message.

        Args:
            message: Complete email message

        Returns:
            EmailResult with send outcome

        Notes:
            - Must not raise exceptions; return failed status instead
        """
        ...


# --- Error Types ---


class EmailError(Exception):
    """Base exception for email-related errors."""

    pass


class EmailSendError(EmailError):
    """Failed to send email."""

    def __init__(self, recipient: str, error: str, retriable: bool = True) -> None:
        self.recipient = recipient
        self.error = error
        self.retriable = retriable
        super().__init__(f"Failed to send email to {recipient}: {error}")
