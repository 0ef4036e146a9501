"""
Dev Email Adapter.

Logs newsletter emails instead of handing them to the mail function.
Used for local development and tests, and whenever MAIL_FUNCTION_URL is
not configured.

Key behaviors:
- Logs recipient, subject, kind and a body preview
- Returns SKIPPED status (not SENT); SKIPPED still counts as handed over
- Stores messages in memory for test assertions
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from farmstore.core.ports.email import (
    EmailKind,
    EmailMessage,
    EmailResult,
    EmailStatus,
)

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    kind: EmailKind
    sender: str | None
    discount_code: str | None
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    """
    Dev email adapter that logs instead of sending.

    Implements the EmailPort protocol.
    """

    sent_emails: list[SentEmail] = field(default_factory=list)

    log_level: int = logging.INFO
    log_body: bool = True
    body_preview_length: int = 100

    def send(self, message: EmailMessage) -> EmailResult:
        """
        Log a composed email message.

        Returns:
            EmailResult with SKIPPED status
        """
        message_id = f"dev-{uuid4().hex[:12]}"
        sender = str(message.sender) if message.sender else None

        self.sent_emails.append(
            SentEmail(
                id=message_id,
                recipient=message.recipient.email,
                subject=message.subject,
                body_html=message.body_html,
                body_text=message.body_text,
                kind=message.kind,
                sender=sender,
                discount_code=message.discount_code,
                logged_at=datetime.now(UTC),
            )
        )
        self._log_email(message, message_id, sender)

        return EmailResult(
            status=EmailStatus.SKIPPED,
            message_id=message_id,
            recipient=message.recipient.email,
            error="Dev mode - email logged, not sent",
        )

    def _log_email(self, message: EmailMessage, message_id: str, sender: str | None) -> None:
        parts = [
            f"EMAIL (dev): To={message.recipient}",
            f"Subject={message.subject}",
            f"Kind={message.kind.value}",
        ]
        if sender:
            parts.append(f"From={sender}")
        if message.discount_code:
            parts.append(f"Discount={message.discount_code}")
        if self.log_body and message.body_text:
            preview = message.body_text[: self.body_preview_length]
            if len(message.body_text) > self.body_preview_length:
                preview += "..."
            parts.append(f"Body={preview!r}")
        parts.append(f"MessageID={message_id}")

        logger.log(self.log_level, ", ".join(parts))

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        """Get the most recently logged email."""
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        """Get all emails logged to a specific address."""
        return [e for e in self.sent_emails if e.recipient == recipient]

    def get_emails_of_kind(self, kind: EmailKind) -> list[SentEmail]:
        return [e for e in self.sent_emails if e.kind == kind]

    def clear(self) -> None:
        """Clear all stored emails (for test isolation)."""
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)
