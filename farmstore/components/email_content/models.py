"""
Email content component models.

Inputs and outputs for the localized confirmation and welcome emails.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class ConfirmationEmailInput:
    """Input for rendering the double opt-in confirmation email."""

    confirmation_url: str
    first_name: str | None = None
    language: str = "sl"
    year: int | None = None  # Footer year; omitted when None


@dataclass(frozen=True)
class WelcomeEmailInput:
    """Input for rendering the welcome email sent after confirmation."""

    unsubscribe_url: str
    first_name: str | None = None
    discount_code: str | None = None
    discount_percent: Decimal | None = None  # None: offer names no percentage
    language: str = "sl"
    site_url: str = "https://kmetija-marosa.si"
    year: int | None = None


@dataclass(frozen=True)
class RenderedEmail:
    """Rendered email: localized subject plus HTML and plain text bodies."""

    subject: str
    html: str
    text: str
    language: str  # Resolved language actually used
