"""
Newsletter component models.

Data models for the double opt-in subscription lifecycle.

State machine (Subscriber):
    pending --confirm--> confirmed --unsubscribe--> inactive
    pending --unsubscribe--> inactive
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

# --- State Machine ---


class ConfirmationStatus(Enum):
    """Persisted opt-in status of a subscriber."""

    PENDING = "pending"  # Awaiting email confirmation
    CONFIRMED = "confirmed"  # Email confirmed


class SubscriberState(Enum):
    """
    Lifecycle state derived from confirmation status and activity flag.

    State transitions:
    - pending → confirmed (via confirmation link)
    - confirmed → inactive (via unsubscribe link)
    - pending → inactive (unsubscribe before confirming)
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    INACTIVE = "inactive"  # Terminal, never mailed again


VALID_TRANSITIONS: dict[SubscriberState, set[SubscriberState]] = {
    SubscriberState.PENDING: {SubscriberState.CONFIRMED, SubscriberState.INACTIVE},
    SubscriberState.CONFIRMED: {SubscriberState.INACTIVE},
    SubscriberState.INACTIVE: set(),
}


def can_transition(from_state: SubscriberState, to_state: SubscriberState) -> bool:
    """Check if a lifecycle transition is allowed."""
    return to_state in VALID_TRANSITIONS.get(from_state, set())


# --- Entity ---


@dataclass(frozen=True)
class SubscriberPreferences:
    """Which newsletter topics the subscriber wants."""

    product_updates: bool = True
    promotions: bool = True
    recipes: bool = True

    def merged(self, update: dict[str, Any] | None) -> SubscriberPreferences:
        """Return a copy with the wire-keyed flags in ``update`` applied."""
        if not update:
            return self
        current = self.to_dict()
        for key in current:
            if key in update and update[key] is not None:
                current[key] = bool(update[key])
        return SubscriberPreferences.from_dict(current)

    def to_dict(self) -> dict[str, bool]:
        return {
            "productUpdates": self.product_updates,
            "promotions": self.promotions,
            "recipes": self.recipes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SubscriberPreferences:
        if not data:
            return cls()
        return cls(
            product_updates=bool(data.get("productUpdates", True)),
            promotions=bool(data.get("promotions", True)),
            recipes=bool(data.get("recipes", True)),
        )


@dataclass
class Subscriber:
    """
    Newsletter subscriber entity.

    Holds both opt-in tokens. The confirmation token is kept after
    confirmation so a repeated click still resolves to this record.
    """

    id: UUID
    email: str  # Lowercased, trimmed
    confirmation_token: str
    unsubscribe_token: str
    name: str | None = None
    is_active: bool = True
    confirmation_status: ConfirmationStatus = ConfirmationStatus.PENDING
    source: str = "website"
    language: str = "sl"
    preferences: SubscriberPreferences = field(default_factory=SubscriberPreferences)
    discount_used: str | None = None
    last_emailed_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    confirmed_at: datetime | None = None
    unsubscribed_at: datetime | None = None

    @property
    def state(self) -> SubscriberState:
        if not self.is_active:
            return SubscriberState.INACTIVE
        if self.confirmation_status == ConfirmationStatus.CONFIRMED:
            return SubscriberState.CONFIRMED
        return SubscriberState.PENDING

    @property
    def first_name(self) -> str | None:
        if not self.name or not self.name.strip():
            return None
        return self.name.strip().split()[0]


# --- Input Models ---


@dataclass(frozen=True)
class SubscribeInput:
    """Input for new subscription."""

    email: str
    name: str | None = None
    preferences: dict[str, Any] | None = None  # Wire keys: productUpdates, promotions, recipes
    source: str = "website"  # e.g. "website_footer", "welcome_popup"
    language: str = "sl"


@dataclass(frozen=True)
class ConfirmInput:
    """Input for confirming subscription."""

    token: str
    language: str | None = None  # None = subscriber's own language


@dataclass(frozen=True)
class UnsubscribeInput:
    """Input for unsubscribing."""

    token: str
    language: str | None = None


@dataclass(frozen=True)
class UpdatePreferencesInput:
    """Input for changing topic preferences, identified by unsubscribe token."""

    token: str
    preferences: dict[str, Any]
    language: str | None = None


# --- Output Models ---


@dataclass(frozen=True)
class ValidationError:
    """Validation error detail."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class ValidateEmailOutput:
    """Output from email validation."""

    is_valid: bool
    normalized_email: str | None = None  # Lowercase, trimmed
    errors: list[ValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class SubscribeOutput:
    """Output from subscription attempt."""

    success: bool
    message: str = ""
    subscriber_id: UUID | None = None
    errors: list[ValidationError] = field(default_factory=list)
    simulated_dispatch: bool = False  # Dispatch failed, reported as success


@dataclass(frozen=True)
class ConfirmOutput:
    """Output from confirmation attempt."""

    success: bool
    message: str = ""
    subscriber_id: UUID | None = None
    errors: list[ValidationError] = field(default_factory=list)
    already_confirmed: bool = False  # Idempotent success
    welcome_email_sent: bool = False
    discount_code: str | None = None
    simulated_dispatch: bool = False


@dataclass(frozen=True)
class UnsubscribeOutput:
    """Output from unsubscribe attempt."""

    success: bool
    message: str = ""
    errors: list[ValidationError] = field(default_factory=list)
    already_unsubscribed: bool = False  # Idempotent success


@dataclass(frozen=True)
class UpdatePreferencesOutput:
    """Output from preference update."""

    success: bool
    message: str = ""
    preferences: SubscriberPreferences | None = None
    errors: list[ValidationError] = field(default_factory=list)


# --- Error Codes ---

ALREADY_SUBSCRIBED = "ALREADY_SUBSCRIBED"
INVALID_TOKEN = "INVALID_TOKEN"
SUBSCRIPTION_ERROR = "SUBSCRIPTION_ERROR"
PREFERENCE_UPDATE_ERROR = "PREFERENCE_UPDATE_ERROR"
INVALID_EMAIL = "INVALID_EMAIL"


# --- Configuration ---


@dataclass(frozen=True)
class NewsletterConfig:
    """Newsletter lifecycle configuration."""

    base_url: str = "https://kmetija-marosa.si"
    confirmation_path: str = "/confirm-subscription"
    unsubscribe_path: str = "/unsubscribe"
    site_url: str = "https://kmetija-marosa.si"
    welcome_discount_code: str = "DOBRODOSLI10"
    welcome_discount_percent: Decimal | None = Decimal("10")
    welcome_email_cooldown_seconds: int = 300
    confirmation_token_expiry_hours: int | None = None  # None = never expires
    default_language: str = "sl"
    sender_email: str | None = None  # None = gateway default sender
    sender_name: str | None = "Kmetija Maroša"
    reply_to_email: str | None = "kmetija.marosa@gmail.com"
    allow_simulated_dispatch: bool = False


# --- Error Types ---


class NewsletterError(Exception):
    """Base newsletter error."""

    code = SUBSCRIPTION_ERROR


class AlreadySubscribedError(NewsletterError):
    """Email address already has a subscriber record."""

    code = ALREADY_SUBSCRIBED

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"Email '{email}' is already subscribed")


class InvalidTokenError(NewsletterError):
    """Token is unknown, malformed or expired."""

    code = INVALID_TOKEN

    def __init__(self, reason: str = "Token not found") -> None:
        self.reason = reason
        super().__init__(f"Invalid token: {reason}")


class SubscriptionError(NewsletterError):
    """Storage or dispatch fault during a lifecycle operation."""

    code = SUBSCRIPTION_ERROR

    def __init__(self, email: str, reason: str) -> None:
        self.email = email
        self.reason = reason
        super().__init__(f"Subscription error for '{email}': {reason}")


class PreferenceUpdateError(NewsletterError):
    """Preferences could not be persisted."""

    code = PREFERENCE_UPDATE_ERROR

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Preference update failed: {reason}")
