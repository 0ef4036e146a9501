"""
Newsletter component ports.

Protocol interfaces for the subscription lifecycle dependencies.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from farmstore.components.newsletter.models import (
    Subscriber,
    SubscriberPreferences,
    SubscriberState,
)


class SubscriberRepoPort(Protocol):
    """
    Newsletter subscriber repository interface.

    State-changing methods are conditional updates so that concurrent
    callers cannot both win the same transition.
    """

    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        """Get subscriber by ID."""
        ...

    def get_by_email(self, email: str) -> Subscriber | None:
        """Get subscriber by normalized email address."""
        ...

    def get_by_confirmation_token(self, token: str) -> Subscriber | None:
        """Get subscriber by confirmation token."""
        ...

    def get_by_unsubscribe_token(self, token: str) -> Subscriber | None:
        """Get subscriber by unsubscribe token."""
        ...

    def create(self, subscriber: Subscriber) -> Subscriber:
        """
        Insert a new subscriber.

        Raises:
            AlreadySubscribedError: email already has a record
        """
        ...

    def mark_confirmed(self, subscriber_id: UUID, confirmed_at: datetime) -> bool:
        """
        Compare-and-swap pending → confirmed.

        Returns:
            True only for the caller that performed the transition
        """
        ...

    def assign_discount(self, subscriber_id: UUID, code: str) -> None:
        """Record the discount code granted to the subscriber."""
        ...

    def claim_welcome_email(
        self,
        subscriber_id: UUID,
        now: datetime,
        cooldown_seconds: int,
    ) -> bool:
        """
        Atomically set last_emailed_at to ``now`` if the subscriber is
        active and was never emailed or the cooldown has elapsed.

        Returns:
            True if this caller may send the welcome email
        """
        ...

    def release_welcome_email(
        self,
        subscriber_id: UUID,
        claimed_at: datetime,
        previous: datetime | None,
    ) -> None:
        """Undo a claim whose dispatch failed (only if still ours)."""
        ...

    def deactivate(self, subscriber_id: UUID, unsubscribed_at: datetime) -> bool:
        """Compare-and-swap active → inactive. False if already inactive."""
        ...

    def update_preferences(
        self,
        subscriber_id: UUID,
        preferences: SubscriberPreferences,
    ) -> None:
        """Persist topic preferences."""
        ...

    def count_by_state(self, state: SubscriberState) -> int:
        """Count subscribers in a lifecycle state."""
        ...


class ProcessedTokenStorePort(Protocol):
    """
    Set of confirmation tokens already being processed.

    Absorbs near-simultaneous duplicate confirmations within one running
    instance. Not durable; the repository's conditional updates are the
    real guarantee.
    """

    def add_if_absent(self, token: str) -> bool:
        """Add token; True if it was not present."""
        ...

    def discard(self, token: str) -> None:
        """Forget a token (processing failed, allow retry)."""
        ...

    def __contains__(self, token: object) -> bool: ...
