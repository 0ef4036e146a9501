"""
SQLite Database Adapter.

Implements the subscriber and discount repository ports on SQLite.
Sticks to standard SQL so the schema ports to Postgres.

Every state transition is a single conditional UPDATE whose rowcount
tells the caller whether it won, so concurrent requests cannot both
confirm a subscriber, both claim the welcome email, or push a discount
past its usage cap.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

from farmstore.components.discounts.models import DiscountCode, DiscountType
from farmstore.components.newsletter.models import (
    AlreadySubscribedError,
    ConfirmationStatus,
    Subscriber,
    SubscriberPreferences,
    SubscriberState,
)


# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def to_iso(dt: datetime | None) -> str | None:
    """
    Serialize a datetime as fixed-width UTC ISO text.

    Fixed width keeps lexicographic order equal to time order, which the
    range predicates below rely on. Naive values are taken as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


def parse_decimal(s: str | None) -> Decimal | None:
    return Decimal(s) if s is not None else None


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path, timeout=10.0)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row: dict[str, Any] | None = conn.execute(sql, params).fetchone()
            return row
        finally:
            if self._should_close():
                conn.close()

    def _update(self, sql: str, params: tuple[Any, ...]) -> int:
        """Run a single UPDATE and return the number of rows it changed."""
        conn = self._get_conn()
        try:
            cursor = conn.execute(sql, params)
            if self._should_close():
                conn.commit()
            return cursor.rowcount
        finally:
            if self._should_close():
                conn.close()


# -----------------------------------------------------------------------------
# Newsletter Subscriber Repository
# -----------------------------------------------------------------------------


class SQLiteSubscriberRepo(SQLiteRepoBase):
    """SQLite implementation of SubscriberRepoPort."""

    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        row = self._fetch_one(
            "SELECT * FROM newsletter_subscribers WHERE id = ?", (str(subscriber_id),)
        )
        return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> Subscriber | None:
        row = self._fetch_one(
            "SELECT * FROM newsletter_subscribers WHERE email = ?", (email.strip().lower(),)
        )
        return self._map_row(row) if row else None

    def get_by_confirmation_token(self, token: str) -> Subscriber | None:
        row = self._fetch_one(
            "SELECT * FROM newsletter_subscribers WHERE confirmation_token = ?", (token,)
        )
        return self._map_row(row) if row else None

    def get_by_unsubscribe_token(self, token: str) -> Subscriber | None:
        row = self._fetch_one(
            "SELECT * FROM newsletter_subscribers WHERE unsubscribe_token = ?", (token,)
        )
        return self._map_row(row) if row else None

    def create(self, subscriber: Subscriber) -> Subscriber:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO newsletter_subscribers (
                    id, email, name, is_active, confirmation_status,
                    confirmation_token, unsubscribe_token, source, language,
                    preferences, discount_used, last_emailed_at,
                    created_at, confirmed_at, unsubscribed_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(subscriber.id),
                    subscriber.email,
                    subscriber.name,
                    1 if subscriber.is_active else 0,
                    subscriber.confirmation_status.value,
                    subscriber.confirmation_token,
                    subscriber.unsubscribe_token,
                    subscriber.source,
                    subscriber.language,
                    json.dumps(subscriber.preferences.to_dict()),
                    subscriber.discount_used,
                    to_iso(subscriber.last_emailed_at),
                    to_iso(subscriber.created_at),
                    to_iso(subscriber.confirmed_at),
                    to_iso(subscriber.unsubscribed_at),
                ),
            )
            if self._should_close():
                conn.commit()
            return subscriber
        except sqlite3.IntegrityError as e:
            if "newsletter_subscribers.email" in str(e):
                raise AlreadySubscribedError(subscriber.email) from e
            raise
        finally:
            if self._should_close():
                conn.close()

    def mark_confirmed(self, subscriber_id: UUID, confirmed_at: datetime) -> bool:
        changed = self._update(
            """
            UPDATE newsletter_subscribers
            SET confirmation_status = 'confirmed', confirmed_at = ?
            WHERE id = ? AND confirmation_status = 'pending'
            """,
            (to_iso(confirmed_at), str(subscriber_id)),
        )
        return changed == 1

    def assign_discount(self, subscriber_id: UUID, code: str) -> None:
        self._update(
            "UPDATE newsletter_subscribers SET discount_used = ? WHERE id = ?",
            (code, str(subscriber_id)),
        )

    def claim_welcome_email(
        self,
        subscriber_id: UUID,
        now: datetime,
        cooldown_seconds: int,
    ) -> bool:
        threshold = now - timedelta(seconds=cooldown_seconds)
        changed = self._update(
            """
            UPDATE newsletter_subscribers
            SET last_emailed_at = ?
            WHERE id = ? AND is_active = 1
              AND (last_emailed_at IS NULL OR last_emailed_at <= ?)
            """,
            (to_iso(now), str(subscriber_id), to_iso(threshold)),
        )
        return changed == 1

    def release_welcome_email(
        self,
        subscriber_id: UUID,
        claimed_at: datetime,
        previous: datetime | None,
    ) -> None:
        self._update(
            """
            UPDATE newsletter_subscribers
            SET last_emailed_at = ?
            WHERE id = ? AND last_emailed_at = ?
            """,
            (to_iso(previous), str(subscriber_id), to_iso(claimed_at)),
        )

    def deactivate(self, subscriber_id: UUID, unsubscribed_at: datetime) -> bool:
        changed = self._update(
            """
            UPDATE newsletter_subscribers
            SET is_active = 0, unsubscribed_at = ?
            WHERE id = ? AND is_active = 1
            """,
            (to_iso(unsubscribed_at), str(subscriber_id)),
        )
        return changed == 1

    def update_preferences(
        self,
        subscriber_id: UUID,
        preferences: SubscriberPreferences,
    ) -> None:
        self._update(
            "UPDATE newsletter_subscribers SET preferences = ? WHERE id = ?",
            (json.dumps(preferences.to_dict()), str(subscriber_id)),
        )

    def count_by_state(self, state: SubscriberState) -> int:
        predicates = {
            SubscriberState.PENDING: "is_active = 1 AND confirmation_status = 'pending'",
            SubscriberState.CONFIRMED: "is_active = 1 AND confirmation_status = 'confirmed'",
            SubscriberState.INACTIVE: "is_active = 0",
        }
        row = self._fetch_one(
            f"SELECT COUNT(*) AS n FROM newsletter_subscribers WHERE {predicates[state]}",
            (),
        )
        return int(row["n"]) if row else 0

    def _map_row(self, row: dict[str, Any]) -> Subscriber:
        preferences = json.loads(row["preferences"]) if row["preferences"] else None
        return Subscriber(
            id=UUID(row["id"]),
            email=row["email"],
            confirmation_token=row["confirmation_token"],
            unsubscribe_token=row["unsubscribe_token"],
            name=row["name"],
            is_active=bool(row["is_active"]),
            confirmation_status=ConfirmationStatus(row["confirmation_status"]),
            source=row["source"] or "website",
            language=row["language"] or "sl",
            preferences=SubscriberPreferences.from_dict(preferences),
            discount_used=row["discount_used"],
            last_emailed_at=parse_dt(row["last_emailed_at"]),
            created_at=parse_dt(row["created_at"]) or datetime.now(UTC),
            confirmed_at=parse_dt(row["confirmed_at"]),
            unsubscribed_at=parse_dt(row["unsubscribed_at"]),
        )


# -----------------------------------------------------------------------------
# Discount Code Repository
# -----------------------------------------------------------------------------


class SQLiteDiscountRepo(SQLiteRepoBase):
    """SQLite implementation of DiscountRepoPort."""

    def get_active_by_code(self, code: str) -> DiscountCode | None:
        row = self._fetch_one(
            "SELECT * FROM discount_codes WHERE code = ? AND is_active = 1", (code,)
        )
        return self._map_row(row) if row else None

    def get_by_code(self, code: str) -> DiscountCode | None:
        row = self._fetch_one("SELECT * FROM discount_codes WHERE code = ?", (code,))
        return self._map_row(row) if row else None

    def increment_usage(self, code: str) -> int | None:
        conn = self._get_conn()
        try:
            if self._should_close():
                # Hold the write lock until the new count is read back
                conn.execute("BEGIN IMMEDIATE")
            cursor = conn.execute(
                """
                UPDATE discount_codes
                SET current_uses = current_uses + 1, updated_at = ?
                WHERE code = ? AND is_active = 1
                  AND (max_uses IS NULL OR current_uses < max_uses)
                """,
                (to_iso(datetime.now(UTC)), code),
            )
            if cursor.rowcount != 1:
                if self._should_close():
                    conn.rollback()
                return None
            row = conn.execute(
                "SELECT current_uses FROM discount_codes WHERE code = ?", (code,)
            ).fetchone()
            if self._should_close():
                conn.commit()
            return int(row["current_uses"])
        finally:
            if self._should_close():
                conn.close()

    def list_banner_candidates(self, now: datetime) -> list[DiscountCode]:
        conn = self._get_conn()
        try:
            now_iso = to_iso(now)
            rows = conn.execute(
                """
                SELECT * FROM discount_codes
                WHERE is_active = 1 AND show_in_banner = 1
                  AND valid_from <= ?
                  AND (valid_until IS NULL OR valid_until >= ?)
                ORDER BY valid_until ASC
                """,
                (now_iso, now_iso),
            ).fetchall()
            return [self._map_row(r) for r in rows]
        finally:
            if self._should_close():
                conn.close()

    def save(self, discount: DiscountCode) -> DiscountCode:
        conn = self._get_conn()
        try:
            now = to_iso(datetime.now(UTC))
            conn.execute(
                """
                INSERT OR REPLACE INTO discount_codes (
                    code, discount_type, discount_value, valid_from, valid_until,
                    max_uses, current_uses, min_order_amount, is_active,
                    description, category, product_id, banner_text,
                    show_in_banner, banner_start_time, banner_end_time,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    discount.code.strip().upper(),
                    discount.discount_type.value,
                    str(discount.value),
                    to_iso(discount.valid_from),
                    to_iso(discount.valid_until),
                    discount.max_uses,
                    discount.current_uses,
                    (
                        str(discount.min_order_amount)
                        if discount.min_order_amount is not None
                        else None
                    ),
                    1 if discount.is_active else 0,
                    discount.description,
                    discount.category,
                    discount.product_id,
                    discount.banner_text,
                    1 if discount.show_in_banner else 0,
                    to_iso(discount.banner_start_time),
                    to_iso(discount.banner_end_time),
                    now,
                    now,
                ),
            )
            if self._should_close():
                conn.commit()
            return discount
        finally:
            if self._should_close():
                conn.close()

    def _map_row(self, row: dict[str, Any]) -> DiscountCode:
        return DiscountCode(
            code=row["code"],
            discount_type=DiscountType(row["discount_type"]),
            value=Decimal(row["discount_value"]),
            valid_from=parse_dt(row["valid_from"]) or datetime.min.replace(tzinfo=UTC),
            valid_until=parse_dt(row["valid_until"]),
            max_uses=row["max_uses"],
            current_uses=row["current_uses"],
            min_order_amount=parse_decimal(row["min_order_amount"]),
            is_active=bool(row["is_active"]),
            description=row["description"],
            category=row["category"],
            product_id=row["product_id"],
            banner_text=row["banner_text"],
            show_in_banner=bool(row["show_in_banner"]),
            banner_start_time=parse_dt(row["banner_start_time"]),
            banner_end_time=parse_dt(row["banner_end_time"]),
        )
