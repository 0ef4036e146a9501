"""
Discounts component ports.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from farmstore.components.discounts.models import DiscountCode


class DiscountRepoPort(Protocol):
    """
    Discount code repository interface.

    Codes are passed in normalized (trimmed, uppercase) form.
    """

    def get_active_by_code(self, code: str) -> DiscountCode | None:
        """Get an active code, None if unknown or deactivated."""
        ...

    def get_by_code(self, code: str) -> DiscountCode | None:
        """Get a code regardless of activity flag."""
        ...

    def increment_usage(self, code: str) -> int | None:
        """
        Atomically add one use to an active code below its cap.

        Returns:
            New usage count, or None if the code is unknown, inactive or
            already at max_uses
        """
        ...

    def list_banner_candidates(self, now: datetime) -> list[DiscountCode]:
        """Active codes flagged for the banner whose validity covers ``now``."""
        ...

    def save(self, discount: DiscountCode) -> DiscountCode:
        """Insert or replace a code (admin surface and fixtures)."""
        ...
