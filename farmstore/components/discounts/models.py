"""
Discounts component models.

Discount codes, validation/redemption inputs and outputs, and the error
taxonomy for code checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


class DiscountType(Enum):
    """How ``DiscountCode.value`` is applied."""

    PERCENTAGE = "percentage"  # value = percentage points
    FIXED = "fixed"  # value = currency amount (EUR)


# --- Entity ---


@dataclass
class DiscountCode:
    """
    Redeemable discount code.

    The banner window is independent of the validity window; when the
    banner bounds are absent the validity window is used for display.
    """

    code: str  # Stored uppercase
    discount_type: DiscountType
    value: Decimal
    valid_from: datetime
    valid_until: datetime | None = None  # None = open-ended
    max_uses: int | None = None  # None = unlimited
    current_uses: int = 0
    min_order_amount: Decimal | None = None
    is_active: bool = True
    description: str | None = None
    category: str | None = None
    product_id: str | None = None
    banner_text: str | None = None
    show_in_banner: bool = False
    banner_start_time: datetime | None = None
    banner_end_time: datetime | None = None


# --- Input Models ---


@dataclass(frozen=True)
class ValidateDiscountInput:
    """Input for checking a code against an order total."""

    code: str
    order_total: Decimal


@dataclass(frozen=True)
class ApplyDiscountInput:
    """Input for redeeming a code on a placed order."""

    code: str


# --- Output Models ---


@dataclass(frozen=True)
class DiscountValidationError:
    """Validation error detail."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class ValidateDiscountOutput:
    """Output from code validation."""

    valid: bool
    discount_amount: Decimal = Decimal("0.00")
    discount: DiscountCode | None = None
    errors: list[DiscountValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class ApplyDiscountOutput:
    """Output from code redemption."""

    success: bool
    current_uses: int | None = None
    errors: list[DiscountValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class BannerDiscountsOutput:
    """Codes currently advertised, soonest-expiring first."""

    discounts: list[DiscountCode] = field(default_factory=list)


# --- Error Codes ---

INVALID_CODE = "INVALID_CODE"
EXPIRED_CODE = "EXPIRED_CODE"
USAGE_EXCEEDED = "USAGE_EXCEEDED"
BELOW_MINIMUM = "BELOW_MINIMUM"
STORAGE_ERROR = "STORAGE_ERROR"


# --- Error Types ---


class DiscountError(Exception):
    """Base discount error."""

    code = INVALID_CODE

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidCodeError(DiscountError):
    """No active code with that name."""

    code = INVALID_CODE

    def __init__(self, discount_code: str) -> None:
        self.discount_code = discount_code
        super().__init__(f"Invalid discount code '{discount_code}'")


class ExpiredCodeError(DiscountError):
    """Code is outside its validity window."""

    code = EXPIRED_CODE

    def __init__(self, discount_code: str) -> None:
        self.discount_code = discount_code
        super().__init__(f"Discount code '{discount_code}' is not valid at this time")


class UsageExceededError(DiscountError):
    """Code has reached its usage cap."""

    code = USAGE_EXCEEDED

    def __init__(self, discount_code: str, max_uses: int) -> None:
        self.discount_code = discount_code
        self.max_uses = max_uses
        super().__init__(f"Discount code '{discount_code}' has reached its usage limit")


class BelowMinimumError(DiscountError):
    """Order total is below the code's minimum."""

    code = BELOW_MINIMUM

    def __init__(self, discount_code: str, min_order_amount: Decimal) -> None:
        self.discount_code = discount_code
        self.min_order_amount = min_order_amount
        super().__init__(f"Minimum order amount for this code is {min_order_amount:.2f} EUR")


class DiscountStorageError(DiscountError):
    """Discount storage could not be read or updated."""

    code = STORAGE_ERROR

    def __init__(self, discount_code: str) -> None:
        self.discount_code = discount_code
        super().__init__("Error validating discount code")
