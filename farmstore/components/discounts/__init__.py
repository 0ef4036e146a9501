"""
Discounts component.

Discount code validation, redemption and banner selection.
"""

from farmstore.components.discounts.component import (
    calculate_discount_amount,
    check_discount,
    get_active_banner_discount,
    is_banner_eligible,
    is_within_window,
    normalize_code,
    run,
    run_apply,
    run_list_banner,
    run_validate,
    to_money,
)
from farmstore.components.discounts.models import (
    BELOW_MINIMUM,
    EXPIRED_CODE,
    INVALID_CODE,
    STORAGE_ERROR,
    USAGE_EXCEEDED,
    ApplyDiscountInput,
    ApplyDiscountOutput,
    BannerDiscountsOutput,
    BelowMinimumError,
    DiscountCode,
    DiscountError,
    DiscountStorageError,
    DiscountType,
    DiscountValidationError,
    ExpiredCodeError,
    InvalidCodeError,
    UsageExceededError,
    ValidateDiscountInput,
    ValidateDiscountOutput,
)
from farmstore.components.discounts.ports import DiscountRepoPort

__all__ = [
    # Component
    "calculate_discount_amount",
    "check_discount",
    "get_active_banner_discount",
    "is_banner_eligible",
    "is_within_window",
    "normalize_code",
    "run",
    "run_apply",
    "run_list_banner",
    "run_validate",
    "to_money",
    # Models
    "BELOW_MINIMUM",
    "EXPIRED_CODE",
    "INVALID_CODE",
    "STORAGE_ERROR",
    "USAGE_EXCEEDED",
    "ApplyDiscountInput",
    "ApplyDiscountOutput",
    "BannerDiscountsOutput",
    "BelowMinimumError",
    "DiscountCode",
    "DiscountError",
    "DiscountStorageError",
    "DiscountType",
    "DiscountValidationError",
    "ExpiredCodeError",
    "InvalidCodeError",
    "UsageExceededError",
    "ValidateDiscountInput",
    "ValidateDiscountOutput",
    # Ports
    "DiscountRepoPort",
]
