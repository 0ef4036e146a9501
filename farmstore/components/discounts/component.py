"""
Discounts component.

Functional core for discount code validation, redemption and the
storefront discount banner.

Key behaviors:
- Codes are case-insensitive (trimmed, uppercased before lookup)
- Checks run in a fixed order: validity window, usage cap, minimum order
- The validity window is inclusive at both ends
- Redemption is a single conditional increment at the storage layer, so
  concurrent redemptions are all counted and never exceed the cap
- Money is Decimal, rounded half-up to cents
- Storage faults are logged and returned as STORAGE_ERROR, never raised
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from farmstore.components.discounts.models import (
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
from farmstore.core.ports.clock import ClockPort

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


# --- Pure Functions (Functional Core) ---


def normalize_code(code: str) -> str:
    """Trim and uppercase a code as typed by the customer."""
    return (code or "").strip().upper()


def to_money(amount: Decimal) -> Decimal:
    """Round to cents, half-up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def is_within_window(
    now: datetime,
    start: datetime | None,
    end: datetime | None,
) -> bool:
    """Inclusive window check; a missing bound is open."""
    if start is not None and now < start:
        return False
    if end is not None and now > end:
        return False
    return True


def check_discount(
    discount: DiscountCode,
    order_total: Decimal,
    now: datetime,
) -> None:
    """
    Check that a code can be used on an order.

    Args:
        discount: Stored code
        order_total: Order amount before discount
        now: Current time

    Raises:
        InvalidCodeError: code is deactivated
        ExpiredCodeError: now outside [valid_from, valid_until]
        UsageExceededError: current_uses >= max_uses
        BelowMinimumError: order_total < min_order_amount
    """
    if not discount.is_active:
        raise InvalidCodeError(discount.code)

    if not is_within_window(now, discount.valid_from, discount.valid_until):
        raise ExpiredCodeError(discount.code)

    if discount.max_uses is not None and discount.current_uses >= discount.max_uses:
        raise UsageExceededError(discount.code, discount.max_uses)

    if discount.min_order_amount is not None and order_total < discount.min_order_amount:
        raise BelowMinimumError(discount.code, discount.min_order_amount)


def calculate_discount_amount(discount: DiscountCode, order_total: Decimal) -> Decimal:
    """
    Compute the amount taken off ``order_total``.

    Percentage codes take value% of the total; fixed codes take their
    value but never more than the total itself.
    """
    if discount.discount_type == DiscountType.PERCENTAGE:
        amount = order_total * discount.value / Decimal(100)
    else:
        amount = min(discount.value, order_total)
    return to_money(max(amount, Decimal(0)))


def is_banner_eligible(discount: DiscountCode, now: datetime) -> bool:
    """
    True if the code should be advertised in the storefront banner.

    Requires show_in_banner, an active code inside its validity window,
    and ``now`` inside the banner window. Missing banner bounds fall back
    to the validity bounds.
    """
    if not discount.show_in_banner or not discount.is_active:
        return False
    if not is_within_window(now, discount.valid_from, discount.valid_until):
        return False
    start = discount.banner_start_time or discount.valid_from
    end = discount.banner_end_time or discount.valid_until
    return is_within_window(now, start, end)


def _sort_key(discount: DiscountCode) -> tuple[int, datetime]:
    # Open-ended codes sort last
    if discount.valid_until is None:
        return (1, datetime.max.replace(tzinfo=UTC))
    return (0, discount.valid_until)


def _errors(error: DiscountError, field: str | None = "code") -> list[DiscountValidationError]:
    return [DiscountValidationError(error.code, error.message, field)]


def _now(clock: ClockPort | None) -> datetime:
    return clock.now_utc() if clock else datetime.now(UTC)


# --- Run Handlers ---


def run_validate(
    inp: ValidateDiscountInput,
    repo: DiscountRepoPort,
    *,
    clock: ClockPort | None = None,
) -> ValidateDiscountOutput:
    """
    Validate a code against an order total (Atomic Handler).

    Read-only: usage is counted by run_apply once the order is placed.
    """
    code = normalize_code(inp.code)
    if not code:
        return ValidateDiscountOutput(valid=False, errors=_errors(InvalidCodeError(code)))

    try:
        discount = repo.get_active_by_code(code)
    except Exception:
        logger.exception("Discount lookup failed for %s", code)
        return ValidateDiscountOutput(valid=False, errors=_errors(DiscountStorageError(code), None))
    if discount is None:
        return ValidateDiscountOutput(valid=False, errors=_errors(InvalidCodeError(code)))

    try:
        check_discount(discount, inp.order_total, _now(clock))
    except DiscountError as e:
        field = "order_total" if isinstance(e, BelowMinimumError) else "code"
        return ValidateDiscountOutput(valid=False, discount=discount, errors=_errors(e, field))

    return ValidateDiscountOutput(
        valid=True,
        discount_amount=calculate_discount_amount(discount, inp.order_total),
        discount=discount,
    )


def run_apply(
    inp: ApplyDiscountInput,
    repo: DiscountRepoPort,
) -> ApplyDiscountOutput:
    """
    Count one redemption of a code (Atomic Handler).

    The increment and the cap check are one storage operation.
    """
    code = normalize_code(inp.code)
    if not code:
        return ApplyDiscountOutput(success=False, errors=_errors(InvalidCodeError(code)))

    try:
        new_count = repo.increment_usage(code)
        discount = None if new_count is not None else repo.get_active_by_code(code)
    except Exception:
        logger.exception("Discount redemption failed for %s", code)
        return ApplyDiscountOutput(success=False, errors=_errors(DiscountStorageError(code), None))

    if new_count is not None:
        logger.info("Discount %s redeemed (uses=%d)", code, new_count)
        return ApplyDiscountOutput(success=True, current_uses=new_count)

    if discount is None:
        return ApplyDiscountOutput(success=False, errors=_errors(InvalidCodeError(code)))

    logger.warning("Discount %s rejected at cap %s", code, discount.max_uses)
    return ApplyDiscountOutput(
        success=False,
        current_uses=discount.current_uses,
        errors=_errors(UsageExceededError(code, discount.max_uses or 0)),
    )


def run_list_banner(
    repo: DiscountRepoPort,
    *,
    clock: ClockPort | None = None,
) -> BannerDiscountsOutput:
    """
    List codes to advertise now, soonest-expiring first.
    """
    now = _now(clock)
    try:
        candidates = repo.list_banner_candidates(now)
    except Exception:
        logger.exception("Banner lookup failed")
        return BannerDiscountsOutput()
    eligible = [d for d in candidates if is_banner_eligible(d, now)]
    return BannerDiscountsOutput(discounts=sorted(eligible, key=_sort_key))


def get_active_banner_discount(
    repo: DiscountRepoPort,
    *,
    clock: ClockPort | None = None,
) -> DiscountCode | None:
    """Most relevant code for the banner, or None."""
    listing = run_list_banner(repo, clock=clock)
    return listing.discounts[0] if listing.discounts else None


def run(
    inp: ValidateDiscountInput | ApplyDiscountInput,
    *,
    repo: DiscountRepoPort,
    clock: ClockPort | None = None,
) -> ValidateDiscountOutput | ApplyDiscountOutput:
    """
    Main component entry point (Atomic Component Pattern).
    """
    if isinstance(inp, ValidateDiscountInput):
        return run_validate(inp, repo, clock=clock)
    elif isinstance(inp, ApplyDiscountInput):
        return run_apply(inp, repo)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
