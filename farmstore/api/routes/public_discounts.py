"""
Public discount endpoints used by the storefront checkout and banner.

Endpoints:
- POST /api/public/discounts/validate - Check a code against an order total
- POST /api/public/discounts/apply - Count one redemption of a code
- GET /api/public/discounts/banner - Code currently advertised, or null
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from farmstore.adapters.sqlite_db import SQLiteDiscountRepo
from farmstore.api.deps import get_clock, get_discount_repo, get_rules
from farmstore.components.discounts import (
    STORAGE_ERROR,
    USAGE_EXCEEDED,
    ApplyDiscountInput,
    DiscountCode,
    ValidateDiscountInput,
    get_active_banner_discount,
    normalize_code,
    run_apply,
    run_validate,
    to_money,
)
from farmstore.core.ports.clock import ClockPort
from farmstore.rules.models import Rules

router = APIRouter()


# --- Request/Response Models ---


class ValidateRequest(BaseModel):
    code: str = Field(..., max_length=64)
    order_total: Decimal = Field(..., ge=0)


class ValidateResponse(BaseModel):
    valid: bool
    discount_amount: str  # Decimal text, two places
    code: str
    discount_type: str | None = None
    message: str = ""
    error_code: str | None = None
    currency: str


class ApplyRequest(BaseModel):
    code: str = Field(..., max_length=64)


class ApplyResponse(BaseModel):
    success: bool
    code: str
    current_uses: int


class BannerDiscountResponse(BaseModel):
    code: str
    discount_type: str
    value: str
    banner_text: str | None = None
    description: str | None = None
    min_order_amount: str | None = None
    valid_until: datetime | None = None


class ErrorResponse(BaseModel):
    detail: str


def _banner_response(discount: DiscountCode) -> BannerDiscountResponse:
    return BannerDiscountResponse(
        code=discount.code,
        discount_type=discount.discount_type.value,
        value=str(discount.value),
        banner_text=discount.banner_text,
        description=discount.description,
        min_order_amount=(
            str(to_money(discount.min_order_amount))
            if discount.min_order_amount is not None
            else None
        ),
        valid_until=discount.valid_until,
    )


# --- Endpoints ---


@router.post(
    "/validate",
    response_model=ValidateResponse,
    responses={502: {"model": ErrorResponse, "description": "Discount storage unavailable"}},
    summary="Validate a discount code",
    description="Read-only check; does not count a redemption.",
)
def validate_discount(
    request_body: ValidateRequest,
    repo: SQLiteDiscountRepo = Depends(get_discount_repo),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> ValidateResponse:
    """A storage fault answers 502; every other outcome is 200 with ``valid``."""
    result = run_validate(
        ValidateDiscountInput(code=request_body.code, order_total=request_body.order_total),
        repo,
        clock=clock,
    )
    error = result.errors[0] if result.errors else None
    if error and error.code == STORAGE_ERROR:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.message)
    return ValidateResponse(
        valid=result.valid,
        discount_amount=str(to_money(result.discount_amount)),
        code=normalize_code(request_body.code),
        discount_type=result.discount.discount_type.value if result.discount else None,
        message=error.message if error else "",
        error_code=error.code if error else None,
        currency=rules.discounts.currency,
    )


@router.post(
    "/apply",
    response_model=ApplyResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Unknown or inactive code"},
        409: {"model": ErrorResponse, "description": "Usage limit reached"},
        502: {"model": ErrorResponse, "description": "Discount storage unavailable"},
    },
    summary="Redeem a discount code",
)
def apply_discount(
    request_body: ApplyRequest,
    repo: SQLiteDiscountRepo = Depends(get_discount_repo),
) -> ApplyResponse:
    """Called once the order is placed. Atomic against concurrent orders."""
    result = run_apply(ApplyDiscountInput(code=request_body.code), repo)

    if not result.success or result.current_uses is None:
        error = result.errors[0]
        if error.code == USAGE_EXCEEDED:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=error.message)
        if error.code == STORAGE_ERROR:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.message)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)

    return ApplyResponse(
        success=True,
        code=normalize_code(request_body.code),
        current_uses=result.current_uses,
    )


@router.get(
    "/banner",
    response_model=BannerDiscountResponse | None,
    summary="Current banner discount",
)
def banner_discount(
    repo: SQLiteDiscountRepo = Depends(get_discount_repo),
    clock: ClockPort = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> BannerDiscountResponse | None:
    if not rules.discounts.banner_enabled:
        return None
    discount = get_active_banner_discount(repo, clock=clock)
    return _banner_response(discount) if discount else None
