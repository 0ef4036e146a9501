"""
Public newsletter endpoints for the double opt-in lifecycle.

Endpoints:
- POST /api/public/newsletter/subscribe - Start subscription, mail confirmation link
- GET /api/public/newsletter/confirm - Confirm via emailed token
- GET /api/public/newsletter/unsubscribe - Unsubscribe via emailed token
- POST /api/public/newsletter/preferences - Change topic preferences
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from farmstore.adapters.sqlite_db import SQLiteSubscriberRepo
from farmstore.adapters.token_store import InMemoryProcessedTokenStore
from farmstore.api.deps import (
    get_clock,
    get_email_sender,
    get_newsletter_config,
    get_subscriber_repo,
    get_token_store,
)
from farmstore.components.newsletter import (
    ALREADY_SUBSCRIBED,
    INVALID_EMAIL,
    INVALID_TOKEN,
    SUBSCRIPTION_ERROR,
    ConfirmInput,
    NewsletterConfig,
    SubscribeInput,
    UnsubscribeInput,
    UpdatePreferencesInput,
    ValidationError,
    run_confirm,
    run_subscribe,
    run_unsubscribe,
    run_update_preferences,
)
from farmstore.core.ports.clock import ClockPort
from farmstore.core.ports.email import EmailPort

router = APIRouter()


# --- Request/Response Models ---


class PreferencesBody(BaseModel):
    """Topic flags, camelCase on the wire. Omitted flags are left unchanged."""

    productUpdates: bool | None = None
    promotions: bool | None = None
    recipes: bool | None = None


class SubscribeRequest(BaseModel):
    """Request body for newsletter subscription."""

    email: str = Field(..., description="Email address to subscribe")
    name: str | None = Field(default=None, max_length=200)
    preferences: PreferencesBody | None = None
    source: str = Field(default="website", max_length=100)
    language: str = Field(default="sl", max_length=20)


class SubscribeResponse(BaseModel):
    success: bool
    message: str


class ConfirmResponse(BaseModel):
    success: bool
    message: str
    already_confirmed: bool = False
    welcome_email_sent: bool = False
    discount_code: str | None = None


class UnsubscribeResponse(BaseModel):
    success: bool
    message: str
    already_unsubscribed: bool = False


class PreferencesRequest(BaseModel):
    token: str
    preferences: PreferencesBody
    language: str | None = None


class PreferencesResponse(BaseModel):
    success: bool
    message: str
    preferences: dict[str, bool]


class ErrorResponse(BaseModel):
    """Error response."""

    detail: str


def _error_codes(errors: list) -> set[str]:
    return {e.code for e in errors}


# --- Subscribe Endpoint ---


@router.post(
    "/subscribe",
    response_model=SubscribeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid email"},
        409: {"model": ErrorResponse, "description": "Already subscribed"},
        502: {"model": ErrorResponse, "description": "Could not store or mail"},
    },
    summary="Subscribe to newsletter",
    description="Start the double opt-in flow. Sends a confirmation email.",
)
def subscribe_to_newsletter(
    request_body: SubscribeRequest,
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    email_sender: EmailPort = Depends(get_email_sender),
    clock: ClockPort = Depends(get_clock),
    config: NewsletterConfig = Depends(get_newsletter_config),
) -> SubscribeResponse:
    """
    Subscribe to the newsletter.

    1. Validate and normalize the email
    2. Store a pending subscriber with fresh tokens
    3. Mail the confirmation link in the requested language
    """
    preferences = (
        request_body.preferences.model_dump(exclude_none=True)
        if request_body.preferences
        else None
    )
    result = run_subscribe(
        SubscribeInput(
            email=request_body.email,
            name=request_body.name,
            preferences=preferences,
            source=request_body.source,
            language=request_body.language,
        ),
        repo,
        email_sender=email_sender,
        clock=clock,
        config=config,
    )

    if not result.success:
        codes = _error_codes(result.errors)
        if INVALID_EMAIL in codes:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.message)
        if ALREADY_SUBSCRIBED in codes:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.message)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.message)

    return SubscribeResponse(success=True, message=result.message)


def _failure_status(errors: list[ValidationError]) -> int:
    """502 for a storage fault, 400 for a bad or expired token."""
    if errors and errors[0].code == SUBSCRIPTION_ERROR:
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_400_BAD_REQUEST


# --- Confirm Endpoint ---


@router.get(
    "/confirm",
    response_model=ConfirmResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid or expired token"},
        502: {"model": ErrorResponse, "description": "Subscriber storage unavailable"},
    },
    summary="Confirm newsletter subscription",
)
def confirm_subscription(
    token: str = "",
    lang: str | None = None,
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    token_store: InMemoryProcessedTokenStore = Depends(get_token_store),
    email_sender: EmailPort = Depends(get_email_sender),
    clock: ClockPort = Depends(get_clock),
    config: NewsletterConfig = Depends(get_newsletter_config),
) -> ConfirmResponse:
    """
    Confirm subscription and send the welcome email with its discount code.

    Idempotent: repeated clicks return success with already_confirmed.
    """
    result = run_confirm(
        ConfirmInput(token=token, language=lang),
        repo,
        token_store=token_store,
        email_sender=email_sender,
        clock=clock,
        config=config,
    )

    if not result.success:
        raise HTTPException(status_code=_failure_status(result.errors), detail=result.message)

    return ConfirmResponse(
        success=True,
        message=result.message,
        already_confirmed=result.already_confirmed,
        welcome_email_sent=result.welcome_email_sent,
        discount_code=result.discount_code,
    )


# --- Unsubscribe Endpoint ---


@router.get(
    "/unsubscribe",
    response_model=UnsubscribeResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid token"},
        502: {"model": ErrorResponse, "description": "Subscriber storage unavailable"},
    },
    summary="Unsubscribe from newsletter",
)
def unsubscribe_from_newsletter(
    token: str = "",
    lang: str | None = None,
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    clock: ClockPort = Depends(get_clock),
    config: NewsletterConfig = Depends(get_newsletter_config),
) -> UnsubscribeResponse:
    """Idempotent: already unsubscribed returns success."""
    result = run_unsubscribe(
        UnsubscribeInput(token=token, language=lang),
        repo,
        clock=clock,
        config=config,
    )

    if not result.success:
        raise HTTPException(status_code=_failure_status(result.errors), detail=result.message)

    return UnsubscribeResponse(
        success=True,
        message=result.message,
        already_unsubscribed=result.already_unsubscribed,
    )


# --- Preferences Endpoint ---


@router.post(
    "/preferences",
    response_model=PreferencesResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid token"},
        500: {"model": ErrorResponse, "description": "Preferences not saved"},
    },
    summary="Update newsletter preferences",
)
def update_preferences(
    request_body: PreferencesRequest,
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    config: NewsletterConfig = Depends(get_newsletter_config),
) -> PreferencesResponse:
    result = run_update_preferences(
        UpdatePreferencesInput(
            token=request_body.token,
            preferences=request_body.preferences.model_dump(exclude_none=True),
            language=request_body.language,
        ),
        repo,
        config=config,
    )

    if not result.success or result.preferences is None:
        if INVALID_TOKEN in _error_codes(result.errors):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.message)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=result.message
        )

    return PreferencesResponse(
        success=True,
        message=result.message,
        preferences=result.preferences.to_dict(),
    )
