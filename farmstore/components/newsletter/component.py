"""
Newsletter component.

Functional core for the double opt-in subscription lifecycle.

Key behaviors:
- subscribe creates a pending record with two secure tokens and mails
  a confirmation link
- confirm flips pending → confirmed with a compare-and-swap, grants the
  welcome discount code and mails the welcome email at most once per
  cooldown window
- unsubscribe deactivates; repeating it is a no-op
- preference updates are persisted

Failures never escape the run handlers: storage and dispatch faults are
logged and returned as outputs with a localized message.
"""

from __future__ import annotations

import logging
import re
import secrets
from datetime import UTC, datetime, timedelta
from urllib.parse import urlencode
from uuid import uuid4

from farmstore.components.email_content import (
    ConfirmationEmailInput,
    WelcomeEmailInput,
    render_confirmation,
    render_welcome,
    resolve_language,
    result_message,
)
from farmstore.components.newsletter.models import (
    ALREADY_SUBSCRIBED,
    INVALID_EMAIL,
    INVALID_TOKEN,
    PREFERENCE_UPDATE_ERROR,
    SUBSCRIPTION_ERROR,
    AlreadySubscribedError,
    ConfirmInput,
    ConfirmOutput,
    InvalidTokenError,
    NewsletterConfig,
    PreferenceUpdateError,
    Subscriber,
    SubscriberPreferences,
    SubscriberState,
    SubscribeInput,
    SubscribeOutput,
    SubscriptionError,
    UnsubscribeInput,
    UnsubscribeOutput,
    UpdatePreferencesInput,
    UpdatePreferencesOutput,
    ValidateEmailOutput,
    ValidationError,
)
from farmstore.components.newsletter.ports import (
    ProcessedTokenStorePort,
    SubscriberRepoPort,
)
from farmstore.core.ports.clock import ClockPort
from farmstore.core.ports.email import (
    EmailAddress,
    EmailKind,
    EmailMessage,
    EmailPort,
    EmailResult,
)

logger = logging.getLogger(__name__)

# --- Email Validation Regex (RFC 5322 simplified) ---

EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

TOKEN_BYTES = 32
TOKEN_REGEX = re.compile(r"^[0-9a-f]{64}$")


# --- Pure Functions (Functional Core) ---


def validate_email(email: str) -> ValidateEmailOutput:
    """
    Normalize and validate an email address.

    Args:
        email: Raw email address as typed by the visitor

    Returns:
        ValidateEmailOutput with the lowercased, trimmed address when valid
    """
    normalized = email.strip().lower() if email else ""

    if not normalized:
        return ValidateEmailOutput(
            is_valid=False,
            errors=[ValidationError(INVALID_EMAIL, "Email address is required", "email")],
        )

    if len(normalized) > 254:
        return ValidateEmailOutput(
            is_valid=False,
            errors=[ValidationError(INVALID_EMAIL, "Email address is too long", "email")],
        )

    if not EMAIL_REGEX.match(normalized):
        return ValidateEmailOutput(
            is_valid=False,
            errors=[ValidationError(INVALID_EMAIL, "Invalid email format", "email")],
        )

    return ValidateEmailOutput(is_valid=True, normalized_email=normalized)


def generate_token() -> str:
    """
    Generate a 64-character lowercase hex token from a secure source.

    256 bits of entropy; used for both confirmation and unsubscribe links.
    """
    return secrets.token_hex(TOKEN_BYTES)


def is_valid_token_format(token: str | None) -> bool:
    """True if ``token`` has the shape produced by generate_token."""
    return bool(token) and TOKEN_REGEX.match(token) is not None


def is_token_expired(
    subscriber: Subscriber,
    max_age_hours: int | None,
    now: datetime,
) -> bool:
    """
    Check if a pending subscriber's confirmation token has expired.

    Token age is measured from record creation. ``max_age_hours=None``
    means tokens never expire.
    """
    if max_age_hours is None:
        return False
    return now > subscriber.created_at + timedelta(hours=max_age_hours)


def _build_url(base_url: str, path: str, token: str, language: str) -> str:
    base = base_url.rstrip("/")
    return f"{base}{path}?{urlencode({'token': token, 'lang': language})}"


def build_confirmation_url(
    base_url: str,
    token: str,
    language: str,
    path: str = "/confirm-subscription",
) -> str:
    """
    Build the confirmation URL for email.

    Returns:
        ``{base}{path}?token={token}&lang={language}``
    """
    return _build_url(base_url, path, token, language)


def build_unsubscribe_url(
    base_url: str,
    token: str,
    language: str,
    path: str = "/unsubscribe",
) -> str:
    """Build the unsubscribe URL for email."""
    return _build_url(base_url, path, token, language)


def create_subscriber(
    email: str,
    inp: SubscribeInput,
    language: str,
    now: datetime,
) -> Subscriber:
    """Create a new pending subscriber with two fresh tokens."""
    name = inp.name.strip() if inp.name and inp.name.strip() else None
    return Subscriber(
        id=uuid4(),
        email=email,
        confirmation_token=generate_token(),
        unsubscribe_token=generate_token(),
        name=name,
        source=inp.source or "website",
        language=language,
        preferences=SubscriberPreferences().merged(inp.preferences),
        created_at=now,
    )


def _address(email: str | None, name: str | None) -> EmailAddress | None:
    if not email:
        return None
    return EmailAddress(email, name)


def compose_confirmation_message(
    subscriber: Subscriber,
    language: str,
    config: NewsletterConfig,
    now: datetime,
) -> EmailMessage:
    """Compose the confirmation email carrying the opt-in link."""
    url = build_confirmation_url(
        config.base_url,
        subscriber.confirmation_token,
        language,
        config.confirmation_path,
    )
    rendered = render_confirmation(
        ConfirmationEmailInput(
            confirmation_url=url,
            first_name=subscriber.first_name,
            language=language,
            year=now.year,
        )
    )
    return EmailMessage(
        recipient=EmailAddress(subscriber.email, subscriber.name),
        subject=rendered.subject,
        body_html=rendered.html,
        body_text=rendered.text,
        kind=EmailKind.CONFIRMATION,
        sender=_address(config.sender_email, config.sender_name),
        reply_to=_address(config.reply_to_email, None),
    )


def compose_welcome_message(
    subscriber: Subscriber,
    discount_code: str | None,
    language: str,
    config: NewsletterConfig,
    now: datetime,
) -> EmailMessage:
    """Compose the welcome email with the unsubscribe link and discount code."""
    url = build_unsubscribe_url(
        config.base_url,
        subscriber.unsubscribe_token,
        language,
        config.unsubscribe_path,
    )
    rendered = render_welcome(
        WelcomeEmailInput(
            unsubscribe_url=url,
            first_name=subscriber.first_name,
            discount_code=discount_code,
            discount_percent=(
                config.welcome_discount_percent
                if discount_code == config.welcome_discount_code
                else None
            ),
            language=language,
            site_url=config.site_url,
            year=now.year,
        )
    )
    return EmailMessage(
        recipient=EmailAddress(subscriber.email, subscriber.name),
        subject=rendered.subject,
        body_html=rendered.html,
        body_text=rendered.text,
        kind=EmailKind.WELCOME,
        sender=_address(config.sender_email, config.sender_name),
        reply_to=_address(config.reply_to_email, None),
        discount_code=discount_code,
    )


def _now(clock: ClockPort | None) -> datetime:
    return clock.now_utc() if clock else datetime.now(UTC)


def _language(
    requested: str | None,
    subscriber: Subscriber | None,
    config: NewsletterConfig,
) -> str:
    if requested:
        return resolve_language(requested)
    if subscriber is not None and subscriber.language:
        return resolve_language(subscriber.language)
    return resolve_language(config.default_language)


def _dispatch(email_sender: EmailPort | None, message: EmailMessage) -> EmailResult:
    recipient = message.recipient.email
    if email_sender is None:
        return EmailResult.failed(recipient, "No email dispatcher configured")
    try:
        return email_sender.send(message)
    except Exception as e:
        logger.exception("Email dispatcher raised for %s", recipient)
        return EmailResult.failed(recipient, str(e))


def _invalid_token(language: str) -> list[ValidationError]:
    return [ValidationError(INVALID_TOKEN, result_message("invalid_token", language), "token")]


# --- Run Handlers (Functional Core) ---


def run_subscribe(
    inp: SubscribeInput,
    repo: SubscriberRepoPort,
    *,
    email_sender: EmailPort | None = None,
    clock: ClockPort | None = None,
    config: NewsletterConfig | None = None,
) -> SubscribeOutput:
    """
    Handle subscription request (Atomic Handler).

    Stores a pending subscriber, then dispatches the confirmation email.
    A failed dispatch is reported as SUBSCRIPTION_ERROR unless simulated
    dispatch is allowed; the pending record is kept either way.
    """
    cfg = config or NewsletterConfig()
    now = _now(clock)
    language = resolve_language(inp.language or cfg.default_language)

    validation = validate_email(inp.email)
    if not validation.is_valid or validation.normalized_email is None:
        return SubscribeOutput(
            success=False,
            message=result_message("invalid_email", language),
            errors=validation.errors,
        )
    email = validation.normalized_email

    subscriber = create_subscriber(email, inp, language, now)
    try:
        saved = _store(repo, subscriber)
    except AlreadySubscribedError:
        logger.info("Subscribe rejected, %s already has a record", email)
        message = result_message("already_subscribed", language)
        return SubscribeOutput(
            success=False,
            message=message,
            errors=[ValidationError(ALREADY_SUBSCRIBED, message, "email")],
        )
    except SubscriptionError as e:
        logger.exception("Failed to store subscriber %s: %s", email, e.reason)
        message = result_message("subscription_failed", language)
        return SubscribeOutput(
            success=False,
            message=message,
            errors=[ValidationError(SUBSCRIPTION_ERROR, message, None)],
        )

    result = _dispatch(email_sender, compose_confirmation_message(saved, language, cfg, now))
    if not result.ok:
        logger.error("Confirmation email to %s failed: %s", email, result.error)
        if cfg.allow_simulated_dispatch:
            logger.warning("Simulated dispatch: reporting subscribe for %s as success", email)
            return SubscribeOutput(
                success=True,
                message=result_message("subscribed_simulated", language),
                subscriber_id=saved.id,
                simulated_dispatch=True,
            )
        message = result_message("subscription_failed", language)
        return SubscribeOutput(
            success=False,
            message=message,
            subscriber_id=saved.id,
            errors=[ValidationError(SUBSCRIPTION_ERROR, message, None)],
        )

    logger.info("New pending subscriber %s (source=%s)", saved.id, saved.source)
    return SubscribeOutput(
        success=True,
        message=result_message("subscribed", language),
        subscriber_id=saved.id,
    )


def _store(repo: SubscriberRepoPort, subscriber: Subscriber) -> Subscriber:
    try:
        return repo.create(subscriber)
    except AlreadySubscribedError:
        raise
    except Exception as e:
        raise SubscriptionError(subscriber.email, str(e)) from e


def _send_welcome(
    subscriber: Subscriber,
    discount_code: str | None,
    language: str,
    repo: SubscriberRepoPort,
    email_sender: EmailPort | None,
    cfg: NewsletterConfig,
    now: datetime,
) -> tuple[bool, bool]:
    """Claim the cooldown slot and dispatch. Returns (sent, simulated)."""
    previous = subscriber.last_emailed_at
    if not repo.claim_welcome_email(subscriber.id, now, cfg.welcome_email_cooldown_seconds):
        logger.info("Welcome email to %s sent recently, skipping", subscriber.id)
        return False, False

    message = compose_welcome_message(subscriber, discount_code, language, cfg, now)
    result = _dispatch(email_sender, message)
    if result.ok:
        return True, False

    logger.error("Welcome email to %s failed: %s", subscriber.email, result.error)
    if cfg.allow_simulated_dispatch:
        logger.warning("Simulated dispatch: treating welcome email to %s as sent", subscriber.email)
        return False, True
    repo.release_welcome_email(subscriber.id, now, previous)
    return False, False


def _confirm(
    inp: ConfirmInput,
    subscriber: Subscriber,
    repo: SubscriberRepoPort,
    email_sender: EmailPort | None,
    cfg: NewsletterConfig,
    now: datetime,
) -> ConfirmOutput:
    language = _language(inp.language, subscriber, cfg)
    state = subscriber.state

    if state == SubscriberState.INACTIVE:
        raise InvalidTokenError("subscriber has unsubscribed")
    if state == SubscriberState.PENDING and is_token_expired(
        subscriber, cfg.confirmation_token_expiry_hours, now
    ):
        raise InvalidTokenError("confirmation token expired")

    already_confirmed = state == SubscriberState.CONFIRMED
    if not already_confirmed and not repo.mark_confirmed(subscriber.id, now):
        # Lost the race to a concurrent confirmation
        already_confirmed = True

    discount_code = subscriber.discount_used
    if discount_code is None and not already_confirmed:
        try:
            repo.assign_discount(subscriber.id, cfg.welcome_discount_code)
            discount_code = cfg.welcome_discount_code
        except Exception:
            logger.exception("Could not record discount for %s, continuing without", subscriber.id)
    elif discount_code is None:
        discount_code = cfg.welcome_discount_code

    sent, simulated = _send_welcome(
        subscriber, discount_code, language, repo, email_sender, cfg, now
    )
    key = "already_confirmed" if already_confirmed else "confirmed"
    return ConfirmOutput(
        success=True,
        message=result_message(key, language),
        subscriber_id=subscriber.id,
        already_confirmed=already_confirmed,
        welcome_email_sent=sent,
        discount_code=discount_code,
        simulated_dispatch=simulated,
    )


def run_confirm(
    inp: ConfirmInput,
    repo: SubscriberRepoPort,
    *,
    token_store: ProcessedTokenStorePort,
    email_sender: EmailPort | None = None,
    clock: ClockPort | None = None,
    config: NewsletterConfig | None = None,
) -> ConfirmOutput:
    """
    Handle confirmation request (Atomic Handler).

    A token already in ``token_store`` is being processed by another
    call; that duplicate returns success without touching storage. The
    token is released once processing ends so a later click can resend
    the welcome email after the cooldown.
    """
    cfg = config or NewsletterConfig()
    now = _now(clock)

    if not is_valid_token_format(inp.token):
        language = _language(inp.language, None, cfg)
        return ConfirmOutput(
            success=False,
            message=result_message("invalid_token", language),
            errors=_invalid_token(language),
        )

    try:
        subscriber = repo.get_by_confirmation_token(inp.token)
    except Exception:
        logger.exception("Confirmation lookup failed")
        language = _language(inp.language, None, cfg)
        message = result_message("confirm_failed", language)
        return ConfirmOutput(
            success=False,
            message=message,
            errors=[ValidationError(SUBSCRIPTION_ERROR, message, None)],
        )

    if subscriber is None:
        language = _language(inp.language, None, cfg)
        return ConfirmOutput(
            success=False,
            message=result_message("invalid_token", language),
            errors=_invalid_token(language),
        )

    language = _language(inp.language, subscriber, cfg)
    if not token_store.add_if_absent(inp.token):
        logger.info("Duplicate confirmation for %s absorbed", subscriber.id)
        return ConfirmOutput(
            success=True,
            message=result_message("already_confirmed", language),
            subscriber_id=subscriber.id,
            already_confirmed=True,
        )

    try:
        output = _confirm(inp, subscriber, repo, email_sender, cfg, now)
    except InvalidTokenError as e:
        logger.info("Confirmation for %s rejected: %s", subscriber.id, e.reason)
        output = ConfirmOutput(
            success=False,
            message=result_message("invalid_token", language),
            errors=_invalid_token(language),
        )
    except Exception:
        logger.exception("Failed to confirm subscriber %s", subscriber.id)
        message = result_message("confirm_failed", language)
        output = ConfirmOutput(
            success=False,
            message=message,
            subscriber_id=subscriber.id,
            errors=[ValidationError(SUBSCRIPTION_ERROR, message, None)],
        )
    finally:
        token_store.discard(inp.token)

    return output


def run_unsubscribe(
    inp: UnsubscribeInput,
    repo: SubscriberRepoPort,
    *,
    clock: ClockPort | None = None,
    config: NewsletterConfig | None = None,
) -> UnsubscribeOutput:
    """
    Handle unsubscribe request (Atomic Handler).
    """
    cfg = config or NewsletterConfig()
    now = _now(clock)

    if not is_valid_token_format(inp.token):
        language = _language(inp.language, None, cfg)
        return UnsubscribeOutput(
            success=False,
            message=result_message("invalid_token", language),
            errors=_invalid_token(language),
        )

    subscriber: Subscriber | None = None
    try:
        subscriber = repo.get_by_unsubscribe_token(inp.token)
        if subscriber is None:
            language = _language(inp.language, None, cfg)
            return UnsubscribeOutput(
                success=False,
                message=result_message("invalid_token", language),
                errors=_invalid_token(language),
            )

        language = _language(inp.language, subscriber, cfg)
        if not subscriber.is_active or not repo.deactivate(subscriber.id, now):
            return UnsubscribeOutput(
                success=True,
                message=result_message("already_unsubscribed", language),
                already_unsubscribed=True,
            )
    except Exception:
        logger.exception("Unsubscribe failed")
        language = _language(inp.language, subscriber, cfg)
        message = result_message("unsubscribe_failed", language)
        return UnsubscribeOutput(
            success=False,
            message=message,
            errors=[ValidationError(SUBSCRIPTION_ERROR, message, None)],
        )

    logger.info("Subscriber %s unsubscribed", subscriber.id)
    return UnsubscribeOutput(
        success=True,
        message=result_message("unsubscribed", language),
    )


def run_update_preferences(
    inp: UpdatePreferencesInput,
    repo: SubscriberRepoPort,
    *,
    config: NewsletterConfig | None = None,
) -> UpdatePreferencesOutput:
    """
    Handle preference update (Atomic Handler).

    Flags absent from ``inp.preferences`` keep their stored value.
    """
    cfg = config or NewsletterConfig()

    if not is_valid_token_format(inp.token):
        language = _language(inp.language, None, cfg)
        return UpdatePreferencesOutput(
            success=False,
            message=result_message("invalid_token", language),
            errors=_invalid_token(language),
        )

    subscriber: Subscriber | None = None
    try:
        subscriber = repo.get_by_unsubscribe_token(inp.token)
        if subscriber is None:
            language = _language(inp.language, None, cfg)
            return UpdatePreferencesOutput(
                success=False,
                message=result_message("invalid_token", language),
                errors=_invalid_token(language),
            )
        language = _language(inp.language, subscriber, cfg)
        preferences = subscriber.preferences.merged(inp.preferences)
        _save_preferences(repo, subscriber, preferences)
    except PreferenceUpdateError as e:
        logger.error("Preferences not saved: %s", e.reason)
        return _preferences_failed(inp, subscriber, cfg)
    except Exception:
        logger.exception("Preference update failed")
        return _preferences_failed(inp, subscriber, cfg)

    return UpdatePreferencesOutput(
        success=True,
        message=result_message("preferences_updated", language),
        preferences=preferences,
    )


def _save_preferences(
    repo: SubscriberRepoPort, subscriber: Subscriber, preferences: SubscriberPreferences
) -> None:
    try:
        repo.update_preferences(subscriber.id, preferences)
    except Exception as e:
        raise PreferenceUpdateError(str(e)) from e


def _preferences_failed(
    inp: UpdatePreferencesInput, subscriber: Subscriber | None, cfg: NewsletterConfig
) -> UpdatePreferencesOutput:
    language = _language(inp.language, subscriber, cfg)
    message = result_message("preferences_failed", language)
    return UpdatePreferencesOutput(
        success=False,
        message=message,
        errors=[ValidationError(PREFERENCE_UPDATE_ERROR, message, None)],
    )


def run(
    inp: SubscribeInput | ConfirmInput | UnsubscribeInput | UpdatePreferencesInput,
    *,
    repo: SubscriberRepoPort,
    token_store: ProcessedTokenStorePort | None = None,
    email_sender: EmailPort | None = None,
    clock: ClockPort | None = None,
    config: NewsletterConfig | None = None,
) -> SubscribeOutput | ConfirmOutput | UnsubscribeOutput | UpdatePreferencesOutput:
    """
    Main component entry point (Atomic Component Pattern).

    Args:
        inp: Input command
        repo: Subscriber repository (Required)
        token_store: Processed-token store (Required for ConfirmInput)
        email_sender: Email dispatcher (Optional)
        clock: Time source (Optional, defaults to system UTC)
        config: Configuration (Optional)

    Returns:
        Operation result
    """
    if isinstance(inp, SubscribeInput):
        return run_subscribe(
            inp,
            repo,
            email_sender=email_sender,
            clock=clock,
            config=config,
        )
    elif isinstance(inp, ConfirmInput):
        if token_store is None:
            raise ValueError("token_store is required for confirmation")
        return run_confirm(
            inp,
            repo,
            token_store=token_store,
            email_sender=email_sender,
            clock=clock,
            config=config,
        )
    elif isinstance(inp, UnsubscribeInput):
        return run_unsubscribe(inp, repo, clock=clock, config=config)
    elif isinstance(inp, UpdatePreferencesInput):
        return run_update_preferences(inp, repo, config=config)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
