"""
Newsletter component.

Double opt-in newsletter subscription lifecycle.
"""

from farmstore.components.newsletter.component import (
    EMAIL_REGEX,
    build_confirmation_url,
    build_unsubscribe_url,
    compose_confirmation_message,
    compose_welcome_message,
    create_subscriber,
    generate_token,
    is_token_expired,
    is_valid_token_format,
    run,
    run_confirm,
    run_subscribe,
    run_unsubscribe,
    run_update_preferences,
    validate_email,
)
from farmstore.components.newsletter.models import (
    ALREADY_SUBSCRIBED,
    INVALID_EMAIL,
    INVALID_TOKEN,
    PREFERENCE_UPDATE_ERROR,
    SUBSCRIPTION_ERROR,
    VALID_TRANSITIONS,
    AlreadySubscribedError,
    ConfirmationStatus,
    ConfirmInput,
    ConfirmOutput,
    InvalidTokenError,
    NewsletterConfig,
    NewsletterError,
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
    can_transition,
)
from farmstore.components.newsletter.ports import (
    ProcessedTokenStorePort,
    SubscriberRepoPort,
)

__all__ = [
    # Component
    "EMAIL_REGEX",
    "build_confirmation_url",
    "build_unsubscribe_url",
    "compose_confirmation_message",
    "compose_welcome_message",
    "create_subscriber",
    "generate_token",
    "is_token_expired",
    "is_valid_token_format",
    "run",
    "run_confirm",
    "run_subscribe",
    "run_unsubscribe",
    "run_update_preferences",
    "validate_email",
    # Models
    "ALREADY_SUBSCRIBED",
    "INVALID_EMAIL",
    "INVALID_TOKEN",
    "PREFERENCE_UPDATE_ERROR",
    "SUBSCRIPTION_ERROR",
    "VALID_TRANSITIONS",
    "AlreadySubscribedError",
    "ConfirmationStatus",
    "ConfirmInput",
    "ConfirmOutput",
    "InvalidTokenError",
    "NewsletterConfig",
    "NewsletterError",
    "PreferenceUpdateError",
    "Subscriber",
    "SubscriberPreferences",
    "SubscriberState",
    "SubscribeInput",
    "SubscribeOutput",
    "SubscriptionError",
    "UnsubscribeInput",
    "UnsubscribeOutput",
    "UpdatePreferencesInput",
    "UpdatePreferencesOutput",
    "ValidateEmailOutput",
    "ValidationError",
    "can_transition",
    # Ports
    "ProcessedTokenStorePort",
    "SubscriberRepoPort",
]
