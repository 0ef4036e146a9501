"""
Email content component.

Localized confirmation and welcome emails for the newsletter opt-in flow.
"""

from farmstore.components.email_content.component import (
    FALLBACK_LANGUAGE,
    SUPPORTED_LANGUAGES,
    render_confirmation,
    render_welcome,
    resolve_language,
    result_message,
)
from farmstore.components.email_content.models import (
    ConfirmationEmailInput,
    RenderedEmail,
    WelcomeEmailInput,
)

__all__ = [
    # Renderers
    "render_confirmation",
    "render_welcome",
    "resolve_language",
    "result_message",
    # Constants
    "SUPPORTED_LANGUAGES",
    "FALLBACK_LANGUAGE",
    # Models
    "ConfirmationEmailInput",
    "WelcomeEmailInput",
    "RenderedEmail",
]
