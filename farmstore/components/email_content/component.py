"""
Email content component.

Pure renderers for the newsletter confirmation and welcome emails.
No clock, no I/O: output depends only on the input, so renders can be
compared byte-for-byte in tests.

Key behaviors:
- Four supported languages (sl, en, de, hr), English copy for anything else
- Greeting uses the first name when present
- Discount section only when a discount code is given
- Dynamic values are HTML-escaped; URLs survive extraction unchanged
"""

from __future__ import annotations

import html
from decimal import Decimal

from farmstore.components.email_content.copy import EMAIL_COPY, RESULT_MESSAGES, SITE_NAME
from farmstore.components.email_content.models import (
    ConfirmationEmailInput,
    RenderedEmail,
    WelcomeEmailInput,
)

SUPPORTED_LANGUAGES: tuple[str, ...] = ("sl", "en", "de", "hr")
FALLBACK_LANGUAGE = "en"

_STYLE = """
    body { font-family: 'Helvetica Neue', Arial, sans-serif; line-height: 1.6;
           color: #333; background-color: #f9f9f9; margin: 0; padding: 0; }
    .container { max-width: 600px; margin: 0 auto; padding: 20px; background-color: #ffffff; }
    .header { text-align: center; padding: 20px 0; border-bottom: 1px solid #eaeaea; }
    .content { padding: 30px 20px; }
    .button { display: inline-block; background-color: #8B4513; color: #ffffff !important;
              text-decoration: none; padding: 12px 30px; border-radius: 4px;
              margin: 20px 0; font-weight: bold; }
    .offer { background-color: #f8f4e5; padding: 20px; border-radius: 5px; margin: 20px 0; }
    .offer code { background-color: #fff; padding: 5px 10px; border: 1px dashed #8B4513; }
    .unsubscribe { text-align: center; font-size: 12px; color: #999; margin-top: 20px; }
    .footer { padding: 20px; text-align: center; font-size: 12px; color: #666;
              border-top: 1px solid #eaeaea; }
"""


def resolve_language(language: str | None) -> str:
    """
    Map a language tag onto a supported catalog language.

    Case-insensitive; region subtags (de-AT, en_GB) resolve to the base
    language. Unknown or empty tags fall back to English.
    """
    if not language:
        return FALLBACK_LANGUAGE
    base = language.strip().lower().replace("_", "-").split("-")[0]
    return base if base in SUPPORTED_LANGUAGES else FALLBACK_LANGUAGE


def result_message(key: str, language: str | None) -> str:
    """Localized user-visible outcome message for a newsletter operation."""
    return RESULT_MESSAGES[resolve_language(language)][key]


def _copy(language: str) -> dict[str, str]:
    return EMAIL_COPY[language]


def _greeting(copy: dict[str, str], first_name: str | None) -> str:
    name = first_name.strip() if first_name else ""
    if name:
        return copy["greeting_named"].format(name=name)
    return copy["greeting"]


def _footer_line(copy: dict[str, str], year: int | None) -> str:
    if year is None:
        return f"© {SITE_NAME}. {copy['rights']}"
    return f"© {year} {SITE_NAME}. {copy['rights']}"


def _e(value: str) -> str:
    return html.escape(value, quote=True)


def _html_document(title: str, body: str, footer: str) -> str:
    return (
        "<!DOCTYPE html>\n"
        "<html>\n"
        "<head>\n"
        '  <meta charset="utf-8">\n'
        '  <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
        f"  <title>{_e(title)}</title>\n"
        f"  <style>{_STYLE}  </style>\n"
        "</head>\n"
        "<body>\n"
        '  <div class="container">\n'
        f'    <div class="header"><strong>{_e(SITE_NAME)}</strong></div>\n'
        f'    <div class="content">\n{body}    </div>\n'
        f'    <div class="footer">{_e(footer)}</div>\n'
        "  </div>\n"
        "</body>\n"
        "</html>\n"
    )


# --- Confirmation Email ---


def render_confirmation(inp: ConfirmationEmailInput) -> RenderedEmail:
    """
    Render the double opt-in confirmation email.

    Args:
        inp: Recipient name, confirmation URL, language, footer year

    Returns:
        RenderedEmail with localized subject, HTML and text bodies
    """
    language = resolve_language(inp.language)
    copy = _copy(language)
    greeting = _greeting(copy, inp.first_name)
    footer = _footer_line(copy, inp.year)

    body = (
        f"      <h2>{_e(greeting)}</h2>\n"
        f"      <p>{_e(copy['confirm_intro'])}</p>\n"
        f"      <p>{_e(copy['confirm_action_html'])}</p>\n"
        '      <div style="text-align: center;">\n'
        f'        <a href="{_e(inp.confirmation_url)}" class="button">'
        f"{_e(copy['confirm_button'])}</a>\n"
        "      </div>\n"
        f"      <p>{_e(copy['confirm_ignore'])}</p>\n"
        f"      <p>{_e(copy['signoff'])}<br>{_e(copy['team'])}</p>\n"
    )
    html_body = _html_document(copy["confirm_subject"], body, footer)

    text_body = "\n".join(
        [
            greeting,
            "",
            copy["confirm_intro"],
            copy["confirm_action_text"],
            "",
            inp.confirmation_url,
            "",
            copy["confirm_ignore"],
            "",
            copy["signoff"],
            copy["team"],
            "",
            footer,
        ]
    )

    return RenderedEmail(
        subject=copy["confirm_subject"],
        html=html_body,
        text=text_body,
        language=language,
    )


# --- Welcome Email ---


def _offer_phrase(copy: dict[str, str], percent: Decimal | None) -> str:
    if percent is None:
        return copy["offer_generic"]
    return copy["offer_percent"].format(percent=f"{percent.normalize():f}")


def _offer_html(copy: dict[str, str], code: str, percent: Decimal | None) -> str:
    phrase = f"<strong>{_e(_offer_phrase(copy, percent))}</strong>"
    offer = _e(copy["offer_body"]).replace("{offer}", phrase)
    return (
        '      <div class="offer">\n'
        f'        <h3 style="color: #8B4513; margin-top: 0;">{_e(copy["offer_title"])}</h3>\n'
        f"        <p>{offer}</p>\n"
        f"        <p>{_e(copy['offer_code'])} <code>{_e(code)}</code></p>\n"
        "      </div>\n"
    )


def _offer_text(copy: dict[str, str], code: str, percent: Decimal | None) -> list[str]:
    return [
        copy["offer_title"].upper(),
        copy["offer_body"].format(offer=_offer_phrase(copy, percent)),
        f"{copy['offer_code']} {code}",
        "",
    ]


def render_welcome(inp: WelcomeEmailInput) -> RenderedEmail:
    """
    Render the welcome email sent once a subscription is confirmed.

    The discount block is included only when ``discount_code`` is set. It
    names the percentage only when ``discount_percent`` is given.
    """
    language = resolve_language(inp.language)
    copy = _copy(language)
    greeting = _greeting(copy, inp.first_name)
    footer = _footer_line(copy, inp.year)
    topics = copy["welcome_topics"].split("|")

    items = "".join(f"        <li>{_e(topic)}</li>\n" for topic in topics)
    body = (
        f"      <h2>{_e(greeting)}</h2>\n"
        f"      <h1>{_e(copy['welcome_subject'])}</h1>\n"
        f"      <p>{_e(copy['welcome_thanks'])}</p>\n"
        f"      <p>{_e(copy['welcome_topics_intro'])}</p>\n"
        f"      <ul>\n{items}      </ul>\n"
    )
    if inp.discount_code:
        body += _offer_html(copy, inp.discount_code, inp.discount_percent)
    body += (
        '      <div style="text-align: center;">\n'
        f'        <a href="{_e(inp.site_url)}" class="button">{_e(copy["visit_site"])}</a>\n'
        "      </div>\n"
        f"      <p>{_e(copy['welcome_outro'])}</p>\n"
        f"      <p>{_e(copy['signoff'])}<br>{_e(copy['team'])}</p>\n"
        '      <div class="unsubscribe">\n'
        f'        <a href="{_e(inp.unsubscribe_url)}">{_e(copy["unsubscribe"])}</a>\n'
        "      </div>\n"
    )
    html_body = _html_document(copy["welcome_subject"], body, footer)

    lines = [
        greeting,
        "",
        copy["welcome_subject"],
        "",
        copy["welcome_thanks"],
        "",
        copy["welcome_topics_intro"],
        *[f"- {topic}" for topic in topics],
        "",
    ]
    if inp.discount_code:
        lines.extend(_offer_text(copy, inp.discount_code, inp.discount_percent))
    lines.extend(
        [
            f"{copy['visit_site']}: {inp.site_url}",
            "",
            copy["welcome_outro"],
            "",
            copy["signoff"],
            copy["team"],
            "",
            f"{copy['unsubscribe']}: {inp.unsubscribe_url}",
            "",
            footer,
        ]
    )

    return RenderedEmail(
        subject=copy["welcome_subject"],
        html=html_body,
        text="\n".join(lines),
        language=language,
    )
