"""
HTTP Dispatch Gateway.

Hands composed newsletter emails to the hosted send-email function.

Wire format (POST, JSON):
    {to, subject, body, from, replyTo}
where ``body`` is itself a JSON string:
    {html, text, isConfirmation | isWelcome, discountCode?}

The function answers ``{success, message}``. Delivery is its concern;
this adapter only builds the payload and inspects the answer.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from farmstore.core.ports.email import EmailKind, EmailMessage, EmailResult, EmailSendError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


def build_dispatch_payload(
    message: EmailMessage,
    default_sender: str,
) -> dict[str, Any]:
    """
    Build the request body for the send-email function.

    Args:
        message: Composed email
        default_sender: Used for ``from`` and ``replyTo`` when the message
            carries none (``dispatch.default_sender`` in rules.yaml)

    Returns:
        JSON-serializable payload
    """
    envelope: dict[str, Any] = {
        "html": message.body_html,
        "text": message.body_text,
    }
    if message.kind == EmailKind.CONFIRMATION:
        envelope["isConfirmation"] = True
    else:
        envelope["isWelcome"] = True
    if message.discount_code:
        envelope["discountCode"] = message.discount_code

    sender = str(message.sender) if message.sender else default_sender
    reply_to = str(message.reply_to) if message.reply_to else default_sender
    return {
        "to": message.recipient.email,
        "subject": message.subject,
        "body": json.dumps(envelope, ensure_ascii=False),
        "from": sender,
        "replyTo": reply_to,
    }


class HttpDispatchGateway:
    """
    EmailPort implementation posting to the hosted mail function.

    Never raises: transport errors, non-2xx answers and
    ``success: false`` all come back as a FAILED EmailResult.
    """

    def __init__(
        self,
        url: str,
        api_key: str | None = None,
        *,
        default_sender: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url
        self.default_sender = default_sender
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = client or httpx.Client(timeout=timeout)
        self._headers = headers

    def send(self, message: EmailMessage) -> EmailResult:
        recipient = message.recipient.email
        payload = build_dispatch_payload(message, self.default_sender)

        try:
            data = self._post(payload, recipient)
        except EmailSendError as e:
            logger.warning("%s (retriable=%s)", e, e.retriable)
            return EmailResult.failed(recipient, e.error)

        logger.info("Email (%s) handed to mail function for %s", message.kind.value, recipient)
        return EmailResult.success(
            recipient,
            message_id=data.get("id"),
            message=str(data.get("message", "")),
        )

    def _post(self, payload: dict[str, Any], recipient: str) -> dict[str, Any]:
        """POST the payload; raise EmailSendError unless the function accepted it."""
        try:
            response = self._client.post(self.url, json=payload, headers=self._headers)
        except httpx.TimeoutException as e:
            raise EmailSendError(recipient, "Mail function timed out") from e
        except httpx.HTTPError as e:
            raise EmailSendError(recipient, f"Mail function unreachable: {e}") from e

        if response.status_code >= 400:
            logger.debug("Mail function body: %s", response.text[:200])
            raise EmailSendError(
                recipient,
                f"Mail function returned {response.status_code}",
                retriable=response.status_code >= 500,
            )

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if data.get("success") is False:
            error = data.get("error") or data.get("message") or "Unknown error from function"
            raise EmailSendError(recipient, str(error), retriable=False)
        return data

    def close(self) -> None:
        self._client.close()
