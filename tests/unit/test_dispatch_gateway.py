"""
Unit tests for the HTTP dispatch gateway.

The mail function is replaced by httpx.MockTransport handlers.
"""

import json

import httpx
import pytest

from farmstore.adapters.dispatch_gateway import (
    HttpDispatchGateway,
    build_dispatch_payload,
)
from farmstore.core.ports.email import EmailAddress, EmailKind, EmailMessage, EmailStatus

FUNCTION_URL = "https://mail.example.test/functions/v1/send-email"
SENDER = "novice@example.test"


def _message(
    kind: EmailKind = EmailKind.CONFIRMATION,
    discount_code: str | None = None,
    sender: EmailAddress | None = None,
) -> EmailMessage:
    return EmailMessage(
        recipient=EmailAddress("jane@example.com"),
        subject="Potrdite prijavo",
        body_html="<p>Živjo</p>",
        body_text="Živjo",
        kind=kind,
        sender=sender,
        discount_code=discount_code,
    )


def _gateway(handler, api_key: str | None = "secret-key") -> HttpDispatchGateway:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpDispatchGateway(FUNCTION_URL, api_key, default_sender=SENDER, client=client)


class TestBuildPayload:
    def test_confirmation_envelope(self) -> None:
        payload = build_dispatch_payload(_message(), SENDER)

        assert payload["to"] == "jane@example.com"
        assert payload["subject"] == "Potrdite prijavo"
        assert payload["from"] == SENDER
        assert payload["replyTo"] == SENDER
        envelope = json.loads(payload["body"])
        assert envelope == {"html": "<p>Živjo</p>", "text": "Živjo", "isConfirmation": True}

    def test_welcome_envelope_carries_code(self) -> None:
        payload = build_dispatch_payload(
            _message(kind=EmailKind.WELCOME, discount_code="DOBRODOSLI10"), SENDER
        )

        envelope = json.loads(payload["body"])
        assert envelope["isWelcome"] is True
        assert "isConfirmation" not in envelope
        assert envelope["discountCode"] == "DOBRODOSLI10"

    def test_body_keeps_non_ascii(self) -> None:
        payload = build_dispatch_payload(_message(), SENDER)

        assert "Živjo" in payload["body"]

    def test_message_sender_wins(self) -> None:
        payload = build_dispatch_payload(
            _message(sender=EmailAddress("shop@example.com")), default_sender="other@example.com"
        )

        assert payload["from"] == "shop@example.com"
        assert payload["replyTo"] == "other@example.com"


class TestSend:
    def test_success(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True, "message": "queued", "id": "m-1"})

        result = _gateway(handler).send(_message())

        assert result.status == EmailStatus.SENT
        assert result.message_id == "m-1"
        assert result.message == "queued"
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == FUNCTION_URL
        assert request.headers["Authorization"] == "Bearer secret-key"
        assert json.loads(request.content)["to"] == "jane@example.com"

    def test_no_auth_header_without_key(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True})

        _gateway(handler, api_key=None).send(_message())

        assert "Authorization" not in seen[0].headers

    def test_function_reports_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"success": False, "message": "quota exceeded"})

        result = _gateway(handler).send(_message())

        assert result.status == EmailStatus.FAILED
        assert result.ok is False
        assert result.error == "quota exceeded"

    def test_server_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        result = _gateway(handler).send(_message())

        assert result.status == EmailStatus.FAILED
        assert "500" in (result.error or "")

    def test_server_error_logged_as_retriable(self, caplog) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="busy")

        with caplog.at_level("WARNING", logger="farmstore.adapters.dispatch_gateway"):
            _gateway(handler).send(_message())

        assert "retriable=True" in caplog.text
        assert "jane@example.com" in caplog.text

    def test_rejection_logged_as_not_retriable(self, caplog) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(422, json={"success": False})

        with caplog.at_level("WARNING", logger="farmstore.adapters.dispatch_gateway"):
            result = _gateway(handler).send(_message())

        assert result.error == "Mail function returned 422"
        assert "retriable=False" in caplog.text

    @pytest.mark.parametrize(
        "exc, fragment",
        [
            (httpx.ReadTimeout, "timed out"),
            (httpx.ConnectError, "unreachable"),
        ],
    )
    def test_transport_errors(self, exc, fragment) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise exc("no answer", request=request)

        result = _gateway(handler).send(_message())

        assert result.status == EmailStatus.FAILED
        assert fragment in (result.error or "")

    def test_non_json_success_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="OK")

        result = _gateway(handler).send(_message())

        assert result.status == EmailStatus.SENT
        assert result.message_id is None
