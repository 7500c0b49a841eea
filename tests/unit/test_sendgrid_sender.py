"""Unit tests for SendGridEmailSender with a mocked HTTP transport."""
import json

import httpx

from src.services.email.base import EmailSender
from src.services.email.sendgrid import SendGridEmailSender


def _sender(handler, api_key="SG.test", from_email="deliveries@shop.test", timeout=10.0):
    return SendGridEmailSender(
        api_key=api_key,
        from_email=from_email,
        timeout=timeout,
        transport=httpx.MockTransport(handler),
    )


class TestConfiguration:
    def test_implements_email_sender_abc(self):
        assert isinstance(_sender(lambda r: httpx.Response(202)), EmailSender)

    def test_missing_api_key(self):
        sender = _sender(lambda r: httpx.Response(202), api_key=None)
        assert sender.is_configured is False
        assert sender.configuration_error == "SENDGRID_API_KEY not configured"

    def test_missing_from_email(self):
        sender = _sender(lambda r: httpx.Response(202), from_email="")
        assert sender.configuration_error == "DELIVERY_FROM_EMAIL not configured"

    def test_unconfigured_send_makes_no_request(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(202)

        result = _sender(handler, api_key=None).send("to@example.com", "Subject", "<p>hi</p>")

        assert result.success is False
        assert result.error == "SENDGRID_API_KEY not configured"
        assert calls == []


class TestSend:
    def test_posts_mail_send_payload(self):
        captured = {}

        def handler(request):
            captured["method"] = request.method
            captured["path"] = request.url.path
            captured["auth"] = request.headers["authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(202, headers={"x-message-id": "msg-abc"})

        result = _sender(handler).send("to@example.com", "Delivered", "<p>done</p>")

        assert captured["method"] == "POST"
        assert captured["path"] == "/v3/mail/send"
        assert captured["auth"] == "Bearer SG.test"
        assert captured["body"] == {
            "personalizations": [{"to": [{"email": "to@example.com"}], "subject": "Delivered"}],
            "from": {"email": "deliveries@shop.test"},
            "content": [{"type": "text/html", "value": "<p>done</p>"}],
        }
        assert result.success is True
        assert result.status_code == 202
        assert result.message_id == "msg-abc"

    def test_200_is_success(self):
        result = _sender(lambda r: httpx.Response(200)).send("to@example.com", "s", "h")
        assert result.success is True
        assert result.message_id is None

    def test_provider_error_returns_body(self):
        result = _sender(lambda r: httpx.Response(403, text="sender not verified")).send("to@example.com", "s", "h")
        assert result.success is False
        assert result.status_code == 403
        assert result.error == "sender not verified"

    def test_timeout_is_reported_not_raised(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        result = _sender(handler).send("to@example.com", "s", "h")

        assert result.success is False
        assert result.status_code is None
        assert "timed out" in result.error

    def test_transport_error_is_reported_not_raised(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        result = _sender(handler).send("to@example.com", "s", "h")

        assert result.success is False
        assert result.error == "connection refused"

    def test_client_uses_configured_timeout(self):
        sender = _sender(lambda r: httpx.Response(202), timeout=10.0)
        assert sender._client.timeout.read == 10.0
