import logging

import httpx
import opik

from src.services.email.base import EmailSender, SendResult

logger = logging.getLogger("pod_service.email")

SUCCESS_STATUSES = (200, 202)


class SendGridEmailSender(EmailSender):
    """EmailSender using the SendGrid v3 mail/send HTTP API."""

    def __init__(
        self,
        api_key: str | None,
        from_email: str | None,
        api_url: str = "https://api.sendgrid.com",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._api_key = api_key
        self._from_email = from_email
        self._timeout = timeout
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    @property
    def from_email(self) -> str | None:
        return self._from_email

    @property
    def configuration_error(self) -> str | None:
        if not self._api_key:
            return "SENDGRID_API_KEY not configured"
        if not self._from_email:
            return "DELIVERY_FROM_EMAIL not configured"
        return None

    def close(self) -> None:
        self._client.close()

    @opik.track(name="sendgrid_send")
    def send(self, to: str, subject: str, html: str) -> SendResult:
        if not self.is_configured:
            logger.error(f"SendGrid not configured: {self.configuration_error}")
            return SendResult(success=False, error=self.configuration_error)

        payload = {
            "personalizations": [{"to": [{"email": to}], "subject": subject}],
            "from": {"email": self._from_email},
            "content": [{"type": "text/html", "value": html}],
        }

        try:
            response = self._client.post(
                "/v3/mail/send",
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
        except httpx.TimeoutException:
            logger.error(f"SendGrid request to {to} timed out after {self._timeout}s")
            return SendResult(success=False, error=f"Request timed out after {self._timeout}s")
        except httpx.HTTPError as e:
            logger.error(f"SendGrid request to {to} failed: {e}")
            return SendResult(success=False, error=str(e) or type(e).__name__)

        message_id = response.headers.get("x-message-id")
        logger.info(f"SendGrid status={response.status_code} message_id={message_id}")

        if response.status_code in SUCCESS_STATUSES:
            return SendResult(success=True, status_code=response.status_code, message_id=message_id)

        logger.error(f"SendGrid error: status={response.status_code} body={response.text}")
        return SendResult(
            success=False,
            status_code=response.status_code,
            message_id=message_id,
            error=response.text,
        )
