from src.services.email.base import EmailSender, SendResult


class MockEmailSender(EmailSender):
    """Inspectable mock. Captures every send for assertion."""

    def __init__(
        self,
        from_email: str | None = "deliveries@example.com",
        configuration_error: str | None = None,
        fail_status: int | None = None,
    ):
        self._from_email = from_email
        self._configuration_error = configuration_error
        self._fail_status = fail_status
        self._sent: list[dict] = []

    @property
    def from_email(self) -> str | None:
        return self._from_email

    @property
    def configuration_error(self) -> str | None:
        return self._configuration_error

    def send(self, to: str, subject: str, html: str) -> SendResult:
        if self._configuration_error:
            return SendResult(success=False, error=self._configuration_error)

        self._sent.append({"to": to, "subject": subject, "html": html})
        if self._fail_status:
            return SendResult(success=False, status_code=self._fail_status, error="mock provider error")
        return SendResult(success=True, status_code=202, message_id=f"mock-{len(self._sent)}")

    @property
    def emails_sent(self) -> list[dict]:
        return list(self._sent)
