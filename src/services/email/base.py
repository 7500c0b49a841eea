from abc import ABC, abstractmethod

from pydantic import BaseModel


class SendResult(BaseModel):
    """Outcome of one send attempt. Failures are reported here, not raised."""
    success: bool
    status_code: int | None = None
    message_id: str | None = None
    error: str | None = None


class EmailSender(ABC):
    @property
    @abstractmethod
    def from_email(self) -> str | None:
        ...

    @property
    @abstractmethod
    def configuration_error(self) -> str | None:
        """Description of the missing setting, or None when ready to send."""
        ...

    @property
    def is_configured(self) -> bool:
        return self.configuration_error is None

    @abstractmethod
    def send(self, to: str, subject: str, html: str) -> SendResult:
        """Send one HTML email."""
        ...

    def close(self) -> None:
        """Release network resources. No-op for senders that hold none."""
