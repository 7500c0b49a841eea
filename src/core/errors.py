class DeliveryServiceError(Exception):
    """Base class for errors raised by the delivery service."""


class AuthenticationRequiredError(DeliveryServiceError):
    """Caller has no valid driver session."""


class ConfigurationError(DeliveryServiceError):
    """A required setting is missing."""


class RecordStoreError(DeliveryServiceError):
    """Record store query or write was rejected."""

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class RecordWriteError(RecordStoreError):
    pass


class DuplicateReceiptError(RecordWriteError):
    """An email receipt already exists for this POD id."""


class BlobUploadError(DeliveryServiceError):
    """Object store rejected an upload."""
