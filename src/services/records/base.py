from abc import ABC, abstractmethod
from datetime import datetime

from src.core.models import DriverIdentity, EmailReceipt, NewProofOfDelivery, Order, OrderStatus, ProofOfDelivery


class RecordStore(ABC):
    """Orders, proofs of delivery and the email-receipt ledger.

    Lookups return None when the row does not exist and raise RecordStoreError
    when the query itself fails. Every write commits on its own.
    """

    @abstractmethod
    def get_user(self, access_token: str) -> DriverIdentity | None:
        """Resolve a session token to the driver it belongs to."""
        ...

    @abstractmethod
    def get_order(self, order_id: str) -> Order | None:
        ...

    @abstractmethod
    def get_pod(self, pod_id: str) -> ProofOfDelivery | None:
        ...

    @abstractmethod
    def insert_pod(self, pod: NewProofOfDelivery) -> ProofOfDelivery:
        """Insert a POD row. Returns it with the store-generated id."""
        ...

    @abstractmethod
    def update_order_status(self, order_id: str, status: OrderStatus, updated_at: datetime) -> None:
        ...

    @abstractmethod
    def has_email_receipt(self, pod_id: str) -> bool:
        """True if an email has already been recorded for the POD."""
        ...

    @abstractmethod
    def insert_email_receipt(self, receipt: EmailReceipt) -> None:
        """Record a sent email. Raises DuplicateReceiptError if one exists for the POD."""
        ...

    def close(self) -> None:
        """Release network resources. No-op for stores that hold none."""
