import uuid
from datetime import datetime

from src.core.errors import DuplicateReceiptError, RecordStoreError, RecordWriteError
from src.core.models import DriverIdentity, EmailReceipt, NewProofOfDelivery, Order, OrderStatus, ProofOfDelivery
from src.services.records.base import RecordStore


class InMemoryRecordStore(RecordStore):
    """Dict-backed store for local runs and tests.

    `fail_on` names operations (e.g. {"update_order_status"}) that should fail,
    so partial-failure paths can be exercised.
    """

    def __init__(
        self,
        orders: list[Order] | None = None,
        users: dict[str, DriverIdentity] | None = None,
        fail_on: set[str] | None = None,
    ):
        self.orders: dict[str, Order] = {o.id: o for o in orders or []}
        self.pods: dict[str, ProofOfDelivery] = {}
        self.receipts: dict[str, EmailReceipt] = {}
        self.users: dict[str, DriverIdentity] = dict(users or {})
        self.fail_on: set[str] = set(fail_on or ())

    def _maybe_fail(self, operation: str, error_cls: type[RecordStoreError] = RecordStoreError) -> None:
        if operation in self.fail_on:
            raise error_cls(f"{operation} failed (injected)")

    def get_user(self, access_token: str) -> DriverIdentity | None:
        self._maybe_fail("get_user")
        return self.users.get(access_token)

    def get_order(self, order_id: str) -> Order | None:
        self._maybe_fail("get_order")
        order = self.orders.get(order_id)
        return order.model_copy() if order else None

    def get_pod(self, pod_id: str) -> ProofOfDelivery | None:
        self._maybe_fail("get_pod")
        return self.pods.get(pod_id)

    def insert_pod(self, pod: NewProofOfDelivery) -> ProofOfDelivery:
        self._maybe_fail("insert_pod", RecordWriteError)
        stored = ProofOfDelivery(id=str(uuid.uuid4()), **pod.model_dump())
        self.pods[stored.id] = stored
        return stored

    def update_order_status(self, order_id: str, status: OrderStatus, updated_at: datetime) -> None:
        self._maybe_fail("update_order_status", RecordWriteError)
        order = self.orders.get(order_id)
        if order is None:
            # Matches an UPDATE with no matching rows: not an error
            return
        self.orders[order_id] = order.model_copy(update={"status": status.value, "updated_at": updated_at})

    def has_email_receipt(self, pod_id: str) -> bool:
        self._maybe_fail("has_email_receipt")
        return pod_id in self.receipts

    def insert_email_receipt(self, receipt: EmailReceipt) -> None:
        self._maybe_fail("insert_email_receipt", RecordWriteError)
        if receipt.pod_id in self.receipts:
            raise DuplicateReceiptError(f"Email receipt already exists for POD {receipt.pod_id}")
        self.receipts[receipt.pod_id] = receipt
