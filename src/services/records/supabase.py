import logging
from datetime import datetime

import httpx

from src.core.errors import DuplicateReceiptError, RecordStoreError, RecordWriteError
from src.core.models import DriverIdentity, EmailReceipt, NewProofOfDelivery, Order, OrderStatus, ProofOfDelivery
from src.services.records.base import RecordStore

logger = logging.getLogger("pod_service.records")

UNIQUE_VIOLATION = "23505"


class SupabaseRecordStore(RecordStore):
    """RecordStore backed by Supabase: PostgREST for tables, GoTrue for sessions."""

    ORDERS = "orders"
    PODS = "pods"
    RECEIPTS = "pod_emails"

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._client = httpx.Client(
            base_url=url.rstrip("/"),
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    # --- Auth ---

    def get_user(self, access_token: str) -> DriverIdentity | None:
        try:
            response = self._client.get(
                "/auth/v1/user",
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as e:
            raise RecordStoreError(f"Session lookup failed: {e}") from e

        if response.status_code in (401, 403):
            return None
        if response.is_error:
            raise RecordStoreError("Session lookup failed", response.status_code, response.text)

        data = response.json()
        if not data.get("id"):
            return None
        return DriverIdentity(id=data["id"], email=data.get("email"))

    # --- Tables ---

    def _request(self, method: str, table: str, **kwargs) -> httpx.Response:
        try:
            return self._client.request(method, f"/rest/v1/{table}", **kwargs)
        except httpx.HTTPError as e:
            raise RecordStoreError(f"{method} {table} failed: {e}") from e

    def _select_one(self, table: str, column: str, value: str, select: str = "*") -> dict | None:
        response = self._request("GET", table, params={"select": select, column: f"eq.{value}", "limit": "1"})
        if response.is_error:
            raise RecordStoreError(f"Query on {table} failed", response.status_code, response.text)
        rows = response.json()
        return rows[0] if rows else None

    def _insert(
        self,
        table: str,
        row: dict,
        on_conflict: type[RecordWriteError] = RecordWriteError,
    ) -> list[dict]:
        response = self._request(
            "POST",
            table,
            json=row,
            headers={"Prefer": "return=representation"},
        )
        if response.status_code == 409 or _error_code(response) == UNIQUE_VIOLATION:
            raise on_conflict(f"Duplicate key on {table}", response.status_code, response.text)
        if response.is_error:
            raise RecordWriteError(f"Insert into {table} failed", response.status_code, response.text)
        return response.json()

    def get_order(self, order_id: str) -> Order | None:
        row = self._select_one(self.ORDERS, "id", order_id)
        return Order.model_validate(row) if row else None

    def get_pod(self, pod_id: str) -> ProofOfDelivery | None:
        row = self._select_one(self.PODS, "id", pod_id)
        return ProofOfDelivery.model_validate(row) if row else None

    def insert_pod(self, pod: NewProofOfDelivery) -> ProofOfDelivery:
        rows = self._insert(self.PODS, pod.model_dump(mode="json"))
        if not rows:
            raise RecordWriteError("Insert into pods returned no row")
        return ProofOfDelivery.model_validate(rows[0])

    def update_order_status(self, order_id: str, status: OrderStatus, updated_at: datetime) -> None:
        response = self._request(
            "PATCH",
            self.ORDERS,
            params={"id": f"eq.{order_id}"},
            json={"status": status.value, "updated_at": updated_at.isoformat()},
            headers={"Prefer": "return=minimal"},
        )
        if response.is_error:
            raise RecordWriteError("Order status update failed", response.status_code, response.text)

    def has_email_receipt(self, pod_id: str) -> bool:
        # Existence only: older ledger rows may lack to_email or sent_at
        return self._select_one(self.RECEIPTS, "pod_id", pod_id, select="pod_id") is not None

    def insert_email_receipt(self, receipt: EmailReceipt) -> None:
        self._insert(self.RECEIPTS, receipt.model_dump(mode="json"), on_conflict=DuplicateReceiptError)
        logger.info(f"Email receipt recorded for POD {receipt.pod_id}")


def _error_code(response: httpx.Response) -> str | None:
    if not response.is_error:
        return None
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("code") if isinstance(body, dict) else None
