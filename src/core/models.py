from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

ADDRESS_NOT_AVAILABLE = "Address not available"


class OrderStatus(str, Enum):
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"


class Order(BaseModel):
    """Order row as read by the delivery service."""
    id: str
    customer_name: str | None = None
    customer_email: str | None = None

    # Canonical address
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip: str | None = None

    # Legacy single-column addresses, read only as a fallback
    delivery_address: str | None = None
    full_address: str | None = None
    address_line1: str | None = None

    # Read as free text: the orders table carries states this service never writes
    status: str = OrderStatus.PENDING.value
    updated_at: datetime | None = None

    @property
    def order_number(self) -> str:
        return self.id[:8].upper()

    @property
    def display_address(self) -> str:
        parts = [p.strip() for p in (self.address, self.city, self.state, self.zip) if p and p.strip()]
        if parts:
            return ", ".join(parts)
        for legacy in (self.delivery_address, self.full_address, self.address_line1):
            if legacy and legacy.strip():
                return legacy.strip()
        return ADDRESS_NOT_AVAILABLE


class NewProofOfDelivery(BaseModel):
    """Insert payload for a POD; the store assigns the id."""
    order_id: str
    driver_id: str
    photo_url: str | None = None
    signature_url: str | None = None
    recipient_name: str | None = None
    notes: str | None = None
    delivered_at: datetime


class ProofOfDelivery(NewProofOfDelivery):
    id: str


class EmailReceipt(BaseModel):
    """Idempotency ledger entry: one per POD id."""
    pod_id: str
    order_id: str
    to_email: str
    provider_message_id: str = "accepted"
    sent_at: datetime


class DriverIdentity(BaseModel):
    id: str
    email: str | None = None


class DeliveryRequest(BaseModel):
    """Body of the submit-delivery endpoint (camelCase on the wire)."""
    order_id: str = Field(alias="orderId")
    photo_data: str | None = Field(default=None, alias="photoData")
    signature_data: str | None = Field(default=None, alias="signatureData")
    recipient_name: str | None = Field(default=None, alias="recipientName")
    notes: str | None = None


class PODEmailRequest(BaseModel):
    order_id: str | None = Field(default=None, alias="orderId")
    pod_id: str | None = Field(default=None, alias="podId")
