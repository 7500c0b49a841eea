"""PODNotifier: the single notification cycle for a recorded proof of delivery.

Used both by the notify node at the end of the delivery workflow and by the
standalone POD-email endpoint.
"""
import logging
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel

from src.core.email_content import render_pod_email
from src.core.errors import DuplicateReceiptError, RecordStoreError
from src.core.models import EmailReceipt
from src.services.email.base import EmailSender
from src.services.records.base import RecordStore

logger = logging.getLogger("pod_service.notifier")

ACCEPTED_SENTINEL = "accepted"


class NotificationStatus(str, Enum):
    SENT = "sent"
    ALREADY_SENT = "already_sent"
    NO_CUSTOMER_EMAIL = "no_customer_email"
    ORDER_NOT_FOUND = "order_not_found"
    POD_NOT_FOUND = "pod_not_found"
    NOT_CONFIGURED = "not_configured"
    PROVIDER_ERROR = "provider_error"


class NotificationOutcome(BaseModel):
    status: NotificationStatus
    to_email: str | None = None
    message_id: str | None = None
    provider_status: int | None = None
    error: str | None = None

    @property
    def sent(self) -> bool:
        return self.status == NotificationStatus.SENT


class PODNotifier:
    def __init__(self, records: RecordStore, sender: EmailSender):
        self.records = records
        self.sender = sender

    def notify(self, order_id: str, pod_id: str, include_missing_media_notice: bool = False) -> NotificationOutcome:
        """Send the delivery email for a POD at most once.

        Record-store read errors propagate; everything else is reported in the
        returned outcome.
        """
        if not self.sender.is_configured:
            logger.error(f"POD email not configured: {self.sender.configuration_error}")
            return NotificationOutcome(status=NotificationStatus.NOT_CONFIGURED, error=self.sender.configuration_error)

        order = self.records.get_order(order_id)
        if order is None:
            logger.warning(f"Order {order_id} not found, cannot send POD email")
            return NotificationOutcome(status=NotificationStatus.ORDER_NOT_FOUND, error="Order not found")

        if not order.customer_email:
            logger.info(f"Order {order_id} has no customer email, skipping POD email")
            return NotificationOutcome(
                status=NotificationStatus.NO_CUSTOMER_EMAIL,
                error="customer_email not set for this order",
            )

        if self.records.has_email_receipt(pod_id):
            logger.info(f"POD email already sent for POD {pod_id}")
            return NotificationOutcome(status=NotificationStatus.ALREADY_SENT, to_email=order.customer_email)

        pod = self.records.get_pod(pod_id)
        if pod is None:
            logger.warning(f"POD {pod_id} not found, cannot send POD email")
            return NotificationOutcome(status=NotificationStatus.POD_NOT_FOUND, error="POD missing")

        content = render_pod_email(order, pod, include_missing_media_notice=include_missing_media_notice)
        logger.info(
            f"Sending POD email: order={order.order_number} to={order.customer_email} "
            f"photo={'yes' if pod.photo_url else 'no'} signature={'yes' if pod.signature_url else 'no'}"
        )
        result = self.sender.send(to=order.customer_email, subject=content.subject, html=content.html)

        if not result.success:
            return NotificationOutcome(
                status=NotificationStatus.PROVIDER_ERROR,
                to_email=order.customer_email,
                provider_status=result.status_code,
                error=result.error,
            )

        self._record_receipt(order_id, pod_id, order.customer_email, result.message_id)
        return NotificationOutcome(
            status=NotificationStatus.SENT,
            to_email=order.customer_email,
            message_id=result.message_id,
            provider_status=result.status_code,
        )

    def _record_receipt(self, order_id: str, pod_id: str, to_email: str, message_id: str | None) -> None:
        receipt = EmailReceipt(
            pod_id=pod_id,
            order_id=order_id,
            to_email=to_email,
            provider_message_id=message_id or ACCEPTED_SENTINEL,
            sent_at=datetime.now(timezone.utc),
        )
        try:
            self.records.insert_email_receipt(receipt)
        except DuplicateReceiptError:
            logger.warning(f"Receipt for POD {pod_id} was recorded by a concurrent request")
        except RecordStoreError as e:
            logger.error(f"Failed to record email receipt for POD {pod_id}: {e}")
