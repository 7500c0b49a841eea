import logging
from datetime import datetime, timezone

from src.nodes.base import BaseNode
from src.services.records.base import RecordStore
from src.core.models import OrderStatus
from src.core.workflow_state import DeliveryWorkflowState

logger = logging.getLogger("pod_service.workflow")


class UpdateOrderNode(BaseNode):
    """Marks the order delivered.

    The POD row was committed by the previous step and is not rolled back if
    this fails; the order then needs manual reconciliation, which is logged.
    """

    name = "update_order"

    def __init__(self, records: RecordStore):
        self.records = records

    def run(self, state: DeliveryWorkflowState) -> dict:
        order_id = state["order_id"]
        try:
            self.records.update_order_status(order_id, OrderStatus.DELIVERED, datetime.now(timezone.utc))
            logger.info(f"Order {order_id} marked as delivered")
            return {"order_updated": True}
        except Exception as e:
            logger.error(f"Order update failed for order {order_id}: {e}")
            logger.warning(
                f"Reconciliation needed: POD {state.get('pod_id')} recorded but order {order_id} not marked delivered"
            )
            return {
                "order_updated": False,
                "final_status": "error",
                "error_message": "Failed to update order status",
            }
