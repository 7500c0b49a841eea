import logging
from datetime import datetime, timezone

from src.nodes.base import BaseNode
from src.services.records.base import RecordStore
from src.core.models import NewProofOfDelivery
from src.core.workflow_state import DeliveryWorkflowState

logger = logging.getLogger("pod_service.workflow")


class RecordPODNode(BaseNode):
    name = "record_pod"

    def __init__(self, records: RecordStore):
        self.records = records

    def run(self, state: DeliveryWorkflowState) -> dict:
        try:
            pod = self.records.insert_pod(NewProofOfDelivery(
                order_id=state["order_id"],
                driver_id=state["driver_id"],
                photo_url=state.get("photo_url"),
                signature_url=state.get("signature_url"),
                recipient_name=state.get("recipient_name"),
                notes=state.get("notes"),
                delivered_at=datetime.now(timezone.utc),
            ))
            logger.info(f"POD saved: {pod.id}")
            return {"pod_id": pod.id}
        except Exception as e:
            logger.error(f"POD save failed for order {state.get('order_id')}: {e}")
            return {
                "final_status": "error",
                "error_message": "Failed to save POD",
            }
