import logging

import opik

from src.nodes.base import BaseNode
from src.core.workflow_state import DeliveryWorkflowState

logger = logging.getLogger("pod_service.workflow")


class ReportNode(BaseNode):
    """Settles the final status: `error` if any fatal step failed, else `delivered`."""

    name = "report"
    runs_after_error = True

    @opik.track(name="report_node")
    def run(self, state: DeliveryWorkflowState) -> dict:
        if state.get("error_message"):
            logger.warning(f"Delivery failed for order {state.get('order_id')}: {state['error_message']}")
            return {"final_status": "error"}

        notification = state.get("notification_status") or "not_attempted"
        return {"final_status": "delivered", "notification_status": notification}
