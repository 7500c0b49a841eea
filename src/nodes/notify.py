import logging

from src.nodes.base import BaseNode
from src.notifier import PODNotifier
from src.core.workflow_state import DeliveryWorkflowState

logger = logging.getLogger("pod_service.workflow")


class NotifyNode(BaseNode):
    """Attempts the customer email once. Never fails the workflow."""

    name = "notify"

    def __init__(self, notifier: PODNotifier, enabled: bool = True):
        self.notifier = notifier
        self.enabled = enabled

    def run(self, state: DeliveryWorkflowState) -> dict:
        if not self.enabled:
            logger.info("POD email disabled")
            return {"notification_status": "disabled"}

        try:
            outcome = self.notifier.notify(
                state["order_id"],
                state["pod_id"],
                include_missing_media_notice=True,
            )
        except Exception as e:
            logger.error(f"POD email failed for order {state.get('order_id')}: {e}")
            return {"notification_status": "failed"}

        if outcome.sent:
            logger.info(f"POD email sent: message_id={outcome.message_id}")
        else:
            logger.warning(f"POD email not sent: status={outcome.status.value} error={outcome.error}")
        return {"notification_status": outcome.status.value}
