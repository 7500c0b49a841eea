from typing import TypedDict


class DeliveryWorkflowState(TypedDict, total=False):
    # --- Input (populated from the authenticated request) ---
    order_id: str
    driver_id: str
    photo_data: str | None
    signature_data: str | None
    recipient_name: str | None
    notes: str | None

    # --- Uploads ---
    photo_url: str | None
    signature_url: str | None

    # --- Records ---
    pod_id: str | None
    order_updated: bool

    # --- Notification ---
    notification_status: str           # NotificationStatus value, "disabled" or "failed"

    trajectory: list[str]              # node names visited

    # --- Final ---
    final_status: str                  # "delivered" | "error"
    error_message: str
