"""Unit tests for delivery workflow nodes."""
import pytest

from src.nodes.base import BaseNode
from src.nodes.notify import NotifyNode
from src.nodes.record_pod import RecordPODNode
from src.nodes.report import ReportNode
from src.nodes.update_order import UpdateOrderNode
from src.nodes.upload import UploadPhotoNode, UploadSignatureNode
from src.notifier import PODNotifier
from src.core.models import OrderStatus
from src.services.blobs.memory import InMemoryBlobStore
from src.services.email.mock import MockEmailSender
from tests.mocks import (
    DRIVER,
    JPEG_BYTES,
    JPEG_DATA_URI,
    ORDER_ID,
    PNG_BYTES,
    PNG_DATA_URI,
    RaisingNotifier,
    make_order,
    make_pod,
    make_store,
)

ERROR_STATE = {
    "order_id": ORDER_ID,
    "final_status": "error",
    "error_message": "Previous failure",
    "trajectory": ["upload_photo"],
}


class TestBaseNode:
    def test_subclass_without_name_rejected(self):
        with pytest.raises(TypeError, match="must define a 'name'"):
            class Nameless(BaseNode):
                def run(self, state):
                    return {}

    def test_trajectory_appended_by_base(self):
        class Echo(BaseNode):
            name = "echo"

            def run(self, state):
                return {"notes": "ran"}

        result = Echo()({"trajectory": ["a"]})
        assert result == {"notes": "ran", "trajectory": ["a", "echo"]}

    def test_skips_run_after_error_unless_opted_in(self):
        class Echo(BaseNode):
            name = "echo"

            def run(self, state):
                return {"notes": "ran"}

        class Always(Echo):
            name = "always"
            runs_after_error = True

        assert Echo()(ERROR_STATE) == {"trajectory": ["upload_photo", "echo"]}
        assert Always()(ERROR_STATE)["notes"] == "ran"


class TestUploadNodes:
    def test_uploads_photo(self):
        blobs = InMemoryBlobStore()
        result = UploadPhotoNode(blobs)({"order_id": ORDER_ID, "photo_data": JPEG_DATA_URI, "trajectory": []})

        [(path, stored)] = blobs.objects.items()
        assert path.startswith(f"pod-photos/{ORDER_ID}-")
        assert path.endswith(".jpg")
        assert stored["content"] == JPEG_BYTES
        assert stored["content_type"] == "image/jpeg"
        assert stored["access"] == "public"
        assert result["photo_url"] == f"memory://blobs/{path}"
        assert result["trajectory"] == ["upload_photo"]

    def test_uploads_signature(self):
        blobs = InMemoryBlobStore()
        result = UploadSignatureNode(blobs)({"order_id": ORDER_ID, "signature_data": PNG_DATA_URI})

        [(path, stored)] = blobs.objects.items()
        assert path.startswith(f"pod-signatures/{ORDER_ID}-")
        assert path.endswith(".png")
        assert stored["content"] == PNG_BYTES
        assert result["signature_url"].endswith(path)

    def test_absent_data_skips_upload(self):
        blobs = InMemoryBlobStore()
        result = UploadPhotoNode(blobs)({"order_id": ORDER_ID, "photo_data": None, "trajectory": []})
        assert blobs.objects == {}
        assert result["photo_url"] is None
        assert "final_status" not in result

    def test_generic_content_type_uses_kind_default(self):
        blobs = InMemoryBlobStore()
        UploadSignatureNode(blobs)({"order_id": ORDER_ID, "signature_data": "aGVsbG8="})
        [stored] = blobs.objects.values()
        assert stored["content_type"] == "image/png"

    def test_upload_failure_is_fatal(self):
        result = UploadPhotoNode(InMemoryBlobStore(should_fail=True))(
            {"order_id": ORDER_ID, "photo_data": JPEG_DATA_URI}
        )
        assert result["final_status"] == "error"
        assert result["error_message"] == "Failed to upload photo"

    def test_error_guard_passes_through(self):
        blobs = InMemoryBlobStore()
        result = UploadSignatureNode(blobs)({**ERROR_STATE, "signature_data": PNG_DATA_URI})
        assert blobs.objects == {}
        assert result == {"trajectory": ["upload_photo", "upload_signature"]}


class TestRecordPODNode:
    def test_inserts_pod_with_uploads(self):
        store = make_store()
        state = {
            "order_id": ORDER_ID,
            "driver_id": DRIVER.id,
            "photo_url": "memory://blobs/p.jpg",
            "signature_url": None,
            "recipient_name": "Bob",
            "notes": "Porch",
            "trajectory": ["upload_photo", "upload_signature"],
        }

        result = RecordPODNode(store)(state)

        pod = store.get_pod(result["pod_id"])
        assert pod.order_id == ORDER_ID
        assert pod.driver_id == DRIVER.id
        assert pod.photo_url == "memory://blobs/p.jpg"
        assert pod.signature_url is None
        assert pod.recipient_name == "Bob"
        assert pod.notes == "Porch"
        assert pod.delivered_at is not None
        assert result["trajectory"][-1] == "record_pod"

    def test_insert_failure_is_fatal(self):
        store = make_store(fail_on={"insert_pod"})
        result = RecordPODNode(store)({"order_id": ORDER_ID, "driver_id": DRIVER.id})
        assert result["final_status"] == "error"
        assert result["error_message"] == "Failed to save POD"
        assert store.pods == {}

    def test_error_guard_passes_through(self):
        store = make_store()
        result = RecordPODNode(store)({**ERROR_STATE, "driver_id": DRIVER.id})
        assert store.pods == {}
        assert "pod_id" not in result


class TestUpdateOrderNode:
    def test_marks_order_delivered(self):
        store = make_store()
        result = UpdateOrderNode(store)({"order_id": ORDER_ID, "pod_id": "pod-1"})
        assert store.get_order(ORDER_ID).status == OrderStatus.DELIVERED
        assert result["order_updated"] is True

    def test_update_failure_is_fatal(self):
        store = make_store(fail_on={"update_order_status"})
        result = UpdateOrderNode(store)({"order_id": ORDER_ID, "pod_id": "pod-1"})
        assert result["final_status"] == "error"
        assert result["error_message"] == "Failed to update order status"
        assert store.get_order(ORDER_ID).status == OrderStatus.PENDING


class TestNotifyNode:
    def _state(self, store):
        pod = make_pod()
        store.pods[pod.id] = pod
        return {"order_id": ORDER_ID, "pod_id": pod.id, "trajectory": ["update_order"]}

    def test_sends_with_missing_media_notice(self):
        store = make_store()
        sender = MockEmailSender()
        state = self._state(store)

        result = NotifyNode(PODNotifier(store, sender))(state)

        assert result["notification_status"] == "sent"
        assert "No delivery photo available" in sender.emails_sent[0]["html"]
        assert result["trajectory"] == ["update_order", "notify"]

    def test_disabled_sends_nothing(self):
        store = make_store()
        sender = MockEmailSender()
        result = NotifyNode(PODNotifier(store, sender), enabled=False)(self._state(store))
        assert result["notification_status"] == "disabled"
        assert sender.emails_sent == []

    def test_provider_failure_is_not_fatal(self):
        store = make_store()
        result = NotifyNode(PODNotifier(store, MockEmailSender(fail_status=500)))(self._state(store))
        assert result["notification_status"] == "provider_error"
        assert "final_status" not in result

    def test_no_customer_email_is_not_fatal(self):
        store = make_store(order=make_order(customer_email=""))
        result = NotifyNode(PODNotifier(store, MockEmailSender()))(self._state(store))
        assert result["notification_status"] == "no_customer_email"
        assert "final_status" not in result

    def test_exception_is_swallowed(self):
        notifier = RaisingNotifier(RuntimeError("store down"))
        result = NotifyNode(notifier)({"order_id": ORDER_ID, "pod_id": "pod-1"})
        assert notifier.calls == 1
        assert result["notification_status"] == "failed"
        assert "final_status" not in result

    def test_error_guard_passes_through(self):
        notifier = RaisingNotifier(RuntimeError("should not be called"))
        result = NotifyNode(notifier)(ERROR_STATE)
        assert notifier.calls == 0
        assert result == {"trajectory": ["upload_photo", "notify"]}


class TestReportNode:
    def test_delivered_when_no_error(self):
        result = ReportNode()({"trajectory": ["notify"]})
        assert result["final_status"] == "delivered"
        assert result["trajectory"] == ["notify", "report"]

    def test_error_when_error_message(self):
        result = ReportNode()({"error_message": "Failed to save POD", "final_status": "error"})
        assert result["final_status"] == "error"
        assert result["trajectory"] == ["report"]

    def test_records_notification_not_attempted(self):
        result = ReportNode()({"order_id": ORDER_ID, "pod_id": "pod-1", "order_updated": True})
        assert result["notification_status"] == "not_attempted"

    def test_keeps_notification_outcome(self):
        result = ReportNode()({"notification_status": "sent", "trajectory": []})
        assert result["notification_status"] == "sent"
