import logging
import time

from src.nodes.base import BaseNode
from src.services.blobs.base import BlobStore
from src.core.data_uri import DEFAULT_CONTENT_TYPE, decode_data_uri
from src.core.workflow_state import DeliveryWorkflowState

logger = logging.getLogger("pod_service.workflow")


class AbstractUploadNode(BaseNode):
    """Decode a data-URI field from the state and upload it to the blob store."""

    input_key: str
    output_key: str
    folder: str
    extension: str
    fallback_content_type: str
    label: str

    def __init__(self, blobs: BlobStore):
        self.blobs = blobs

    def run(self, state: DeliveryWorkflowState) -> dict:
        data = state.get(self.input_key)
        if not data:
            return {self.output_key: None}

        order_id = state.get("order_id", "")
        try:
            decoded = decode_data_uri(data)
            content_type = decoded.content_type
            if content_type == DEFAULT_CONTENT_TYPE:
                content_type = self.fallback_content_type
            path = f"{self.folder}/{order_id}-{int(time.time() * 1000)}.{self.extension}"

            logger.info(f"Uploading {self.label} for order {order_id}")
            url = self.blobs.put(path, decoded.content, content_type, access="public")
            logger.info(f"{self.label.capitalize()} uploaded: {url}")

            return {self.output_key: url}
        except Exception as e:
            logger.error(f"{self.label.capitalize()} upload failed for order {order_id}: {e}")
            return {
                "final_status": "error",
                "error_message": f"Failed to upload {self.label}",
            }


class UploadPhotoNode(AbstractUploadNode):
    name = "upload_photo"
    input_key = "photo_data"
    output_key = "photo_url"
    folder = "pod-photos"
    extension = "jpg"
    fallback_content_type = "image/jpeg"
    label = "photo"


class UploadSignatureNode(AbstractUploadNode):
    name = "upload_signature"
    input_key = "signature_data"
    output_key = "signature_url"
    folder = "pod-signatures"
    extension = "png"
    fallback_content_type = "image/png"
    label = "signature"
