"""WorkflowBuilder: wires services and nodes based on AppConfig."""
from src.config import AppConfig
from src.core.errors import ConfigurationError
from src.services.records.base import RecordStore
from src.services.records.memory import InMemoryRecordStore
from src.services.records.supabase import SupabaseRecordStore
from src.services.blobs.base import BlobStore
from src.services.blobs.memory import InMemoryBlobStore
from src.services.blobs.vercel import VercelBlobStore
from src.services.email.base import EmailSender
from src.services.email.mock import MockEmailSender
from src.services.email.sendgrid import SendGridEmailSender
from src.notifier import PODNotifier
from src.nodes.upload import UploadPhotoNode, UploadSignatureNode
from src.nodes.record_pod import RecordPODNode
from src.nodes.update_order import UpdateOrderNode
from src.nodes.notify import NotifyNode
from src.nodes.report import ReportNode
from src.workflow import build_graph


class WorkflowBuilder:
    """Builds the delivery workflow graph by wiring services and nodes from config."""

    def __init__(self, config: AppConfig):
        self.config = config

        # Instantiate services
        self._records = self._build_record_store()
        self._blobs = self._build_blob_store()
        self._email_sender = self._build_email_sender()
        self._notifier = PODNotifier(records=self._records, sender=self._email_sender)

    @property
    def records(self) -> RecordStore:
        return self._records

    @property
    def blobs(self) -> BlobStore:
        return self._blobs

    @property
    def email_sender(self) -> EmailSender:
        return self._email_sender

    @property
    def notifier(self) -> PODNotifier:
        return self._notifier

    def build(self):
        """Build and return a compiled LangGraph workflow."""
        return build_graph(
            UploadPhotoNode(blobs=self._blobs),
            UploadSignatureNode(blobs=self._blobs),
            RecordPODNode(records=self._records),
            UpdateOrderNode(records=self._records),
            NotifyNode(notifier=self._notifier, enabled=self.config.pod_email_enabled),
            ReportNode(),
        )

    def _build_record_store(self) -> RecordStore:
        if self.config.record_store == "memory":
            return InMemoryRecordStore()
        if self.config.record_store == "supabase":
            if not self.config.supabase_url or not self.config.supabase_key:
                raise ConfigurationError("SUPABASE_URL and SUPABASE_KEY are required for the supabase record store")
            return SupabaseRecordStore(
                url=self.config.supabase_url,
                api_key=self.config.supabase_key,
                timeout=self.config.http_timeout_seconds,
            )
        raise ValueError(f"Unknown record store: {self.config.record_store}")

    def _build_blob_store(self) -> BlobStore:
        if self.config.blob_store == "memory":
            return InMemoryBlobStore()
        if self.config.blob_store == "vercel":
            if not self.config.blob_read_write_token:
                raise ConfigurationError("BLOB_READ_WRITE_TOKEN is required for the vercel blob store")
            return VercelBlobStore(
                token=self.config.blob_read_write_token,
                api_url=self.config.blob_api_url,
                timeout=self.config.http_timeout_seconds,
            )
        raise ValueError(f"Unknown blob store: {self.config.blob_store}")

    def _build_email_sender(self) -> EmailSender:
        if self.config.email_sender == "mock":
            return MockEmailSender(from_email=self.config.delivery_from_email or "deliveries@example.com")
        if self.config.email_sender == "sendgrid":
            # Missing credentials are reported per send, not at startup
            return SendGridEmailSender(
                api_key=self.config.sendgrid_api_key,
                from_email=self.config.delivery_from_email,
                api_url=self.config.sendgrid_api_url,
                timeout=self.config.email_timeout_seconds,
            )
        raise ValueError(f"Unknown email sender: {self.config.email_sender}")

    def close(self) -> None:
        """Close the HTTP clients held by the services."""
        self._records.close()
        self._blobs.close()
        self._email_sender.close()
