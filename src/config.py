from pathlib import Path

import yaml
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"

POD_EMAIL_DISABLED = "false"


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Record store
    record_store: str = "supabase"  # "supabase" | "memory"
    supabase_url: str | None = None
    supabase_key: str | None = None

    # Blob store
    blob_store: str = "vercel"  # "vercel" | "memory"
    blob_read_write_token: str | None = None
    blob_api_url: str = "https://blob.vercel-storage.com"

    # Email
    email_sender: str = "sendgrid"  # "sendgrid" | "mock"
    sendgrid_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("sendgrid_api_key", "send_grid_api_key"),
    )
    delivery_from_email: str | None = None
    sendgrid_api_url: str = "https://api.sendgrid.com"
    email_timeout_seconds: float = 10.0
    enable_pod_email: str = Field(
        default="true",
        validation_alias=AliasChoices("enable_pod_email", "next_public_enable_pod_email"),
    )

    # HTTP clients for the record and blob stores
    http_timeout_seconds: float = 30.0

    @property
    def pod_email_enabled(self) -> bool:
        return self.enable_pod_email != POD_EMAIL_DISABLED

    @classmethod
    def from_yaml(cls, path: str | Path = CONFIG_PATH) -> "AppConfig":
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def for_local(cls) -> "AppConfig":
        """Pre-configured for local runs: in-memory stores, mock email."""
        return cls(
            record_store="memory",
            blob_store="memory",
            email_sender="mock",
        )
