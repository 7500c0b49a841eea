import logging

import httpx
import opik

from src.core.errors import BlobUploadError
from src.services.blobs.base import BlobStore

logger = logging.getLogger("pod_service.blobs")

API_VERSION = "7"


class VercelBlobStore(BlobStore):
    """BlobStore implementation using the Vercel Blob HTTP API."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://blob.vercel-storage.com",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers={
                "authorization": f"Bearer {token}",
                "x-api-version": API_VERSION,
            },
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    @opik.track(name="blob_put")
    def put(self, path: str, content: bytes, content_type: str, access: str = "public") -> str:
        if access != "public":
            raise ValueError(f"Unsupported blob access level: {access}")

        try:
            response = self._client.put(
                f"/{path.lstrip('/')}",
                content=content,
                headers={"x-content-type": content_type},
            )
        except httpx.HTTPError as e:
            raise BlobUploadError(f"Upload of {path} failed: {e}") from e

        if response.is_error:
            logger.error(f"Blob upload rejected: status={response.status_code} body={response.text}")
            raise BlobUploadError(f"Upload of {path} failed with status {response.status_code}")

        url = response.json().get("url")
        if not url:
            raise BlobUploadError(f"Upload of {path} returned no URL")
        return url
