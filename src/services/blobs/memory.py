from src.core.errors import BlobUploadError
from src.services.blobs.base import BlobStore


class InMemoryBlobStore(BlobStore):
    """Keeps uploads in a dict. Captures all calls for assertion."""

    def __init__(self, base_url: str = "memory://blobs", should_fail: bool = False):
        self._base_url = base_url.rstrip("/")
        self._should_fail = should_fail
        self.objects: dict[str, dict] = {}

    def put(self, path: str, content: bytes, content_type: str, access: str = "public") -> str:
        if self._should_fail:
            raise BlobUploadError(f"Upload of {path} failed (injected)")
        self.objects[path] = {"content": content, "content_type": content_type, "access": access}
        return f"{self._base_url}/{path}"
