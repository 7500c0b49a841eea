from abc import ABC, abstractmethod


class BlobStore(ABC):
    @abstractmethod
    def put(self, path: str, content: bytes, content_type: str, access: str = "public") -> str:
        """Store bytes under `path`. Returns the public URL of the stored object."""
        ...

    def close(self) -> None:
        """Release network resources. No-op for stores that hold none."""
