from abc import ABC, abstractmethod
from typing import Union


class StorageProvider(ABC):
    """Abstract base class for object storage providers."""

    @abstractmethod
    async def upload(self, data: Union[bytes, str], path: str, **kwargs) -> str:
        """Store bytes (or the contents of a local file path) at ``path``; returns a locator."""
        pass

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Delete one object. Missing objects are not an error."""
        pass

    @abstractmethod
    async def delete_by_prefix(self, prefix: str) -> int:
        """Delete every object under ``prefix``; returns the number removed."""
        pass

    @abstractmethod
    async def get_signed_url(self, path: str, ttl_seconds: int) -> str:
        """Generate a time-limited access URL for an object."""
        pass

    async def close(self):
        """Close the underlying client and cleanup."""
        pass
