import hashlib
import hmac
import os
import shutil
import time
from pathlib import Path
from typing import Any, Dict, Union
from urllib.parse import parse_qs, urlencode, urlparse
import aiofiles
from loguru import logger
from scenerag.providers.base import StorageProvider
from scenerag.utils.error_handler import handle_exceptions, convert_exceptions
from scenerag.utils.error_handler import ProviderException


class LocalStorageProvider(StorageProvider):
    """Local filesystem-based storage provider.

    Signed URLs are ``file://`` URLs carrying an ``expires`` timestamp and an
    HMAC-SHA256 ``signature`` over ``path`` and ``expires``.
    """

    def __init__(self, config: Dict[str, Any]):
        """
        Initialize Local Storage Provider.

        Args:
            config: {
                        "base_path": str -> Root directory for local storage (default: ./local_storage)
                        "signing_key": str -> Secret used to sign URLs
                    }
        """
        self.config = config
        self.base_path = Path(config.get("base_path", "./local_storage")).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._signing_key = config.get("signing_key", "change-me").encode("utf-8")
        logger.info(f"LocalStorageProvider initialized at {self.base_path}")

    def _get_file_path(self, path: str) -> Path:
        """Return the absolute path for a storage key, refusing keys that escape the root."""
        file_path = (self.base_path / path).resolve()
        if self.base_path not in file_path.parents and file_path != self.base_path:
            raise ProviderException(f"Storage path escapes base directory: {path}")
        return file_path

    def _file_url(self, file_path: Path) -> str:
        # Proper file:// handling on Windows (e.g., file:///C:/path/to/file)
        if os.name == "nt":
            return f"file:///{file_path.as_posix()}"
        return file_path.as_uri()

    def _sign(self, path: str, expires: int) -> str:
        message = f"{path}:{expires}".encode("utf-8")
        return hmac.new(self._signing_key, message, hashlib.sha256).hexdigest()

    @handle_exceptions(retries=3, exceptions=(OSError,))
    @convert_exceptions({Exception: ProviderException})
    async def upload(self, data: Union[bytes, str], path: str, **kwargs) -> str:
        """Write bytes, or copy a local file, into the storage directory."""
        dest_path = self._get_file_path(path)
        dest_path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            async with aiofiles.open(data, "rb") as src, aiofiles.open(dest_path, "wb") as dst:
                while chunk := await src.read(1024 * 1024):
                    await dst.write(chunk)
        else:
            async with aiofiles.open(dest_path, "wb") as dst:
                await dst.write(data)
        logger.debug(f"Stored {path} at {dest_path}")
        return self._file_url(dest_path)

    @convert_exceptions({Exception: ProviderException})
    async def delete(self, path: str) -> None:
        file_path = self._get_file_path(path)
        if file_path.is_file():
            file_path.unlink()

    @convert_exceptions({Exception: ProviderException})
    async def delete_by_prefix(self, prefix: str) -> int:
        """Delete every file whose storage key starts with ``prefix``."""
        removed = 0
        for file_path in list(self.base_path.rglob("*")):
            if not file_path.is_file():
                continue
            key = file_path.relative_to(self.base_path).as_posix()
            if key.startswith(prefix):
                file_path.unlink()
                removed += 1
        # Drop directories emptied by the prefix delete
        prefix_dir = self.base_path / prefix.rstrip("/")
        if prefix.endswith("/") and prefix_dir.is_dir() and not any(prefix_dir.rglob("*")):
            shutil.rmtree(prefix_dir, ignore_errors=True)
        if removed:
            logger.info(f"Deleted {removed} local objects under {prefix}")
        return removed

    async def get_signed_url(self, path: str, ttl_seconds: int) -> str:
        expires = int(time.time()) + int(ttl_seconds)
        query = urlencode({"expires": expires, "signature": self._sign(path, expires)})
        return f"{self._file_url(self._get_file_path(path))}?{query}"

    def verify_signed_url(self, url: str) -> bool:
        """True when ``url`` was signed by this provider and has not expired."""
        parsed = urlparse(url)
        params = parse_qs(parsed.query)
        try:
            expires = int(params["expires"][0])
            signature = params["signature"][0]
        except (KeyError, IndexError, ValueError):
            return False
        if expires < time.time():
            return False
        file_path = Path(parsed.path.lstrip("/") if os.name == "nt" else parsed.path)
        try:
            key = file_path.resolve().relative_to(self.base_path).as_posix()
        except ValueError:
            return False
        return hmac.compare_digest(signature, self._sign(key, expires))
