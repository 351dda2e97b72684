"""
Binary storage collaborator (object storage / CDN).
Chỉ dùng để xóa file khi item bị xóa; upload do client/CDN thực hiện, core chỉ lưu payload_ref.
Best-effort: lỗi được log, không bao giờ chặn việc xóa trong DB.
"""
from typing import Optional, Protocol

import httpx

from wedding_memories.config import get_settings
from wedding_memories.logging_config import get_logger

logger = get_logger(__name__)


class StorageBackend(Protocol):
    async def delete(self, storage_id: str, resource_type: str) -> bool: ...


def resource_type_for(kind: str) -> str:
    """Storage resource bucket for an item kind. Audio (media or guestbook) is stored as raw."""
    if kind == "photo":
        return "image"
    if kind == "video":
        return "video"
    return "raw"


class HttpStorageBackend:
    """
    DELETE {STORAGE_DELETE_URL}/{resource_type}/{storage_id}.
    Returns True on 2xx/404, False otherwise. Not configured -> logged and skipped.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self._transport = transport
        self.base_url = (base_url if base_url is not None else settings.storage_delete_url) or ""
        self.timeout = timeout if timeout is not None else settings.storage_timeout_seconds

    async def delete(self, storage_id: str, resource_type: str) -> bool:
        if not self.base_url.strip():
            logger.debug("storage.delete_skipped", reason="STORAGE_DELETE_URL_not_set", storage_id=storage_id)
            return False
        url = f"{self.base_url.rstrip('/')}/{resource_type}/{storage_id}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.delete(url)
        except httpx.RequestError as e:
            logger.warning("storage.delete_error", storage_id=storage_id, error=str(e))
            return False
        if resp.status_code >= 400 and resp.status_code != 404:
            logger.warning(
                "storage.delete_failed",
                storage_id=storage_id,
                status=resp.status_code,
                body=resp.text[:300],
            )
            return False
        logger.info("storage.deleted", storage_id=storage_id, resource_type=resource_type)
        return True


_backend: StorageBackend = HttpStorageBackend()


def get_storage() -> StorageBackend:
    """FastAPI dependency: storage backend (overridable in tests)."""
    return _backend
