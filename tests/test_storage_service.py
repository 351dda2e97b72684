"""Storage delete hook: URL layout, 404 treated as already deleted, unconfigured backend skipped."""
import httpx
import pytest

from wedding_memories.services.storage_service import HttpStorageBackend, resource_type_for


def test_resource_type_for_kind() -> None:
    assert resource_type_for("photo") == "image"
    assert resource_type_for("video") == "video"
    assert resource_type_for("audio") == "raw"
    assert resource_type_for("mixed") == "raw"
    assert resource_type_for("text") == "raw"


def _backend(status_code: int, calls: list) -> HttpStorageBackend:
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, str(request.url)))
        return httpx.Response(status_code)

    return HttpStorageBackend(base_url="https://storage.test/delete/", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_delete_ok() -> None:
    calls: list = []
    assert await _backend(200, calls).delete("wedding/a", "image") is True
    assert calls == [("DELETE", "https://storage.test/delete/image/wedding/a")]


@pytest.mark.asyncio
async def test_delete_missing_counts_as_deleted() -> None:
    assert await _backend(404, []).delete("gone", "video") is True


@pytest.mark.asyncio
async def test_delete_server_error() -> None:
    assert await _backend(500, []).delete("x", "image") is False


@pytest.mark.asyncio
async def test_unconfigured_backend_skips() -> None:
    assert await HttpStorageBackend(base_url="").delete("x", "image") is False
