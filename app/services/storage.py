"""Upload post images to Supabase Storage and resolve their public URLs."""

from __future__ import annotations

import logging
import time
from pathlib import PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import quote

import httpx

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

POSTS_FOLDER = "posts"


class StorageNotConfiguredError(Exception):
    """Raised when an upload is attempted but SUPABASE_URL / SUPABASE_KEY are missing."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StorageApiError(Exception):
    """Raised when the storage service rejects an upload or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _is_storage_configured(settings: Settings) -> bool:
    if not settings.SUPABASE_URL or not settings.SUPABASE_URL.strip():
        return False
    if settings.SUPABASE_KEY is None:
        return False
    key = settings.SUPABASE_KEY.get_secret_value()
    return bool(key and key.strip())


def build_object_path(filename: str, now_ms: int | None = None) -> str:
    """Return 'posts/<epoch-ms>_<basename>' for an uploaded file name."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    name = PurePosixPath((filename or "").replace("\\", "/")).name or "image"
    return f"{POSTS_FOLDER}/{now_ms}_{name}"


def public_url(settings: Settings, path: str) -> str:
    base = (settings.SUPABASE_URL or "").rstrip("/")
    return f"{base}/storage/v1/object/public/{settings.STORAGE_BUCKET}/{quote(path)}"


async def upload_object(
    path: str,
    content: bytes,
    content_type: str,
    settings: Settings,
) -> str:
    """
    Store content at path in the configured bucket and return its public URL.

    Raises StorageNotConfiguredError if Supabase settings are missing and
    StorageApiError if the service rejects the object or is unreachable.
    """
    if not _is_storage_configured(settings):
        raise StorageNotConfiguredError(
            "Object storage is not configured; set SUPABASE_URL and SUPABASE_KEY."
        )
    key = settings.SUPABASE_KEY.get_secret_value()
    base_url = (settings.SUPABASE_URL or "").rstrip("/")
    url = f"{base_url}/storage/v1/object/{settings.STORAGE_BUCKET}/{quote(path)}"
    headers = {
        "Authorization": f"Bearer {key}",
        "apikey": key,
        "Content-Type": content_type or "application/octet-stream",
        "x-upsert": "false",
    }
    try:
        async with httpx.AsyncClient(timeout=settings.STORAGE_REQUEST_TIMEOUT_SEC) as client:
            resp = await client.post(url, content=content, headers=headers)
    except httpx.TimeoutException as e:
        raise StorageApiError("Object storage request timed out.") from e
    except httpx.HTTPError as e:
        raise StorageApiError(f"Object storage unreachable: {e!s}") from e

    if resp.status_code in (401, 403):
        raise StorageApiError("Object storage rejected the credentials.", resp.status_code)
    if resp.status_code >= 400:
        try:
            body = resp.json()
            detail = body.get("message") or body.get("error") or str(body)[:500]
        except ValueError:
            detail = resp.text[:500] if resp.text else "Unknown error"
        raise StorageApiError(
            f"Object storage returned {resp.status_code}: {detail}", resp.status_code
        )

    logger.info("Image uploaded", extra={"path": path, "size": len(content)})
    return public_url(settings, path)
