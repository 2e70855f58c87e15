"""
Object store adapter backed by Supabase Storage.

Binary assets (catalog images, profile pictures) live in a storage bucket and
rows reference them by public URL. Uploads use generated keys of the form
``<folder>/<epoch-ms>-<random><ext>``.
"""
import os
import random
import time
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

import httpx

from brandstore.core.errors import ObjectStoreError
from brandstore.utils.logger import get_logger

logger = get_logger("storage.object_store")


@dataclass(frozen=True)
class StoredObject:
    """Result of a successful upload."""
    key: str
    url: str


@dataclass(frozen=True)
class UploadedObject:
    """
    A file that was stored for the current request before the handler ran.

    field_name is the multipart field it arrived in (e.g. ``image_2``).
    """
    field_name: str
    url: str
    key: str


def make_object_key(folder: str, filename: Optional[str] = None) -> str:
    """Generate ``<folder>/<timestamp>-<random><ext>`` for an upload."""
    ext = os.path.splitext(filename or "")[1].lower()
    stamp = int(time.time() * 1000)
    nonce = random.randint(0, 10**9)
    folder = folder.strip("/")
    name = f"{stamp}-{nonce}{ext}"
    return f"{folder}/{name}" if folder else name


class ObjectStore:
    """Interface every object store adapter implements."""

    bucket: str = ""

    async def put(self, data: bytes, key: str, content_type: Optional[str] = None) -> StoredObject:
        raise NotImplementedError

    async def delete(self, key: str) -> None:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class SupabaseObjectStore(ObjectStore):
    """
    Lightweight client for the Supabase Storage REST API.

    Objects are written to ``/storage/v1/object/<bucket>/<key>`` and served
    from the bucket's public URL.
    """

    def __init__(
        self,
        base_url: str,
        key: str,
        bucket: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not base_url or not key:
            logger.warning("SUPABASE_URL or SUPABASE_KEY not set - uploads will fail.")
        self.base_url = (base_url or "").rstrip("/")
        self.bucket = bucket
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "apikey": key,
                "Authorization": f"Bearer {key}",
            },
            timeout=timeout,
        )

    def public_url(self, key: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(key)}"

    def _object_path(self, key: str) -> str:
        return f"/storage/v1/object/{self.bucket}/{quote(key)}"

    async def put(self, data: bytes, key: str, content_type: Optional[str] = None) -> StoredObject:
        headers = {
            "Content-Type": content_type or "application/octet-stream",
            "x-upsert": "false",
        }
        try:
            resp = await self._client.post(self._object_path(key), content=data, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"object_store: method=put key={key} result=error error={e}")
            raise ObjectStoreError(key, f"Upload failed for {key}: {e}") from e
        logger.info(f"object_store: method=put key={key} size={len(data)} result=success")
        return StoredObject(key=key, url=self.public_url(key))

    async def delete(self, key: str) -> None:
        try:
            resp = await self._client.delete(self._object_path(key))
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise ObjectStoreError(key, f"Delete failed for {key}: {e}") from e
        logger.info(f"object_store: method=delete key={key} result=success")

    async def aclose(self) -> None:
        await self._client.aclose()
