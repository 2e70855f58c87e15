"""
Best-effort object deletion.

There is no transaction spanning the relational store and the object store,
so object deletes are compensating actions: they are awaited, run
concurrently, and their failures are collected and logged instead of raised.
A leaked object is acceptable; a failed user-facing operation is not.
"""
import asyncio
from typing import Iterable, List, Optional, Sequence

from brandstore.storage.key_resolver import resolve_object_key
from brandstore.storage.object_store import ObjectStore, UploadedObject
from brandstore.utils.logger import get_logger

logger = get_logger("storage.cleanup")


async def delete_objects(objects: ObjectStore, keys: Iterable[Optional[str]], reason: str) -> List[str]:
    """
    Delete every key concurrently.

    Args:
        objects: Object store adapter
        keys: Object keys; ``None`` entries are skipped
        reason: Short label for the log lines (e.g. "duplicate sku")

    Returns:
        Keys whose delete failed (empty when everything was removed)
    """
    pending = [k for k in keys if k]
    if not pending:
        return []

    results = await asyncio.gather(
        *(objects.delete(k) for k in pending),
        return_exceptions=True,
    )

    failed = []
    for key, result in zip(pending, results):
        if isinstance(result, BaseException):
            logger.warning(f"cleanup: reason={reason} key={key} result=error error={result}")
            failed.append(key)
        else:
            logger.info(f"cleanup: reason={reason} key={key} result=deleted")
    return failed


async def discard_uploads(objects: ObjectStore, uploads: Sequence[UploadedObject], reason: str) -> List[str]:
    """Compensating delete for objects uploaded by a request that will not be persisted."""
    keys = [u.key or resolve_object_key(u.url, objects.bucket) for u in uploads]
    return await delete_objects(objects, keys, reason)


async def delete_references(objects: ObjectStore, urls: Iterable[Optional[str]], reason: str) -> List[str]:
    """Delete the objects behind stored references (URLs). Unresolvable references are skipped."""
    keys = [resolve_object_key(url, objects.bucket) for url in urls]
    return await delete_objects(objects, keys, reason)
