"""Object storage: adapter, key resolution and best-effort cleanup."""

from brandstore.storage.key_resolver import resolve_object_key
from brandstore.storage.object_store import (
    ObjectStore,
    StoredObject,
    SupabaseObjectStore,
    UploadedObject,
    make_object_key,
)

__all__ = [
    'ObjectStore',
    'StoredObject',
    'SupabaseObjectStore',
    'UploadedObject',
    'make_object_key',
    'resolve_object_key',
]
