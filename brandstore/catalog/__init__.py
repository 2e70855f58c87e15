"""Catalog entities and their row/object lifecycle."""

from brandstore.catalog.entities import CATALOG_ENTITIES, EntityDefinition, FieldSpec
from brandstore.catalog.lifecycle import CatalogLifecycle, DeleteResult, WriteResult

__all__ = [
    'CATALOG_ENTITIES',
    'CatalogLifecycle',
    'DeleteResult',
    'EntityDefinition',
    'FieldSpec',
    'WriteResult',
]
