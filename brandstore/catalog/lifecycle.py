"""
Catalog entity lifecycle.

Keeps a database row and the objects it references in step:

- create: validate -> uniqueness check -> insert row pointing at the
  already-uploaded objects
- update: fetch -> validate -> uniqueness check (excluding self) -> update
  row -> delete the objects the row no longer references
- delete: fetch -> delete every referenced object -> delete row

The relational store and the object store share no transaction. Whenever a
create or update fails, the objects uploaded for that request are deleted
(compensating delete) before the error propagates. Deletes of superseded
objects happen only after the row points at the new ones, so a crash leaves
an orphaned object, never a row with a dangling reference.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Sequence

from brandstore.catalog.entities import EntityDefinition
from brandstore.core.errors import (
    BrandStoreError,
    DuplicateKey,
    DuplicateKeyViolation,
    NotFound,
    ValidationFailed,
)
from brandstore.data.relational_store import RelationalStore
from brandstore.storage.cleanup import delete_references, discard_uploads
from brandstore.storage.object_store import ObjectStore, UploadedObject
from brandstore.utils.logger import get_logger

logger = get_logger("catalog.lifecycle")


@dataclass
class WriteResult:
    """Id of the written row and the image references it now holds (column -> URL)."""
    id: int
    references: Dict[str, Optional[str]] = field(default_factory=dict)


@dataclass
class DeleteResult:
    id: int
    deleted_objects: List[str] = field(default_factory=list)
    failed_objects: List[str] = field(default_factory=list)


def clean_value(value: Any) -> Any:
    """Strip strings; blank strings count as missing (None)."""
    if value is None:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


class CatalogLifecycle:
    """
    Create / update / delete for every cataloged entity type.

    Both stores are process-lifetime handles injected at startup.
    """

    def __init__(self, store: RelationalStore, objects: ObjectStore):
        self.store = store
        self.objects = objects

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self, entity: EntityDefinition) -> List[Dict[str, Any]]:
        return self.store.query(f"SELECT * FROM {entity.table} ORDER BY id DESC")

    def get(self, entity: EntityDefinition, entity_id: int) -> Dict[str, Any]:
        row = self._fetch(entity, entity_id)
        if row is None:
            raise NotFound(f"{entity.label} not found")
        return row

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(
        self,
        entity: EntityDefinition,
        fields: Mapping[str, Any],
        uploads: Sequence[UploadedObject] = (),
    ) -> WriteResult:
        """
        Insert a new row referencing the uploaded objects.

        Raises:
            ValidationFailed: required field missing/blank, bad number, or
                incomplete image set
            DuplicateKey: unique key already taken
            StoreUnavailable: the insert failed for any other reason
        """
        uploads = list(uploads)
        by_slot = self._uploads_by_slot(entity, uploads)
        try:
            values = self._validate(entity, fields, creating=True)
            self._require_images(entity, by_slot)
            self._check_unique(entity, values)
            for slot, column in entity.image_slots.items():
                upload = by_slot.get(slot)
                values[column] = upload.url if upload else None
            try:
                result = self.store.insert(entity.table, values)
            except DuplicateKeyViolation as e:
                raise self._duplicate_from_violation(entity, e) from e
        except BrandStoreError as e:
            await discard_uploads(self.objects, uploads, reason=f"{entity.name} create failed ({e.kind})")
            raise

        references = {column: values[column] for column in entity.image_slots.values()}
        logger.info(f"{entity.name} created: id={result.insert_id} images={len(by_slot)}")
        return WriteResult(id=result.insert_id, references=references)

    async def update(
        self,
        entity: EntityDefinition,
        entity_id: int,
        fields: Mapping[str, Any],
        uploads: Sequence[UploadedObject] = (),
    ) -> WriteResult:
        """
        Update a row; every slot with a new upload gets the new URL and its old
        object is deleted afterwards (best-effort). Other slots are untouched.

        Raises:
            NotFound: no row with this id
            ValidationFailed: missing required field, bad number, or nothing to update
            DuplicateKey: unique key taken by another row
            StoreUnavailable: the update failed for any other reason
        """
        uploads = list(uploads)
        by_slot = self._uploads_by_slot(entity, uploads)
        try:
            existing = self._fetch(entity, entity_id)
            if existing is None:
                raise NotFound(f"{entity.label} not found")

            changes = self._validate(entity, fields, creating=False)
            self._check_unique(entity, changes, exclude_id=entity_id)

            replaced = {entity.image_slots[slot]: upload.url for slot, upload in by_slot.items()}
            assignments = {**changes, **replaced}
            if not assignments:
                raise ValidationFailed("No fields provided for update")

            set_clause = ", ".join(f"{column} = :{column}" for column in assignments)
            try:
                self.store.execute(
                    f"UPDATE {entity.table} SET {set_clause} WHERE id = :id",
                    {**assignments, "id": entity_id},
                )
            except DuplicateKeyViolation as e:
                raise self._duplicate_from_violation(entity, e) from e
        except BrandStoreError as e:
            await discard_uploads(self.objects, uploads, reason=f"{entity.name} update failed ({e.kind})")
            raise

        # Row now points at the new objects; the old ones can go
        superseded = [
            existing[column] for column, url in replaced.items()
            if existing.get(column) and existing[column] != url
        ]
        if superseded:
            await delete_references(self.objects, superseded, reason=f"{entity.name} {entity_id} image replaced")

        references = {
            column: replaced.get(column, existing.get(column))
            for column in entity.image_slots.values()
        }
        logger.info(f"{entity.name} updated: id={entity_id} fields={sorted(changes)} images_replaced={len(replaced)}")
        return WriteResult(id=entity_id, references=references)

    async def delete(self, entity: EntityDefinition, entity_id: int) -> DeleteResult:
        """
        Delete a row and all its objects. Objects go first; a failed object
        delete is logged and does not stop the others or the row delete.

        Raises:
            NotFound: no row with this id
            StoreUnavailable: the row delete failed (object deletes are not undone)
        """
        existing = self._fetch(entity, entity_id)
        if existing is None:
            raise NotFound(f"{entity.label} not found")

        references = [existing.get(column) for column in entity.image_slots.values()]
        failed = await delete_references(self.objects, references, reason=f"{entity.name} {entity_id} deleted")

        result = self.store.execute(f"DELETE FROM {entity.table} WHERE id = :id", {"id": entity_id})
        if result.affected_rows == 0:
            raise NotFound(f"{entity.label} not found")

        deleted = [ref for ref in references if ref]
        logger.info(f"{entity.name} deleted: id={entity_id} objects={len(deleted)} failed_objects={len(failed)}")
        return DeleteResult(id=entity_id, deleted_objects=deleted, failed_objects=failed)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fetch(self, entity: EntityDefinition, entity_id: int) -> Optional[Dict[str, Any]]:
        return self.store.query_one(f"SELECT * FROM {entity.table} WHERE id = :id", {"id": entity_id})

    @staticmethod
    def _uploads_by_slot(entity: EntityDefinition, uploads: Sequence[UploadedObject]) -> Dict[str, UploadedObject]:
        by_slot = {}
        for upload in uploads:
            if upload.field_name in entity.image_slots and upload.field_name not in by_slot:
                by_slot[upload.field_name] = upload
        return by_slot

    @staticmethod
    def _validate(entity: EntityDefinition, fields: Mapping[str, Any], creating: bool) -> Dict[str, Any]:
        """Return the cleaned values to write. Only supplied fields are included."""
        values = {}
        missing = []
        for field_spec in entity.fields:
            value = clean_value(fields.get(field_spec.name))
            required = field_spec.required if creating else (field_spec.required_on_update and not entity.partial_update)
            if value is None:
                if required:
                    missing.append(field_spec.display)
                continue
            if field_spec.numeric:
                try:
                    number = Decimal(str(value))
                except InvalidOperation:
                    raise ValidationFailed(f"{field_spec.display} must be a number")
                if not number.is_finite():
                    raise ValidationFailed(f"{field_spec.display} must be a number")
                # Plain decimal text binds on every driver (sqlite has no Decimal)
                value = format(number, "f")
            values[field_spec.name] = value

        if missing:
            verb = "is" if len(missing) == 1 else "are"
            raise ValidationFailed(f"{', '.join(missing)} {verb} required")
        return values

    @staticmethod
    def _require_images(entity: EntityDefinition, by_slot: Mapping[str, UploadedObject]) -> None:
        if not entity.images_required:
            return
        slots = list(entity.image_slots)
        if all(slot in by_slot for slot in slots):
            return
        if len(slots) == 1:
            raise ValidationFailed(f"{entity.label} image is required")
        raise ValidationFailed(f"All {len(slots)} images ({', '.join(slots)}) are required")

    def _check_unique(
        self,
        entity: EntityDefinition,
        values: Mapping[str, Any],
        exclude_id: Optional[int] = None,
    ) -> None:
        for field_spec in entity.unique_fields:
            value = values.get(field_spec.name)
            if value is None:
                continue
            sql = f"SELECT id FROM {entity.table} WHERE LOWER({field_spec.name}) = LOWER(:value)"
            params = {"value": str(value)}
            if exclude_id is not None:
                sql += " AND id != :id"
                params["id"] = exclude_id
            if self.store.query(sql, params):
                logger.info(f"{entity.name} duplicate {field_spec.name}={value!r}")
                raise DuplicateKey(
                    f"{field_spec.display} already exists",
                    field=field_spec.name,
                    status_code=entity.duplicate_status,
                )

    @staticmethod
    def _duplicate_from_violation(entity: EntityDefinition, violation: DuplicateKeyViolation) -> DuplicateKey:
        """Map a store-level unique violation (e.g. lost race) onto the entity's unique field."""
        for field_spec in entity.unique_fields:
            if field_spec.name in violation.column:
                return DuplicateKey(
                    f"{field_spec.display} already exists",
                    field=field_spec.name,
                    status_code=entity.duplicate_status,
                )
        return DuplicateKey(
            f"{entity.label} already exists",
            field=violation.column,
            status_code=entity.duplicate_status,
        )
