"""
Upload interception.

Multipart requests are read before the route handler runs: every file in a
declared field is written to the object store and handed to the handler as
an UploadedObject, alongside the plain text fields. If any store call fails
part-way through, the files already stored for the request are removed and
the request ends with StoreUnavailable.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence

from fastapi import Request
from pydantic import TypeAdapter, ValidationError
from starlette.datastructures import UploadFile

from brandstore.core.errors import ObjectStoreError, StoreUnavailable, ValidationFailed
from brandstore.storage.cleanup import discard_uploads
from brandstore.storage.object_store import ObjectStore, UploadedObject, make_object_key
from brandstore.utils.logger import get_logger

logger = get_logger("api.uploads")

FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")

# Same coercion FastAPI applies to ``int`` path parameters
_INT_ADAPTER = TypeAdapter(int)


@dataclass
class FormSubmission:
    """Text fields of the request plus the objects stored for its files."""
    fields: Dict[str, Any] = field(default_factory=dict)
    uploads: List[UploadedObject] = field(default_factory=list)

    def upload_for(self, field_name: str):
        for upload in self.uploads:
            if upload.field_name == field_name:
                return upload
        return None


async def store_form(request: Request, objects: ObjectStore, folder: str, file_fields: Sequence[str]) -> FormSubmission:
    """Read the request body and store its declared file fields."""
    submission = FormSubmission()
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("application/json"):
        try:
            body = await request.json()
        except ValueError:
            raise ValidationFailed("Malformed JSON body")
        if not isinstance(body, dict):
            raise ValidationFailed("Request body must be an object")
        submission.fields.update(body)
        return submission

    if not content_type.startswith(FORM_CONTENT_TYPES):
        return submission

    form = await request.form()
    try:
        for name, value in form.multi_items():
            if not isinstance(value, UploadFile):
                submission.fields[name] = value
                continue
            if name not in file_fields:
                logger.info(f"Ignoring unexpected file field {name!r}")
                continue
            if not value.filename:
                # Browsers send an empty part when no file was chosen
                continue
            data = await value.read()
            key = make_object_key(folder, value.filename)
            stored = await objects.put(data, key, value.content_type)
            submission.uploads.append(UploadedObject(field_name=name, url=stored.url, key=stored.key))
    except ObjectStoreError as e:
        await discard_uploads(objects, submission.uploads, reason="upload batch failed")
        raise StoreUnavailable("Image upload failed") from e
    finally:
        await form.close()

    if submission.uploads:
        logger.info(f"Stored {len(submission.uploads)} upload(s) under {folder}")
    return submission


def _check_int_path_param(request: Request, name: str) -> None:
    try:
        _INT_ADAPTER.validate_python(request.path_params.get(name))
    except ValidationError:
        raise ValidationFailed(f"{name} must be an integer")


def intercept_uploads(folder: str, file_fields: Sequence[str], int_path_params: Sequence[str] = ()) -> Callable:
    """
    Build a dependency that stores ``file_fields`` under ``folder``.

    Path parameters are validated by FastAPI only after dependencies run, so
    any listed in ``int_path_params`` are checked here before anything is
    stored; a request with a malformed id never leaves objects behind.
    """
    file_fields = tuple(file_fields)
    int_path_params = tuple(int_path_params)

    async def dependency(request: Request) -> FormSubmission:
        for name in int_path_params:
            _check_int_path_param(request, name)
        objects = request.app.state.object_store
        return await store_form(request, objects, folder, file_fields)

    return dependency
