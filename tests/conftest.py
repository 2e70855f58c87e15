"""Pytest configuration for BrandStore tests."""

import asyncio
import json
from typing import Dict, List, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from brandstore.api.server import create_app
from brandstore.catalog.lifecycle import CatalogLifecycle
from brandstore.core.config import StoreConfig
from brandstore.core.errors import ObjectStoreError
from brandstore.data.database import build_engine, create_tables
from brandstore.data.relational_store import RelationalStore
from brandstore.payments.razorpay import RazorpayGateway
from brandstore.storage.object_store import ObjectStore, StoredObject, UploadedObject

TEST_BUCKET = "brandstore"
TEST_STORAGE_URL = "https://test-project.supabase.co"
TEST_RAZORPAY_SECRET = "razorpay-test-secret"


class RecordingObjectStore(ObjectStore):
    """
    In-memory object store that records every call.

    Keys listed in ``fail_deletes`` raise on delete; ``fail_put_after`` makes
    the n-th and later puts fail.
    """

    def __init__(self, bucket: str = TEST_BUCKET):
        self.bucket = bucket
        self.objects: Dict[str, bytes] = {}
        self.puts: List[str] = []
        self.deleted: List[str] = []
        self.fail_deletes = set()
        self.fail_put_after: Optional[int] = None
        self.closed = False

    def public_url(self, key: str) -> str:
        return f"{TEST_STORAGE_URL}/storage/v1/object/public/{self.bucket}/{key}"

    async def put(self, data: bytes, key: str, content_type: Optional[str] = None) -> StoredObject:
        if self.fail_put_after is not None and len(self.puts) >= self.fail_put_after:
            raise ObjectStoreError(key, "simulated upload failure")
        self.puts.append(key)
        self.objects[key] = data
        return StoredObject(key=key, url=self.public_url(key))

    async def delete(self, key: str) -> None:
        if key in self.fail_deletes:
            raise ObjectStoreError(key, "simulated delete failure")
        self.deleted.append(key)
        self.objects.pop(key, None)

    async def aclose(self) -> None:
        self.closed = True


def run(coro):
    return asyncio.run(coro)


def stored_upload(objects: RecordingObjectStore, slot: str, key: Optional[str] = None) -> UploadedObject:
    """Put a fake image into ``objects`` and describe it as an upload for ``slot``."""
    key = key or f"tests/{slot}-{len(objects.puts)}.jpg"
    stored = run(objects.put(b"\x89PNG fake", key, "image/png"))
    return UploadedObject(field_name=slot, url=stored.url, key=stored.key)


def razorpay_transport(status_code: int = 200, order_id: str = "order_TEST123"):
    """MockTransport answering POST /orders like the Razorpay Orders API."""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if status_code != 200:
            return httpx.Response(status_code, json={"error": {"description": "Bad request"}})
        payload = json.loads(request.content)
        return httpx.Response(200, json={"id": order_id, "entity": "order", **payload})

    transport = httpx.MockTransport(handler)
    transport.requests = requests
    return transport


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def engine():
    """Fresh in-memory SQLite database per test."""
    eng = build_engine("sqlite://")
    create_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def store(engine):
    return RelationalStore(engine)


@pytest.fixture
def objects():
    return RecordingObjectStore()


@pytest.fixture
def lifecycle(store, objects):
    return CatalogLifecycle(store, objects)


@pytest.fixture
def config():
    return StoreConfig(
        database_url="sqlite://",
        jwt_secret="test-jwt-secret",
        razorpay_key_id="rzp_test_key",
        razorpay_key_secret=TEST_RAZORPAY_SECRET,
        cors_origins=["http://testserver"],
        log_level="WARNING",
    )


@pytest.fixture
def gateway_transport():
    return razorpay_transport()


@pytest.fixture
def gateway(gateway_transport):
    client = httpx.AsyncClient(
        base_url="https://api.razorpay.test/v1",
        auth=("rzp_test_key", TEST_RAZORPAY_SECRET),
        transport=gateway_transport,
    )
    return RazorpayGateway("rzp_test_key", TEST_RAZORPAY_SECRET, client=client)


@pytest.fixture
def client(config, store, objects, gateway):
    app = create_app(config, relational_store=store, object_store=objects, payment_gateway=gateway)
    with TestClient(app) as test_client:
        yield test_client
