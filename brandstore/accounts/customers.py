"""
Customer accounts: registration, login and profile management.

A customer row is a catalog entity with an optional profile picture, so
registration and profile updates go through CatalogLifecycle and get the
same compensating-delete and image-replacement behaviour as catalog items.
"""
from datetime import timedelta
from typing import Any, Dict, Mapping, Optional, Sequence

from brandstore.auth.passwords import hash_password, verify_password
from brandstore.auth.tokens import TokenIssuer
from brandstore.catalog.entities import CUSTOMER
from brandstore.catalog.lifecycle import CatalogLifecycle, WriteResult, clean_value
from brandstore.core.errors import NotFound, Unauthorized, ValidationFailed
from brandstore.storage.object_store import UploadedObject
from brandstore.utils.logger import get_logger

logger = get_logger("accounts.customers")

PROFILE_COLUMNS = "id, full_name, email, phone, profile_url, created_at"
PROFILE_FIELDS = ("full_name", "email", "phone")


class CustomerAccounts:
    def __init__(self, lifecycle: CatalogLifecycle, tokens: TokenIssuer, token_ttl: timedelta = timedelta(days=7)):
        self.lifecycle = lifecycle
        self.store = lifecycle.store
        self.tokens = tokens
        self.token_ttl = token_ttl

    async def register(self, fields: Mapping[str, Any], uploads: Sequence[UploadedObject] = ()) -> WriteResult:
        """
        Create a customer. The password is hashed here; a missing password
        surfaces as a validation failure from the lifecycle (which also
        removes an uploaded profile picture).
        """
        values = {name: fields.get(name) for name in PROFILE_FIELDS}
        password = clean_value(fields.get("password"))
        values["password_hash"] = hash_password(password) if password else None
        result = await self.lifecycle.create(CUSTOMER, values, uploads)
        logger.info(f"Customer registered: id={result.id}")
        return result

    def login(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        email = clean_value(email)
        if not email or not password:
            raise ValidationFailed("Email and password required")

        row = self.store.query_one(
            "SELECT * FROM customers WHERE LOWER(email) = LOWER(:email)",
            {"email": email},
        )
        if row is None or not verify_password(password, row["password_hash"]):
            logger.info(f"Customer login rejected for {email}")
            raise Unauthorized("Invalid credentials")

        token = self.tokens.issue(row["id"], row["email"], self.token_ttl, role="customer")
        return {
            "token": token,
            "user": {
                "id": row["id"],
                "full_name": row["full_name"],
                "email": row["email"],
                "phone": row["phone"],
                "profile_url": row["profile_url"],
            },
        }

    def get_profile(self, customer_id: int) -> Dict[str, Any]:
        row = self.store.query_one(
            f"SELECT {PROFILE_COLUMNS} FROM customers WHERE id = :id",
            {"id": customer_id},
        )
        if row is None:
            raise NotFound("User not found")
        return row

    async def update_profile(
        self,
        customer_id: int,
        fields: Mapping[str, Any],
        uploads: Sequence[UploadedObject] = (),
    ) -> WriteResult:
        """Update name / email / phone and optionally replace the profile picture."""
        values = {name: fields.get(name) for name in PROFILE_FIELDS}
        return await self.lifecycle.update(CUSTOMER, customer_id, values, uploads)
