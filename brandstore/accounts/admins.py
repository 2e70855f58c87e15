"""Back-office user accounts (register / login)."""
from datetime import timedelta
from typing import Any, Dict, Optional

from brandstore.auth.passwords import hash_password, verify_password
from brandstore.auth.tokens import TokenIssuer
from brandstore.catalog.lifecycle import clean_value
from brandstore.core.errors import DuplicateKey, DuplicateKeyViolation, Unauthorized, ValidationFailed
from brandstore.data.relational_store import RelationalStore
from brandstore.utils.logger import get_logger

logger = get_logger("accounts.admins")


class AdminAccounts:
    def __init__(self, store: RelationalStore, tokens: TokenIssuer, token_ttl: timedelta = timedelta(hours=1)):
        self.store = store
        self.tokens = tokens
        self.token_ttl = token_ttl

    def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> int:
        name, email = clean_value(name), clean_value(email)
        if not name or not email or not password:
            raise ValidationFailed("All fields are required")

        existing = self.store.query(
            "SELECT id FROM users WHERE LOWER(email) = LOWER(:email)",
            {"email": email},
        )
        if existing:
            raise DuplicateKey("Email already exists", field="email", status_code=409)

        try:
            result = self.store.insert(
                "users",
                {"name": name, "email": email, "password_hash": hash_password(password)},
            )
        except DuplicateKeyViolation as e:
            raise DuplicateKey("Email already exists", field="email", status_code=409) from e
        logger.info(f"Admin user created: id={result.insert_id}")
        return result.insert_id

    def login(self, email: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        email = clean_value(email)
        if not email or not password:
            raise ValidationFailed("Email and password required")

        user = self.store.query_one(
            "SELECT * FROM users WHERE LOWER(email) = LOWER(:email)",
            {"email": email},
        )
        if user is None:
            raise Unauthorized("User not found")
        if not verify_password(password, user["password_hash"]):
            raise Unauthorized("Invalid credentials")

        token = self.tokens.issue(user["id"], user["email"], self.token_ttl, role="admin")
        return {
            "token": token,
            "user": {"id": user["id"], "email": user["email"], "name": user["name"]},
        }
