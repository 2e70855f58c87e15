"""
Bearer token issuance and verification (JWT, HS256).

Tokens carry the account id and email. Customer and admin tokens share the
format; the ``role`` claim tells them apart.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from brandstore.core.errors import Unauthorized
from brandstore.utils.logger import get_logger

logger = get_logger("auth.tokens")


@dataclass(frozen=True)
class Identity:
    """Who a verified token belongs to."""
    user_id: int
    email: Optional[str] = None
    role: str = "customer"


class TokenIssuer:
    def __init__(self, secret: str, algorithm: str = "HS256"):
        self.secret = secret
        self.algorithm = algorithm

    def issue(self, user_id: int, email: Optional[str], ttl: timedelta, role: str = "customer") -> str:
        payload = {
            "id": user_id,
            "email": email,
            "role": role,
            "exp": datetime.now(timezone.utc) + ttl,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: Optional[str]) -> Identity:
        """
        Resolve a bearer credential to an identity.

        Raises:
            Unauthorized: missing, expired, malformed or wrongly signed token
        """
        if not token:
            raise Unauthorized("Missing token")
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise Unauthorized("Token expired")
        except jwt.InvalidTokenError:
            raise Unauthorized("Invalid token")

        user_id = payload.get("id")
        if user_id is None:
            raise Unauthorized("Invalid token payload")
        try:
            user_id = int(user_id)
        except (TypeError, ValueError):
            raise Unauthorized("Invalid token payload")
        return Identity(user_id=user_id, email=payload.get("email"), role=payload.get("role", "customer"))
