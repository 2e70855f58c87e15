"""
Razorpay payment bridge.

Creates gateway orders ("payment intents") through the Razorpay Orders REST
API and checks the signature Razorpay attaches to the checkout callback.
"""
import hashlib
import hmac
import time
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

import httpx

from brandstore.core.errors import PaymentGatewayError, ValidationFailed
from brandstore.utils.logger import get_logger

logger = get_logger("payments.razorpay")


@dataclass(frozen=True)
class PaymentIntent:
    order_id: str
    amount: int  # minor units (paise)
    currency: str
    receipt: str


def to_minor_units(amount: Any) -> int:
    """Convert a rupee amount to paise, rounding half up."""
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        raise ValidationFailed("Amount must be a number")
    if not value.is_finite() or value <= 0:
        raise ValidationFailed("Amount required")
    return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def callback_signature(order_id: str, payment_id: str, secret: str) -> str:
    body = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


class RazorpayGateway:
    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        currency: str = "INR",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not key_id or not key_secret:
            logger.warning("RAZORPAY_KEY_ID or RAZORPAY_KEY_SECRET not set - payments will fail.")
        self.key_secret = key_secret or ""
        self.currency = currency
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            auth=(key_id or "", self.key_secret),
            timeout=timeout,
        )

    async def create_intent(self, amount: Any, currency: Optional[str] = None) -> PaymentIntent:
        """
        Create a Razorpay order for ``amount`` (major units).

        Raises:
            ValidationFailed: amount missing, non-numeric or not positive
            PaymentGatewayError: the gateway call failed or returned no order id
        """
        if amount is None or amount == "":
            raise ValidationFailed("Amount required")
        payload = {
            "amount": to_minor_units(amount),
            "currency": currency or self.currency,
            "receipt": f"rcpt_{int(time.time() * 1000)}",
        }
        try:
            resp = await self._client.post("/orders", json=payload)
            resp.raise_for_status()
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"razorpay: method=create_order amount={payload['amount']} result=error error={e}")
            raise PaymentGatewayError("Order creation failed") from e

        order_id = data.get("id") if isinstance(data, dict) else None
        if not order_id:
            logger.error("razorpay: method=create_order result=error error=missing order id")
            raise PaymentGatewayError("Order creation failed")
        logger.info(f"razorpay: method=create_order order_id={order_id} amount={payload['amount']} result=success")
        return PaymentIntent(
            order_id=order_id,
            amount=payload["amount"],
            currency=payload["currency"],
            receipt=payload["receipt"],
        )

    def verify_callback(self, order_id: Optional[str], payment_id: Optional[str], signature: Optional[str]) -> bool:
        """True when ``signature`` is the HMAC-SHA256 of ``order_id|payment_id``."""
        if not order_id or not payment_id or not signature:
            return False
        expected = callback_signature(order_id, payment_id, self.key_secret)
        valid = hmac.compare_digest(expected.encode(), signature.encode("utf-8"))
        if not valid:
            logger.warning(f"razorpay: invalid signature for order_id={order_id}")
        return valid

    async def aclose(self) -> None:
        await self._client.aclose()
