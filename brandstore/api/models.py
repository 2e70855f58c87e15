"""
Request bodies for the JSON endpoints.

Every field is optional at this layer: presence and format are checked by
the services so missing input is reported with the service's own message.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AdminRegisterRequest(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class PlaceOrderRequest(BaseModel):
    """Checkout payload. Items are free-form cart lines (see normalize_item)."""
    full_name: Optional[str] = None
    phone: Optional[Union[str, int]] = None
    address: Optional[str] = None
    city: Optional[str] = None
    pincode: Optional[Union[str, int]] = None
    items: Optional[List[Dict[str, Any]]] = None
    total_amount: Optional[Decimal] = None
    payment_method: Optional[str] = None
    payment_status: Optional[str] = None
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    status: Optional[str] = None


class CreatePaymentRequest(BaseModel):
    amount: Optional[Decimal] = Field(None, description="Amount in rupees")
    currency: Optional[str] = None


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None


class UpdatePaymentRequest(BaseModel):
    order_id: Optional[int] = None
    payment_id: Optional[str] = None


class StockUpdateRequest(BaseModel):
    subcategory_id: Optional[int] = None
    stock: Optional[int] = Field(None, description="Quantity to add")
