"""Razorpay checkout endpoints (/api/payments)."""
from fastapi import APIRouter, Depends

from brandstore.api.deps import get_orders, get_payments
from brandstore.api.models import CreatePaymentRequest, UpdatePaymentRequest, VerifyPaymentRequest
from brandstore.core.errors import ValidationFailed
from brandstore.orders.aggregation import OrderService
from brandstore.payments.razorpay import RazorpayGateway

router = APIRouter(prefix="/api/payments", tags=["payments"])


@router.post("/create-order")
async def create_payment_order(request: CreatePaymentRequest, gateway: RazorpayGateway = Depends(get_payments)):
    intent = await gateway.create_intent(request.amount, request.currency)
    return {
        "success": True,
        "order_id": intent.order_id,
        "amount": intent.amount,
        "currency": intent.currency,
    }


@router.post("/verify")
def verify_payment(request: VerifyPaymentRequest, gateway: RazorpayGateway = Depends(get_payments)):
    if not gateway.verify_callback(
        request.razorpay_order_id,
        request.razorpay_payment_id,
        request.razorpay_signature,
    ):
        raise ValidationFailed("Invalid signature")
    return {"success": True}


@router.post("/update-payment")
def update_payment(request: UpdatePaymentRequest, orders: OrderService = Depends(get_orders)):
    orders.mark_paid(request.order_id, request.payment_id)
    return {"success": True}
