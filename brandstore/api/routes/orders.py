"""Order endpoints (/api/orders)."""
from typing import Optional

from fastapi import APIRouter, Depends

from brandstore.api.deps import get_orders, optional_customer, require_customer
from brandstore.api.models import PlaceOrderRequest, StatusUpdateRequest
from brandstore.auth.tokens import Identity
from brandstore.orders.aggregation import OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("")
def place_order(
    request: PlaceOrderRequest,
    identity: Optional[Identity] = Depends(optional_customer),
    orders: OrderService = Depends(get_orders),
):
    """Place an order. Signed-in customers get it linked to their account."""
    header = request.model_dump(exclude={"items"})
    placed = orders.place_order(header, request.items, customer_id=identity.user_id if identity else None)
    return {"success": True, "message": "Order placed successfully", **placed.to_dict()}


@router.get("")
def list_orders(phone: Optional[str] = None, orders: OrderService = Depends(get_orders)):
    return {"success": True, "orders": orders.list_orders(phone=phone)}


@router.get("/mine")
def list_my_orders(
    identity: Identity = Depends(require_customer),
    orders: OrderService = Depends(get_orders),
):
    return {"success": True, "orders": orders.list_orders(customer_id=identity.user_id)}


@router.get("/{order_id}")
def get_order(order_id: int, orders: OrderService = Depends(get_orders)):
    return {"success": True, "order": orders.get_order(order_id)}


@router.put("/{order_id}/status")
def update_order_status(order_id: int, request: StatusUpdateRequest, orders: OrderService = Depends(get_orders)):
    result = orders.update_order_status(order_id, request.status)
    return {"success": True, "message": "Order status updated", **result}


@router.put("/{order_id}/items/{item_id}/status")
def update_item_status(
    order_id: int,
    item_id: int,
    request: StatusUpdateRequest,
    orders: OrderService = Depends(get_orders),
):
    result = orders.update_item_status(order_id, item_id, request.status)
    return {"success": True, "message": "Item status updated", **result}
