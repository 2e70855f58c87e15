"""
Order aggregation.

An order is a header row in ``orders`` plus its lines in ``order_items``.
Reads fetch the headers first, then every line for those headers with one
``IN`` query, and group the lines in memory. Only ``order_status``, each
line's ``item_status`` and the payment fields change after placement.
"""
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from brandstore.catalog.lifecycle import clean_value
from brandstore.core.errors import NotFound, ValidationFailed
from brandstore.data.relational_store import RelationalStore
from brandstore.utils.logger import get_logger

logger = get_logger("orders.aggregation")

ORDER_STATUSES = ("Pending", "Confirmed", "Shipped", "Delivered", "Cancelled")
PAYMENT_PENDING = "PENDING"
PAYMENT_PAID = "PAID"
DEFAULT_PAYMENT_METHOD = "COD"

HEADER_FIELDS = ("full_name", "phone", "address", "city", "pincode")
ITEM_COLUMNS = ("id", "order_id", "product_id", "product_name", "price", "quantity", "image_url", "item_status")


@dataclass
class PlacedOrder:
    order_id: int
    payment_method: str
    payment_status: str
    total_amount: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order_id": self.order_id,
            "payment_method": self.payment_method,
            "payment_status": self.payment_status,
            "total_amount": self.total_amount,
        }


def _first(item: Mapping[str, Any], *names: str) -> Any:
    """First of ``names`` present with a non-None value."""
    for name in names:
        value = item.get(name)
        if value is not None:
            return value
    return None


def _to_decimal(value: Any, label: str) -> Decimal:
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationFailed(f"{label} must be a number")
    if not number.is_finite():
        raise ValidationFailed(f"{label} must be a number")
    return number


def normalize_item(item: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Turn a client cart line into an order_items row.

    Clients send either ``name`` or ``product_name``, ``qty`` or ``quantity``,
    ``image_url`` or ``image_uri``; missing values fall back to
    "Unknown" / 1 / 0 / None.
    """
    name = _first(item, "name", "product_name")
    quantity = _first(item, "qty", "quantity")
    price = item.get("price")
    product_id = _first(item, "id", "product_id")

    if quantity is None:
        quantity = 1
    else:
        try:
            quantity = int(quantity)
        except (TypeError, ValueError):
            raise ValidationFailed("Item quantity must be an integer")

    return {
        "product_id": str(product_id) if product_id is not None else None,
        "product_name": name if name is not None else "Unknown",
        "price": _to_decimal(price, "Item price") if price is not None else Decimal("0"),
        "quantity": quantity,
        "image_url": _first(item, "image_url", "image_uri"),
        "item_status": "Pending",
    }


def group_items_by_order(rows: Iterable[Mapping[str, Any]]) -> Dict[int, List[Dict[str, Any]]]:
    """Group order_items rows by order_id, keeping row order within each group."""
    grouped = defaultdict(list)
    for row in rows:
        line = {column: row.get(column) for column in ITEM_COLUMNS if column != "order_id"}
        if not line.get("item_status"):
            line["item_status"] = "Pending"
        grouped[row["order_id"]].append(line)
    return dict(grouped)


def _require_status(status: Optional[str]) -> str:
    if not status or status not in ORDER_STATUSES:
        raise ValidationFailed("Invalid status")
    return status


class OrderService:
    """Place, read and track orders."""

    def __init__(self, store: RelationalStore):
        self.store = store

    def place_order(
        self,
        header: Mapping[str, Any],
        items: Optional[Sequence[Mapping[str, Any]]],
        customer_id: Optional[int] = None,
    ) -> PlacedOrder:
        """
        Write the header and all of its lines in one transaction.

        Raises:
            ValidationFailed: a header field is missing or there are no items
            StoreUnavailable: the insert failed (nothing is written)
        """
        values = {}
        for name in HEADER_FIELDS:
            value = header.get(name)
            # Phone and pincode may arrive as numbers
            values[name] = clean_value(str(value)) if value is not None else None
        if any(values[name] is None for name in HEADER_FIELDS) or not isinstance(items, (list, tuple)) or not items:
            logger.info("Order rejected: missing required fields")
            raise ValidationFailed("Missing required fields")

        lines = [normalize_item(item) for item in items]
        total = header.get("total_amount")
        if total is None:
            total = sum((line["price"] * line["quantity"] for line in lines), Decimal("0"))
        else:
            total = _to_decimal(total, "Total amount")

        payment_method = clean_value(header.get("payment_method")) or DEFAULT_PAYMENT_METHOD
        payment_status = clean_value(header.get("payment_status")) or PAYMENT_PENDING
        values.update(
            customer_id=customer_id,
            total_amount=total,
            payment_method=payment_method,
            payment_status=payment_status,
            order_status="Pending",
            razorpay_order_id=clean_value(header.get("razorpay_order_id")),
            razorpay_payment_id=clean_value(header.get("razorpay_payment_id")),
        )

        with self.store.transaction() as tx:
            order_id = tx.insert("orders", values).insert_id
            tx.insert_many("order_items", [{**line, "order_id": order_id} for line in lines])

        logger.info(
            f"Order placed: id={order_id} customer_id={customer_id} items={len(lines)} "
            f"payment_method={payment_method}"
        )
        return PlacedOrder(
            order_id=order_id,
            payment_method=payment_method,
            payment_status=payment_status,
            total_amount=total,
        )

    def list_orders(self, phone: Optional[str] = None, customer_id: Optional[int] = None) -> List[Dict[str, Any]]:
        """Newest first; every order carries its ``items`` (possibly empty)."""
        sql = "SELECT * FROM orders"
        conditions = []
        params = {}
        if phone:
            conditions.append("phone = :phone")
            params["phone"] = phone
        if customer_id is not None:
            conditions.append("customer_id = :customer_id")
            params["customer_id"] = customer_id
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        sql += " ORDER BY created_at DESC, id DESC"

        orders = self.store.query(sql, params)
        if not orders:
            return []

        ids = [order["id"] for order in orders]
        rows = self.store.query(
            "SELECT * FROM order_items WHERE order_id IN :ids ORDER BY id",
            {"ids": ids},
            expanding=("ids",),
        )
        grouped = group_items_by_order(rows)
        return [{**order, "items": grouped.get(order["id"], [])} for order in orders]

    def get_order(self, order_id: int) -> Dict[str, Any]:
        order = self.store.query_one("SELECT * FROM orders WHERE id = :id", {"id": order_id})
        if order is None:
            raise NotFound("Order not found")
        rows = self.store.query(
            "SELECT * FROM order_items WHERE order_id = :id ORDER BY id",
            {"id": order_id},
        )
        return {**order, "items": group_items_by_order(rows).get(order_id, [])}

    def update_order_status(self, order_id: int, status: Optional[str]) -> Dict[str, Any]:
        """Set the order-level status. Line statuses are not touched."""
        status = _require_status(status)
        result = self.store.execute(
            "UPDATE orders SET order_status = :status WHERE id = :id",
            {"status": status, "id": order_id},
        )
        if result.affected_rows == 0:
            raise NotFound("Order not found")
        logger.info(f"Order status updated: id={order_id} status={status}")
        return {"order_id": order_id, "status": status}

    def update_item_status(self, order_id: int, item_id: int, status: Optional[str]) -> Dict[str, Any]:
        """Set one line's status; the line must belong to the given order."""
        status = _require_status(status)
        result = self.store.execute(
            "UPDATE order_items SET item_status = :status WHERE id = :item_id AND order_id = :order_id",
            {"status": status, "item_id": item_id, "order_id": order_id},
        )
        if result.affected_rows == 0:
            raise NotFound("Order item not found")
        logger.info(f"Item status updated: order_id={order_id} item_id={item_id} status={status}")
        return {"order_id": order_id, "item_id": item_id, "status": status}

    def mark_paid(self, order_id: Any, payment_id: Optional[str]) -> None:
        """Record a verified gateway payment against an order."""
        payment_id = clean_value(payment_id)
        if order_id is None or order_id == "" or not payment_id:
            raise ValidationFailed("Missing data")
        result = self.store.execute(
            "UPDATE orders SET payment_status = :paid, razorpay_payment_id = :payment_id WHERE id = :id",
            {"paid": PAYMENT_PAID, "payment_id": payment_id, "id": order_id},
        )
        if result.affected_rows == 0:
            raise NotFound("Order not found")
        logger.info(f"Order marked paid: id={order_id} payment_id={payment_id}")
