"""Tests for order placement, reads and status tracking."""

from decimal import Decimal

import pytest

from brandstore.core.errors import NotFound, ValidationFailed
from brandstore.orders.aggregation import OrderService, group_items_by_order, normalize_item

HEADER = {
    "full_name": "Asha Rao",
    "phone": "9876543210",
    "address": "12 MG Road",
    "city": "Bengaluru",
    "pincode": "560001",
    "total_amount": 1500,
}

ITEMS = [
    {"id": 7, "name": "Oxford Shirt", "price": 1000, "qty": 1, "image_uri": "https://cdn/x.jpg"},
    {"product_name": "Socks", "price": 250, "quantity": 2},
]


@pytest.fixture
def orders(store):
    return OrderService(store)


class TestNormalizeItem:
    def test_fallbacks(self):
        line = normalize_item({})
        assert line["product_name"] == "Unknown"
        assert line["quantity"] == 1
        assert line["price"] == Decimal("0")
        assert line["image_url"] is None
        assert line["product_id"] is None
        assert line["item_status"] == "Pending"

    def test_alternate_field_names(self):
        line = normalize_item({"product_id": 3, "product_name": "Cap", "quantity": "2", "image_url": "u"})
        assert line == {
            "product_id": "3",
            "product_name": "Cap",
            "price": Decimal("0"),
            "quantity": 2,
            "image_url": "u",
            "item_status": "Pending",
        }

    def test_bad_quantity(self):
        with pytest.raises(ValidationFailed):
            normalize_item({"qty": "many"})


class TestGroupItems:
    def test_groups_by_order(self):
        rows = [
            {"id": 1, "order_id": 10, "product_name": "a", "item_status": "Pending"},
            {"id": 2, "order_id": 11, "product_name": "b", "item_status": None},
            {"id": 3, "order_id": 10, "product_name": "c", "item_status": "Shipped"},
        ]
        grouped = group_items_by_order(rows)
        assert [i["id"] for i in grouped[10]] == [1, 3]
        assert grouped[11][0]["item_status"] == "Pending"
        assert "order_id" not in grouped[10][0]


class TestPlaceOrder:
    def test_place_then_get(self, orders):
        placed = orders.place_order(HEADER, ITEMS)

        assert placed.payment_method == "COD"
        assert placed.payment_status == "PENDING"
        assert placed.total_amount == Decimal("1500")

        order = orders.get_order(placed.order_id)
        assert order["full_name"] == "Asha Rao"
        assert order["order_status"] == "Pending"
        assert [i["product_name"] for i in order["items"]] == ["Oxford Shirt", "Socks"]
        assert [i["quantity"] for i in order["items"]] == [1, 2]
        assert order["items"][0]["image_url"] == "https://cdn/x.jpg"
        assert order["items"][0]["product_id"] == "7"
        assert all(i["item_status"] == "Pending" for i in order["items"])

    def test_total_defaults_to_line_sum(self, orders):
        header = {k: v for k, v in HEADER.items() if k != "total_amount"}
        placed = orders.place_order(header, ITEMS)
        assert placed.total_amount == Decimal("1500")

    def test_online_payment(self, orders):
        placed = orders.place_order(
            {**HEADER, "payment_method": "ONLINE", "razorpay_order_id": "order_abc"},
            ITEMS,
        )
        order = orders.get_order(placed.order_id)
        assert order["payment_method"] == "ONLINE"
        assert order["razorpay_order_id"] == "order_abc"

    def test_customer_link(self, orders, store):
        placed = orders.place_order(HEADER, ITEMS, customer_id=5)
        assert orders.get_order(placed.order_id)["customer_id"] == 5

    @pytest.mark.parametrize("field", ["full_name", "phone", "address", "city", "pincode"])
    def test_missing_header_field(self, orders, store, field):
        with pytest.raises(ValidationFailed) as exc:
            orders.place_order({**HEADER, field: ""}, ITEMS)
        assert exc.value.message == "Missing required fields"
        assert store.query("SELECT * FROM orders") == []

    @pytest.mark.parametrize("items", [None, [], "not-a-list"])
    def test_items_required(self, orders, items):
        with pytest.raises(ValidationFailed):
            orders.place_order(HEADER, items)

    def test_line_failure_writes_nothing(self, orders, store, monkeypatch):
        from brandstore.core.errors import StoreUnavailable
        from brandstore.data.relational_store import RelationalStore

        def broken_insert_many(self, table, rows):
            raise StoreUnavailable("Database error")

        monkeypatch.setattr(RelationalStore, "insert_many", broken_insert_many)
        with pytest.raises(StoreUnavailable):
            orders.place_order(HEADER, ITEMS)
        assert store.query("SELECT * FROM orders") == []


class TestListOrders:
    def test_empty(self, orders):
        assert orders.list_orders() == []

    def test_newest_first_with_items(self, orders):
        first = orders.place_order(HEADER, ITEMS).order_id
        second = orders.place_order({**HEADER, "phone": "1112223333"}, ITEMS[:1]).order_id

        listed = orders.list_orders()
        assert [o["id"] for o in listed] == [second, first]
        assert len(listed[0]["items"]) == 1
        assert len(listed[1]["items"]) == 2

    def test_phone_filter(self, orders):
        orders.place_order(HEADER, ITEMS)
        other = orders.place_order({**HEADER, "phone": "1112223333"}, ITEMS).order_id
        assert [o["id"] for o in orders.list_orders(phone="1112223333")] == [other]

    def test_customer_filter(self, orders):
        orders.place_order(HEADER, ITEMS)
        mine = orders.place_order(HEADER, ITEMS, customer_id=9).order_id
        assert [o["id"] for o in orders.list_orders(customer_id=9)] == [mine]

    def test_order_without_lines_has_empty_items(self, orders, store):
        store.insert("orders", {**HEADER, "payment_method": "COD", "payment_status": "PENDING"})
        assert orders.list_orders()[0]["items"] == []

    def test_listing_is_repeatable(self, orders):
        orders.place_order(HEADER, ITEMS)
        assert orders.list_orders() == orders.list_orders()


class TestStatusUpdates:
    def test_order_status(self, orders):
        placed = orders.place_order(HEADER, ITEMS)
        orders.update_order_status(placed.order_id, "Shipped")
        order = orders.get_order(placed.order_id)
        assert order["order_status"] == "Shipped"
        # No cascade to lines
        assert all(i["item_status"] == "Pending" for i in order["items"])

    def test_invalid_status(self, orders):
        placed = orders.place_order(HEADER, ITEMS)
        with pytest.raises(ValidationFailed):
            orders.update_order_status(placed.order_id, "Lost")

    def test_unknown_order(self, orders):
        with pytest.raises(NotFound):
            orders.update_order_status(404, "Confirmed")

    def test_item_status(self, orders):
        placed = orders.place_order(HEADER, ITEMS)
        item_id = orders.get_order(placed.order_id)["items"][1]["id"]

        orders.update_item_status(placed.order_id, item_id, "Delivered")

        order = orders.get_order(placed.order_id)
        assert [i["item_status"] for i in order["items"]] == ["Pending", "Delivered"]
        assert order["order_status"] == "Pending"

    def test_item_of_another_order(self, orders):
        first = orders.place_order(HEADER, ITEMS)
        second = orders.place_order(HEADER, ITEMS)
        item_id = orders.get_order(first.order_id)["items"][0]["id"]
        with pytest.raises(NotFound):
            orders.update_item_status(second.order_id, item_id, "Cancelled")


class TestMarkPaid:
    def test_mark_paid(self, orders):
        placed = orders.place_order(HEADER, ITEMS)
        orders.mark_paid(placed.order_id, "pay_123")
        order = orders.get_order(placed.order_id)
        assert order["payment_status"] == "PAID"
        assert order["razorpay_payment_id"] == "pay_123"

    def test_unknown_order(self, orders):
        with pytest.raises(NotFound):
            orders.mark_paid(99, "pay_123")

    def test_missing_payment_id(self, orders):
        with pytest.raises(ValidationFailed):
            orders.mark_paid(1, None)

    def test_get_unknown_order(self, orders):
        with pytest.raises(NotFound):
            orders.get_order(1)
