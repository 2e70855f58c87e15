"""Tests for per-subcategory stock totals."""

import pytest

from brandstore.core.errors import DuplicateKeyViolation, ValidationFailed
from brandstore.inventory.stock import StockLedger


@pytest.fixture
def ledger(store):
    return StockLedger(store)


@pytest.fixture
def catalog(store):
    """Two categories, three subcategories."""
    store.insert("product_categories", {"name": "Men", "category": "Shirts", "image_url": "u"})
    store.insert("product_categories", {"name": "Kids", "category": "Shoes", "image_url": "u"})
    ids = {}
    for category, name, sku in (("Shirts", "Oxford", "S1"), ("Shirts", "Linen", "S2"), ("Shoes", "Runner", "R1")):
        ids[name] = store.insert("subcategories", {
            "category": category, "name": name, "price": 100, "sku": sku,
            "image_1": "a", "image_2": "b", "image_3": "c", "image_4": "d",
        }).insert_id
    return ids


class TestAddStock:
    def test_first_add_creates_row(self, ledger, catalog):
        assert ledger.add_stock(catalog["Oxford"], 5) == 5
        assert ledger.get_stock(catalog["Oxford"]) == 5

    def test_adds_accumulate(self, ledger, catalog):
        ledger.add_stock(catalog["Oxford"], 5)
        assert ledger.add_stock(catalog["Oxford"], "3") == 8

    def test_concurrent_first_add_is_retried(self, ledger, catalog, store, monkeypatch):
        apply = ledger._apply
        raced = []

        def racing_apply(subcategory_id, quantity):
            if not raced:
                # Another request inserts the row between our UPDATE and INSERT
                raced.append(subcategory_id)
                store.insert("stock", {"subcategory_id": subcategory_id, "stock": 2})
                raise DuplicateKeyViolation("subcategory_id", "duplicate key")
            return apply(subcategory_id, quantity)

        monkeypatch.setattr(ledger, "_apply", racing_apply)

        assert ledger.add_stock(catalog["Oxford"], 5) == 7
        assert ledger.get_stock(catalog["Oxford"]) == 7

    @pytest.mark.parametrize("subcategory_id, quantity", [(None, 1), ("", 1), (1, None), (1, "lots")])
    def test_invalid_input(self, ledger, subcategory_id, quantity):
        with pytest.raises(ValidationFailed):
            ledger.add_stock(subcategory_id, quantity)


class TestReads:
    def test_unknown_subcategory_has_zero(self, ledger):
        assert ledger.get_stock(123) == 0

    def test_list_includes_zero_stock(self, ledger, catalog):
        ledger.add_stock(catalog["Runner"], 4)
        rows = ledger.list_stock()

        assert [r["subcategory_name"] for r in rows] == ["Linen", "Oxford", "Runner"]
        totals = {r["subcategory_name"]: r["stock"] for r in rows}
        assert totals == {"Linen": 0, "Oxford": 0, "Runner": 4}
        assert rows[0]["category_name"] == "Men"

    def test_list_by_category(self, ledger, catalog):
        rows = ledger.list_stock("Shoes")
        assert [r["subcategory_id"] for r in rows] == [catalog["Runner"]]

    def test_categories(self, ledger, catalog):
        assert ledger.list_categories() == ["Shirts", "Shoes"]
