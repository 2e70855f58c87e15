"""Stock bookkeeping: one running total per subcategory."""
from typing import Any, Dict, List, Optional

from brandstore.core.errors import DuplicateKeyViolation, ValidationFailed
from brandstore.data.relational_store import RelationalStore
from brandstore.utils.logger import get_logger

logger = get_logger("inventory.stock")

_LIST_SQL = """
    SELECT
        sc.id AS subcategory_id,
        sc.name AS subcategory_name,
        sc.category AS category,
        pc.name AS category_name,
        COALESCE(SUM(st.stock), 0) AS stock
    FROM subcategories sc
    LEFT JOIN product_categories pc ON pc.category = sc.category
    LEFT JOIN stock st ON st.subcategory_id = sc.id
"""


def _as_int(value: Any, message: str) -> int:
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationFailed(message)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationFailed(message)


class StockLedger:
    def __init__(self, store: RelationalStore):
        self.store = store

    def list_stock(self, category: Optional[str] = None) -> List[Dict[str, Any]]:
        """Every subcategory with its total stock (0 when none), by category then name."""
        sql = _LIST_SQL
        params = {}
        if category:
            sql += " WHERE sc.category = :category"
            params["category"] = category
        sql += (
            " GROUP BY sc.id, sc.name, sc.category, pc.name"
            " ORDER BY sc.category, sc.name"
        )
        return self.store.query(sql, params)

    def get_stock(self, subcategory_id: Any) -> int:
        subcategory_id = _as_int(subcategory_id, "subcategory_id is required")
        row = self.store.query_one(
            "SELECT COALESCE(SUM(stock), 0) AS total_stock FROM stock WHERE subcategory_id = :id",
            {"id": subcategory_id},
        )
        return int(row["total_stock"]) if row else 0

    def add_stock(self, subcategory_id: Any, quantity: Any) -> int:
        """
        Add ``quantity`` to the subcategory's total, creating the row on first use.
        Returns the new total.
        """
        subcategory_id = _as_int(subcategory_id, "subcategory_id and stock are required")
        quantity = _as_int(quantity, "subcategory_id and stock are required")

        try:
            total = self._apply(subcategory_id, quantity)
        except DuplicateKeyViolation:
            # A concurrent add created the row after our UPDATE missed it
            logger.info(f"Stock row for subcategory_id={subcategory_id} created concurrently, retrying")
            total = self._apply(subcategory_id, quantity)

        logger.info(f"Stock added: subcategory_id={subcategory_id} quantity={quantity} total={total}")
        return total

    def _apply(self, subcategory_id: int, quantity: int) -> int:
        with self.store.transaction() as tx:
            result = tx.execute(
                "UPDATE stock SET stock = stock + :quantity WHERE subcategory_id = :id",
                {"quantity": quantity, "id": subcategory_id},
            )
            if result.affected_rows == 0:
                tx.insert("stock", {"subcategory_id": subcategory_id, "stock": quantity})
            total = tx.query_one(
                "SELECT stock FROM stock WHERE subcategory_id = :id",
                {"id": subcategory_id},
            )["stock"]
        return int(total)

    def list_categories(self) -> List[str]:
        rows = self.store.query("SELECT DISTINCT category FROM subcategories ORDER BY category")
        return [row["category"] for row in rows if row["category"] is not None]
