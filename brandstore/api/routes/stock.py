"""Stock endpoints (/api/stock)."""
from typing import Optional

from fastapi import APIRouter, Depends

from brandstore.api.deps import get_stock
from brandstore.api.models import StockUpdateRequest
from brandstore.inventory.stock import StockLedger

router = APIRouter(prefix="/api/stock", tags=["stock"])


@router.get("")
def list_stock(category: Optional[str] = None, stock: StockLedger = Depends(get_stock)):
    return {"success": True, "data": stock.list_stock(category)}


@router.get("/categories")
def list_stock_categories(stock: StockLedger = Depends(get_stock)):
    return {"success": True, "data": stock.list_categories()}


@router.get("/{subcategory_id}")
def get_stock_total(subcategory_id: int, stock: StockLedger = Depends(get_stock)):
    return {
        "success": True,
        "subcategory_id": subcategory_id,
        "total_stock": stock.get_stock(subcategory_id),
    }


@router.post("")
def add_stock(request: StockUpdateRequest, stock: StockLedger = Depends(get_stock)):
    total = stock.add_stock(request.subcategory_id, request.stock)
    return {
        "success": True,
        "message": "Stock added successfully!",
        "subcategory_id": request.subcategory_id,
        "total_stock": total,
    }
