"""Stock classification for product variants."""
from __future__ import annotations

from enum import Enum

from catalog import Product, Selection


class StockLevel(str, Enum):
    OUT = "out"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


LOW_STOCK_MAX = 5
MEDIUM_STOCK_MAX = 20


def stock_level(stock: int) -> StockLevel:
    if stock <= 0:
        return StockLevel.OUT
    if stock <= LOW_STOCK_MAX:
        return StockLevel.LOW
    if stock <= MEDIUM_STOCK_MAX:
        return StockLevel.MEDIUM
    return StockLevel.HIGH


def stock_message(stock: int) -> str:
    level = stock_level(stock)
    if level is StockLevel.OUT:
        return "Out of stock"
    if level is StockLevel.LOW:
        return f"Only {stock} left in stock!"
    if level is StockLevel.MEDIUM:
        return f"{stock} available"
    return "In stock"


def selection_stock(product: Product, selection: Selection) -> int:
    """Units available for a configuration: the scarcest selected variant.

    An id that does not resolve on its axis counts as zero stock.
    """
    resolved = product.selected_variants(selection).values()
    return min(variant.stock if variant else 0 for variant in resolved)
