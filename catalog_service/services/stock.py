"""
Stock status derivation shared by products and size variants
"""

from catalog_service.models.product import StockStatus

LOW_STOCK_THRESHOLD = 10


def derive_status(quantity: int) -> StockStatus:
    """Map a stock quantity to its status; the only producer of status values"""
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= LOW_STOCK_THRESHOLD:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK
