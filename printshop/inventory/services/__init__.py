from .stock_service import StockService

__all__ = ["StockService"]
