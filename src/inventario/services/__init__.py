from .product_service import ProductService
from .inventory_service import InventoryService
from .excel_service import ExcelService

__all__ = [
    "ProductService",
    "InventoryService",
    "ExcelService",
]
