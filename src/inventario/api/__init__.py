from .handlers import InventoryHandlers, ProductHandlers
from .router import Router

__all__ = ["InventoryHandlers", "ProductHandlers", "Router"]
