from .models import Product, InventoryNote, NoteResult, NoteType, NoteState
from .errors import (
    AppError,
    ValidationError,
    NotFoundError,
    ProductNotFoundError,
    DuplicateKeyError,
    InsufficientStockError,
    ConflictError,
    UpstreamError,
)

__all__ = [
    "Product",
    "InventoryNote",
    "NoteResult",
    "NoteType",
    "NoteState",
    "AppError",
    "ValidationError",
    "NotFoundError",
    "ProductNotFoundError",
    "DuplicateKeyError",
    "InsufficientStockError",
    "ConflictError",
    "UpstreamError",
]
