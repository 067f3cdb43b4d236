from .contracts import NoteRepository, ProductRepository
from .http_products import HttpProductRepository
from .sqlite_repo import SqliteRepository

__all__ = ["NoteRepository", "ProductRepository", "HttpProductRepository", "SqliteRepository"]
