from __future__ import annotations

from typing import Optional, Protocol

from inventario.domain.models import InventoryNote, Product


class ProductRepository(Protocol):
    def add_product(self, product: Product) -> None: ...
    def get_product(self, codigo: str) -> Optional[Product]: ...
    def list_products(self) -> list[Product]: ...
    def set_quantity(self, codigo: str, cantidad: int, expected: int | None = None) -> bool: ...


class NoteRepository(Protocol):
    def add_note(self, note: InventoryNote) -> None: ...
    def list_notes(self, codigo: str | None = None) -> list[InventoryNote]: ...
