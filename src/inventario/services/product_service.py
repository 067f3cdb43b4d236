from __future__ import annotations

import logging

from inventario.domain import validation
from inventario.domain.errors import ConflictError, DuplicateKeyError, NotFoundError, ValidationError
from inventario.domain.models import Product
from inventario.repositories.contracts import ProductRepository

log = logging.getLogger("inventario.products")


class ProductService:
    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def create(self, data: dict) -> Product:
        product = validation.validate_product(data)
        if self.repo.get_product(product.codigo) is not None:
            raise DuplicateKeyError(f"Código de producto duplicado: {product.codigo}")
        self.repo.add_product(product)
        log.info("product_created codigo=%s cantidad=%s", product.codigo, product.cantidad)
        return product

    def get(self, codigo: str | None) -> Product:
        codigo = (codigo or "").strip()
        if not codigo:
            raise ValidationError('El parámetro "codigo" es obligatorio.')
        p = self.repo.get_product(codigo)
        if not p:
            raise NotFoundError(f'Producto con código "{codigo}" no encontrado.')
        return p

    def list(self) -> list[Product]:
        return self.repo.list_products()

    def update_quantity(self, codigo: str | None, cantidad: object, expected: object = None) -> Product:
        """Overwrite stock. ``expected`` turns the write into a compare-and-swap."""
        codigo = (codigo or "").strip()
        if not codigo:
            raise ValidationError('El parámetro "codigo" es obligatorio.')
        new_qty = validation.non_negative_int(cantidad)
        expected_qty = None if expected is None else validation.non_negative_int(expected, "cantidad_anterior")

        if not self.repo.set_quantity(codigo, new_qty, expected=expected_qty):
            raise ConflictError(f'La cantidad de "{codigo}" cambió; se esperaba {expected_qty}.')
        log.info("quantity_updated codigo=%s cantidad=%s expected=%s", codigo, new_qty, expected_qty)
        return self.get(codigo)
