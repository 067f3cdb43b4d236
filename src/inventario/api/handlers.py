from __future__ import annotations

import functools
import logging

from inventario.api.responses import parse_body, response_for_error, success_response
from inventario.services.inventory_service import InventoryService
from inventario.services.product_service import ProductService

log = logging.getLogger("inventario.api")


def api_handler(action: str):
    """Wrap a handler method: log the request and turn any exception into a response."""

    def deco(fn):
        @functools.wraps(fn)
        def wrapper(self, event: dict | None, context=None) -> dict:
            event = event or {}
            log.info(
                "request action=%s method=%s path=%s",
                action, event.get("httpMethod"), event.get("path"),
            )
            try:
                return fn(self, event)
            except Exception as exc:
                return response_for_error(exc, action)

        return wrapper

    return deco


def _path_param(event: dict, name: str) -> str | None:
    return (event.get("pathParameters") or {}).get(name)


def _query_param(event: dict, name: str) -> str | None:
    return (event.get("queryStringParameters") or {}).get(name)


class ProductHandlers:
    def __init__(self, service: ProductService):
        self.service = service

    @api_handler("create_product")
    def create(self, event: dict) -> dict:
        product = self.service.create(parse_body(event))
        return success_response(product.to_dict(), "Producto creado exitosamente", 201)

    @api_handler("get_product")
    def get(self, event: dict) -> dict:
        product = self.service.get(_path_param(event, "codigo"))
        return success_response(product.to_dict())

    @api_handler("list_products")
    def list(self, event: dict) -> dict:
        return success_response([p.to_dict() for p in self.service.list()])

    @api_handler("update_quantity")
    def update_quantity(self, event: dict) -> dict:
        body = parse_body(event)
        product = self.service.update_quantity(
            _path_param(event, "codigo"),
            body.get("cantidad"),
            expected=body.get("cantidad_anterior"),
        )
        return success_response(product.to_dict(), "Cantidad actualizada exitosamente")


class InventoryHandlers:
    def __init__(self, service: InventoryService):
        self.service = service

    @api_handler("create_nota_entrada")
    def create_entrada(self, event: dict) -> dict:
        result = self.service.create_entrada(parse_body(event))
        return success_response(result.to_dict(), "Nota de entrada creada exitosamente", 201)

    @api_handler("create_nota_salida")
    def create_salida(self, event: dict) -> dict:
        result = self.service.create_salida(parse_body(event))
        return success_response(result.to_dict(), "Nota de salida creada exitosamente", 201)

    @api_handler("list_notes")
    def list_notes(self, event: dict) -> dict:
        notes = self.service.list_notes(_query_param(event, "codigo"))
        return success_response([n.to_dict() for n in notes])
