from __future__ import annotations

import logging
import re
from typing import Callable
from urllib.parse import unquote

from inventario.api.handlers import InventoryHandlers, ProductHandlers
from inventario.api.responses import build_response, error_response

log = logging.getLogger("inventario.api")

Handler = Callable[[dict, object], dict]


class Router:
    """Dispatches an API Gateway proxy event to the matching handler.

    Accepts both the REST (``httpMethod``/``path``) and the HTTP API v2
    (``requestContext.http.method``/``rawPath``) event shapes.
    """

    def __init__(self, products: ProductHandlers, inventory: InventoryHandlers):
        self.routes: list[tuple[re.Pattern, dict[str, Handler]]] = [
            (re.compile(r"^/products$"), {"GET": products.list, "POST": products.create}),
            (
                re.compile(r"^/products/(?P<codigo>[^/]+)$"),
                {"GET": products.get, "PUT": products.update_quantity, "PATCH": products.update_quantity},
            ),
            (re.compile(r"^/inventory$"), {"GET": inventory.list_notes}),
            (re.compile(r"^/inventory/entrada$"), {"POST": inventory.create_entrada}),
            (re.compile(r"^/inventory/salida$"), {"POST": inventory.create_salida}),
        ]

    @staticmethod
    def _method(event: dict) -> str:
        method = event.get("httpMethod") or ((event.get("requestContext") or {}).get("http") or {}).get("method")
        return str(method or "GET").upper()

    @staticmethod
    def _path(event: dict) -> str:
        path = event.get("path") or event.get("rawPath") or "/"
        path = path.split("?", 1)[0]
        return path.rstrip("/") or "/"

    def dispatch(self, event: dict, context=None) -> dict:
        method = self._method(event)
        path = self._path(event)

        for pattern, methods in self.routes:
            m = pattern.match(path)
            if not m:
                continue
            if method == "OPTIONS":
                return build_response(204, None)
            handler = methods.get(method)
            if handler is None:
                return error_response(f"Método {method} no permitido en {path}.", 405)
            params = {k: unquote(v) for k, v in m.groupdict().items()}
            if params:
                event = {**event, "pathParameters": {**params, **(event.get("pathParameters") or {})}}
            return handler(event, context)

        log.info("route_not_found method=%s path=%s", method, path)
        return error_response(f"Ruta no encontrada: {path}", 404)
