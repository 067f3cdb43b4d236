from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import requests

from inventario.domain.errors import DuplicateKeyError, NotFoundError, UpstreamError, ValidationError
from inventario.domain.models import Product

log = logging.getLogger("inventario.http")


class HttpProductRepository:
    """Product repository backed by a remote products API.

    Speaks the same routes this package serves under ``/products``, so two
    deployments can be chained: the inventory service points
    ``PRODUCTS_SERVICE_URL`` at the products service.
    """

    def __init__(self, base_url: str, timeout: float = 10.0, session: requests.Session | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _url(self, codigo: str | None = None) -> str:
        if codigo is None:
            return self.base_url
        return f"{self.base_url}/{quote(codigo, safe='')}"

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            log.warning("products_api_unreachable method=%s url=%s error=%s", method, url, e)
            raise UpstreamError("El servicio de productos no está disponible.") from e

    @staticmethod
    def _payload(r: requests.Response):
        try:
            body = r.json()
        except ValueError as e:
            raise UpstreamError(f"Respuesta inválida del servicio de productos (HTTP {r.status_code}).") from e
        # enveloped {"success": ..., "data": ...} or the bare item
        if isinstance(body, dict) and "success" in body:
            if not body.get("success"):
                return body.get("error") or ""
            return body.get("data")
        return body

    def _raise_for_status(self, r: requests.Response) -> None:
        if r.status_code < 400:
            return
        detail = self._payload(r)
        message = detail if isinstance(detail, str) and detail else f"HTTP {r.status_code}"
        if r.status_code == 400:
            raise ValidationError(message)
        if r.status_code == 404:
            raise NotFoundError(message)
        if r.status_code == 409:
            raise DuplicateKeyError(message)
        log.warning("products_api_error status=%s detail=%s", r.status_code, message)
        raise UpstreamError(f"El servicio de productos respondió HTTP {r.status_code}.")

    @staticmethod
    def _to_product(data) -> Product:
        if not isinstance(data, dict):
            raise UpstreamError("Producto con formato inesperado en el servicio de productos.")
        try:
            return Product(
                codigo=str(data["codigo"]),
                nombre=str(data["nombre"]),
                descripcion=str(data.get("descripcion") or ""),
                cantidad=int(data["cantidad"]),
                precio_unitario=float(data["precio_unitario"]),
                categoria=str(data["categoria"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError("Producto con formato inesperado en el servicio de productos.") from e

    def add_product(self, product: Product) -> None:
        r = self._request("POST", self._url(), json=product.to_dict())
        self._raise_for_status(r)

    def get_product(self, codigo: str) -> Optional[Product]:
        r = self._request("GET", self._url(codigo))
        if r.status_code == 404:
            return None
        self._raise_for_status(r)
        return self._to_product(self._payload(r))

    def list_products(self) -> list[Product]:
        r = self._request("GET", self._url())
        self._raise_for_status(r)
        data = self._payload(r)
        if not isinstance(data, list):
            raise UpstreamError("Listado con formato inesperado en el servicio de productos.")
        return [self._to_product(item) for item in data]

    def set_quantity(self, codigo: str, cantidad: int, expected: int | None = None) -> bool:
        body = {"cantidad": int(cantidad)}
        if expected is not None:
            body["cantidad_anterior"] = int(expected)
        r = self._request("PUT", self._url(codigo), json=body)
        # 409 on this route means the compare-and-swap lost
        if r.status_code == 409:
            return False
        self._raise_for_status(r)
        return True
