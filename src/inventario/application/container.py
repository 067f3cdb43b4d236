from __future__ import annotations

import logging
from dataclasses import dataclass

from inventario.api.handlers import InventoryHandlers, ProductHandlers
from inventario.api.router import Router
from inventario.config import AppConfig
from inventario.repositories.contracts import ProductRepository
from inventario.repositories.http_products import HttpProductRepository
from inventario.repositories.sqlite_repo import SqliteRepository
from inventario.services.excel_service import ExcelService
from inventario.services.inventory_service import InventoryService
from inventario.services.product_service import ProductService

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppContainer:
    repo: SqliteRepository
    product_repo: ProductRepository
    products: ProductService
    inventory: InventoryService
    excel: ExcelService
    product_handlers: ProductHandlers
    inventory_handlers: InventoryHandlers
    router: Router


def build_container(config: AppConfig) -> AppContainer:
    repo = SqliteRepository(config.db_path)
    repo.init_db()

    product_repo: ProductRepository = repo
    if config.products_service_url:
        product_repo = HttpProductRepository(config.products_service_url, timeout=config.http_timeout)
    log.info(
        "container_built db=%s products=%s retries=%s",
        config.db_path, config.products_service_url or "local", config.stock_max_retries,
    )

    products = ProductService(product_repo)
    inventory = InventoryService(product_repo, repo, max_retries=config.stock_max_retries)
    excel = ExcelService(products, inventory)
    product_handlers = ProductHandlers(products)
    inventory_handlers = InventoryHandlers(inventory)

    return AppContainer(
        repo=repo,
        product_repo=product_repo,
        products=products,
        inventory=inventory,
        excel=excel,
        product_handlers=product_handlers,
        inventory_handlers=inventory_handlers,
        router=Router(product_handlers, inventory_handlers),
    )
