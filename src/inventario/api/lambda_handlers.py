"""Lambda entry points.

The container is built on first use and reused for the lifetime of the
process, so each warm invocation shares one set of repositories.
"""
from __future__ import annotations

import functools

from inventario.application.container import AppContainer, build_container
from inventario.config import load_config
from inventario.logging_config import setup_logging


@functools.lru_cache(maxsize=1)
def get_container() -> AppContainer:
    config = load_config()
    setup_logging(config.logs_dir)
    return build_container(config)


def handler(event, context=None):
    return get_container().router.dispatch(event, context)


def create_product(event, context=None):
    return get_container().product_handlers.create(event, context)


def get_product(event, context=None):
    return get_container().product_handlers.get(event, context)


def list_products(event, context=None):
    return get_container().product_handlers.list(event, context)


def update_quantity(event, context=None):
    return get_container().product_handlers.update_quantity(event, context)


def create_nota_entrada(event, context=None):
    return get_container().inventory_handlers.create_entrada(event, context)


def create_nota_salida(event, context=None):
    return get_container().inventory_handlers.create_salida(event, context)


def list_notes(event, context=None):
    return get_container().inventory_handlers.list_notes(event, context)
