import logging
from datetime import date
from pathlib import Path

import pytest

from conftest import PRODUCT_A1
from inventario.domain.errors import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    ProductNotFoundError,
    ValidationError,
)
from inventario.domain.models import NoteType
from inventario.repositories.sqlite_repo import SqliteRepository
from inventario.services.inventory_service import InventoryService
from inventario.services.product_service import ProductService


def _setup(tmp_path: Path, **kwargs):
    repo = SqliteRepository(tmp_path / "notes.db")
    repo.init_db()
    ProductService(repo).create(dict(PRODUCT_A1))
    return repo, InventoryService(repo, repo, **kwargs)


def test_entrada_adds_to_stock(tmp_path: Path):
    repo, inventory = _setup(tmp_path)

    result = inventory.create_entrada({"fecha": "2024-05-01", "codigo": "A1", "cantidad": 5})

    assert result.previous_quantity == 10
    assert result.new_quantity == 15
    assert repo.get_product("A1").cantidad == 15
    assert result.nota.tipo is NoteType.ENTRADA
    assert result.nota.fecha == date(2024, 5, 1)


def test_salida_then_insufficient_stock_leaves_quantity_unchanged(tmp_path: Path):
    repo, inventory = _setup(tmp_path)

    first = inventory.create_salida({"fecha": "2024-05-01", "codigo": "A1", "cantidad": 7})
    assert first.new_quantity == 3

    with pytest.raises(InsufficientStockError, match="Stock actual: 3"):
        inventory.create_salida({"fecha": "2024-05-02", "codigo": "A1", "cantidad": 5})

    assert repo.get_product("A1").cantidad == 3
    assert len(repo.list_notes("A1")) == 1


def test_salida_can_take_stock_to_exactly_zero(tmp_path: Path):
    repo, inventory = _setup(tmp_path)

    inventory.create_salida({"fecha": "2024-05-01", "codigo": "A1", "cantidad": 10})

    assert repo.get_product("A1").cantidad == 0


def test_unknown_product_is_reported_and_nothing_is_written(tmp_path: Path):
    repo, inventory = _setup(tmp_path)

    with pytest.raises(ProductNotFoundError):
        inventory.create_entrada({"fecha": "2024-05-01", "codigo": "ZZ", "cantidad": 1})

    assert issubclass(ProductNotFoundError, NotFoundError)
    assert repo.list_notes() == []


@pytest.mark.parametrize(
    "data",
    [
        {"codigo": "A1", "cantidad": 1},
        {"fecha": "2024-05-01", "cantidad": 1},
        {"fecha": "2024-05-01", "codigo": "A1"},
        {"fecha": "2024-05-01", "codigo": "A1", "cantidad": 0},
        {"fecha": "2024-05-01", "codigo": "A1", "cantidad": -2},
        {"fecha": "2024-05-01", "codigo": "A1", "cantidad": "2"},
        {"fecha": "2024-05-01", "codigo": "A1", "cantidad": 1.5},
        {"fecha": "not-a-date", "codigo": "A1", "cantidad": 1},
        {"fecha": "2024-02-30", "codigo": "A1", "cantidad": 1},
    ],
)
def test_invalid_note_data_is_rejected(tmp_path: Path, data):
    repo, inventory = _setup(tmp_path)

    with pytest.raises(ValidationError):
        inventory.create_salida(data)

    assert repo.get_product("A1").cantidad == 10
    assert repo.list_notes() == []


def test_unknown_note_type_is_rejected(tmp_path: Path):
    _, inventory = _setup(tmp_path)

    with pytest.raises(ValidationError):
        inventory.process_note({"fecha": "2024-05-01", "codigo": "A1", "cantidad": 1}, "ajuste")


def test_note_is_persisted_with_generated_id_and_timestamp(tmp_path: Path):
    repo, inventory = _setup(
        tmp_path,
        clock=lambda: "2024-05-01T12:00:00.000Z",
        id_factory=lambda: "note-1",
    )

    result = inventory.create_entrada({"fecha": "2024-05-01T09:30:00Z", "codigo": "A1", "cantidad": 2})

    assert result.to_dict() == {
        "nota": {
            "id": "note-1",
            "fecha": "2024-05-01",
            "codigo": "A1",
            "cantidad": 2,
            "tipo": "entrada",
            "createdAt": "2024-05-01T12:00:00.000Z",
        },
        "product": {"codigo": "A1", "previousQuantity": 10, "newQuantity": 12},
    }
    assert repo.list_notes() == [result.nota]


def test_default_ids_are_unique(tmp_path: Path):
    _, inventory = _setup(tmp_path)

    ids = {
        inventory.create_entrada({"fecha": "2024-05-01", "codigo": "A1", "cantidad": 1}).nota.id
        for _ in range(5)
    }

    assert len(ids) == 5


def test_list_notes_filters_by_codigo(tmp_path: Path):
    repo, inventory = _setup(tmp_path)
    ProductService(repo).create({**PRODUCT_A1, "codigo": "B2"})
    inventory.create_entrada({"fecha": "2024-05-01", "codigo": "A1", "cantidad": 1})
    inventory.create_entrada({"fecha": "2024-05-01", "codigo": "B2", "cantidad": 1})
    inventory.create_salida({"fecha": "2024-05-02", "codigo": "A1", "cantidad": 1})

    assert [n.tipo for n in inventory.list_notes("A1")] == [NoteType.ENTRADA, NoteType.SALIDA]
    assert len(inventory.list_notes()) == 3


class LosingRaceRepo(SqliteRepository):
    """Someone else always changes the stock between our read and our write."""

    def set_quantity(self, codigo, cantidad, expected=None):
        if expected is not None:
            super().set_quantity(codigo, expected + 1)
            return False
        return super().set_quantity(codigo, cantidad)


def test_retries_exhausted_raise_conflict(tmp_path: Path):
    repo = LosingRaceRepo(tmp_path / "race.db")
    repo.init_db()
    ProductService(repo).create(dict(PRODUCT_A1))
    inventory = InventoryService(repo, repo, max_retries=3)

    with pytest.raises(ConflictError):
        inventory.create_salida({"fecha": "2024-05-01", "codigo": "A1", "cantidad": 1})

    assert repo.get_product("A1").cantidad == 13
    assert repo.list_notes() == []


class FailingNotesRepo(SqliteRepository):
    def add_note(self, note):
        raise RuntimeError("disk full")


def test_stock_is_restored_when_the_note_cannot_be_saved(tmp_path: Path):
    repo = SqliteRepository(tmp_path / "rollback.db")
    repo.init_db()
    ProductService(repo).create(dict(PRODUCT_A1))
    inventory = InventoryService(repo, FailingNotesRepo(tmp_path / "rollback.db"))

    with pytest.raises(RuntimeError, match="disk full"):
        inventory.create_salida({"fecha": "2024-05-01", "codigo": "A1", "cantidad": 4})

    assert repo.get_product("A1").cantidad == 10


def test_entrada_quantity_beyond_storage_range_is_rejected(tmp_path: Path):
    repo, inventory = _setup(tmp_path)

    with pytest.raises(ValidationError):
        inventory.create_entrada({"fecha": "2024-05-01", "codigo": "A1", "cantidad": 2**63})

    assert repo.get_product("A1").cantidad == 10


def test_entrada_that_would_overflow_stock_is_rejected(tmp_path: Path):
    repo, inventory = _setup(tmp_path)
    ProductService(repo).update_quantity("A1", 2**63 - 3)

    with pytest.raises(ValidationError, match="máximo"):
        inventory.create_entrada({"fecha": "2024-05-01", "codigo": "A1", "cantidad": 5})

    assert repo.get_product("A1").cantidad == 2**63 - 3
    assert repo.list_notes() == []


def test_unexpected_failure_is_logged_as_error_state(tmp_path: Path, caplog):
    repo = SqliteRepository(tmp_path / "state.db")
    repo.init_db()
    ProductService(repo).create(dict(PRODUCT_A1))
    inventory = InventoryService(repo, FailingNotesRepo(tmp_path / "state.db"))

    with caplog.at_level(logging.DEBUG, logger="inventario.notes"):
        with pytest.raises(RuntimeError):
            inventory.create_entrada({"fecha": "2024-05-01", "codigo": "A1", "cantidad": 1})

    assert any("to=error" in r.getMessage() and "disk full" in r.getMessage() for r in caplog.records)
