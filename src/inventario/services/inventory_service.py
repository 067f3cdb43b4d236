from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable

from inventario.domain import validation
from inventario.domain.errors import (
    ConflictError,
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
)
from inventario.domain.models import InventoryNote, NoteResult, NoteState, NoteType
from inventario.repositories.contracts import NoteRepository, ProductRepository

log = logging.getLogger("inventario.notes")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class InventoryService:
    """Applies entrada/salida notes to product stock.

    The stock write is a compare-and-swap on the quantity that was read, so a
    concurrent note for the same product forces a re-read instead of applying
    a decrement against stale stock.
    """

    def __init__(
        self,
        products: ProductRepository,
        notes: NoteRepository,
        max_retries: int = 5,
        clock: Callable[[], str] = _utc_now_iso,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        self.products = products
        self.notes = notes
        self.max_retries = max_retries
        self.clock = clock
        self.id_factory = id_factory

    def create_entrada(self, data: dict) -> NoteResult:
        return self.process_note(data, NoteType.ENTRADA)

    def create_salida(self, data: dict) -> NoteResult:
        return self.process_note(data, NoteType.SALIDA)

    def list_notes(self, codigo: str | None = None) -> list[InventoryNote]:
        codigo = (codigo or "").strip() or None
        return self.notes.list_notes(codigo)

    def process_note(self, data: dict, tipo: NoteType | str) -> NoteResult:
        state = NoteState.RECEIVED
        try:
            tipo = validation.note_type(tipo)
            fecha, codigo, cantidad = validation.validate_note(data)
            state = self._advance(state, NoteState.VALIDATED, tipo)

            previous, new = self._apply_stock(codigo, cantidad, tipo)
            state = self._advance(NoteState.STOCK_CHECKED, NoteState.APPLIED, tipo)

            note = InventoryNote(
                id=self.id_factory(),
                fecha=fecha,
                codigo=codigo,
                cantidad=cantidad,
                tipo=tipo,
                created_at=self.clock(),
            )
            self._persist(note, previous, new)
            self._advance(state, NoteState.PERSISTED, tipo)
        except Exception as e:
            log.debug("note_state from=%s to=%s reason=%s", state.value, NoteState.ERROR.value, e)
            raise

        log.info(
            "note_created id=%s tipo=%s codigo=%s cantidad=%s before=%s after=%s",
            note.id, tipo.value, codigo, cantidad, previous, new,
        )
        return NoteResult(nota=note, previous_quantity=previous, new_quantity=new)

    @staticmethod
    def _advance(current: NoteState, nxt: NoteState, tipo: NoteType) -> NoteState:
        log.debug("note_state tipo=%s from=%s to=%s", tipo.value, current.value, nxt.value)
        return nxt

    def _apply_stock(self, codigo: str, cantidad: int, tipo: NoteType) -> tuple[int, int]:
        for attempt in range(1, self.max_retries + 1):
            product = self.products.get_product(codigo)
            if product is None:
                raise ProductNotFoundError(f"Producto con código {codigo} no encontrado")

            current = int(product.cantidad)
            new = current + cantidad if tipo is NoteType.ENTRADA else current - cantidad
            if new < 0:
                raise InsufficientStockError(f"Stock insuficiente. Stock actual: {current}")
            if new > validation.MAX_QUANTITY:
                raise ValidationError(f"La cantidad resultante supera el máximo permitido ({validation.MAX_QUANTITY}).")
            log.debug("note_state tipo=%s to=%s codigo=%s attempt=%s", tipo.value, NoteState.STOCK_CHECKED.value, codigo, attempt)

            if self.products.set_quantity(codigo, new, expected=current):
                return current, new
            log.info("stock_cas_retry codigo=%s attempt=%s expected=%s", codigo, attempt, current)

        raise ConflictError(
            f"No se pudo actualizar el stock de {codigo}: demasiadas modificaciones concurrentes."
        )

    def _persist(self, note: InventoryNote, previous: int, new: int) -> None:
        try:
            self.notes.add_note(note)
        except Exception:
            # Undo our stock change only if nobody moved it since.
            restored = False
            try:
                restored = self.products.set_quantity(note.codigo, previous, expected=new)
            except Exception:
                log.exception("note_compensation_failed id=%s codigo=%s", note.id, note.codigo)
            log.error(
                "note_persist_failed id=%s codigo=%s stock_restored=%s",
                note.id, note.codigo, restored,
            )
            raise
