from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import date
from enum import Enum


class NoteType(str, Enum):
    ENTRADA = "entrada"
    SALIDA = "salida"


class NoteState(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    STOCK_CHECKED = "stock_checked"
    APPLIED = "applied"
    PERSISTED = "persisted"
    ERROR = "error"


@dataclass(frozen=True)
class Product:
    codigo: str
    nombre: str
    cantidad: int
    precio_unitario: float
    categoria: str
    descripcion: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class InventoryNote:
    id: str
    fecha: date
    codigo: str
    cantidad: int
    tipo: NoteType
    created_at: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fecha": self.fecha.isoformat(),
            "codigo": self.codigo,
            "cantidad": self.cantidad,
            "tipo": self.tipo.value,
            "createdAt": self.created_at,
        }


@dataclass(frozen=True)
class NoteResult:
    nota: InventoryNote
    previous_quantity: int
    new_quantity: int

    def to_dict(self) -> dict:
        return {
            "nota": self.nota.to_dict(),
            "product": {
                "codigo": self.nota.codigo,
                "previousQuantity": self.previous_quantity,
                "newQuantity": self.new_quantity,
            },
        }
