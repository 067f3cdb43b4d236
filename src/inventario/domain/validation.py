"""Input validation shared by the product and inventory operations.

Every helper either returns the cleaned value or raises ``ValidationError``
with a message that is safe to return to the caller.
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from inventario.domain.errors import ValidationError
from inventario.domain.models import NoteType, Product

PRODUCT_REQUIRED = ("codigo", "nombre", "cantidad", "precio_unitario", "categoria")
NOTE_REQUIRED = ("fecha", "codigo", "cantidad")

# SQLite INTEGER is a signed 64-bit value
MAX_QUANTITY = 2**63 - 1


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


def require_fields(data: object, fields: tuple[str, ...]) -> dict:
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object.")
    missing = [f for f in fields if _is_missing(data.get(f))]
    if missing:
        raise ValidationError(f"Campos requeridos: {', '.join(fields)}. Faltan: {', '.join(missing)}")
    return data


def _as_int(value: object, field: str) -> int:
    # bool is an int subclass; JSON true/false is never a quantity
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} debe ser un número entero.")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field} debe ser un número entero.")
        value = int(value)
    if value > MAX_QUANTITY:
        raise ValidationError(f"{field} no puede superar {MAX_QUANTITY}.")
    return value


def non_negative_int(value: object, field: str = "cantidad") -> int:
    n = _as_int(value, field)
    if n < 0:
        raise ValidationError(f"{field} debe ser un número entero no negativo.")
    return n


def positive_int(value: object, field: str = "cantidad") -> int:
    n = _as_int(value, field)
    if n <= 0:
        raise ValidationError(f"{field} debe ser un número positivo.")
    return n


def price(value: object, field: str = "precio_unitario") -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field} debe ser un número.")
    try:
        d = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"{field} debe ser un número.") from exc
    if not d.is_finite() or d < 0:
        raise ValidationError(f"{field} debe ser un número no negativo.")
    if d.as_tuple().exponent < -2:
        raise ValidationError(f"{field} admite como máximo 2 decimales.")
    return float(value)


def text(value: object, field: str) -> str:
    if not isinstance(value, (str, int)) or isinstance(value, bool):
        raise ValidationError(f"{field} debe ser texto.")
    return str(value).strip()


def fecha(value: object) -> date:
    """Accepts ``YYYY-MM-DD`` or a full ISO-8601 datetime (``Z`` suffix included)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError("Fecha inválida.")
    raw = value.strip()
    if raw.endswith(("Z", "z")):
        raw = raw[:-1] + "+00:00"
    try:
        if len(raw) == 10:
            return date.fromisoformat(raw)
        return datetime.fromisoformat(raw).date()
    except ValueError as exc:
        raise ValidationError("Fecha inválida.") from exc


def note_type(value: object) -> NoteType:
    try:
        return NoteType(value)
    except ValueError as exc:
        raise ValidationError(f"Tipo de nota inválido: {value!r}") from exc


def validate_product(data: object) -> Product:
    data = require_fields(data, PRODUCT_REQUIRED)
    descripcion = data.get("descripcion")
    return Product(
        codigo=text(data["codigo"], "codigo"),
        nombre=text(data["nombre"], "nombre"),
        cantidad=non_negative_int(data["cantidad"]),
        precio_unitario=price(data["precio_unitario"]),
        categoria=text(data["categoria"], "categoria"),
        descripcion="" if _is_missing(descripcion) else text(descripcion, "descripcion"),
    )


def validate_note(data: object) -> tuple[date, str, int]:
    data = require_fields(data, NOTE_REQUIRED)
    return (
        fecha(data["fecha"]),
        text(data["codigo"], "codigo"),
        positive_int(data["cantidad"]),
    )
