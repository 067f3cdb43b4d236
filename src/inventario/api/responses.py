"""Response construction and error-to-status mapping for every handler."""
from __future__ import annotations

import base64
import json
import logging

from inventario.domain.errors import (
    AppError,
    ConflictError,
    DuplicateKeyError,
    InsufficientStockError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)

log = logging.getLogger("inventario.api")

CORS_HEADERS = {
    "Content-Type": "application/json",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "OPTIONS,GET,POST,PUT,PATCH",
}

# Checked in order; subclasses before their bases.
ERROR_STATUS: list[tuple[type[AppError], int]] = [
    (ValidationError, 400),
    (NotFoundError, 404),
    (DuplicateKeyError, 409),
    (ConflictError, 409),
    (InsufficientStockError, 422),
    (UpstreamError, 502),
]

INTERNAL_ERROR_MESSAGE = "Hubo un error interno al procesar la solicitud."


def build_response(status_code: int, payload: object | None) -> dict:
    return {
        "statusCode": status_code,
        "headers": dict(CORS_HEADERS),
        "body": "" if payload is None else json.dumps(payload, ensure_ascii=False),
    }


def success_response(data: object, message: str = "Operación exitosa", status_code: int = 200) -> dict:
    return build_response(status_code, {"success": True, "message": message, "data": data})


def error_response(message: str, status_code: int = 500) -> dict:
    return build_response(status_code, {"success": False, "error": message})


def status_for(exc: BaseException) -> int:
    for cls, status in ERROR_STATUS:
        if isinstance(exc, cls):
            return status
    return 500


def response_for_error(exc: Exception, action: str) -> dict:
    status = status_for(exc)
    if status == 500:
        log.exception("unexpected_error action=%s", action)
        return error_response(INTERNAL_ERROR_MESSAGE, 500)
    log.info("request_rejected action=%s status=%s error=%s", action, status, exc)
    return error_response(str(exc), status)


def parse_body(event: dict) -> dict:
    raw = event.get("body")
    if raw is None or raw == "":
        raise ValidationError("El cuerpo de la solicitud es obligatorio.")
    if isinstance(raw, dict):
        return raw
    if event.get("isBase64Encoded"):
        try:
            raw = base64.b64decode(raw).decode("utf-8")
        except (ValueError, UnicodeDecodeError) as e:
            raise ValidationError("Cuerpo de la solicitud mal codificado.") from e
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise ValidationError("El cuerpo de la solicitud no es JSON válido.") from e
    if not isinstance(data, dict):
        raise ValidationError("El cuerpo de la solicitud debe ser un objeto JSON.")
    return data
