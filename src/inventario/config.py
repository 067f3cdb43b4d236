from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
import os
import sys

from inventario.domain.errors import ValidationError


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    db_path: Path
    logs_dir: Path


@dataclass(frozen=True)
class AppConfig:
    db_path: Path
    logs_dir: Path
    products_service_url: str | None = None
    stock_max_retries: int = 5
    http_timeout: float = 10.0
    host: str = "127.0.0.1"
    port: int = 8000


def _windows_appdata() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def _mac_app_support() -> Path:
    return Path.home() / "Library" / "Application Support"


def get_app_paths(app_name: str = "Inventario") -> AppPaths:
    if sys.platform.startswith("win"):
        base = _windows_appdata() / app_name
    elif sys.platform == "darwin":
        base = _mac_app_support() / app_name
    else:
        base = Path.home() / f".{app_name.lower()}"

    return AppPaths(base_dir=base, db_path=base / "inventario.db", logs_dir=base / "logs")


def _env_number(env: Mapping[str, str], name: str, default, cast, minimum):
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError as e:
        raise ValidationError(f"{name} must be a number, got {raw!r}") from e
    if value < minimum:
        raise ValidationError(f"{name} must be >= {minimum}, got {value}")
    return value


def load_config(env: Mapping[str, str] | None = None) -> AppConfig:
    env = os.environ if env is None else env
    paths = get_app_paths()

    db_path = Path(env["INVENTARIO_DB_PATH"]) if env.get("INVENTARIO_DB_PATH") else paths.db_path
    logs_dir = Path(env["INVENTARIO_LOG_DIR"]) if env.get("INVENTARIO_LOG_DIR") else paths.logs_dir
    db_path.parent.mkdir(parents=True, exist_ok=True)

    return AppConfig(
        db_path=db_path,
        logs_dir=logs_dir,
        products_service_url=(env.get("PRODUCTS_SERVICE_URL") or "").strip() or None,
        stock_max_retries=_env_number(env, "INVENTARIO_STOCK_RETRIES", 5, int, 1),
        http_timeout=_env_number(env, "INVENTARIO_HTTP_TIMEOUT", 10.0, float, 0.1),
        host=(env.get("INVENTARIO_HOST") or "").strip() or "127.0.0.1",
        port=_env_number(env, "INVENTARIO_PORT", 8000, int, 0),
    )
