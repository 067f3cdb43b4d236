from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

DATEFMT = "%Y-%m-%d %H:%M:%S"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; ``thread`` tells concurrent requests apart."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _json(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setFormatter(JsonFormatter(datefmt=DATEFMT))
    handler.setLevel(level)
    return handler


def _file_handler(path: Path, level: int) -> logging.Handler:
    return _json(RotatingFileHandler(path, maxBytes=2_000_000, backupCount=5, encoding="utf-8"), level)


def setup_logging(logs_dir: Path, level: int = logging.INFO, console: bool = False) -> None:
    logs_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    if root.handlers:
        return

    root.addHandler(_file_handler(logs_dir / "app.log", logging.INFO))
    root.addHandler(_file_handler(logs_dir / "errors.log", logging.ERROR))
    if console:
        root.addHandler(_json(logging.StreamHandler(), level))

    notes = logging.getLogger("inventario.notes")
    notes.addHandler(_file_handler(logs_dir / "notes.log", logging.INFO))
    notes.setLevel(logging.DEBUG if level <= logging.DEBUG else logging.INFO)
