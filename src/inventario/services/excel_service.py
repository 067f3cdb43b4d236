from __future__ import annotations

import logging
from pathlib import Path

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from inventario.domain.errors import AppError, ValidationError

log = logging.getLogger(__name__)

PRODUCT_COLUMNS = ["codigo", "nombre", "descripcion", "cantidad", "precio_unitario", "categoria"]
NOTE_COLUMNS = ["id", "fecha", "codigo", "cantidad", "tipo", "createdAt"]


class ExcelService:
    def __init__(self, product_service, inventory_service):
        self.products = product_service
        self.inventory = inventory_service

    @staticmethod
    def _write_sheet(path: Path | str, title: str, headers: list[str], rows: list[list]) -> Path:
        wb = Workbook()
        ws = wb.active
        ws.title = title
        ws.append(headers)
        for cell in ws[1]:
            cell.font = Font(bold=True)
        for row in rows:
            ws.append(row)
        for idx, h in enumerate(headers, start=1):
            width = max([len(str(h))] + [len(str(r[idx - 1])) for r in rows])
            ws.column_dimensions[get_column_letter(idx)].width = min(width + 2, 60)
        ws.freeze_panes = "A2"

        out = Path(path)
        out.parent.mkdir(parents=True, exist_ok=True)
        wb.save(out)
        return out

    def export_products(self, path: Path | str) -> Path:
        rows = [[p.to_dict()[c] for c in PRODUCT_COLUMNS] for p in self.products.list()]
        out = self._write_sheet(path, "productos", PRODUCT_COLUMNS, rows)
        log.info("products_exported path=%s rows=%s", out, len(rows))
        return out

    def export_notes(self, path: Path | str, codigo: str | None = None) -> Path:
        rows = [[n.to_dict()[c] for c in NOTE_COLUMNS] for n in self.inventory.list_notes(codigo)]
        out = self._write_sheet(path, "notas", NOTE_COLUMNS, rows)
        log.info("notes_exported path=%s rows=%s codigo=%s", out, len(rows), codigo)
        return out

    def import_products(self, path: Path | str) -> tuple[int, int]:
        """Create one product per row.

        Headers (row 1, any order, case-insensitive):
          codigo | nombre | descripcion | cantidad | precio_unitario | categoria
        ``descripcion`` is optional. Invalid rows and existing codes are skipped.
        """
        wb = load_workbook(path)
        ws = wb.active

        headers = {}
        for col in range(1, ws.max_column + 1):
            v = ws.cell(row=1, column=col).value
            if isinstance(v, str):
                headers[v.strip().lower()] = col

        for r in PRODUCT_COLUMNS:
            if r != "descripcion" and r not in headers:
                raise ValidationError(f"Missing column header: {r}")

        ok = 0
        skipped = 0
        for row in range(2, ws.max_row + 1):
            data = {name: ws.cell(row=row, column=col).value for name, col in headers.items()}
            if all(v is None for v in data.values()):
                continue
            try:
                self.products.create(data)
                ok += 1
            except AppError as e:
                log.warning("Excel import skipped row %s: %s", row, e)
                skipped += 1

        return ok, skipped
