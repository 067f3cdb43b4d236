from __future__ import annotations

import sqlite3
from datetime import date, datetime
from pathlib import Path
from typing import Optional

from inventario.domain.errors import DuplicateKeyError, NotFoundError, ValidationError
from inventario.domain.models import InventoryNote, NoteType, Product


class SqliteRepository:
    """Product and note store on a single SQLite file.

    Every call opens its own connection so the repository can be shared by
    request threads.
    """

    def __init__(self, db_path: Path | str, busy_timeout: float = 30.0):
        self.db_path = str(db_path)
        self.busy_timeout = busy_timeout

    def _conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=self.busy_timeout)
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def init_db(self) -> None:
        conn = self._conn()
        try:
            conn.execute("PRAGMA journal_mode = WAL;")
        finally:
            conn.close()
        self.run_migrations()

    def _migrations(self):
        return [
            (1, self._migration_v1_base),
            (2, self._migration_v2_note_indexes),
        ]

    def run_migrations(self) -> None:
        conn = self._conn()
        try:
            conn.execute("CREATE TABLE IF NOT EXISTS schema_migrations (version INTEGER PRIMARY KEY, applied_at TEXT NOT NULL)")
            conn.commit()
            current_version = int(conn.execute("SELECT COALESCE(MAX(version), 0) FROM schema_migrations").fetchone()[0])
            pending = [(v, m) for v, m in self._migrations() if v > current_version]
            if not pending:
                return

            backup_path = self._create_pre_migration_backup(conn) if current_version > 0 else None
            try:
                cur = conn.cursor()
                cur.execute("BEGIN")
                for version, migration in pending:
                    migration(cur)
                    cur.execute(
                        "INSERT INTO schema_migrations (version, applied_at) VALUES (?, datetime('now'))",
                        (version,),
                    )
                conn.commit()
            except Exception as exc:
                conn.rollback()
                self._restore_pre_migration_backup(conn, backup_path)
                raise RuntimeError(
                    "Database migration failed. Original database restored from automatic backup."
                ) from exc
        finally:
            conn.close()

    def schema_version(self) -> int:
        conn = self._conn()
        try:
            row = conn.execute("SELECT COALESCE(MAX(version), 0) FROM schema_migrations").fetchone()
            return int(row[0])
        finally:
            conn.close()

    def _create_pre_migration_backup(self, conn: sqlite3.Connection) -> Path:
        db_file = Path(self.db_path)
        backup_file = db_file.with_name(f"{db_file.stem}.pre_migration_{datetime.now().strftime('%Y%m%d%H%M%S')}.bak")
        dst = sqlite3.connect(backup_file)
        try:
            conn.backup(dst)
        finally:
            dst.close()
        return backup_file

    def _restore_pre_migration_backup(self, conn: sqlite3.Connection, backup_path: Path | None) -> None:
        if backup_path is None or not backup_path.exists():
            return
        src = sqlite3.connect(backup_path)
        try:
            src.backup(conn)
        finally:
            src.close()

    def _migration_v1_base(self, cur: sqlite3.Cursor) -> None:
        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS products (
                codigo TEXT PRIMARY KEY,
                nombre TEXT NOT NULL,
                descripcion TEXT NOT NULL DEFAULT '',
                cantidad INTEGER NOT NULL DEFAULT 0 CHECK(cantidad >= 0),
                precio_unitario REAL NOT NULL CHECK(precio_unitario >= 0),
                categoria TEXT NOT NULL
            )
            """
        )

        cur.execute(
            """
            CREATE TABLE IF NOT EXISTS inventory_notes (
                id TEXT PRIMARY KEY,
                fecha TEXT NOT NULL,
                codigo TEXT NOT NULL,
                cantidad INTEGER NOT NULL CHECK(cantidad > 0),
                tipo TEXT NOT NULL CHECK(tipo IN ('entrada','salida')),
                created_at TEXT NOT NULL
            )
            """
        )

    def _migration_v2_note_indexes(self, cur: sqlite3.Cursor) -> None:
        cur.execute("CREATE INDEX IF NOT EXISTS idx_inventory_notes_codigo ON inventory_notes(codigo)")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_inventory_notes_created_at ON inventory_notes(created_at)")

    # ---------- Products ----------
    def add_product(self, product: Product) -> None:
        conn = self._conn()
        try:
            conn.execute(
                """
                INSERT INTO products (codigo, nombre, descripcion, cantidad, precio_unitario, categoria)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    product.codigo,
                    product.nombre,
                    product.descripcion,
                    int(product.cantidad),
                    float(product.precio_unitario),
                    product.categoria,
                ),
            )
            conn.commit()
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            if "UNIQUE" in str(exc) or "PRIMARY KEY" in str(exc):
                raise DuplicateKeyError(f"Código de producto duplicado: {product.codigo}") from exc
            raise ValidationError(str(exc)) from exc
        finally:
            conn.close()

    def get_product(self, codigo: str) -> Optional[Product]:
        conn = self._conn()
        try:
            r = conn.execute(
                """
                SELECT codigo, nombre, descripcion, cantidad, precio_unitario, categoria
                FROM products
                WHERE codigo=?
                """,
                (codigo,),
            ).fetchone()
        finally:
            conn.close()
        if not r:
            return None
        return self._product_from_row(r)

    def list_products(self) -> list[Product]:
        conn = self._conn()
        try:
            rows = conn.execute(
                """
                SELECT codigo, nombre, descripcion, cantidad, precio_unitario, categoria
                FROM products
                ORDER BY codigo
                """
            ).fetchall()
        finally:
            conn.close()
        return [self._product_from_row(r) for r in rows]

    def set_quantity(self, codigo: str, cantidad: int, expected: int | None = None) -> bool:
        """Write ``cantidad``; with ``expected`` only if the stored value still matches.

        Returns False when ``expected`` no longer matches. The check and the
        write are a single UPDATE statement.
        """
        conn = self._conn()
        try:
            cur = conn.cursor()
            if expected is None:
                cur.execute("UPDATE products SET cantidad=? WHERE codigo=?", (int(cantidad), codigo))
            else:
                cur.execute(
                    "UPDATE products SET cantidad=? WHERE codigo=? AND cantidad=?",
                    (int(cantidad), codigo, int(expected)),
                )
            changed = cur.rowcount > 0
            conn.commit()
            if changed:
                return True
            exists = cur.execute("SELECT 1 FROM products WHERE codigo=?", (codigo,)).fetchone()
        except sqlite3.IntegrityError as exc:
            conn.rollback()
            raise ValidationError("La cantidad no puede ser negativa.") from exc
        finally:
            conn.close()

        if not exists:
            raise NotFoundError(f'Producto con código "{codigo}" no encontrado.')
        return False

    @staticmethod
    def _product_from_row(r) -> Product:
        return Product(
            codigo=str(r[0]),
            nombre=str(r[1]),
            descripcion=str(r[2] or ""),
            cantidad=int(r[3]),
            precio_unitario=float(r[4]),
            categoria=str(r[5]),
        )

    # ---------- Inventory notes ----------
    def add_note(self, note: InventoryNote) -> None:
        conn = self._conn()
        try:
            conn.execute(
                """
                INSERT INTO inventory_notes (id, fecha, codigo, cantidad, tipo, created_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    note.id,
                    note.fecha.isoformat(),
                    note.codigo,
                    int(note.cantidad),
                    note.tipo.value,
                    note.created_at,
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def list_notes(self, codigo: str | None = None) -> list[InventoryNote]:
        sql = "SELECT id, fecha, codigo, cantidad, tipo, created_at FROM inventory_notes"
        params: tuple = ()
        if codigo is not None:
            sql += " WHERE codigo=?"
            params = (codigo,)
        sql += " ORDER BY created_at, rowid"

        conn = self._conn()
        try:
            rows = conn.execute(sql, params).fetchall()
        finally:
            conn.close()
        return [
            InventoryNote(
                id=str(r[0]),
                fecha=date.fromisoformat(r[1]),
                codigo=str(r[2]),
                cantidad=int(r[3]),
                tipo=NoteType(r[4]),
                created_at=str(r[5]),
            )
            for r in rows
        ]

