"""SQLite-backed product inventory.

Owns the single connection shared by every query.  The schema is created and
seeded on first open; afterwards the store is only read.  Lookups return
human-readable text that is injected straight into the conversation as a tool
result, so database errors are reported as text instead of raised.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path

logger = logging.getLogger(__name__)

TABLE_NAME = "product_inventory"

NO_MATCHES_MESSAGE = "No matching products found in the inventory."

_CREATE_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_name TEXT NOT NULL,
    size TEXT NOT NULL,
    stock_count INTEGER NOT NULL,
    price_gbp DECIMAL(10, 2) NOT NULL
)
"""

_SEED_SQL = (
    f"INSERT OR IGNORE INTO {TABLE_NAME} "
    "(id, item_name, size, stock_count, price_gbp) VALUES (?, ?, ?, ?, ?)"
)

# (id, item_name, size, stock_count, price_gbp)
SEED_ROWS: tuple[tuple[int, str, str, int, float], ...] = (
    (1, "Waterproof Commuter Jacket", "S", 5, 85.00),
    (2, "Waterproof Commuter Jacket", "M", 0, 85.00),
    (3, "Waterproof Commuter Jacket", "L", 12, 85.00),
    (4, "Waterproof Commuter Jacket", "XL", 3, 85.00),
    (5, "Tech-Knit Hoodie", "M", 10, 45.00),
    (6, "Tech-Knit Hoodie", "S", 0, 45.00),
    (7, "Dry-Fit Running Tee", "L", 20, 25.00),
    (8, "Dry-Fit Running Tee", "M", 15, 25.00),
)


def format_row(item_name: str, size: str, stock_count: int, price_gbp: float) -> str:
    """Render one inventory row the way the model is told to read it."""
    return (
        f"Item: {item_name} | Size: {size} | Stock: {stock_count} | "
        f"Price: £{price_gbp:.2f}"
    )


class InventoryDatabase:
    """Parameterised lookups over the ``product_inventory`` table.

    The connection may be used from the API's worker threads, so every
    access (including the one-time seed check) goes through ``_lock``.
    Opening failures propagate: a store that cannot be opened is fatal at
    startup.
    """

    def __init__(self, path: str | Path = ":memory:"):
        self._path = str(path)
        self._lock = threading.Lock()
        self._closed = False
        # Autocommit mode; ensure_schema manages its own transaction.
        self._conn = sqlite3.connect(
            self._path, check_same_thread=False, isolation_level=None,
        )
        try:
            self.ensure_schema()
        except sqlite3.Error:
            self._conn.close()
            raise
        logger.info("Inventory database ready at %s", self._path)

    # ── Schema ───────────────────────────────────────────────────────

    def _table_exists(self) -> bool:
        row = self._conn.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = ?",
            (TABLE_NAME,),
        ).fetchone()
        return row is not None

    def ensure_schema(self) -> bool:
        """Create and seed the table if it is missing.

        Returns ``True`` when seeding happened.  The table creation and the
        seed rows commit together or not at all, so a failed seed leaves no
        empty table behind and the next open seeds again.  Safe to call
        repeatedly: the existence check and the seed run under the same lock,
        and the seed uses fixed ids with ``INSERT OR IGNORE``.
        """
        with self._lock:
            if self._table_exists():
                return False
            self._conn.execute("BEGIN")
            try:
                self._conn.execute(_CREATE_TABLE_SQL)
                self._conn.executemany(_SEED_SQL, SEED_ROWS)
            except sqlite3.Error:
                self._conn.execute("ROLLBACK")
                raise
            self._conn.execute("COMMIT")
            logger.info("Seeded %s with %d rows", TABLE_NAME, len(SEED_ROWS))
            return True

    # ── Lookups ──────────────────────────────────────────────────────

    def query(self, item_name: str, size: str | None = None) -> str:
        """Look up stock and price for *item_name*, optionally one *size*.

        Matching is a case-insensitive substring match on the name and a
        case-insensitive exact match on the size.  A blank size is ignored.
        """
        sql = (
            "SELECT item_name, size, stock_count, price_gbp "
            f"FROM {TABLE_NAME} "
            "WHERE LOWER(item_name) LIKE LOWER(?)"
        )
        params: list[str] = [f"%{item_name}%"]
        if size is not None and size.strip():
            sql += " AND UPPER(size) = UPPER(?)"
            params.append(size.strip())
        sql += " ORDER BY id"

        try:
            with self._lock:
                rows = self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            logger.warning("Inventory query failed for %r: %s", item_name, exc)
            return f"Database error: {exc}"

        if not rows:
            return NO_MATCHES_MESSAGE
        return "\n".join(format_row(*row) for row in rows)

    def row_count(self) -> int:
        with self._lock:
            return self._conn.execute(f"SELECT COUNT(*) FROM {TABLE_NAME}").fetchone()[0]

    # ── Lifecycle ────────────────────────────────────────────────────

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Close the connection.  Calling it twice is harmless."""
        with self._lock:
            if self._closed:
                return
            self._conn.close()
            self._closed = True
        logger.info("Inventory database closed")
