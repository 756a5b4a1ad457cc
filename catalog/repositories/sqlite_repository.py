"""SQLite-backed product repository.

sqlite3 calls block, so each operation runs in the default thread-pool
executor. An asyncio.Lock keeps operations on the shared connection
strictly one at a time.
"""

import asyncio
import functools
import logging
import re
from typing import Any, Callable, Mapping, Optional, TypeVar

from catalog.clients import SqliteClient
from catalog.exceptions import InvalidIdentifierError
from catalog.models import Product, ProductQuery, ProductStats
from catalog.models.product import (
    PRODUCT_FIELDS,
    format_timestamp,
    next_update_time,
    parse_timestamp,
    utc_now,
)
from catalog.repositories.query_builder import build_sqlite_query

logger = logging.getLogger(__name__)

T = TypeVar("T")

ID_PATTERN = re.compile(r"[1-9][0-9]*")
MAX_ROW_ID = 2**63 - 1

# SQL statements
CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS products (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    description TEXT,
    description_am TEXT,
    description_om TEXT,
    price REAL NOT NULL CHECK (price >= 0),
    stock INTEGER NOT NULL DEFAULT 0 CHECK (stock >= 0),
    category TEXT,
    image_base64 TEXT,
    unit TEXT,
    origin TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_products_category ON products(category);
CREATE INDEX IF NOT EXISTS idx_products_price ON products(price);
"""

# Columns added after the first release; older databases are migrated on connect
LATER_COLUMNS = ("description_am", "description_om", "unit", "origin")

STATS_SQL = """
SELECT
    COUNT(*) AS total,
    COALESCE(SUM(CASE WHEN stock > 0 AND stock <= 5 THEN 1 ELSE 0 END), 0) AS low_stock,
    COALESCE(SUM(CASE WHEN stock = 0 THEN 1 ELSE 0 END), 0) AS out_of_stock,
    COALESCE(SUM(price * stock), 0) AS total_value
FROM products
"""


class SqliteProductRepository:
    """Product repository over a single SQLite database file."""

    def __init__(self, db_path: str):
        """Initialize the repository.

        Args:
            db_path: Path to the SQLite database file.
        """
        self._db_path = db_path
        self._sqlite_client: Optional[SqliteClient] = None
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        if self._sqlite_client is not None:
            return
        await self._run(self._open)
        logger.info(f"SQLite product store ready at {self._db_path}")

    async def close(self) -> None:
        if self._sqlite_client is not None:
            self._sqlite_client.close()
            self._sqlite_client = None

    def parse_id(self, raw_id: Any) -> int:
        text = str(raw_id)
        if not ID_PATTERN.fullmatch(text) or int(text) > MAX_ROW_ID:
            raise InvalidIdentifierError(raw_id)
        return int(text)

    async def list_products(self, query: ProductQuery) -> tuple[list[Product], int]:
        return await self._run(self._list_products, query)

    async def get_by_id(self, product_id: int) -> Optional[Product]:
        return await self._run(self._get_by_id, product_id)

    async def create(self, values: Mapping[str, Any]) -> Product:
        return await self._run(self._create, dict(values))

    async def update(self, product_id: int, changes: Mapping[str, Any]) -> Optional[Product]:
        return await self._run(self._update, product_id, dict(changes))

    async def delete(self, product_id: int) -> bool:
        return await self._run(self._delete, product_id)

    async def distinct_categories(self) -> list[str]:
        return await self._run(self._distinct_categories)

    async def aggregate_stats(self) -> ProductStats:
        return await self._run(self._aggregate_stats)

    async def _run(self, func: Callable[..., T], *args: Any) -> T:
        async with self._lock:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, functools.partial(func, *args))

    @property
    def _client(self) -> SqliteClient:
        if self._sqlite_client is None:
            raise RuntimeError("SQLite repository not connected. Call connect() first.")
        return self._sqlite_client

    def _open(self) -> None:
        self._sqlite_client = SqliteClient(self._db_path)
        self._sqlite_client.execute_script(CREATE_TABLE_SQL)
        self._migrate_columns()

    def _migrate_columns(self) -> None:
        existing = self._client.table_columns("products")
        for column in LATER_COLUMNS:
            if column not in existing:
                self._client.execute_script(f"ALTER TABLE products ADD COLUMN {column} TEXT")
                logger.info(f"Added {column} column to products table")

    def _list_products(self, query: ProductQuery) -> tuple[list[Product], int]:
        sql_query = build_sqlite_query(query)

        count_sql, count_params = sql_query.count_statement()
        total = self._client.execute_query(count_sql, count_params)[0][0]

        select_sql, select_params = sql_query.select_statement()
        rows = self._client.execute_query(select_sql, select_params)
        return [Product.from_record(dict(row)) for row in rows], total

    def _get_by_id(self, product_id: int) -> Optional[Product]:
        rows = self._client.execute_query("SELECT * FROM products WHERE id = ?", (product_id,))
        if not rows:
            return None
        return Product.from_record(dict(rows[0]))

    def _create(self, values: dict[str, Any]) -> Product:
        now = format_timestamp(utc_now())
        columns = [name for name in PRODUCT_FIELDS if name in values]
        record = {name: values[name] for name in columns}
        record["created_at"] = now
        record["updated_at"] = now

        placeholders = ", ".join("?" for _ in record)
        row_id = self._client.execute_insert(
            f"INSERT INTO products ({', '.join(record)}) VALUES ({placeholders})",
            tuple(record.values()),
        )

        logger.debug(f"Inserted product row {row_id}")
        return Product.from_record({"id": row_id, **record})

    def _update(self, product_id: int, changes: dict[str, Any]) -> Optional[Product]:
        rows = self._client.execute_query(
            "SELECT updated_at FROM products WHERE id = ?", (product_id,)
        )
        if not rows:
            return None

        updated_at = next_update_time(parse_timestamp(rows[0]["updated_at"]))
        assignments = {name: changes[name] for name in PRODUCT_FIELDS if name in changes}
        assignments["updated_at"] = format_timestamp(updated_at)

        set_clause = ", ".join(f"{name} = ?" for name in assignments)
        updated = self._client.execute_write(
            f"UPDATE products SET {set_clause} WHERE id = ?",
            (*assignments.values(), product_id),
        )
        if not updated:
            return None
        return self._get_by_id(product_id)

    def _delete(self, product_id: int) -> bool:
        deleted = self._client.execute_write("DELETE FROM products WHERE id = ?", (product_id,))
        return deleted > 0

    def _distinct_categories(self) -> list[str]:
        rows = self._client.execute_query(
            "SELECT DISTINCT category FROM products WHERE category IS NOT NULL ORDER BY category"
        )
        return [row["category"] for row in rows]

    def _aggregate_stats(self) -> ProductStats:
        row = self._client.execute_query(STATS_SQL)[0]
        return ProductStats(
            total=row["total"],
            low_stock=row["low_stock"],
            out_of_stock=row["out_of_stock"],
            total_value=float(row["total_value"]),
        )
