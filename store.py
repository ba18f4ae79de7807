"""Product store: every public method runs exactly one SQL statement."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, List, Optional, Sequence, Tuple

import pymysql

from db import DatabaseSettings, get_connection
from errors import ClientError, NotFound, StoreError
from models.product import ProductInput, ProductRead
from models.stats import InventoryStats

logger = logging.getLogger(__name__)

SeedRow = Tuple[str, str, int, float, str]

SEED_PRODUCTS: Sequence[SeedRow] = (
    ("Laptop Pro", "Electronics", 15, 1299.99, "High-performance laptop"),
    ("Wireless Mouse", "Electronics", 45, 29.99, "Ergonomic wireless mouse"),
    ("Office Chair", "Furniture", 8, 199.99, "Comfortable office chair"),
    ("Coffee Beans", "Food", 120, 12.99, "Premium coffee beans"),
    ("Notebook Set", "Office Supplies", 200, 8.99, "Pack of 3 notebooks"),
)

CREATE_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS products (
        id INT AUTO_INCREMENT PRIMARY KEY,
        name VARCHAR(255) NOT NULL,
        category VARCHAR(255) NOT NULL,
        quantity INT NOT NULL,
        price DOUBLE NOT NULL,
        description TEXT,
        created_at TIMESTAMP(6) NOT NULL DEFAULT CURRENT_TIMESTAMP(6),
        updated_at TIMESTAMP(6) NOT NULL DEFAULT CURRENT_TIMESTAMP(6)
    )
"""

# (name, category) identifies a seed row; rows already present are skipped
SEED_SQL = """
    INSERT INTO products (name, category, quantity, price, description)
    SELECT %s, %s, %s, %s, %s FROM DUAL
    WHERE NOT EXISTS (
        SELECT 1 FROM products WHERE name=%s AND category=%s
    )
"""


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # the session time zone is UTC, pymysql hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def row_to_product_read(row: dict) -> Optional[ProductRead]:
    """
    Convert a SQL row from the `products` table (DictCursor) into ProductRead.
    """
    if not row:
        return None

    return ProductRead(
        id=int(row["id"]),
        name=row["name"],
        category=row["category"],
        quantity=int(row["quantity"]),
        price=float(row["price"]),
        description=row.get("description"),
        created_at=_as_utc(row.get("created_at")),
        updated_at=_as_utc(row.get("updated_at")),
    )


def row_to_stats(row: Optional[dict]) -> InventoryStats:
    if not row:
        return InventoryStats()

    return InventoryStats(
        total_products=int(row.get("total_products") or 0),
        total_items=int(row.get("total_items") or 0),
        categories=int(row.get("categories") or 0),
        total_value=float(row.get("total_value") or 0),
    )


class ProductStore:
    """Store client built once at startup and shared by all request handlers."""

    def __init__(self, settings: DatabaseSettings):
        self.settings = settings

    def _connect(self):
        return get_connection(self.settings)

    @contextmanager
    def _cursor(self) -> Iterator[pymysql.cursors.Cursor]:
        try:
            with self._connect() as conn, conn.cursor() as cur:
                yield cur
                conn.commit()
        except pymysql.MySQLError as exc:
            raise StoreError.from_driver(exc) from exc

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    def ping(self) -> None:
        with self._cursor() as cur:
            cur.execute("SELECT 1")

    def create_schema(self) -> None:
        with self._cursor() as cur:
            cur.execute(CREATE_TABLE_SQL)

    def seed(self, products: Sequence[SeedRow] = SEED_PRODUCTS) -> int:
        """Insert each seed product unless one with the same name and category exists.

        Returns the number of rows actually inserted.
        """
        inserted = 0
        for name, category, quantity, price, description in products:
            with self._cursor() as cur:
                inserted += cur.execute(
                    SEED_SQL,
                    (name, category, quantity, price, description, name, category),
                )
        return inserted

    def bootstrap(self) -> None:
        self.ping()
        logger.info("Connected to %s:%s/%s", self.settings.host, self.settings.port, self.settings.database)
        self.create_schema()
        inserted = self.seed()
        logger.info("Schema ready, %d seed product(s) inserted", inserted)

    # -------------------------------------------------------------------------
    # Products
    # -------------------------------------------------------------------------

    def list_products(self) -> List[ProductRead]:
        with self._cursor() as cur:
            cur.execute("SELECT * FROM products ORDER BY created_at DESC, id DESC")
            rows = cur.fetchall()
        return [row_to_product_read(row) for row in rows]

    def get_product(self, product_id: int) -> ProductRead:
        with self._cursor() as cur:
            cur.execute("""
                SELECT *
                FROM products
                WHERE id=%s
            """, (product_id,))
            row = cur.fetchone()
        if not row:
            raise NotFound(product_id)
        return row_to_product_read(row)

    def create_product(self, product: ProductInput) -> int:
        missing = product.missing_fields()
        if missing:
            raise ClientError("Missing required fields", fields=missing)

        with self._cursor() as cur:
            cur.execute("""
                INSERT INTO products (
                    name, category, quantity, price, description,
                    created_at, updated_at
                )
                VALUES (%s, %s, %s, %s, %s, CURRENT_TIMESTAMP(6), CURRENT_TIMESTAMP(6))
            """, (
                product.name,
                product.category,
                product.quantity,
                product.price,
                product.description,
            ))
            product_id = cur.lastrowid
        return int(product_id)

    def update_product(self, product_id: int, product: ProductInput) -> None:
        """Overwrite all mutable fields; omitted fields are written as NULL."""
        with self._cursor() as cur:
            matched = cur.execute("""
                UPDATE products
                SET name=%s, category=%s, quantity=%s, price=%s, description=%s,
                    updated_at=CURRENT_TIMESTAMP(6)
                WHERE id=%s
            """, (
                product.name,
                product.category,
                product.quantity,
                product.price,
                product.description,
                product_id,
            ))
        if matched == 0:
            raise NotFound(product_id)

    def delete_product(self, product_id: int) -> None:
        with self._cursor() as cur:
            deleted = cur.execute("DELETE FROM products WHERE id=%s", (product_id,))
        if deleted == 0:
            raise NotFound(product_id)

    def stats(self) -> InventoryStats:
        with self._cursor() as cur:
            cur.execute("""
                SELECT
                    COUNT(*) AS total_products,
                    COALESCE(SUM(quantity), 0) AS total_items,
                    COUNT(DISTINCT category) AS categories,
                    COALESCE(SUM(quantity * price), 0) AS total_value
                FROM products
            """)
            row = cur.fetchone()
        return row_to_stats(row)
