"""Shared fixtures: an in-memory product store wired into the FastAPI app."""

from datetime import datetime, timezone
from typing import Dict, List

import pytest
from fastapi.testclient import TestClient

from errors import ClientError, NotFound
from main import app, get_store
from models.product import ProductInput, ProductRead
from models.stats import InventoryStats


class InMemoryProductStore:
    """Mirrors ProductStore's contract without a database."""

    def __init__(self):
        self.rows: Dict[int, dict] = {}
        self._next_id = 1

    def list_products(self) -> List[ProductRead]:
        rows = sorted(self.rows.values(), key=lambda r: (r["created_at"], r["id"]), reverse=True)
        return [ProductRead(**row) for row in rows]

    def get_product(self, product_id: int) -> ProductRead:
        if product_id not in self.rows:
            raise NotFound(product_id)
        return ProductRead(**self.rows[product_id])

    def create_product(self, product: ProductInput) -> int:
        missing = product.missing_fields()
        if missing:
            raise ClientError("Missing required fields", fields=missing)
        now = datetime.now(timezone.utc)
        product_id = self._next_id
        self._next_id += 1
        self.rows[product_id] = dict(
            id=product_id, created_at=now, updated_at=now, **product.model_dump()
        )
        return product_id

    def update_product(self, product_id: int, product: ProductInput) -> None:
        if product_id not in self.rows:
            raise NotFound(product_id)
        self.rows[product_id].update(product.model_dump(), updated_at=datetime.now(timezone.utc))

    def delete_product(self, product_id: int) -> None:
        if self.rows.pop(product_id, None) is None:
            raise NotFound(product_id)

    def stats(self) -> InventoryStats:
        rows = list(self.rows.values())
        return InventoryStats(
            total_products=len(rows),
            total_items=sum(r["quantity"] for r in rows),
            categories=len({r["category"] for r in rows}),
            total_value=sum(r["quantity"] * r["price"] for r in rows),
        )


@pytest.fixture
def memory_store():
    return InMemoryProductStore()


@pytest.fixture
def client(memory_store):
    """TestClient without lifespan, so no database bootstrap runs."""
    app.dependency_overrides[get_store] = lambda: memory_store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def laptop():
    return {
        "name": "Laptop Pro",
        "category": "Electronics",
        "quantity": 15,
        "price": 1299.99,
        "description": "High-performance laptop",
    }
