from __future__ import annotations

import logging
import os
import socket
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path as FilePath
from typing import List, Optional

from fastapi import Depends, FastAPI, Path, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from db import DatabaseSettings, ServerSettings
from errors import ClientError, InventoryError, StoreError
from models.health import Health
from models.product import Message, ProductCreated, ProductInput, ProductRead
from models.stats import InventoryStats
from store import ProductStore

server_settings = ServerSettings.from_env()

logging.basicConfig(
    level=server_settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

STATIC_DIR = os.getenv("STATIC_DIR", str(FilePath(__file__).parent / "public"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect, create the schema and seed before any request is served."""
    settings = DatabaseSettings.from_env()
    store = ProductStore(settings)
    logger.info("Attempting to initialize database...")
    try:
        store.bootstrap()
    except StoreError as exc:
        logger.error("Could not start server due to database failure: %s", exc.message)
        logger.error(
            "Check DATABASE_HOST, DATABASE_PORT, DATABASE_USER, DATABASE_PASSWORD, "
            "DATABASE_NAME and that the database server is running."
        )
        raise
    logger.info("Database initialized successfully.")
    app.state.store = store
    yield


app = FastAPI(
    title="Inventory Management API",
    description="FastAPI service for managing products and inventory statistics",
    version="1.0.0",
    lifespan=lifespan,
)

# ============================================================================
# CORS Middleware Configuration
# ============================================================================
# Accept requests from any origin, the bundled dashboard may be served elsewhere
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_store(request: Request) -> ProductStore:
    return request.app.state.store


# ============================================================================
# Error handlers
# ============================================================================


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError):
    if isinstance(exc, StoreError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    else:
        logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # loc is ("body", "quantity") or ("path", "product_id"); a missing body is just ("body",)
    fields = [
        ".".join(str(p) for p in err.get("loc", ())[1:]) or str(err.get("loc", ("request",))[0])
        for err in exc.errors()
    ]
    return await inventory_error_handler(
        request, ClientError(f"Invalid request: {', '.join(fields)}", fields=fields)
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    # router and static mount errors (404, 405) share the {"error": ...} shape
    logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    return await inventory_error_handler(request, StoreError(str(exc) or exc.__class__.__name__))


# ============================================================================
# Health endpoints
# ============================================================================


def make_health(echo: Optional[str]) -> Health:
    try:
        ip_address = socket.gethostbyname(socket.gethostname())
    except socket.gaierror:
        ip_address = "127.0.0.1"
    return Health(
        status=200,
        status_message="OK",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        ip_address=ip_address,
        echo=echo,
    )


@app.get("/health", response_model=Health)
def get_health(echo: str | None = Query(None, description="Optional echo string")):
    return make_health(echo=echo)


# -----------------------------------------------------------------------------
# Product endpoints
# -----------------------------------------------------------------------------


@app.get("/api/products", response_model=List[ProductRead])
@app.get("/api/products/", response_model=List[ProductRead], include_in_schema=False)
def list_products(store: ProductStore = Depends(get_store)):
    """List all products, newest first."""
    return store.list_products()


@app.get("/api/products/{product_id}", response_model=ProductRead)
def get_product(
        product_id: int = Path(..., description="Product ID"),
        store: ProductStore = Depends(get_store),
):
    """Get a specific product by ID."""
    return store.get_product(product_id)


@app.post("/api/products", response_model=ProductCreated)
@app.post("/api/products/", response_model=ProductCreated, include_in_schema=False)
def create_product(product: ProductInput, store: ProductStore = Depends(get_store)):
    """Create a new product. name, category, quantity and price are required."""
    product_id = store.create_product(product)
    logger.info("Created product %d", product_id)
    return ProductCreated(id=product_id)


@app.put("/api/products/{product_id}", response_model=Message)
def update_product(
        product: ProductInput,
        product_id: int = Path(..., description="Product ID"),
        store: ProductStore = Depends(get_store),
):
    """Replace every mutable field of a product."""
    store.update_product(product_id, product)
    return Message(message="Product updated successfully")


@app.delete("/api/products/{product_id}", response_model=Message, status_code=status.HTTP_200_OK)
def delete_product(
        product_id: int = Path(..., description="Product ID"),
        store: ProductStore = Depends(get_store),
):
    """Delete a product."""
    store.delete_product(product_id)
    logger.info("Deleted product %d", product_id)
    return Message(message="Product deleted successfully")


# -----------------------------------------------------------------------------
# Inventory statistics endpoints
# -----------------------------------------------------------------------------


@app.get("/api/stats", response_model=InventoryStats)
def get_stats(store: ProductStore = Depends(get_store)):
    """Get inventory summary statistics."""
    return store.stats()


# Mounted last so the API routes above take precedence over "/"
app.mount("/", StaticFiles(directory=STATIC_DIR, html=True, check_dir=False), name="static")


# -----------------------------------------------------------------------------
# Run the app
# -----------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=server_settings.host, port=server_settings.port)
