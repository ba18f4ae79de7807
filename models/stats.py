from pydantic import BaseModel, Field


class InventoryStats(BaseModel):
    """Aggregates over the whole products table."""
    total_products: int = Field(
        0,
        description="Number of product rows.",
        json_schema_extra={"example": 5},
    )
    total_items: int = Field(
        0,
        description="Sum of quantity across all products.",
        json_schema_extra={"example": 388},
    )
    categories: int = Field(
        0,
        description="Number of distinct categories.",
        json_schema_extra={"example": 4},
    )
    total_value: float = Field(
        0.0,
        description="Sum of quantity * price across all products.",
        json_schema_extra={"example": 25929.1},
    )
