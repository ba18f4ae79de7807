from __future__ import annotations

from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field

REQUIRED_FIELDS = ("name", "category", "quantity", "price")


class ProductInput(BaseModel):
    """Body for create and full update. Absent fields are None, never coerced to zero."""
    name: Optional[str] = Field(
        None,
        description="Product name. Required.",
        json_schema_extra={"example": "Wireless Mouse"},
    )
    category: Optional[str] = Field(
        None,
        description="Product category. Required.",
        json_schema_extra={"example": "Electronics"},
    )
    quantity: Optional[int] = Field(
        None,
        description="Units in stock. Required; zero is a valid quantity.",
        json_schema_extra={"example": 45},
    )
    price: Optional[float] = Field(
        None,
        description="Unit price. Required; zero is a valid price.",
        json_schema_extra={"example": 29.99},
    )
    description: Optional[str] = Field(
        None,
        description="Free-form product description.",
        json_schema_extra={"example": "Ergonomic wireless mouse"},
    )

    model_config = {
        "json_schema_extra": {
            # documented as required; absence is reported as 400 by ProductStore.create_product
            "required": list(REQUIRED_FIELDS),
            "examples": [
                {
                    "name": "Wireless Mouse",
                    "category": "Electronics",
                    "quantity": 45,
                    "price": 29.99,
                    "description": "Ergonomic wireless mouse",
                }
            ]
        }
    }

    def missing_fields(self) -> List[str]:
        missing = []
        for name in REQUIRED_FIELDS:
            value = getattr(self, name)
            if value is None or (isinstance(value, str) and value == ""):
                missing.append(name)
        return missing


class ProductRead(BaseModel):
    """Server representation returned to clients."""
    id: int = Field(
        ...,
        description="Server-generated Product ID.",
        json_schema_extra={"example": 1},
    )
    name: str = Field(..., json_schema_extra={"example": "Wireless Mouse"})
    category: str = Field(..., json_schema_extra={"example": "Electronics"})
    quantity: int = Field(..., json_schema_extra={"example": 45})
    price: float = Field(..., json_schema_extra={"example": 29.99})
    description: Optional[str] = Field(
        None,
        json_schema_extra={"example": "Ergonomic wireless mouse"},
    )
    created_at: datetime = Field(
        ...,
        description="Creation timestamp (UTC).",
        json_schema_extra={"example": "2025-09-30T10:20:30Z"},
    )
    updated_at: datetime = Field(
        ...,
        description="Last update timestamp (UTC).",
        json_schema_extra={"example": "2025-09-30T12:00:00Z"},
    )


class ProductCreated(BaseModel):
    id: int
    message: str = "Product created successfully"


class Message(BaseModel):
    message: str
