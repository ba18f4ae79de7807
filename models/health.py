from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field


class Health(BaseModel):
    status: int = Field(..., json_schema_extra={"example": 200})
    status_message: str = Field(..., json_schema_extra={"example": "OK"})
    timestamp: str = Field(
        ...,
        description="Server time in ISO-8601 (UTC).",
        json_schema_extra={"example": "2025-09-30T10:20:30Z"},
    )
    ip_address: str = Field(..., json_schema_extra={"example": "172.17.0.2"})
    echo: Optional[str] = Field(None, description="Echoed query string.")
