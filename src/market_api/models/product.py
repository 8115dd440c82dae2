"""
Product-related Pydantic models
"""

import math
from typing import Any, Mapping, Optional
from pydantic import BaseModel, Field, field_validator


class ProductWriteRequest(BaseModel):
    """Full-row payload for creating or overwriting a product"""
    name: str = Field(..., min_length=1, description="Product name")
    description: str = Field(..., min_length=1, description="Product description")
    price_cost: float = Field(..., allow_inf_nan=False, description="Cost price")
    price_sale: float = Field(..., allow_inf_nan=False, description="Sale price")
    quantity: int = Field(..., description="Quantity on hand")
    image: Optional[str] = Field(None, description="Image reference, stored as an empty string when omitted")

    @field_validator("quantity", mode="before")
    @classmethod
    def truncate_quantity(cls, value: Any) -> Any:
        """Accept any finite number (or numeric string) and keep its integer part"""
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                value = float(value)
            except ValueError:
                return value
        if isinstance(value, float) and math.isfinite(value):
            return int(value)
        return value


class ProductResponse(BaseModel):
    id: int
    name: str
    description: str
    price_cost: float
    price_sale: float
    quantity: int
    image: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ProductResponse":
        """Build from a `productos` row, translating store column names"""
        return cls(
            id=row["id"],
            name=row["nombre"],
            description=row["descripcion"],
            price_cost=row["precio_costo"],
            price_sale=row["precio_venta"],
            quantity=row["cantidad"],
            image=row["fototgrafia"] or "",
        )


class ProductCreatedResponse(BaseModel):
    message: str
    id: int
    product: ProductResponse


class ProductUpdatedResponse(BaseModel):
    message: str
    product: ProductResponse


class MessageResponse(BaseModel):
    message: str
