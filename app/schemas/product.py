"""
Pydantic schemas for Product entities.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Optional

from pydantic import Field, PlainSerializer, StringConstraints

from app.schemas.base import CamelModel

# prices go over the wire as JSON numbers, not strings
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# limites das colunas: Numeric(18, 2) e INTEGER de 32 bits
MAX_STOCK_QUANTITY = 2**31 - 1


class ProductCreate(CamelModel):
    """Schema for creating or replacing a product"""
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=200)]
    description: str = Field("", max_length=500)
    price: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)
    stock_quantity: int = Field(0, ge=0, le=MAX_STOCK_QUANTITY)


class ProductOut(CamelModel):
    """Schema for product output"""
    id: int
    name: str
    description: str
    price: Money
    stock_quantity: int
    created_date: datetime
    updated_date: Optional[datetime] = None
    is_active: bool
