"""
Pydantic schemas for order lookup and administrative adjustment.
"""

from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, Field

OrderStatus = Literal["PENDING", "CONFIRMED", "CANCELLED", "COMPLETED", "REFUNDED"]


class OrderLineUpdate(BaseModel):
    product_id: int
    product_type_id: int
    session_id: int
    quantity: int = Field(..., ge=0)


class OrderUpdate(BaseModel):
    order_lines: Optional[list[OrderLineUpdate]] = None
    status: Optional[OrderStatus] = None
    total_cost: Optional[Decimal] = Field(None, ge=0)


class OrderLineResponse(BaseModel):
    id: int
    product_id: int
    product_type_id: int
    session_id: int
    quantity: int
    unit_price: Decimal

    model_config = {"from_attributes": True}


class OrderResponse(BaseModel):
    id: int
    transaction_id: str
    registrant_kind: str
    guest_id: Optional[int]
    member_id: Optional[int]
    total_cost: Decimal
    status: str
    created_at: datetime
    order_lines: list[OrderLineResponse]

    model_config = {"from_attributes": True}


class OrderCountResponse(BaseModel):
    count: int
