"""
Pydantic schemas for registration requests, quotes and their responses.
"""

from decimal import Decimal
from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field


class ProductSelection(BaseModel):
    product_id: int
    product_type_id: int
    quantity: int = Field(..., ge=1, le=1000)


class SessionSelection(BaseModel):
    session_id: int
    opt_out_of_food: bool = False
    product_selections: list[ProductSelection] = Field(default_factory=list)


class GuestRegistrationCreate(BaseModel):
    guest_name: str = Field(..., min_length=1, max_length=255)
    guest_email: Optional[EmailStr] = None
    guest_phone: Optional[str] = Field(None, max_length=50)
    guest_location: Optional[str] = Field(None, max_length=255)
    adults: int = Field(0, ge=0)
    children: int = Field(0, ge=0)
    infants: int = Field(0, ge=0)
    elder: int = Field(0, ge=0)
    member_id: int
    event_id: int
    session_selections: list[SessionSelection]


class MemberRegistrationCreate(BaseModel):
    event_id: int
    adults: int = Field(1, ge=1)
    children: int = Field(0, ge=0)
    infants: int = Field(0, ge=0)
    elder: int = Field(0, ge=0)
    session_selections: list[SessionSelection]


class QuoteRequest(BaseModel):
    registrant_kind: Literal["GUEST", "MEMBER"] = "GUEST"
    event_id: int
    session_selections: list[SessionSelection]


class PriceQuoteResponse(BaseModel):
    entry_subtotal: Decimal
    entry_cost: Decimal
    food_cost: Decimal
    total_cost: Decimal
    discount_applied: bool
    discount_amount: Decimal
    discount_factor: Decimal
    selected_sessions: int
    total_sessions: int


class RegistrationResponse(PriceQuoteResponse):
    transaction_id: str
    order_id: int
    registrant_kind: str
    status: str
