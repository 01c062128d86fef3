"""
Pydantic schemas for session listings with live seat availability.
"""

from datetime import date, time
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel


class ProductTypeResponse(BaseModel):
    id: int
    product_size: str
    product_choice: str
    product_pref: str
    product_subtype: str
    product_price: Decimal

    model_config = {"from_attributes": True}


class ProductResponse(BaseModel):
    id: int
    product_code: str
    product_name: str
    product_type: str
    product_types: list[ProductTypeResponse]


class SessionAvailabilityResponse(BaseModel):
    session_id: int
    session_balance_capacity: int
    current_registrations: int
    available_spots: int
    is_full: bool


class SessionResponse(BaseModel):
    id: int
    event_id: int
    session_name: str
    session_date: date
    start_time: time
    end_time: time
    session_detail: Optional[str]
    session_balance_capacity: int
    current_registrations: int
    available_spots: int
    is_full: bool
    products: list[ProductResponse]


class SessionListResponse(BaseModel):
    event_id: int
    sessions: list[SessionResponse]
    cached: bool = False
