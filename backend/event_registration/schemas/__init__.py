from event_registration.schemas.registration import (
    ProductSelection, SessionSelection, GuestRegistrationCreate, MemberRegistrationCreate,
    QuoteRequest, PriceQuoteResponse, RegistrationResponse,
)
from event_registration.schemas.order import (
    OrderLineUpdate, OrderUpdate, OrderLineResponse, OrderResponse, OrderCountResponse,
)
from event_registration.schemas.session import (
    ProductTypeResponse, ProductResponse, SessionAvailabilityResponse, SessionResponse,
    SessionListResponse,
)

__all__ = [
    "ProductSelection", "SessionSelection", "GuestRegistrationCreate", "MemberRegistrationCreate",
    "QuoteRequest", "PriceQuoteResponse", "RegistrationResponse",
    "OrderLineUpdate", "OrderUpdate", "OrderLineResponse", "OrderResponse", "OrderCountResponse",
    "ProductTypeResponse", "ProductResponse", "SessionAvailabilityResponse", "SessionResponse",
    "SessionListResponse",
]
