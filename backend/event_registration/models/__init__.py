from event_registration.models.event import Venue, Event, EventSession, ProductSessionMap
from event_registration.models.product import Product, ProductType
from event_registration.models.registrant import Member, Guest
from event_registration.models.order import OrderMaster, OrderLine

__all__ = [
    "Venue", "Event", "EventSession", "ProductSessionMap",
    "Product", "ProductType",
    "Member", "Guest",
    "OrderMaster", "OrderLine",
]
