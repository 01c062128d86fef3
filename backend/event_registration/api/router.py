"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from event_registration.api.routes import sessions, registrations, orders

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(sessions.router)
api_router.include_router(registrations.router)
api_router.include_router(orders.router)
