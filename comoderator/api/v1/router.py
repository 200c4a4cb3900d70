"""
API v1 router aggregation.
"""

from fastapi import APIRouter
from comoderator.api.v1.endpoints import sessions, health

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(sessions.router, prefix="/sessions", tags=["Sessions"])
api_router.include_router(health.router, tags=["Health"])

__all__ = ["api_router"]
