"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter
from shuttle.api.routes import auth, bookings, catalog, checkin, news, reports

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(catalog.router)
api_router.include_router(bookings.router)
api_router.include_router(checkin.router)
api_router.include_router(reports.router)
api_router.include_router(news.router)
