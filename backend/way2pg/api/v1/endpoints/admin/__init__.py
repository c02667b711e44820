"""
Admin API endpoints for the Way2PG admin dashboard.
All endpoints require the admin role.
"""
from fastapi import APIRouter

from way2pg.api.v1.endpoints.admin import dashboard, users, accommodations

admin_router = APIRouter(prefix="/admin", tags=["Admin"])

admin_router.include_router(dashboard.router)
admin_router.include_router(users.router)
admin_router.include_router(accommodations.router, prefix="/accommodations")
