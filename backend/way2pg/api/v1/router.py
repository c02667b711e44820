from fastapi import APIRouter

from way2pg.api.v1.endpoints import auth, accommodations, owner, student, health
from way2pg.api.v1.endpoints.admin import admin_router

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router, prefix="/auth", tags=["Auth"])
api_router.include_router(accommodations.router, prefix="/accommodations", tags=["Accommodations"])
api_router.include_router(owner.router, prefix="/owner", tags=["Owner"])
api_router.include_router(student.router, prefix="/student", tags=["Student"])
api_router.include_router(admin_router)
