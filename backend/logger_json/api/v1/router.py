"""
Router that aggregates the example endpoint routers.
"""

from fastapi import APIRouter

from logger_json.api.v1.endpoints import pages, system

api_router = APIRouter()

api_router.include_router(system.router, prefix="/api/v1/system", tags=["System"])
api_router.include_router(pages.router, tags=["Pages"])
