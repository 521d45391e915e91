"""
System health check endpoint.
Provides a liveness probe for load balancers.
"""

from fastapi import APIRouter

from logger_json.core.config import get_settings

router = APIRouter()


@router.get(
    "/health",
    summary="Basic health check (no auth required)",
    response_model=dict,
)
async def health_check() -> dict:
    """Liveness probe for load balancers and Kubernetes."""
    settings = get_settings()
    return {
        "status": "healthy",
        "app": settings.APP_NAME,
        "environment": settings.APP_ENV,
    }
