"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from app.api.v1.dependencies (no manual client/service construction).
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    cache,
    health,
    notifications,
    payments,
    profiles,
    properties,
    tenant_requests,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(properties.router, prefix="/properties", tags=["properties"])
api_router.include_router(
    tenant_requests.applications_router, prefix="/applications", tags=["applications"]
)
api_router.include_router(
    tenant_requests.viewings_router, prefix="/viewing-requests", tags=["viewing-requests"]
)
api_router.include_router(profiles.router, prefix="/profiles", tags=["profiles"])
api_router.include_router(payments.router, prefix="/payments", tags=["payments"])
api_router.include_router(
    notifications.router, prefix="/notifications", tags=["notifications"]
)
api_router.include_router(cache.router, prefix="/cache", tags=["cache"])
