"""API v1 router aggregation.

Routes take their use cases from aigency.api.v1.dependencies; none builds
repositories itself.
"""

from fastapi import APIRouter

from aigency.api.v1.endpoints import companies, health, tasks

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(companies.router, prefix="/companies", tags=["companies"])
