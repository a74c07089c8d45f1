"""API v1: routes mounted under /api/v1."""

from aigency.api.v1.router import api_router

__all__ = ["api_router"]
