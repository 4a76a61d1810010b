"""
API routers module.

This module contains all API route definitions organized by domain.
"""
from api.routers.health import router as health_router
from api.routers.users import router as users_router
from api.routers.readings import router as readings_router
from api.routers.settings import router as settings_router
from api.routers.alerts import router as alerts_router

__all__ = ["health_router", "users_router", "readings_router", "settings_router", "alerts_router"]
