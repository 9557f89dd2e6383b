from __future__ import annotations

from app.api.routes.app_settings import router as app_settings_router
from app.api.routes.auth import router as auth_router
from app.api.routes.businesses import router as businesses_router
from app.api.routes.dashboard import router as dashboard_router
from app.api.routes.download import router as download_router
from app.api.routes.health import router as health_router
from app.api.routes.modules import router as modules_router
from app.api.routes.profile import router as profile_router
from app.api.routes.users import router as users_router
from app.api.routes.users import team_router

__all__ = [
    "app_settings_router",
    "auth_router",
    "businesses_router",
    "dashboard_router",
    "download_router",
    "health_router",
    "modules_router",
    "profile_router",
    "team_router",
    "users_router",
]
