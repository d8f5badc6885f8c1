"""Central API router aggregating all domain routers."""

from fastapi import APIRouter

from wphub.activity.router import router as activity_router
from wphub.auth.router import router as auth_router
from wphub.health.router import router as health_router
from wphub.messaging.router import notifications_router
from wphub.messaging.router import router as messaging_router
from wphub.ownership.router import router as ownership_router
from wphub.plugin.router import router as plugin_router
from wphub.project.router import router as project_router
from wphub.site.router import router as site_router
from wphub.team.router import router as team_router
from wphub.user.router import router as user_router

api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(team_router)
api_router.include_router(site_router)
api_router.include_router(plugin_router)
api_router.include_router(ownership_router)
api_router.include_router(messaging_router)
api_router.include_router(notifications_router)
api_router.include_router(project_router)
api_router.include_router(activity_router)
