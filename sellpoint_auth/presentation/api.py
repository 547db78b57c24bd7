from fastapi import APIRouter

from sellpoint_auth.presentation.routers.v1.account import router as account_router
from sellpoint_auth.presentation.routers.v1.admin import router as admin_router
from sellpoint_auth.presentation.routers.v1.auth import router as auth_router
from sellpoint_auth.presentation.routers.v1.password_reset import (
    router as password_reset_router,
)
from sellpoint_auth.presentation.routes.health import router as health_router

api = APIRouter()

# Add all v1 routers here
routers = (auth_router, password_reset_router, account_router, admin_router)
for router in routers:
    api.include_router(router, prefix="/v1")

api.include_router(health_router)
