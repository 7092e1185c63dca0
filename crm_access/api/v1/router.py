from fastapi import APIRouter

from crm_access.api.v1.endpoints import auth, permissions, users

api_router = APIRouter(prefix="/api/v1")

# Public
api_router.include_router(auth.router, tags=["Auth"])
api_router.include_router(permissions.router, tags=["Permissions"])

# Admin
api_router.include_router(users.router, prefix="/admin", tags=["Admin - Users"])
