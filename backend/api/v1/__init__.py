"""Version 1 API routers."""

from fastapi import APIRouter

from . import auth, games, users

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(games.router)

__all__ = ["api_router"]
