from fastapi import APIRouter

from src.authhub.api.v1 import oauth, users

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(oauth.router)
api_router.include_router(users.router)
