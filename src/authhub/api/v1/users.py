"""User endpoints."""

from fastapi import APIRouter

from src.authhub.api.dependencies import CurrentUser
from src.authhub.schemas.user import UserRead

router = APIRouter(prefix="/users", tags=["users"])


@router.get(
    "/me",
    response_model=UserRead,
    responses={
        200: {
            "description": "Current user profile",
            "content": {
                "application/json": {
                    "example": {
                        "id": "0190f1a4-5b7e-7c3d-9a2b-1e4f6d8c0a12",
                        "display_name": "Ada Lovelace",
                        "profile_image_url": "https://avatars.githubusercontent.com/u/1",
                        "primary_email": "ada@example.com",
                        "primary_email_verified": True,
                        "primary_email_auth_enabled": True,
                        "oauth_providers": ["github"],
                        "created_at": "2026-01-15T10:30:00",
                    }
                }
            },
        },
        401: {"description": "Missing, expired or unparsable access token"},
    },
)
async def get_current_user(current_user: CurrentUser) -> UserRead:
    """Get the user the access token was issued to."""
    return current_user
