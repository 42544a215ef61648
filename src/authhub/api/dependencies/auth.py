"""Access token dependencies."""

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from src.authhub.api.dependencies.services import TenancyServiceDep, UserServiceDep
from src.authhub.core.logging import bind_user_context
from src.authhub.core.security import AccessTokenClaims, decode_access_token
from src.authhub.schemas.user import UserRead


async def get_access_token_claims(
    authorization: Annotated[str | None, Header()] = None,
) -> AccessTokenClaims:
    """Verify the Bearer access token.

    Expired and unparsable tokens raise their known errors (401 with
    ``ACCESS_TOKEN_EXPIRED`` / ``UNPARSABLE_ACCESS_TOKEN``).
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid authorization header",
        )
    return decode_access_token(authorization[7:])


AccessTokenClaimsDep = Annotated[AccessTokenClaims, Depends(get_access_token_claims)]


async def get_current_user(
    claims: AccessTokenClaimsDep,
    tenancy_service: TenancyServiceDep,
    user_service: UserServiceDep,
) -> UserRead:
    tenancy = await tenancy_service.get_tenancy_by_project(claims.project_id, claims.branch_id)
    if tenancy is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Project not found",
        )

    user = await user_service.get_user(tenancy.id, claims.user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    bind_user_context(user.id, user.primary_email)
    return user


CurrentUser = Annotated[UserRead, Depends(get_current_user)]
