"""OAuth endpoints - provider callback and token endpoint."""

from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from starlette.requests import Request

from src.authhub.api.context import RequestCookieStore
from src.authhub.api.dependencies import OAuthCallbackServiceDep, OAuthServerDep
from src.authhub.core.logging import get_logger
from src.authhub.core.rate_limit import limiter

logger = get_logger(__name__)

router = APIRouter(prefix="/auth/oauth", tags=["oauth"])

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_body(request: Request) -> dict[str, Any]:
    """Read a form or JSON body as a flat dict. Other bodies are ignored."""
    if request.method != "POST":
        return {}
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        body = await request.json()
        return body if isinstance(body, dict) else {}
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}
    return {}


@router.api_route(
    "/callback/{provider_id}",
    methods=["GET", "POST"],
    status_code=307,
    responses={
        307: {
            "description": "Redirect to the client's redirect_uri with an authorization "
            "code, or to the flow's errorRedirectUrl",
        },
        400: {"description": "Missing inner cookie, invalid outer state or flow error"},
    },
    include_in_schema=False,
)
@limiter.limit("30/minute")
async def oauth_callback(
    request: Request,
    provider_id: str,
    service: OAuthCallbackServiceDep,
) -> JSONResponse:
    """Handle a third-party provider redirecting the user back to AuthHub.

    Providers call back with GET (query) or POST (form_post); both are merged,
    body taking precedence.
    """
    query = dict(request.query_params)
    body = await _read_body(request)
    inner_state = str(query.get("state") or body.get("state") or "")

    redirect = await service.handle_callback(
        provider_id=provider_id,
        inner_state=inner_state,
        params={**query, **body},
        cookies=RequestCookieStore(request),
    )
    return JSONResponse(
        status_code=redirect.status_code,
        content=redirect.model_dump(by_alias=True),
        headers={"Location": redirect.location},
    )


@router.post(
    "/token",
    responses={
        200: {
            "description": "Session tokens",
            "content": {
                "application/json": {
                    "example": {
                        "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                        "refresh_token": "c0FfM2xxWk5vX3Zqb0dCZ3E2c1pGbw",
                        "token_type": "bearer",
                        "expires_in": 600,
                        "is_new_user": True,
                        "after_callback_redirect_url": "https://app.example.com/welcome",
                    }
                }
            },
        },
        400: {"description": "invalid_request, invalid_grant or unsupported_grant_type"},
        401: {"description": "invalid_client or refresh token not found"},
    },
)
@limiter.limit("20/minute")
async def oauth_token(request: Request, server: OAuthServerDep) -> JSONResponse:
    """Exchange an authorization code or refresh token for session tokens."""
    form = await request.form()
    tokens = await server.exchange_token(
        {key: value for key, value in form.items() if isinstance(value, str)}
    )
    return JSONResponse(
        content=tokens.model_dump(exclude_none=True),
        headers={"Cache-Control": "no-store", "Pragma": "no-cache"},
    )
