"""Expire cookies deleted through the request cookie store."""

from fastapi import Request, Response
from starlette.middleware.base import RequestResponseEndpoint

from src.authhub.api.context import expire_deleted_cookies


async def cookie_expiry_middleware(
    request: Request, call_next: RequestResponseEndpoint
) -> Response:
    """Expire deleted cookies on the outgoing response.

    Applies to redirects and to errors rendered by the exception handlers.
    Unhandled exceptions pass through; the generic handler expires the
    cookies on the 500 it renders.
    """
    response = await call_next(request)
    return expire_deleted_cookies(request, response)
