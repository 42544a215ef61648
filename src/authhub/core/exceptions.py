"""Exception handlers with request_id in responses."""

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.authhub.api.context import expire_deleted_cookies
from src.authhub.core.errors import (
    InvariantViolation,
    KnownError,
    OAuthProtocolError,
    ProviderCallbackError,
    StatusError,
)
from src.authhub.core.logging import get_logger

logger = get_logger(__name__)


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
        )

    @app.exception_handler(KnownError)
    async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={**exc.to_json(), "request_id": correlation_id.get()},
            headers={"X-Stack-Known-Error": exc.error_code},
        )

    @app.exception_handler(StatusError)
    async def status_error_handler(request: Request, exc: StatusError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.message,
                "request_id": correlation_id.get(),
            },
        )

    @app.exception_handler(OAuthProtocolError)
    async def oauth_protocol_error_handler(
        request: Request, exc: OAuthProtocolError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={**exc.to_json(), "request_id": correlation_id.get()},
            headers={"Cache-Control": "no-store", "Pragma": "no-cache"},
        )

    @app.exception_handler(ProviderCallbackError)
    async def provider_callback_error_handler(
        request: Request, exc: ProviderCallbackError
    ) -> JSONResponse:
        request_id = correlation_id.get()
        logger.warning(
            "OAuth provider callback failed",
            error=str(exc),
            request_id=request_id,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=502,
            content={
                "detail": "The OAuth provider returned an invalid response. Please try again.",
                "request_id": request_id,
            },
        )

    @app.exception_handler(InvariantViolation)
    async def invariant_violation_handler(
        request: Request, exc: InvariantViolation
    ) -> JSONResponse:
        request_id = correlation_id.get()
        logger.error(
            "Invariant violation",
            error=str(exc),
            context=exc.context,
            request_id=request_id,
            path=request.url.path,
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        response = JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )
        # Runs outside the cookie expiry middleware
        expire_deleted_cookies(request, response)
        return response
