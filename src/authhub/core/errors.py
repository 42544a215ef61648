"""Error taxonomy shared by the service and API layers.

Three families, handled differently at the edge:

- ``KnownError``: stable, client-facing errors with an ``error_code``. Inside
  the OAuth callback these may be redirected to a tenant-validated
  ``errorRedirectUrl``; elsewhere they render as JSON.
- ``StatusError``: plain HTTP failures (e.g. bad request) rendered directly.
- ``InvariantViolation``: internal assertion failures. Always logged, always
  a 500, never redirected.

``OAuthProtocolError`` covers RFC 6749 errors produced by the internal
authorization server and the token endpoint.
"""

from datetime import datetime
from typing import Any


class KnownError(Exception):
    """Base class for errors with a stable, documented error code."""

    status_code: int = 400
    error_code: str = "UNKNOWN_ERROR"
    default_message: str = "An error occurred"

    def __init__(self, message: str | None = None, details: dict[str, Any] | None = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_json(self) -> dict[str, Any]:
        body: dict[str, Any] = {"code": self.error_code, "error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class OuterOAuthTimeout(KnownError):
    status_code = 400
    error_code = "OUTER_OAUTH_TIMEOUT"
    default_message = "The OAuth sign-in attempt has expired. Please try signing in again."


class OAuthProviderNotFoundOrNotEnabled(KnownError):
    status_code = 400
    error_code = "OAUTH_PROVIDER_NOT_FOUND_OR_NOT_ENABLED"
    default_message = "The OAuth provider is not found or not enabled."


class OAuthProviderAccessDenied(KnownError):
    status_code = 400
    error_code = "OAUTH_PROVIDER_ACCESS_DENIED"
    default_message = "The OAuth provider denied access to the user."


class UserAlreadyConnectedToAnotherOAuthConnection(KnownError):
    status_code = 409
    error_code = "USER_ALREADY_CONNECTED_TO_ANOTHER_OAUTH_CONNECTION"
    default_message = "The user is already connected to another OAuth account."


class OAuthConnectionAlreadyConnectedToAnotherUser(KnownError):
    status_code = 409
    error_code = "OAUTH_CONNECTION_ALREADY_CONNECTED_TO_ANOTHER_USER"
    default_message = "The OAuth connection is already connected to another user."


class SignUpNotEnabled(KnownError):
    status_code = 400
    error_code = "SIGN_UP_NOT_ENABLED"
    default_message = "Creation of new accounts is not enabled for this project."


class RedirectUrlNotWhitelisted(KnownError):
    status_code = 400
    error_code = "REDIRECT_URL_NOT_WHITELISTED"
    default_message = "Redirect URL not whitelisted."


class AccessTokenExpired(KnownError):
    status_code = 401
    error_code = "ACCESS_TOKEN_EXPIRED"
    default_message = "Access token has expired. Please refresh it and try again."

    def __init__(self, expired_at: datetime | None = None):
        super().__init__(
            details={"expired_at_millis": int(expired_at.timestamp() * 1000)}
            if expired_at
            else None
        )
        self.expired_at = expired_at


class UnparsableAccessToken(KnownError):
    status_code = 401
    error_code = "UNPARSABLE_ACCESS_TOKEN"
    default_message = "Access token is not parsable."


class RefreshTokenNotFoundOrExpired(KnownError):
    status_code = 401
    error_code = "REFRESH_TOKEN_NOT_FOUND_OR_EXPIRED"
    default_message = "Refresh token not found for this project, or the session has expired."


class StatusError(Exception):
    """An HTTP failure without a stable error code."""

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    NOT_FOUND = 404

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class InvariantViolation(Exception):
    """Something that should be structurally impossible happened.

    Carries extra context for operators; never shown to end users.
    """

    def __init__(self, message: str, **context: Any):
        self.context = context
        super().__init__(message)


class ProviderCallbackError(Exception):
    """The third-party provider returned an unusable callback or token response."""


class OAuthProtocolError(Exception):
    """RFC 6749 error raised by the internal authorization server."""

    error: str = "server_error"
    status_code: int = 400

    def __init__(self, description: str, parameter: str | None = None):
        self.description = description
        self.parameter = parameter
        super().__init__(description)

    def to_json(self) -> dict[str, str]:
        return {"error": self.error, "error_description": self.description}


class InvalidRequestError(OAuthProtocolError):
    error = "invalid_request"


class InvalidClientError(OAuthProtocolError):
    error = "invalid_client"
    status_code = 401


class InvalidGrantError(OAuthProtocolError):
    error = "invalid_grant"


class InvalidScopeError(OAuthProtocolError):
    error = "invalid_scope"


class UnsupportedGrantTypeError(OAuthProtocolError):
    error = "unsupported_grant_type"


class UnsupportedResponseTypeError(OAuthProtocolError):
    error = "unsupported_response_type"
