"""Access token codec and opaque secret generation.

Access tokens are HS256 JWTs. New tokens carry an ``aud`` claim (the tenancy's
root project id) and are signed with a key derived from the global secret and
that audience, so a token minted for one project never verifies for another.
Tokens issued before audiences existed are verified against the global secret.
"""

import hmac
import secrets
from datetime import UTC, datetime, timedelta
from hashlib import sha256
from typing import Any
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel, ValidationError

from src.authhub.core.config import get_settings
from src.authhub.core.errors import AccessTokenExpired, UnparsableAccessToken
from src.authhub.core.logging import get_logger

logger = get_logger(__name__)

JWT_ISSUER = "https://access-token.jwt-signature.authhub.dev"
ACCESS_TOKEN_ROLE = "authenticated"


class AccessTokenClaims(BaseModel):
    """Verified access token payload."""

    project_id: UUID
    user_id: UUID
    branch_id: str
    # Legacy tokens were minted before sessions had ids
    refresh_token_id: UUID | None = None
    role: str | None = None
    exp: int

    @property
    def expires_at(self) -> datetime:
        return datetime.fromtimestamp(self.exp, UTC)


def generate_secure_random_string(num_bytes: int = 32) -> str:
    """Return a URL-safe secret with ``num_bytes`` of entropy (refresh tokens, codes)."""
    return secrets.token_urlsafe(num_bytes)


def hash_token(token: str) -> str:
    """Hash a token using SHA256 for secure storage."""
    return sha256(token.encode()).hexdigest()


def _audience_signing_key(audience: str) -> str:
    settings = get_settings()
    return hmac.new(
        settings.jwt_secret_key.encode(),
        f"audience:{audience}".encode(),
        sha256,
    ).hexdigest()


def sign_access_token(
    *,
    project_id: str | UUID,
    branch_id: str,
    user_id: str | UUID,
    refresh_token_id: str | UUID,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token bound to ``project_id``."""
    settings = get_settings()
    now = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "iss": JWT_ISSUER,
        "aud": str(project_id),
        "sub": str(user_id),
        "branchId": branch_id,
        "refreshTokenId": str(refresh_token_id),
        "role": ACCESS_TOKEN_ROLE,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(  # type: ignore[no-any-return]
        to_encode,
        _audience_signing_key(str(project_id)),
        algorithm=settings.jwt_algorithm,
    )


def _legacy_verify_global(token: str) -> dict[str, Any]:
    # TODO: remove once every token minted without an "aud" claim has expired
    settings = get_settings()
    return jwt.decode(  # type: ignore[no-any-return]
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        issuer=JWT_ISSUER,
        options={"verify_aud": False},
    )


def _verify_with_audience(token: str, audience: str) -> dict[str, Any]:
    settings = get_settings()
    return jwt.decode(  # type: ignore[no-any-return]
        token,
        _audience_signing_key(audience),
        algorithms=[settings.jwt_algorithm],
        audience=audience,
        issuer=JWT_ISSUER,
    )


def decode_access_token(token: str) -> AccessTokenClaims:
    """Verify an access token.

    Raises:
        AccessTokenExpired: The token is well-formed and correctly signed but
            past its ``exp``. The client should refresh.
        UnparsableAccessToken: Anything else (malformed, bad signature,
            wrong issuer, missing claims).
    """
    unverified: dict[str, Any] = {}
    try:
        unverified = jwt.get_unverified_claims(token)
        audience = unverified.get("aud")
        if audience is None:
            payload = _legacy_verify_global(token)
        elif isinstance(audience, str):
            payload = _verify_with_audience(token, audience)
        else:
            raise UnparsableAccessToken()
    except ExpiredSignatureError as e:
        exp = unverified.get("exp")
        expired_at = datetime.fromtimestamp(exp, UTC) if isinstance(exp, int | float) else None
        raise AccessTokenExpired(expired_at) from e
    except JWTError as e:
        raise UnparsableAccessToken() from e

    try:
        return AccessTokenClaims(
            project_id=payload.get("aud") or payload.get("projectId"),
            user_id=payload.get("sub"),
            branch_id=payload.get("branchId"),
            refresh_token_id=payload.get("refreshTokenId"),
            role=payload.get("role"),
            exp=payload.get("exp"),
        )
    except ValidationError as e:
        logger.warning("Access token verified but claims are invalid", errors=e.error_count())
        raise UnparsableAccessToken() from e
