"""Provider variants: endpoints, default scopes and user-info normalization."""

from typing import Any

import httpx

from src.authhub.providers.base import ProviderSpec
from src.authhub.schemas.oauth import OAuthUserInfo


async def _get_json(client: httpx.AsyncClient, url: str, access_token: str) -> Any:
    response = await client.get(
        url,
        headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
    )
    response.raise_for_status()
    return response.json()


async def _google_user_info(client: httpx.AsyncClient, access_token: str) -> OAuthUserInfo:
    data = await _get_json(client, "https://openidconnect.googleapis.com/v1/userinfo", access_token)
    return OAuthUserInfo(
        account_id=str(data["sub"]),
        email=data.get("email"),
        email_verified=bool(data.get("email_verified")),
        display_name=data.get("name"),
        profile_image_url=data.get("picture"),
    )


async def _github_user_info(client: httpx.AsyncClient, access_token: str) -> OAuthUserInfo:
    user = await _get_json(client, "https://api.github.com/user", access_token)
    emails = await _get_json(client, "https://api.github.com/user/emails", access_token)
    primary = next((e for e in emails if e.get("primary")), None)
    return OAuthUserInfo(
        account_id=str(user["id"]),
        email=primary["email"] if primary else user.get("email"),
        email_verified=bool(primary and primary.get("verified")),
        display_name=user.get("name") or user.get("login"),
        profile_image_url=user.get("avatar_url"),
    )


async def _microsoft_user_info(client: httpx.AsyncClient, access_token: str) -> OAuthUserInfo:
    data = await _get_json(client, "https://graph.microsoft.com/oidc/userinfo", access_token)
    # Microsoft accounts do not assert ownership of the address
    return OAuthUserInfo(
        account_id=str(data["sub"]),
        email=data.get("email"),
        email_verified=False,
        display_name=data.get("name"),
        profile_image_url=None,
    )


async def _discord_user_info(client: httpx.AsyncClient, access_token: str) -> OAuthUserInfo:
    data = await _get_json(client, "https://discord.com/api/users/@me", access_token)
    avatar = data.get("avatar")
    return OAuthUserInfo(
        account_id=str(data["id"]),
        email=data.get("email"),
        email_verified=bool(data.get("verified")),
        display_name=data.get("global_name") or data.get("username"),
        profile_image_url=f"https://cdn.discordapp.com/avatars/{data['id']}/{avatar}.png"
        if avatar
        else None,
    )


async def _gitlab_user_info(client: httpx.AsyncClient, access_token: str) -> OAuthUserInfo:
    data = await _get_json(client, "https://gitlab.com/api/v4/user", access_token)
    return OAuthUserInfo(
        account_id=str(data["id"]),
        email=data.get("email"),
        email_verified=bool(data.get("confirmed_at")),
        display_name=data.get("name"),
        profile_image_url=data.get("avatar_url"),
    )


async def _spotify_user_info(client: httpx.AsyncClient, access_token: str) -> OAuthUserInfo:
    data = await _get_json(client, "https://api.spotify.com/v1/me", access_token)
    images = data.get("images") or []
    return OAuthUserInfo(
        account_id=str(data["id"]),
        email=data.get("email"),
        email_verified=False,
        display_name=data.get("display_name"),
        profile_image_url=images[0]["url"] if images else None,
    )


GOOGLE = ProviderSpec(
    type="google",
    authorization_endpoint="https://accounts.google.com/o/oauth2/v2/auth",
    token_endpoint="https://oauth2.googleapis.com/token",
    default_scope="openid email profile",
    fetch_user_info=_google_user_info,
    extra_authorize_params={"access_type": "offline", "prompt": "consent"},
)

GITHUB = ProviderSpec(
    type="github",
    authorization_endpoint="https://github.com/login/oauth/authorize",
    token_endpoint="https://github.com/login/oauth/access_token",
    default_scope="user:email",
    fetch_user_info=_github_user_info,
)

MICROSOFT = ProviderSpec(
    type="microsoft",
    authorization_endpoint="https://login.microsoftonline.com/common/oauth2/v2.0/authorize",
    token_endpoint="https://login.microsoftonline.com/common/oauth2/v2.0/token",
    default_scope="openid email profile offline_access",
    fetch_user_info=_microsoft_user_info,
)

DISCORD = ProviderSpec(
    type="discord",
    authorization_endpoint="https://discord.com/oauth2/authorize",
    token_endpoint="https://discord.com/api/oauth2/token",
    default_scope="identify email",
    fetch_user_info=_discord_user_info,
)

GITLAB = ProviderSpec(
    type="gitlab",
    authorization_endpoint="https://gitlab.com/oauth/authorize",
    token_endpoint="https://gitlab.com/oauth/token",
    default_scope="read_user",
    fetch_user_info=_gitlab_user_info,
)

SPOTIFY = ProviderSpec(
    type="spotify",
    authorization_endpoint="https://accounts.spotify.com/authorize",
    token_endpoint="https://accounts.spotify.com/api/token",
    default_scope="user-read-email user-read-private",
    fetch_user_info=_spotify_user_info,
)

PROVIDER_SPECS: dict[str, ProviderSpec] = {
    spec.type: spec for spec in (GOOGLE, GITHUB, MICROSOFT, DISCORD, GITLAB, SPOTIFY)
}
