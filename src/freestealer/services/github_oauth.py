"""GitHub OAuth2 client used by the login flow."""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import httpx

from freestealer.core.settings import settings
from freestealer.services.user_service import GitHubIdentity

logger = logging.getLogger(__name__)

GITHUB_SCOPES = ("user:email",)


class OAuthError(Exception):
    """GitHub refused the authorization code or returned an unusable profile."""


class GitHubOAuthClient:
    """Thin async wrapper around GitHub's authorize, token and user endpoints."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        callback_url: str,
        *,
        authorize_url: str = "https://github.com/login/oauth/authorize",
        token_url: str = "https://github.com/login/oauth/access_token",
        api_url: str = "https://api.github.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.callback_url = callback_url
        self.authorize_endpoint = authorize_url
        self.token_endpoint = token_url
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def authorize_url(self, state: str) -> str:
        """Return the GitHub consent page URL for ``state``."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.callback_url,
            "scope": " ".join(GITHUB_SCOPES),
            "state": state,
        }
        return f"{self.authorize_endpoint}?{urlencode(params)}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def authenticate(self, code: str) -> GitHubIdentity:
        """Exchange ``code`` for a token and load the matching GitHub profile.

        Raises:
            OAuthError: Any step of the exchange failed.
        """
        async with self._client() as client:
            try:
                token = await self._exchange_code(client, code)
                profile = await self._get_json(client, "/user", token["access_token"])
                email = profile.get("email") or await self._primary_email(
                    client, token["access_token"]
                )
            except (httpx.HTTPError, ValueError) as err:
                logger.error("GitHub OAuth request failed: %s", err)
                raise OAuthError("Failed to reach GitHub") from err

        github_id = profile.get("id")
        login = profile.get("login")
        if github_id is None or not login:
            raise OAuthError("GitHub profile is missing id or login")

        return GitHubIdentity(
            github_id=str(github_id),
            login=login,
            name=profile.get("name"),
            email=email,
            avatar_url=profile.get("avatar_url"),
            access_token=token["access_token"],
            refresh_token=token.get("refresh_token"),
        )

    async def _exchange_code(self, client: httpx.AsyncClient, code: str) -> dict[str, Any]:
        response = await client.post(
            self.token_endpoint,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
                "redirect_uri": self.callback_url,
            },
            headers={"Accept": "application/json"},
        )
        payload: dict[str, Any] = response.json() if response.content else {}
        if response.status_code != 200 or "access_token" not in payload:
            # GitHub reports bad codes as 200 with an "error" field.
            logger.warning(
                "GitHub token exchange rejected: status=%s error=%s",
                response.status_code,
                payload.get("error"),
            )
            raise OAuthError(payload.get("error_description") or "Failed to exchange token")
        return payload

    async def _get_json(self, client: httpx.AsyncClient, path: str, access_token: str) -> Any:
        response = await client.get(
            f"{self.api_url}{path}",
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/vnd.github+json",
            },
        )
        if response.status_code != 200:
            logger.warning("GitHub API %s returned %s", path, response.status_code)
            raise OAuthError(f"GitHub API {path} returned {response.status_code}")
        return response.json()

    async def _primary_email(self, client: httpx.AsyncClient, access_token: str) -> str | None:
        try:
            emails = await self._get_json(client, "/user/emails", access_token)
        except OAuthError:
            return None
        for entry in emails:
            if entry.get("primary") and entry.get("verified"):
                return entry.get("email")
        return None


def get_github_client() -> GitHubOAuthClient | None:
    """FastAPI dependency returning the configured client, or None when disabled."""
    if not settings.github_oauth_configured:
        return None
    return GitHubOAuthClient(
        settings.github_client_id or "",
        settings.github_client_secret or "",
        settings.github_callback_url,
        authorize_url=settings.github_authorize_url,
        token_url=settings.github_token_url,
        api_url=settings.github_api_url,
        timeout=settings.github_http_timeout_seconds,
    )
