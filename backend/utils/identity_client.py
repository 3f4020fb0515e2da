# backend/utils/identity_client.py
import httpx
import logging
from functools import lru_cache
from typing import Optional
from urllib.parse import urljoin

from config import settings
from schemas.user import IdentityUser, IdentitySession

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """Raised when the identity provider rejects a request or cannot be reached."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _user_from(payload: dict) -> IdentityUser:
    metadata = payload.get("user_metadata") or {}
    return IdentityUser(
        id=str(payload["id"]),
        email=payload.get("email") or "",
        name=metadata.get("full_name") or metadata.get("name") or payload.get("email"),
    )


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    return (
        body.get("error_description")
        or body.get("msg")
        or body.get("message")
        or body.get("error")
        or f"HTTP {response.status_code}"
    )


class SupabaseAuthClient:
    """Thin async client for a Supabase Auth (GoTrue) compatible REST API."""

    def __init__(self, base_url: Optional[str], api_key: Optional[str], timeout: float = 10.0):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout

    def _url(self, path: str) -> str:
        # Configuration is checked on use, not at startup
        if not self.base_url or not self.api_key:
            raise IdentityProviderError("Identity provider is not configured", status_code=500)
        return urljoin(self.base_url.rstrip("/") + "/", path.lstrip("/"))

    def _headers(self, token: Optional[str] = None) -> dict:
        headers = {"apikey": self.api_key or "", "Content-Type": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, path: str, token: Optional[str] = None, **kwargs) -> httpx.Response:
        url = self._url(path)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            try:
                response = await client.request(method, url, headers=self._headers(token), **kwargs)
            except httpx.RequestError as e:
                logger.error(f"Identity provider unreachable: {e}")
                raise IdentityProviderError("Identity provider unavailable", status_code=503) from e
        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning("Identity provider %s %s failed: %s", method, path, message)
            raise IdentityProviderError(message, status_code=response.status_code)
        return response

    async def sign_up(self, email: str, password: str, metadata: Optional[dict] = None) -> IdentitySession:
        response = await self._request(
            "POST", "/auth/v1/signup",
            json={"email": email, "password": password, "data": metadata or {}},
        )
        body = response.json()
        # With e-mail confirmation enabled the provider returns a bare user
        user_payload = body.get("user") or body
        return IdentitySession(access_token=body.get("access_token"), user=_user_from(user_payload))

    async def sign_in(self, email: str, password: str) -> IdentitySession:
        response = await self._request(
            "POST", "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        body = response.json()
        return IdentitySession(access_token=body.get("access_token"), user=_user_from(body["user"]))

    async def get_user(self, token: str) -> IdentityUser:
        response = await self._request("GET", "/auth/v1/user", token=token)
        return _user_from(response.json())

    async def sign_out(self, token: str) -> None:
        await self._request("POST", "/auth/v1/logout", token=token)


@lru_cache
def get_identity_provider() -> SupabaseAuthClient:
    # One client per application instance; tests swap it via dependency_overrides
    return SupabaseAuthClient(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY, settings.IDENTITY_TIMEOUT)
