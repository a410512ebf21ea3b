"""
Client for the external identity provider.

Sessions, passwords and role storage live entirely in the provider; this
client only forwards the caller's credentials (cookie / bearer token) to the
provider's session and admin endpoints and returns the decoded JSON.
"""
import logging
from typing import Any, Dict, Mapping, Optional
import httpx
from crumbs.core.config import AUTH_BASE_URL, AUTH_TIMEOUT
from crumbs.core.exceptions import UpstreamError

log = logging.getLogger("crumbs.identity")

# Only these request headers carry the caller's identity upstream
FORWARDED_HEADERS = ("cookie", "authorization")


def forwardable_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {k: v for k, v in headers.items() if k.lower() in FORWARDED_HEADERS}


class IdentityClient:
    """Thin async wrapper over the provider's /api/auth HTTP API."""

    def __init__(self, base_url: str = AUTH_BASE_URL, timeout: float = AUTH_TIMEOUT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, headers: Mapping[str, str],
                       params: Optional[Dict[str, Any]] = None,
                       body: Optional[Dict[str, Any]] = None) -> Any:
        try:
            response = await self._client.request(
                method, path, headers=forwardable_headers(headers), params=params, json=body
            )
        except httpx.HTTPError as e:
            log.error(f"Identity provider unreachable ({method} {path}): {e}")
            raise UpstreamError(f"Identity provider unreachable: {e}") from e

        if response.status_code >= 400:
            log.error(f"Identity provider returned {response.status_code} for {method} {path}: {response.text}")
            raise UpstreamError(
                f"Identity provider returned {response.status_code} for {path}",
                upstream_status=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"Identity provider sent invalid JSON for {path}") from e

    # ----------- Sessions -----------

    async def get_session(self, headers: Mapping[str, str]) -> Optional[Dict[str, Any]]:
        """Returns the provider's {session, user} payload, or None when not signed in."""
        if not forwardable_headers(headers):
            return None
        payload = await self._request("GET", "/api/auth/get-session", headers)
        if not payload or not payload.get("user"):
            return None
        return payload

    # ----------- Admin API -----------

    async def list_users(self, query: Dict[str, Any], headers: Mapping[str, str]) -> Dict[str, Any]:
        return await self._request("GET", "/api/auth/admin/list-users", headers, params=query)

    async def update_user(self, user_id: str, data: Dict[str, Any], headers: Mapping[str, str]) -> Any:
        return await self._request("POST", "/api/auth/admin/update-user", headers,
                                   body={"userId": user_id, "data": data})

    async def ban_user(self, user_id: str, headers: Mapping[str, str],
                       ban_reason: Optional[str] = None, ban_expires_in: Optional[int] = None) -> Any:
        body: Dict[str, Any] = {"userId": user_id}
        if ban_reason:
            body["banReason"] = ban_reason
        if ban_expires_in:
            body["banExpiresIn"] = ban_expires_in
        return await self._request("POST", "/api/auth/admin/ban-user", headers, body=body)

    async def unban_user(self, user_id: str, headers: Mapping[str, str]) -> Any:
        return await self._request("POST", "/api/auth/admin/unban-user", headers, body={"userId": user_id})

    async def remove_user(self, user_id: str, headers: Mapping[str, str]) -> Any:
        return await self._request("POST", "/api/auth/admin/remove-user", headers, body={"userId": user_id})

    async def create_user(self, body: Dict[str, Any], headers: Mapping[str, str]) -> Any:
        return await self._request("POST", "/api/auth/admin/create-user", headers, body=body)

    async def set_role(self, user_id: str, role: str, headers: Mapping[str, str]) -> Any:
        return await self._request("POST", "/api/auth/admin/set-role", headers,
                                   body={"userId": user_id, "role": role})


_client: Optional[IdentityClient] = None


def get_identity_client() -> IdentityClient:
    """FastAPI dependency returning the process-wide client."""
    global _client
    if _client is None:
        _client = IdentityClient()
    return _client


async def close_identity_client():
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
