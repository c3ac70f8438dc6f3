#!/usr/bin/env python3
"""
Hosted backend REST client.
Covers the pieces of the provider DoseCare relies on: GoTrue authentication
(including the admin API), object storage for banner images, and named
database procedures exposed through PostgREST /rpc.
"""

import os
import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx
from dotenv import load_dotenv

from lib.exceptions import AuthProviderError, RemoteProcedureError

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0


def _error_message(response: httpx.Response) -> str:
    """Best effort extraction of the provider's error message"""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            if body.get(key):
                return str(body[key])
    return response.text or f"HTTP {response.status_code}"


class SupabaseClient:
    """Thin async wrapper over the provider's REST endpoints"""

    def __init__(self, url: Optional[str] = None, anon_key: Optional[str] = None,
                 service_key: Optional[str] = None, timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.url = (url or os.getenv("SUPABASE_URL", "http://localhost:54321")).rstrip("/")
        self.anon_key = anon_key or os.getenv("SUPABASE_ANON_KEY", "")
        self.service_key = service_key or os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
        self.timeout = timeout or float(os.getenv("SUPABASE_TIMEOUT", DEFAULT_TIMEOUT_SECONDS))
        self._transport = transport

    # ---------------------------------------------------------------
    # Plumbing
    # ---------------------------------------------------------------

    def _headers(self, access_token: Optional[str] = None, service: bool = False) -> Dict[str, str]:
        key = self.service_key if service else self.anon_key
        return {
            "apikey": key,
            "Authorization": f"Bearer {access_token or key}",
        }

    async def _request(self, method: str, path: str, *, headers: Dict[str, str],
                       error_cls=AuthProviderError, **kwargs) -> httpx.Response:
        timeout = httpx.Timeout(self.timeout, connect=min(self.timeout, 6.0))
        try:
            async with httpx.AsyncClient(base_url=self.url, timeout=timeout,
                                         transport=self._transport) as client:
                return await client.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"⏱️ {method} {path} timed out: {e}")
            if error_cls is AuthProviderError:
                raise AuthProviderError("Timed out talking to the auth provider", 504)
            raise error_cls("Timed out calling remote procedure")
        except httpx.HTTPError as e:
            logger.error(f"❌ {method} {path} failed: {e}")
            if error_cls is AuthProviderError:
                raise AuthProviderError(str(e) or "Auth provider request failed", 502)
            raise error_cls(str(e) or "Remote procedure request failed")

    # ---------------------------------------------------------------
    # Authentication
    # ---------------------------------------------------------------

    async def sign_up(self, email: str, password: str) -> Dict[str, Any]:
        """Create a provider user. Returns {"user": ..., "session": ...}"""
        r = await self._request("POST", "/auth/v1/signup", headers=self._headers(),
                                json={"email": email, "password": password})
        if r.status_code >= 400:
            raise AuthProviderError(_error_message(r), r.status_code)
        data = r.json()
        # With email confirmation disabled the provider answers with a session
        if "access_token" in data:
            return {"user": data.get("user"), "session": data}
        return {"user": data.get("user") or data, "session": None}

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        r = await self._request("POST", "/auth/v1/token", headers=self._headers(),
                                params={"grant_type": "password"},
                                json={"email": email, "password": password})
        if r.status_code >= 400:
            raise AuthProviderError(_error_message(r), 401 if r.status_code in (400, 401) else r.status_code)
        return r.json()

    async def get_user(self, access_token: str) -> Optional[Dict[str, Any]]:
        """Resolve an access token to the provider user, None when the token is invalid"""
        r = await self._request("GET", "/auth/v1/user", headers=self._headers(access_token))
        if r.status_code in (401, 403):
            return None
        if r.status_code >= 400:
            raise AuthProviderError(_error_message(r), r.status_code)
        return r.json()

    async def sign_out(self, access_token: str) -> None:
        r = await self._request("POST", "/auth/v1/logout", headers=self._headers(access_token))
        if r.status_code >= 400 and r.status_code not in (401, 403):
            raise AuthProviderError(_error_message(r), r.status_code)

    async def reset_password_for_email(self, email: str) -> None:
        r = await self._request("POST", "/auth/v1/recover", headers=self._headers(),
                                json={"email": email})
        if r.status_code >= 400:
            raise AuthProviderError(_error_message(r), r.status_code)

    async def admin_update_user(self, auth_id: str, attributes: Dict[str, Any]) -> Dict[str, Any]:
        """PATCH a provider user with the service role key"""
        r = await self._request("PATCH", f"/auth/v1/admin/users/{auth_id}",
                                headers=self._headers(service=True), json=attributes)
        logger.info(f"🔑 Admin user update status={r.status_code}")
        if r.status_code >= 400:
            raise AuthProviderError(r.text or f"Auth {r.status_code}", r.status_code)
        return r.json() if r.content else {}

    # ---------------------------------------------------------------
    # Storage
    # ---------------------------------------------------------------

    async def upload_file(self, bucket: str, path: str, content: bytes,
                          content_type: str = "application/octet-stream") -> str:
        """Upload without overwriting. Returns the object key."""
        headers = self._headers(service=True)
        headers.update({"content-type": content_type, "x-upsert": "false"})
        r = await self._request("POST", f"/storage/v1/object/{bucket}/{quote(path)}",
                                headers=headers, content=content)
        if r.status_code >= 400:
            raise AuthProviderError(_error_message(r), r.status_code)
        return path

    def get_public_url(self, bucket: str, path: str) -> str:
        return f"{self.url}/storage/v1/object/public/{bucket}/{quote(path)}"

    # ---------------------------------------------------------------
    # Remote procedures
    # ---------------------------------------------------------------

    async def rpc(self, name: str, params: Dict[str, Any], access_token: Optional[str] = None) -> Any:
        """Call a named database procedure as the given user"""
        r = await self._request("POST", f"/rest/v1/rpc/{name}",
                                headers=self._headers(access_token),
                                error_cls=RemoteProcedureError, json=params)
        if r.status_code >= 400:
            message = _error_message(r)
            logger.error(f"❌ RPC {name} failed ({r.status_code}): {message}")
            raise RemoteProcedureError(message)
        if not r.content:
            return None
        return r.json()


_client: Optional[SupabaseClient] = None


def get_supabase_client() -> SupabaseClient:
    """FastAPI dependency returning the shared provider client"""
    global _client
    if _client is None:
        _client = SupabaseClient()
    return _client
