"""
Caller identity for uploads.

SupabaseAuthProvider resolves a bearer token against the auth service's
/user endpoint. StaticAuthProvider is a fixed identity for local tooling.
"""

import logging
import os
from typing import Optional, Protocol

import httpx

logger = logging.getLogger(__name__)

AUTH_TIMEOUT_SECONDS = 10.0


class AuthProvider(Protocol):
    def get_current_user(self) -> Optional[str]:
        """Returns the caller's user id, or None if anonymous."""
        ...


class StaticAuthProvider:
    """Always returns the same identity (None means anonymous)."""

    def __init__(self, user_id: Optional[str] = None):
        self.user_id = user_id

    def get_current_user(self) -> Optional[str]:
        return self.user_id


class SupabaseAuthProvider:
    """Resolves a bearer token to a user id via GET {auth_url}/user."""

    def __init__(self, token: Optional[str], auth_url: Optional[str] = None,
                 api_key: Optional[str] = None, client: Optional[httpx.Client] = None):
        self.token = token
        self.auth_url = (auth_url or f"{os.getenv('SUPABASE_URL', '').rstrip('/')}/auth/v1").rstrip("/")
        self.api_key = api_key if api_key is not None else os.getenv("SUPABASE_ANON_KEY", "")
        self._client = client
        self._resolved = False
        self._user_id: Optional[str] = None

    def _fetch_user(self) -> Optional[str]:
        headers = {"Authorization": f"Bearer {self.token}"}
        if self.api_key:
            headers["apikey"] = self.api_key
        client = self._client or httpx.Client(timeout=AUTH_TIMEOUT_SECONDS)
        try:
            response = client.get(f"{self.auth_url}/user", headers=headers)
        finally:
            if self._client is None:
                client.close()
        if response.status_code in (401, 403):
            return None
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            return None
        return payload.get("id") or None

    def get_current_user(self) -> Optional[str]:
        """
        Returns the user id for the token, or None for a missing or rejected token.
        The lookup is done once per provider instance.
        """
        if not self.token:
            return None
        if not self._resolved:
            try:
                self._user_id = self._fetch_user()
            except (httpx.HTTPError, ValueError) as e:
                # ValueError covers a reply body that is not JSON
                logger.warning("Auth lookup failed: %s", e)
                self._user_id = None
            self._resolved = True
        return self._user_id
