"""Supabase Auth admin API client (service-role key)."""

from typing import Any, Dict, Optional

import httpx

from b4_platform.core.config import settings
from b4_platform.core.exceptions import APIClientError
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)


class SupabaseAdminClient:
    """Looks up and deletes auth users through ``/auth/v1/admin/users``."""

    def __init__(self):
        self.base_url = f"{settings.supabase_url.rstrip('/')}/auth/v1/admin/users"
        key = settings.supabase_service_role_key
        self.headers = {"Authorization": f"Bearer {key}", "apikey": key}

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Fetch an auth user; None when Supabase does not know the id.

        Raises:
            APIClientError: If the request fails
        """
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(
                    f"{self.base_url}/{user_id}",
                    headers=self.headers,
                    timeout=settings.http_timeout,
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error fetching auth user {user_id}: {str(e)}", exc_info=True)
            raise APIClientError(f"Failed to fetch auth user: {str(e)}", original_error=e) from e

        if response.status_code == 404:
            return None
        if response.status_code >= 400:
            raise APIClientError(f"Failed to fetch auth user: {response.text}")
        return response.json()

    async def get_user_contact(self, user_id: str) -> Optional[Dict[str, str]]:
        """Email address and display name of a user, for notification emails."""
        user = await self.get_user(user_id)
        if not user or not user.get("email"):
            return None
        metadata = user.get("user_metadata") or {}
        return {
            "email": user["email"],
            "name": metadata.get("full_name") or metadata.get("name") or user["email"],
        }

    async def delete_user(self, user_id: str) -> None:
        """Delete the auth identity.

        Raises:
            APIClientError: If Supabase refuses or cannot be reached
        """
        try:
            async with httpx.AsyncClient() as client:
                response = await client.delete(
                    f"{self.base_url}/{user_id}",
                    headers=self.headers,
                    timeout=settings.http_timeout,
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error deleting auth user {user_id}: {str(e)}", exc_info=True)
            raise APIClientError("Failed to delete auth user", original_error=e) from e

        if response.status_code >= 400:
            LOGGER.error(
                f"Supabase refused to delete auth user: {response.text}",
                extra={"user_id": user_id, "status_code": response.status_code}
            )
            raise APIClientError("Failed to delete auth user")
