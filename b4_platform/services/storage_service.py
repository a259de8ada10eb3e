"""Storage service for Supabase Storage operations."""

from typing import Any, Dict, List

import httpx

from b4_platform.core.config import settings
from b4_platform.core.exceptions import AppError
from b4_platform.utils.logging import get_logger

LOGGER = get_logger(__name__)


class StorageService:
    """Uploads, signs and removes objects in a Supabase Storage bucket."""

    def __init__(self, bucket: str = None):
        self.url = settings.supabase_url.rstrip("/")
        self.service_role_key = settings.supabase_service_role_key
        self.bucket = bucket or settings.storage_bucket
        self.base_api_url = f"{self.url}/storage/v1"
        self.headers = {
            "Authorization": f"Bearer {self.service_role_key}",
            "apikey": self.service_role_key,
        }

    async def upload_bytes(
        self,
        path: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        upsert: bool = False,
    ) -> Dict[str, Any]:
        """Upload raw bytes to ``<bucket>/<path>``.

        Raises:
            AppError: If the upload fails
        """
        upload_url = f"{self.base_api_url}/object/{self.bucket}/{path}"
        headers = {**self.headers, "Content-Type": content_type}
        if upsert:
            headers["x-upsert"] = "true"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    upload_url,
                    headers=headers,
                    content=content,
                    timeout=settings.http_timeout
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error uploading file to Supabase: {str(e)}", exc_info=True)
            raise AppError(f"Storage upload error: {str(e)}", original_error=e)

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to upload file to Supabase: {response.text}",
                extra={"bucket": self.bucket, "path": path, "status_code": response.status_code}
            )
            raise AppError(f"Upload failed: {response.text}")

        return response.json()

    async def get_signed_url(self, path: str, expires_in: int = 3600) -> str:
        """Create a signed download URL for an object.

        Raises:
            AppError: If URL generation fails
        """
        url = f"{self.base_api_url}/object/sign/{self.bucket}/{path}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(
                    url,
                    headers=self.headers,
                    json={"expiresIn": expires_in},
                    timeout=settings.http_timeout
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error generating signed URL: {str(e)}", exc_info=True)
            raise AppError(f"Signed URL error: {str(e)}", original_error=e)

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to generate signed URL: {response.text}",
                extra={"bucket": self.bucket, "path": path, "status_code": response.status_code}
            )
            raise AppError(f"Signed URL generation failed: {response.text}")

        signed_path = response.json().get("signedURL")
        if not signed_path:
            raise AppError("Supabase response did not contain signedURL")

        # Supabase answers with a path relative to /storage/v1
        if signed_path.startswith("/"):
            return f"{self.base_api_url}{signed_path}"
        return signed_path

    async def remove_file(self, paths: List[str]) -> List[Dict[str, Any]]:
        """Remove objects from the bucket.

        Raises:
            AppError: If the removal fails
        """
        url = f"{self.base_api_url}/object/{self.bucket}"

        try:
            async with httpx.AsyncClient() as client:
                response = await client.request(
                    "DELETE",
                    url,
                    headers=self.headers,
                    json={"prefixes": paths},
                    timeout=settings.http_timeout
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error removing files from Supabase: {str(e)}", exc_info=True)
            raise AppError(f"Storage removal error: {str(e)}", original_error=e)

        if response.status_code != 200:
            LOGGER.error(
                f"Failed to remove files: {response.text}",
                extra={"bucket": self.bucket, "paths": paths, "status_code": response.status_code}
            )
            raise AppError(f"Removal failed: {response.text}")

        return response.json()
