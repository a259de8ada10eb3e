"""Account deactivation and permanent deletion.

Permanent deletion is confirmed with a six digit code sent by email. Only
the SHA-256 hash of ``code + user_id`` is stored, with a short expiry.
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.config import settings
from b4_platform.core.exceptions import (
    APIClientError,
    AppError,
    ConfigurationError,
    DatabaseError,
    ValidationError,
)
from b4_platform.repositories.account_repository import AccountDeletionTokenRepository
from b4_platform.repositories.onboarding_repository import ProfileRepository
from b4_platform.schemas.auth import CurrentUser
from b4_platform.services.base_service import BaseService
from b4_platform.services.email_service import ACCOUNT_DELETION_CODE, EmailService
from b4_platform.services.supabase_admin import SupabaseAdminClient


def generate_confirmation_code() -> str:
    return str(secrets.randbelow(900_000) + 100_000)


def hash_confirmation_code(code: str, user_id: str) -> str:
    return hashlib.sha256(f"{code}{user_id}".encode("utf-8")).hexdigest()


class AccountService(BaseService):
    """Soft and hard deletion of the caller's own account."""

    def __init__(
        self,
        session: AsyncSession,
        email_service: Optional[EmailService] = None,
        auth_admin: Optional[SupabaseAdminClient] = None,
    ):
        super().__init__(session)
        self.token_repo = AccountDeletionTokenRepository(session)
        self.profile_repo = ProfileRepository(session)
        self.email_service = email_service or EmailService()
        self.auth_admin = auth_admin or SupabaseAdminClient()

    async def send_confirmation(self, user: CurrentUser) -> str:
        """Email a fresh deletion code, replacing any unused one.

        Raises:
            ConfigurationError: If email delivery is not configured
            DatabaseError: If the code cannot be stored
            APIClientError: If the email cannot be sent
        """
        if not self.email_service.is_configured:
            self.logger.error("RESEND_API_KEY not configured")
            raise ConfigurationError("Email service not configured")

        code = generate_confirmation_code()
        ttl_minutes = settings.platform.deletion_code_ttl_minutes
        try:
            async with self.transaction():
                await self.token_repo.delete_unused(user.id)
                await self.token_repo.create(
                    user_id=user.id,
                    token_hash=hash_confirmation_code(code, user.id),
                    expires_at=datetime.now(timezone.utc) + timedelta(minutes=ttl_minutes),
                )
        except DatabaseError as e:
            raise DatabaseError("Failed to generate confirmation code", original_error=e) from e

        try:
            await self.email_service.send_notification_email(
                to=user.email,
                user_name=user.display_name,
                email_type=ACCOUNT_DELETION_CODE,
                data={"code": code, "ttl_minutes": ttl_minutes},
            )
        except AppError as e:
            raise APIClientError("Failed to send confirmation email", original_error=e) from e

        self.logger.info(f"Deletion confirmation code sent to user {user.id}")
        return "Confirmation code sent to your email"

    async def soft_delete(self, user: CurrentUser) -> str:
        try:
            async with self.transaction():
                await self.profile_repo.upsert(
                    user.id, is_deleted=True, deleted_at=datetime.now(timezone.utc)
                )
        except DatabaseError as e:
            raise DatabaseError("Failed to deactivate account", original_error=e) from e

        self.logger.info(f"Account {user.id} deactivated")
        return "Account deactivated successfully"

    async def hard_delete(self, user: CurrentUser, confirmation_code: Optional[str]) -> str:
        """Verify the code, purge every owned row, then remove the auth identity.

        Raises:
            ValidationError: If the code is missing, wrong, used or expired
            APIClientError: If Supabase refuses to delete the auth user
        """
        if not confirmation_code:
            raise ValidationError("Confirmation code required for permanent deletion")

        now = datetime.now(timezone.utc)
        async with self.transaction():
            token = await self.token_repo.find_valid(
                user.id, hash_confirmation_code(confirmation_code.strip(), user.id), now
            )
            if token is None:
                self.logger.warning(f"Invalid or expired deletion code for {user.id}")
                raise ValidationError("Invalid or expired confirmation code")

            await self.token_repo.update_instance(token, used_at=now)
            deleted: Dict[str, int] = await self.token_repo.purge_user_data(user.id)

        self.logger.info(f"Purged data of {user.id}", extra={"deleted": deleted})
        await self.auth_admin.delete_user(user.id)
        return "Account permanently deleted"

