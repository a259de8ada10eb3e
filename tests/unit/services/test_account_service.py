"""Unit tests for AccountService."""

import hashlib
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from b4_platform.core.exceptions import APIClientError, ConfigurationError, ValidationError
from b4_platform.services.account_service import (
    AccountService,
    generate_confirmation_code,
    hash_confirmation_code,
)
from b4_platform.services.email_service import ACCOUNT_DELETION_CODE


class TestConfirmationCode:

    def test_six_digits(self):
        for _ in range(50):
            code = generate_confirmation_code()
            assert len(code) == 6
            assert code.isdigit()
            assert code[0] != "0"

    def test_hash_binds_code_to_user(self):
        expected = hashlib.sha256(b"123456user-1").hexdigest()

        assert hash_confirmation_code("123456", "user-1") == expected
        assert hash_confirmation_code("123456", "user-2") != expected


class TestAccountService:

    @pytest.fixture
    def email_service(self):
        return Mock(is_configured=True, send_notification_email=AsyncMock())

    @pytest.fixture
    def auth_admin(self):
        return Mock(delete_user=AsyncMock())

    @pytest.fixture
    def service(self, mock_session, email_service, auth_admin):
        service = AccountService(mock_session, email_service=email_service, auth_admin=auth_admin)
        service.token_repo = Mock(
            delete_unused=AsyncMock(return_value=1),
            create=AsyncMock(),
            find_valid=AsyncMock(return_value=None),
            update_instance=AsyncMock(),
            purge_user_data=AsyncMock(return_value={"profiles": 1}),
        )
        service.profile_repo = Mock(upsert=AsyncMock())
        return service

    @pytest.mark.asyncio
    async def test_send_confirmation_without_email(self, service, email_service, current_user):
        email_service.is_configured = False

        with pytest.raises(ConfigurationError, match="Email service not configured"):
            await service.send_confirmation(current_user)

        service.token_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_send_confirmation_stores_only_the_hash(self, service, email_service, current_user):
        message = await service.send_confirmation(current_user)

        assert message == "Confirmation code sent to your email"
        service.token_repo.delete_unused.assert_awaited_once_with(current_user.id)

        email_kwargs = email_service.send_notification_email.await_args.kwargs
        assert email_kwargs["email_type"] == ACCOUNT_DELETION_CODE
        assert email_kwargs["to"] == current_user.email
        code = email_kwargs["data"]["code"]

        token_kwargs = service.token_repo.create.await_args.kwargs
        assert token_kwargs["token_hash"] == hash_confirmation_code(code, current_user.id)
        assert code not in token_kwargs.values()

    @pytest.mark.asyncio
    async def test_email_failure_is_reported(self, service, email_service, current_user):
        email_service.send_notification_email.side_effect = APIClientError("Resend down")

        with pytest.raises(APIClientError, match="Failed to send confirmation email"):
            await service.send_confirmation(current_user)

    @pytest.mark.asyncio
    async def test_soft_delete(self, service, current_user, mock_session):
        message = await service.soft_delete(current_user)

        assert message == "Account deactivated successfully"
        args, kwargs = service.profile_repo.upsert.await_args
        assert args == (current_user.id,)
        assert kwargs["is_deleted"] is True
        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_hard_delete_without_code(self, service, current_user):
        with pytest.raises(ValidationError, match="Confirmation code required"):
            await service.hard_delete(current_user, None)

    @pytest.mark.asyncio
    async def test_hard_delete_with_invalid_code(self, service, current_user, auth_admin):
        with pytest.raises(ValidationError, match="Invalid or expired confirmation code"):
            await service.hard_delete(current_user, "000000")

        service.token_repo.purge_user_data.assert_not_awaited()
        auth_admin.delete_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_hard_delete(self, service, current_user, auth_admin, mock_session):
        token = SimpleNamespace(used_at=None)
        service.token_repo.find_valid.return_value = token

        message = await service.hard_delete(current_user, " 123456 ")

        assert message == "Account permanently deleted"
        assert service.token_repo.find_valid.await_args.args[1] == hash_confirmation_code(
            "123456", current_user.id
        )
        service.token_repo.purge_user_data.assert_awaited_once_with(current_user.id)
        auth_admin.delete_user.assert_awaited_once_with(current_user.id)
        mock_session.commit.assert_awaited_once()
