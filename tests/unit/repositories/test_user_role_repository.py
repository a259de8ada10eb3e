"""Unit tests for UserRoleRepository role grants."""

from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from b4_platform.repositories.user_role_repository import (
    UserRoleRepository,
    is_duplicate_key_error,
)


def _savepoint(error=None):
    @asynccontextmanager
    async def _begin_nested():
        yield
        if error is not None:
            raise error
    return Mock(side_effect=_begin_nested)


class TestUserRoleRepository:

    @pytest.fixture
    def repository(self, mock_session):
        repository = UserRoleRepository(mock_session)
        repository.get_one = AsyncMock(return_value=None)
        return repository

    @pytest.mark.asyncio
    async def test_grant_new_role(self, repository, mock_session):
        mock_session.begin_nested = _savepoint()

        assert await repository.grant_role("user-1", "entrepreneur") is True

        added = mock_session.add.call_args.args[0]
        assert added.user_id == "user-1"
        assert added.role == "entrepreneur"

    @pytest.mark.asyncio
    async def test_existing_role_is_not_inserted(self, repository, mock_session):
        repository.get_one.return_value = SimpleNamespace(role="entrepreneur")
        mock_session.begin_nested = _savepoint()

        assert await repository.grant_role("user-1", "entrepreneur") is False

        mock_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_counts_as_granted(self, repository, mock_session):
        duplicate = IntegrityError("INSERT INTO user_roles", {}, Exception("duplicate key value"))
        mock_session.begin_nested = _savepoint(duplicate)

        assert await repository.grant_role("user-1", "cobuilder") is False

    @pytest.mark.asyncio
    async def test_other_errors_propagate(self, repository, mock_session):
        mock_session.begin_nested = _savepoint(OperationalError("INSERT", {}, Exception("server closed")))

        with pytest.raises(OperationalError):
            await repository.grant_role("user-1", "cobuilder")

    def test_is_duplicate_key_error(self):
        assert is_duplicate_key_error(IntegrityError("INSERT", {}, Exception("x")))
        assert is_duplicate_key_error(Exception("Duplicate entry"))
        assert not is_duplicate_key_error(Exception("timeout"))
