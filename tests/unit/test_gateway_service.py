"""Unit tests for user service (mocked DB)."""

import uuid
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.mc_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
    InvalidRefreshTokenError,
    UsernameExistsError,
)
from src.mc_gateway.auth.jwt_handler import create_access_token, create_refresh_token
from src.mc_gateway.user.db_models import UserModel
from src.mc_gateway.user.service import UserService


def _make_user(is_active: bool = True, is_admin: bool = False) -> UserModel:
    user = UserModel()
    user.id = uuid.uuid4()
    user.username = "alice"
    user.name = "Alice"
    user.email = "alice@example.com"
    user.password_hash = "$2b$12$fakehash"
    user.is_active = is_active
    user.is_admin = is_admin
    return user


def _result(value) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    return result


@pytest.fixture
def mock_db() -> AsyncMock:
    db = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def service() -> UserService:
    return UserService()


class TestRegister:
    async def test_duplicate_username_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))

        with pytest.raises(UsernameExistsError):
            await service.register("alice", "Alice", "new@email.com", "Pass1word", mock_db)

    async def test_duplicate_email_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(side_effect=[_result(None), _result(_make_user())])

        with pytest.raises(EmailExistsError):
            await service.register("newuser", "New", "alice@example.com", "Pass1word", mock_db)

    async def test_new_user_is_not_admin(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(side_effect=[_result(None), _result(None)])

        user = await service.register("bob", "Bob", "bob@example.com", "Pass1word", mock_db)

        assert user.is_admin is False
        assert user.password_hash != "Pass1word"
        mock_db.add.assert_called_once_with(user)
        mock_db.flush.assert_awaited_once()


class TestLogin:
    async def test_wrong_username_raises_credentials_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))

        with pytest.raises(InvalidCredentialsError):
            await service.login("nobody", "Pass1word", mock_db)

    async def test_wrong_password_raises_credentials_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))

        with (
            patch("src.mc_gateway.user.service.verify_password", return_value=False),
            pytest.raises(InvalidCredentialsError),
        ):
            await service.login("alice", "WrongPass1", mock_db)

    async def test_disabled_account_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user(is_active=False)))

        with (
            patch("src.mc_gateway.user.service.verify_password", return_value=True),
            pytest.raises(AccountDisabledError),
        ):
            await service.login("alice", "Pass1word", mock_db)

    async def test_success_returns_user_and_token_pair(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(_make_user()))

        with patch("src.mc_gateway.user.service.verify_password", return_value=True):
            user, access, refresh = await service.login("alice", "Pass1word", mock_db)

        assert user.username == "alice"
        assert access != refresh


class TestRefresh:
    async def test_invalid_refresh_token_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh("not.a.real.token", mock_db)

    async def test_access_token_used_as_refresh_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_access_token(str(uuid.uuid4())), mock_db)

    async def test_unknown_user_raises_error(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        mock_db.execute = AsyncMock(return_value=_result(None))

        with pytest.raises(InvalidRefreshTokenError):
            await service.refresh(create_refresh_token(str(uuid.uuid4())), mock_db)

    async def test_admin_claim_reread_from_db(
        self, service: UserService, mock_db: AsyncMock
    ) -> None:
        from jose import jwt

        user = _make_user(is_admin=True)
        mock_db.execute = AsyncMock(return_value=_result(user))

        access = await service.refresh(create_refresh_token(str(user.id)), mock_db)

        assert jwt.get_unverified_claims(access)["adm"] is True
