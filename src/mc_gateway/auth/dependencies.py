"""FastAPI auth dependencies.

Usage in a protected router:
    from src.mc_gateway.auth.dependencies import get_current_user, require_admin

    @router.get("/mine")
    async def mine(user: Annotated[UserModel, Depends(get_current_user)]): ...
"""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.mc_common.database import get_db_session
from src.mc_common.errors import (
    AccountDisabledError,
    AdminRequiredError,
    InvalidCredentialsError,
)
from src.mc_gateway.auth.jwt_handler import decode_token
from src.mc_gateway.user.db_models import UserModel

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> UserModel:
    """Validate the Bearer access token and load the caller.

    Raises HTTP 401 if the token is missing, invalid, expired or names an
    unknown user; AccountDisabledError (403) if the account is disabled.
    """
    try:
        payload = decode_token(token, expected_type="access")
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


async def require_admin(
    current_user: UserModel = Depends(get_current_user),
) -> UserModel:
    """Gate back-office endpoints (boost cancel/cleanup/active, listing admin)."""
    if not current_user.is_admin:
        raise AdminRequiredError()
    return current_user
