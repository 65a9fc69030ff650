import logging
from typing import AsyncGenerator, Optional

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sitestaff.db.session import AsyncSessionLocal
from sitestaff.core.config import settings
from sitestaff.models.user import User
from sitestaff.schemas.token import TokenPayload
from sitestaff.services.access.gate import AccessControlGate
from sitestaff.services.settings.employee_settings_service import EmployeeSettingsService
from sitestaff.services.statuses.batch import BatchStatusReader

logger = logging.getLogger("sitestaff.deps")

# Allow graceful handling when Authorization header is absent so we can fall back to cookies
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login", auto_error=False)


async def get_db() -> AsyncGenerator:
    async with AsyncSessionLocal() as session:
        yield session


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    token: Optional[str] = Depends(oauth2_scheme),
) -> User:
    """
    Resolve the acting user from the JWT access token.

    Tokens are issued by the auth service; this backend only verifies them.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    # If no Authorization header was provided, fall back to the cookie
    if not token:
        token = request.cookies.get("access_token")
        if token and token.lower().startswith("bearer "):
            parts = token.split(" ", 1)
            token = parts[1] if len(parts) > 1 and parts[1].strip() else None

    if not token:
        raise credentials_exception

    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
        token_data = TokenPayload(**payload)
        if token_data.sub is None:
            raise credentials_exception
    except (JWTError, ValueError) as e:
        logger.debug(f"Rejected access token: {e}")
        raise credentials_exception

    result = await db.execute(select(User).filter(User.id == token_data.sub))
    user = result.scalar_one_or_none()

    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user"
        )

    return user


async def get_current_admin(
    current_user: User = Depends(get_current_user),
) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User doesn't have enough privileges"
        )
    return current_user


async def get_access_gate(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> AccessControlGate:
    # Admins never need the shared tenant id; resolving it would fail on a fresh install
    if current_user.is_admin:
        return AccessControlGate(db, None)
    shared_id = await EmployeeSettingsService(db).get_shared_counterparty_id()
    return AccessControlGate(db, shared_id)


def get_batch_reader() -> BatchStatusReader:
    return BatchStatusReader(AsyncSessionLocal)
