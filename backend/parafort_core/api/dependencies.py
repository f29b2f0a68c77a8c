from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from parafort_core.checkout.session_store import CheckoutSessionStore, get_checkout_session_store
from parafort_core.core.config import get_settings
from parafort_core.db.session import get_async_db_session
from parafort_core.repositories.user_repository import UserRepository
from parafort_core.schemas.auth import CurrentUser
from parafort_core.services.event_publisher import EventPublisher, get_event_publisher

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def checkout_store_dependency() -> CheckoutSessionStore:
    return get_checkout_session_store()


def event_publisher_dependency() -> EventPublisher:
    return get_event_publisher()


async def _resolve_user(token: str, db: AsyncSession) -> CurrentUser:
    settings = get_settings()
    unauthorized = HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
        subject = payload.get("sub")
        role = payload.get("role")
        if not subject or not role:
            raise unauthorized
        user_id = UUID(subject)
    except (JWTError, ValueError) as exc:
        raise unauthorized from exc

    user = await UserRepository(db).get_by_id(user_id)
    if user is None:
        raise unauthorized
    return CurrentUser(user_id=user.id, role=user.role)


async def get_current_user(
    request: Request,
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_async_db_session),
) -> CurrentUser:
    current = await _resolve_user(token, db)
    request.state.user_id = current.user_id
    return current


async def get_optional_user(
    request: Request,
    token: str | None = Depends(optional_oauth2_scheme),
    db: AsyncSession = Depends(get_async_db_session),
) -> CurrentUser | None:
    if not token:
        return None
    current = await _resolve_user(token, db)
    request.state.user_id = current.user_id
    return current


def require_role(*allowed_roles: str):
    def _dependency(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return current_user

    return _dependency
