"""FastAPI dependency injection helpers.

Provides reusable ``Depends``-compatible callables for:
- ``get_db()``                  → async database session
- ``get_settings()``            → application settings
- ``get_schedule_repository()`` → scheduling store bound to the request session
- ``get_dispatcher()``          → notification dispatcher (stored on app.state)
- ``get_current_user()``        → user resolved from the bearer token
- ``require_admin()``           → same, restricted to administrators
"""

import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from src.config import Settings
from src.config import get_settings as _get_settings_impl
from src.database import get_async_db
from src.exceptions import AuthenticationError, PermissionDeniedError
from src.models.user import User
from src.services.auth import decode_token
from src.services.notifier import NotificationDispatcher
from src.services.schedule_repository import ScheduleRepository

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Database session
# ---------------------------------------------------------------------------


async def get_db(
    db: AsyncSession = Depends(get_async_db),
) -> AsyncSession:
    """Provide an async database session to route handlers.

    Thin wrapper around :func:`src.database.get_async_db` that adds a
    typed annotation so handlers can use ``Annotated[AsyncSession, Depends(get_db)]``.

    Yields:
        An async SQLAlchemy session scoped to the current request.
    """
    return db


DBDep = Annotated[AsyncSession, Depends(get_db)]


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def get_settings() -> Settings:
    """Return the cached application settings.

    Returns:
        Application :class:`~src.config.Settings` singleton.
    """
    return _get_settings_impl()


SettingsDep = Annotated[Settings, Depends(get_settings)]


# ---------------------------------------------------------------------------
# Scheduling store
# ---------------------------------------------------------------------------


def get_schedule_repository(db: DBDep) -> ScheduleRepository:
    """Wrap the request session in a :class:`ScheduleRepository`."""
    return ScheduleRepository(db)


RepositoryDep = Annotated[ScheduleRepository, Depends(get_schedule_repository)]


# ---------------------------------------------------------------------------
# Notification dispatcher (stored on app.state during lifespan startup)
# ---------------------------------------------------------------------------


def get_dispatcher(request: Request) -> NotificationDispatcher | None:
    """Return the application-wide dispatcher from ``app.state``.

    ``None`` when startup did not create one; scheduling still succeeds but
    no cross-department notice is sent.
    """
    dispatcher: NotificationDispatcher | None = getattr(
        request.app.state, "dispatcher", None
    )
    if dispatcher is None:
        logger.error("Notification dispatcher not initialised; notices disabled")
    return dispatcher


DispatcherDep = Annotated[NotificationDispatcher | None, Depends(get_dispatcher)]


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

_bearer = HTTPBearer(auto_error=False)


async def get_current_user(
    db: DBDep,
    settings: SettingsDep,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> User:
    """Resolve the active user named by the bearer token.

    Raises:
        AuthenticationError: Missing or invalid token, or unknown/inactive user.
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    user_id = decode_token(credentials.credentials, settings)
    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("Could not validate credentials")
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


async def require_admin(user: CurrentUserDep) -> User:
    """Return *user* if they are an administrator.

    Raises:
        PermissionDeniedError: For any other role.
    """
    if not user.is_admin:
        raise PermissionDeniedError("Administrator access required", role=user.role)
    return user


AdminDep = Annotated[User, Depends(require_admin)]
