import uuid
from collections.abc import AsyncGenerator

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from .auth.rbac_contract import ALL_ROLES, Role
from .auth.scoping import Actor
from .crud.records import SqlStorage
from .database import get_session
from .domain.ports.storage import Storage
from .errors import AuthError
from .security.tokens import ExpiredTokenError, InvalidTokenError, validate_access_token

bearer_scheme = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def get_storage(db: AsyncSession = Depends(get_db)) -> Storage:
    return SqlStorage(db)


async def resolve_actor(token: str, storage: Storage) -> Actor:
    """Turn a bearer token into the session's immutable Actor."""
    try:
        payload = validate_access_token(token)
    except ExpiredTokenError:
        raise AuthError("Token has expired") from None
    except InvalidTokenError:
        raise AuthError("Invalid token") from None

    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise AuthError("Invalid token payload") from None

    user = await storage.users.get(user_id)
    if user is None:
        raise AuthError("User not found")
    if user.status != "active":
        raise AuthError("Account is not active")
    if user.role not in ALL_ROLES:
        raise AuthError("Account has no valid role")

    warehouse_id = None
    if user.role == Role.WAREHOUSE_MANAGER:
        managed = await storage.warehouses.list(manager_id=user.id, limit=1)
        if managed:
            warehouse_id = managed[0].id

    return Actor(
        id=user.id,
        role=user.role,
        center_id=user.center_id,
        warehouse_id=warehouse_id,
    )


async def get_current_actor_optional(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    storage: Storage = Depends(get_storage),
) -> Actor | None:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    return await resolve_actor(credentials.credentials, storage)


async def get_current_actor(
    actor: Actor | None = Depends(get_current_actor_optional),
) -> Actor:
    if actor is None:
        raise AuthError("Not authenticated")
    return actor
