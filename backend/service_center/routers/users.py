import uuid

from fastapi import APIRouter, Depends, Request, Response, status

from ..auth.enforcement_matrix import require_enforced_permission
from ..auth.guards import authorize_changes, authorize_record
from ..auth.rbac_contract import Role
from ..auth.scoping import Actor, ResourceType, filter_for_actor, owned_values
from ..dependencies import get_storage
from ..domain.ports.storage import Storage
from ..errors import ConflictError, PermissionError
from ..schemas.user import UserCreate, UserRead, UserUpdate
from ..services.activity import log_activity
from .common import changes_of, get_or_404

router = APIRouter(prefix="/api/users", tags=["users"])


def _check_role_assignment(actor: Actor, role: Role | None, *, changing: bool) -> None:
    # Only an admin hands out roles after creation, and only an admin creates admins
    if actor.is_admin:
        return
    if role == Role.ADMIN:
        raise PermissionError("Only an admin can grant the admin role")
    if changing and role is not None:
        raise PermissionError("Only an admin can change a user's role")


def _check_target(actor: Actor, user) -> None:
    # Admins have no center, so row scoping alone would let a manager edit them
    if not actor.is_admin and user.role == Role.ADMIN.value:
        raise PermissionError("Only an admin can modify an admin account")


@router.get("", response_model=list[UserRead])
async def list_users(
    actor: Actor = Depends(require_enforced_permission("GET", "/api/users")),
    storage: Storage = Depends(get_storage),
) -> list[UserRead]:
    users = await storage.users.list()
    return [UserRead.model_validate(user) for user in filter_for_actor(actor, ResourceType.USER, users)]


@router.get("/{user_id}", response_model=UserRead)
async def get_user(
    user_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("GET", "/api/users/{user_id}")),
    storage: Storage = Depends(get_storage),
) -> UserRead:
    user = await get_or_404(storage.users, user_id, "User")
    await authorize_record(request, storage, actor, ResourceType.USER, user)
    return UserRead.model_validate(user)


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    actor: Actor = Depends(require_enforced_permission("POST", "/api/users")),
    storage: Storage = Depends(get_storage),
) -> UserRead:
    _check_role_assignment(actor, payload.role, changing=False)
    if await storage.users.list(email=payload.email, limit=1):
        raise ConflictError("Email already registered")

    values = payload.model_dump()
    values["role"] = payload.role.value
    values.update(owned_values(actor, ResourceType.USER))
    user = await storage.users.create(**values)
    await log_activity(storage, actor, "create", ResourceType.USER.value, user.id, f"Created user {user.email}")
    await storage.commit()
    return UserRead.model_validate(user)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: uuid.UUID,
    payload: UserUpdate,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("PUT", "/api/users/{user_id}")),
    storage: Storage = Depends(get_storage),
) -> UserRead:
    user = await get_or_404(storage.users, user_id, "User")
    await authorize_record(request, storage, actor, ResourceType.USER, user)
    _check_target(actor, user)

    changes = changes_of(payload)
    if "role" in changes:
        _check_role_assignment(actor, payload.role, changing=True)
        if payload.role is not None:
            changes["role"] = payload.role.value
        else:
            changes.pop("role")
    if "status" in changes and changes["status"] is None:
        changes.pop("status")
    await authorize_changes(request, storage, actor, ResourceType.USER, user, changes)

    user = await storage.users.update(user, **changes)
    await log_activity(storage, actor, "update", ResourceType.USER.value, user.id, f"Updated user {user.email}")
    await storage.commit()
    return UserRead.model_validate(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("DELETE", "/api/users/{user_id}")),
    storage: Storage = Depends(get_storage),
) -> Response:
    user = await get_or_404(storage.users, user_id, "User")
    await authorize_record(request, storage, actor, ResourceType.USER, user)
    _check_target(actor, user)
    await storage.users.delete(user)
    await log_activity(storage, actor, "delete", ResourceType.USER.value, user_id, f"Deleted user {user.email}")
    await storage.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
