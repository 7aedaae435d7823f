from fastapi import APIRouter, Depends, Query

from ..auth.enforcement_matrix import require_enforced_permission
from ..auth.scoping import Actor, ResourceType, filter_for_actor
from ..dependencies import get_storage
from ..domain.ports.storage import Storage
from ..schemas.activity import ActivityRead

router = APIRouter(prefix="/api/activities", tags=["activities"])


@router.get("", response_model=list[ActivityRead])
async def list_activities(
    limit: int = Query(50, ge=1, le=500),
    actor: Actor = Depends(require_enforced_permission("GET", "/api/activities")),
    storage: Storage = Depends(get_storage),
) -> list[ActivityRead]:
    activities = await storage.activities.list(limit=limit, newest_first=True)
    return [
        ActivityRead.model_validate(activity)
        for activity in filter_for_actor(actor, ResourceType.ACTIVITY, activities)
    ]
