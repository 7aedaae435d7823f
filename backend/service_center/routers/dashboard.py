from collections import Counter

from fastapi import APIRouter, Depends

from ..auth.enforcement_matrix import require_enforced_permission
from ..auth.scoping import Actor, ResourceType, filter_for_actor
from ..dependencies import get_storage
from ..domain.ports.storage import Storage
from ..schemas.navigation import DashboardStats
from ..schemas.service_request import ServiceRequestRead

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

RECENT_REQUESTS_LIMIT = 5


@router.get("/stats", response_model=DashboardStats)
async def dashboard_stats(
    actor: Actor = Depends(require_enforced_permission("GET", "/api/dashboard/stats")),
    storage: Storage = Depends(get_storage),
) -> DashboardStats:
    """Request counts over what the actor is allowed to see."""
    visible = filter_for_actor(actor, ResourceType.SERVICE_REQUEST, await storage.service_requests.list())
    counts = Counter(record.status for record in visible)
    return DashboardStats(
        total_requests=len(visible),
        pending_requests=counts["pending"],
        in_progress_requests=counts["in_progress"],
        completed_requests=counts["completed"],
        cancelled_requests=counts["cancelled"],
    )


@router.get("/recent-requests", response_model=list[ServiceRequestRead])
async def recent_requests(
    actor: Actor = Depends(require_enforced_permission("GET", "/api/dashboard/recent-requests")),
    storage: Storage = Depends(get_storage),
) -> list[ServiceRequestRead]:
    records = await storage.service_requests.list(newest_first=True)
    visible = filter_for_actor(actor, ResourceType.SERVICE_REQUEST, records)
    return [ServiceRequestRead.model_validate(record) for record in visible[:RECENT_REQUESTS_LIMIT]]
