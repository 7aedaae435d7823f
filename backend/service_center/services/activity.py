import logging
from typing import Any

from ..auth.scoping import Actor
from ..domain.ports.storage import Storage

logger = logging.getLogger("service_center.activity")


async def log_activity(
    storage: Storage,
    actor: Actor,
    action: str,
    entity_type: str,
    entity_id: Any | None,
    description: str,
) -> None:
    """Add an activity row to the current unit of work.

    Best-effort: a failed write is logged and never changes the response.
    The caller commits.
    """
    try:
        await storage.activities.create(
            user_id=actor.id,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            description=description,
        )
    except Exception:
        logger.warning(
            "activity_log_failed action=%s entity_type=%s entity_id=%s",
            action,
            entity_type,
            entity_id,
            exc_info=True,
        )


async def record_denial(
    storage: Storage,
    actor: Actor,
    entity_type: str,
    entity_id: Any | None,
    description: str,
) -> None:
    """Persist a permission denial in its own commit, ahead of the 403."""
    try:
        await storage.activities.create(
            user_id=actor.id,
            action="permission_denied",
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            description=description,
        )
        await storage.commit()
    except Exception:
        logger.warning(
            "denial_log_failed entity_type=%s entity_id=%s",
            entity_type,
            entity_id,
            exc_info=True,
        )
        await storage.rollback()
