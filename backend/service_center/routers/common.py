import uuid
from typing import Any

from pydantic import BaseModel

from ..domain.ports.storage import RecordRepository
from ..errors import NotFoundError


async def get_or_404(
    repository: RecordRepository[Any],
    record_id: uuid.UUID,
    label: str,
    *,
    for_update: bool = False,
) -> Any:
    record = await repository.get(record_id, for_update=for_update)
    if record is None:
        raise NotFoundError(f"{label} not found")
    return record


def changes_of(payload: BaseModel) -> dict[str, Any]:
    """Only the fields the client actually sent."""
    return payload.model_dump(exclude_unset=True)
