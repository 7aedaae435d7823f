import uuid
from datetime import datetime

from pydantic import BaseModel


class ActivityRead(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    action: str
    entity_type: str
    entity_id: str | None = None
    description: str
    created_at: datetime

    class Config:
        from_attributes = True
