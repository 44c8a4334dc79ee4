from datetime import datetime
from typing import Any, Dict
from uuid import UUID

from pydantic import BaseModel


class ActivityResponse(BaseModel):
    id: UUID
    type: str
    description: str
    data: Dict[str, Any]
    user: str
    timestamp: datetime

    class Config:
        from_attributes = True
