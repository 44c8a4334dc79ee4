from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from tuition.core.enums import ReferenceType


class ReferenceOptionCreate(BaseModel):
    value: str = Field(..., min_length=1, max_length=255)


class ReferenceOptionResponse(BaseModel):
    id: UUID
    type: ReferenceType
    value: str
    created_at: datetime

    class Config:
        from_attributes = True
