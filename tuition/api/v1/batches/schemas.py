from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class BatchCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class BatchUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class BatchResponse(BaseModel):
    id: UUID
    name: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
