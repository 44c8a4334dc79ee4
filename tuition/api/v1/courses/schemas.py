from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class CourseCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    batch_id: UUID


class CourseUpdate(BaseModel):
    """batch_id is fixed after creation."""

    name: str = Field(..., min_length=1, max_length=150)


class CourseResponse(BaseModel):
    id: UUID
    name: str
    batch_id: UUID
    batch_name: str
    created_at: datetime
    updated_at: datetime
