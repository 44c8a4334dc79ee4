from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class InstitutionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1)


class InstitutionUpdate(InstitutionCreate):
    pass


class InstitutionResponse(BaseModel):
    id: UUID
    name: str
    address: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
