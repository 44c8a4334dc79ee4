from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class MonthCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    month_number: int = Field(..., ge=1, le=999)
    course_id: UUID
    payment: Decimal = Field(..., ge=0, description="Nominal fee for the month")


class MonthUpdate(BaseModel):
    """Only name and fee are editable; a negative payment is ignored."""

    name: Optional[str] = Field(None, max_length=100)
    payment: Optional[Decimal] = None


class MonthResponse(BaseModel):
    id: UUID
    name: str
    month_number: int
    course_id: UUID
    course_name: Optional[str] = None
    batch_id: Optional[UUID] = None
    payment: Decimal
    created_at: datetime
    updated_at: datetime
