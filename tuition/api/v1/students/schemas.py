from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from tuition.core.enums import Gender


class EnrollmentItem(BaseModel):
    course_id: UUID
    starting_month_id: UUID
    ending_month_id: Optional[UUID] = None


class StudentCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    institution_id: UUID
    gender: Gender
    phone: str = Field(..., min_length=1, max_length=50)
    guardian_name: str = Field(..., min_length=1, max_length=255)
    guardian_phone: str = Field(..., min_length=1, max_length=50)
    batch_id: UUID
    enrolled_courses: List[EnrollmentItem] = Field(..., min_length=1, description="At least one course enrollment")


class StudentUpdate(StudentCreate):
    """Full replacement; enrolled_courses replaces the existing enrollments."""


class EnrollmentResponse(EnrollmentItem):
    id: UUID

    class Config:
        from_attributes = True


class StudentResponse(BaseModel):
    id: UUID
    name: str
    student_code: str
    institution_id: UUID
    gender: Gender
    phone: str
    guardian_name: str
    guardian_phone: str
    batch_id: UUID
    enrolled_courses: List[EnrollmentResponse]
    created_at: datetime
    updated_at: datetime
