from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tuition.api.v1.activities.service import log_activity
from tuition.core.enums import ActivityType
from tuition.core.exceptions import ServiceError
from tuition.core.models import Batch, Course, Month

from .schemas import CourseCreate, CourseResponse, CourseUpdate


def _course_to_response(course: Course, batch_name: str) -> CourseResponse:
    return CourseResponse(
        id=course.id,
        name=course.name,
        batch_id=course.batch_id,
        batch_name=batch_name,
        created_at=course.created_at,
        updated_at=course.updated_at,
    )


async def _name_taken_in_batch(
    db: AsyncSession,
    name: str,
    batch_id: UUID,
    exclude_id: Optional[UUID] = None,
) -> bool:
    stmt = select(Course.id).where(func.lower(Course.name) == name.lower(), Course.batch_id == batch_id)
    if exclude_id is not None:
        stmt = stmt.where(Course.id != exclude_id)
    return (await db.execute(stmt.limit(1))).scalar_one_or_none() is not None


async def list_courses(db: AsyncSession, batch_id: Optional[UUID] = None) -> List[CourseResponse]:
    stmt = select(Course, Batch.name.label("batch_name")).join(Batch, Course.batch_id == Batch.id)
    if batch_id is not None:
        stmt = stmt.where(Course.batch_id == batch_id)
    stmt = stmt.order_by(Course.created_at.desc())
    result = await db.execute(stmt)
    return [_course_to_response(c, batch_name) for c, batch_name in result.all()]


async def create_course(db: AsyncSession, payload: CourseCreate, user: str) -> CourseResponse:
    name = payload.name.strip()
    batch = await db.get(Batch, payload.batch_id)
    if not batch:
        raise ServiceError("Invalid batch", status.HTTP_400_BAD_REQUEST)
    if await _name_taken_in_batch(db, name, payload.batch_id):
        raise ServiceError(
            "Course with this name already exists in the selected batch",
            status.HTTP_400_BAD_REQUEST,
        )
    course = Course(name=name, batch_id=payload.batch_id)
    db.add(course)
    await db.flush()
    log_activity(db, ActivityType.COURSE_CREATED, f'Course "{name}" created', user, {"course_id": str(course.id)})
    await db.commit()
    await db.refresh(course)
    return _course_to_response(course, batch.name)


async def update_course(
    db: AsyncSession,
    course_id: UUID,
    payload: CourseUpdate,
    user: str,
) -> Optional[CourseResponse]:
    course = await db.get(Course, course_id)
    if not course:
        return None
    name = payload.name.strip()
    if await _name_taken_in_batch(db, name, course.batch_id, exclude_id=course_id):
        raise ServiceError("Course with this name already exists in this batch", status.HTTP_400_BAD_REQUEST)
    course.name = name
    log_activity(db, ActivityType.COURSE_UPDATED, f'Course "{name}" updated', user, {"course_id": str(course_id)})
    await db.commit()
    await db.refresh(course)
    batch = await db.get(Batch, course.batch_id)
    return _course_to_response(course, batch.name)


async def delete_course(db: AsyncSession, course_id: UUID, user: str) -> bool:
    has_months = (
        await db.execute(select(Month.id).where(Month.course_id == course_id).limit(1))
    ).scalar_one_or_none()
    if has_months is not None:
        raise ServiceError("Cannot delete course with existing months", status.HTTP_400_BAD_REQUEST)
    course = await db.get(Course, course_id)
    if not course:
        return False
    log_activity(db, ActivityType.COURSE_DELETED, f'Course "{course.name}" deleted', user, {"course_id": str(course_id)})
    await db.delete(course)
    await db.commit()
    return True
