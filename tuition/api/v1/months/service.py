"""Months service: per-course billable months and their nominal fee."""

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tuition.api.v1.activities.service import log_activity
from tuition.core.enums import ActivityType
from tuition.core.exceptions import ServiceError
from tuition.core.models import Course, Month, PaymentMonthItem, StudentEnrollment

from .schemas import MonthCreate, MonthResponse, MonthUpdate


def _to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


def _month_to_response(month: Month, course: Optional[Course]) -> MonthResponse:
    return MonthResponse(
        id=month.id,
        name=month.name,
        month_number=month.month_number,
        course_id=month.course_id,
        course_name=course.name if course else None,
        batch_id=course.batch_id if course else None,
        payment=_to_decimal(month.payment),
        created_at=month.created_at,
        updated_at=month.updated_at,
    )


async def list_months(db: AsyncSession, course_id: Optional[UUID] = None) -> List[MonthResponse]:
    stmt = select(Month, Course).outerjoin(Course, Month.course_id == Course.id)
    if course_id is not None:
        stmt = stmt.where(Month.course_id == course_id).order_by(Month.month_number)
    else:
        stmt = stmt.order_by(Month.created_at.desc())
    result = await db.execute(stmt)
    return [_month_to_response(m, c) for m, c in result.all()]


async def create_month(db: AsyncSession, payload: MonthCreate, user: str) -> MonthResponse:
    course = await db.get(Course, payload.course_id)
    if not course:
        raise ServiceError("Invalid course", status.HTTP_400_BAD_REQUEST)
    name = payload.name.strip()
    clash = (
        await db.execute(
            select(Month.id)
            .where(
                Month.course_id == payload.course_id,
                or_(func.lower(Month.name) == name.lower(), Month.month_number == payload.month_number),
            )
            .limit(1)
        )
    ).scalar_one_or_none()
    if clash is not None:
        raise ServiceError(
            "Month with this name or number already exists for the selected course",
            status.HTTP_400_BAD_REQUEST,
        )
    month = Month(
        name=name,
        month_number=payload.month_number,
        course_id=payload.course_id,
        payment=payload.payment,
    )
    db.add(month)
    await db.flush()
    log_activity(db, ActivityType.MONTH_CREATED, f'Month "{name}" created', user, {"month_id": str(month.id)})
    await db.commit()
    await db.refresh(month)
    return _month_to_response(month, course)


async def update_month(
    db: AsyncSession,
    month_id: UUID,
    payload: MonthUpdate,
    user: str,
) -> Optional[MonthResponse]:
    month = await db.get(Month, month_id)
    if not month:
        return None
    name = (payload.name or "").strip()
    if name and name != month.name:
        clash = (
            await db.execute(
                select(Month.id)
                .where(
                    Month.course_id == month.course_id,
                    func.lower(Month.name) == name.lower(),
                    Month.id != month_id,
                )
                .limit(1)
            )
        ).scalar_one_or_none()
        if clash is not None:
            raise ServiceError("Month with this name already exists for this course", status.HTTP_400_BAD_REQUEST)
        month.name = name
    if payload.payment is not None and payload.payment >= 0:
        month.payment = payload.payment
    log_activity(db, ActivityType.MONTH_UPDATED, f'Month "{month.name}" updated', user, {"month_id": str(month_id)})
    await db.commit()
    await db.refresh(month)
    course = await db.get(Course, month.course_id)
    return _month_to_response(month, course)


async def delete_month(db: AsyncSession, month_id: UUID, user: str) -> bool:
    month = await db.get(Month, month_id)
    if not month:
        return False
    enrolled = (
        await db.execute(
            select(StudentEnrollment.id).where(StudentEnrollment.starting_month_id == month_id).limit(1)
        )
    ).scalar_one_or_none()
    if enrolled is not None:
        raise ServiceError("Cannot delete month used as a starting month by students", status.HTTP_400_BAD_REQUEST)
    paid = (
        await db.execute(select(PaymentMonthItem.id).where(PaymentMonthItem.month_id == month_id).limit(1))
    ).scalar_one_or_none()
    if paid is not None:
        raise ServiceError("Cannot delete month with recorded payments", status.HTTP_400_BAD_REQUEST)
    log_activity(db, ActivityType.MONTH_DELETED, f'Month "{month.name}" deleted', user, {"month_id": str(month_id)})
    await db.delete(month)
    await db.commit()
    return True
