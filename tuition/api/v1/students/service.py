"""Students service: registration with generated student code, course enrollments."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tuition.api.v1.activities.service import log_activity
from tuition.core.enums import ActivityType
from tuition.core.exceptions import ServiceError
from tuition.core.models import Batch, Course, Institution, Month, Payment, Student, StudentEnrollment

from .schemas import EnrollmentResponse, StudentCreate, StudentResponse, StudentUpdate

STUDENT_CODE_PREFIX = "BTF"


def _student_to_response(student: Student) -> StudentResponse:
    return StudentResponse(
        id=student.id,
        name=student.name,
        student_code=student.student_code,
        institution_id=student.institution_id,
        gender=student.gender,
        phone=student.phone,
        guardian_name=student.guardian_name,
        guardian_phone=student.guardian_phone,
        batch_id=student.batch_id,
        enrolled_courses=[EnrollmentResponse.model_validate(e) for e in student.enrollments],
        created_at=student.created_at,
        updated_at=student.updated_at,
    )


async def generate_student_code(db: AsyncSession, now: Optional[datetime] = None) -> str:
    """BTF + two-digit year + four-digit sequence (student count + 1)."""
    now = now or datetime.now()
    count = (await db.execute(select(func.count(Student.id)))).scalar() or 0
    return f"{STUDENT_CODE_PREFIX}{now.strftime('%y')}{count + 1:04d}"


async def _load_student(db: AsyncSession, *criteria) -> Optional[Student]:
    result = await db.execute(
        select(Student)
        .options(selectinload(Student.enrollments))
        .where(*criteria)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def _validate_references(db: AsyncSession, payload: StudentCreate) -> None:
    if not await db.get(Institution, payload.institution_id):
        raise ServiceError("Invalid institution", status.HTTP_400_BAD_REQUEST)
    if not await db.get(Batch, payload.batch_id):
        raise ServiceError("Invalid batch", status.HTTP_400_BAD_REQUEST)

    course_ids = {e.course_id for e in payload.enrolled_courses}
    known_courses = set((await db.execute(select(Course.id).where(Course.id.in_(course_ids)))).scalars().all())
    if course_ids - known_courses:
        raise ServiceError("Invalid course in enrollment", status.HTTP_400_BAD_REQUEST)

    month_ids = {e.starting_month_id for e in payload.enrolled_courses}
    month_ids |= {e.ending_month_id for e in payload.enrolled_courses if e.ending_month_id}
    known_months = set((await db.execute(select(Month.id).where(Month.id.in_(month_ids)))).scalars().all())
    if month_ids - known_months:
        raise ServiceError("Invalid month in enrollment", status.HTTP_400_BAD_REQUEST)


def _build_enrollments(payload: StudentCreate) -> List[StudentEnrollment]:
    return [
        StudentEnrollment(
            course_id=e.course_id,
            starting_month_id=e.starting_month_id,
            ending_month_id=e.ending_month_id,
            position=i,
        )
        for i, e in enumerate(payload.enrolled_courses)
    ]


async def list_students(db: AsyncSession) -> List[StudentResponse]:
    result = await db.execute(
        select(Student).options(selectinload(Student.enrollments)).order_by(Student.created_at.desc())
    )
    return [_student_to_response(s) for s in result.scalars().all()]


async def get_student(db: AsyncSession, student_id: UUID) -> Optional[StudentResponse]:
    student = await _load_student(db, Student.id == student_id)
    return _student_to_response(student) if student else None


async def get_student_by_code(db: AsyncSession, student_code: str) -> Optional[StudentResponse]:
    student = await _load_student(db, Student.student_code == student_code)
    return _student_to_response(student) if student else None


async def create_student(db: AsyncSession, payload: StudentCreate, user: str) -> StudentResponse:
    await _validate_references(db, payload)
    try:
        student = Student(
            name=payload.name.strip(),
            student_code=await generate_student_code(db),
            institution_id=payload.institution_id,
            gender=payload.gender.value,
            phone=payload.phone.strip(),
            guardian_name=payload.guardian_name.strip(),
            guardian_phone=payload.guardian_phone.strip(),
            batch_id=payload.batch_id,
            enrollments=_build_enrollments(payload),
        )
        db.add(student)
        await db.flush()
        log_activity(
            db,
            ActivityType.STUDENT_ADDED,
            f'Student "{student.name}" added with ID {student.student_code}',
            user,
            {"student_id": str(student.id)},
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Student code already taken, retry", status.HTTP_409_CONFLICT)
    student = await _load_student(db, Student.id == student.id)
    return _student_to_response(student)


async def update_student(
    db: AsyncSession,
    student_id: UUID,
    payload: StudentUpdate,
    user: str,
) -> Optional[StudentResponse]:
    student = await _load_student(db, Student.id == student_id)
    if not student:
        return None
    await _validate_references(db, payload)
    student.name = payload.name.strip()
    student.institution_id = payload.institution_id
    student.gender = payload.gender.value
    student.phone = payload.phone.strip()
    student.guardian_name = payload.guardian_name.strip()
    student.guardian_phone = payload.guardian_phone.strip()
    student.batch_id = payload.batch_id
    student.enrollments = _build_enrollments(payload)
    log_activity(db, ActivityType.STUDENT_UPDATED, f'Student "{student.name}" updated', user, {"student_id": str(student_id)})
    await db.commit()
    student = await _load_student(db, Student.id == student_id)
    return _student_to_response(student)


async def delete_student(db: AsyncSession, student_id: UUID, user: str) -> bool:
    student = await _load_student(db, Student.id == student_id)
    if not student:
        return False
    has_payments = (
        await db.execute(select(Payment.id).where(Payment.student_id == student_id).limit(1))
    ).scalar_one_or_none()
    if has_payments is not None:
        raise ServiceError("Cannot delete student with recorded payments", status.HTTP_400_BAD_REQUEST)
    log_activity(db, ActivityType.STUDENT_DELETED, f'Student "{student.name}" deleted', user, {"student_id": str(student_id)})
    await db.delete(student)
    await db.commit()
    return True
