from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tuition.api.v1.activities.service import log_activity
from tuition.core.enums import ActivityType
from tuition.core.exceptions import ServiceError
from tuition.core.models import Institution, Student

from .schemas import InstitutionCreate, InstitutionResponse, InstitutionUpdate


async def _name_taken(db: AsyncSession, name: str, exclude_id: Optional[UUID] = None) -> bool:
    stmt = select(Institution.id).where(func.lower(Institution.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(Institution.id != exclude_id)
    return (await db.execute(stmt.limit(1))).scalar_one_or_none() is not None


async def list_institutions(db: AsyncSession) -> List[InstitutionResponse]:
    result = await db.execute(select(Institution).order_by(Institution.created_at.desc()))
    return [InstitutionResponse.model_validate(i) for i in result.scalars().all()]


async def create_institution(db: AsyncSession, payload: InstitutionCreate, user: str) -> InstitutionResponse:
    name = payload.name.strip()
    if await _name_taken(db, name):
        raise ServiceError("Institution with this name already exists", status.HTTP_400_BAD_REQUEST)
    institution = Institution(name=name, address=payload.address.strip())
    db.add(institution)
    await db.flush()
    log_activity(
        db, ActivityType.INSTITUTION_CREATED, f'Institution "{name}" created', user,
        {"institution_id": str(institution.id)},
    )
    await db.commit()
    await db.refresh(institution)
    return InstitutionResponse.model_validate(institution)


async def update_institution(
    db: AsyncSession,
    institution_id: UUID,
    payload: InstitutionUpdate,
    user: str,
) -> Optional[InstitutionResponse]:
    name = payload.name.strip()
    if await _name_taken(db, name, exclude_id=institution_id):
        raise ServiceError("Institution with this name already exists", status.HTTP_400_BAD_REQUEST)
    institution = await db.get(Institution, institution_id)
    if not institution:
        return None
    institution.name = name
    institution.address = payload.address.strip()
    log_activity(
        db, ActivityType.INSTITUTION_UPDATED, f'Institution "{name}" updated', user,
        {"institution_id": str(institution_id)},
    )
    await db.commit()
    await db.refresh(institution)
    return InstitutionResponse.model_validate(institution)


async def delete_institution(db: AsyncSession, institution_id: UUID, user: str) -> bool:
    has_students = (
        await db.execute(select(Student.id).where(Student.institution_id == institution_id).limit(1))
    ).scalar_one_or_none()
    if has_students is not None:
        raise ServiceError("Cannot delete institution with existing students", status.HTTP_400_BAD_REQUEST)
    institution = await db.get(Institution, institution_id)
    if not institution:
        return False
    log_activity(
        db, ActivityType.INSTITUTION_DELETED, f'Institution "{institution.name}" deleted', user,
        {"institution_id": str(institution_id)},
    )
    await db.delete(institution)
    await db.commit()
    return True
