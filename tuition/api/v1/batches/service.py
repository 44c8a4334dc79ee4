from typing import List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tuition.api.v1.activities.service import log_activity
from tuition.core.enums import ActivityType
from tuition.core.exceptions import ServiceError
from tuition.core.models import Batch, Course

from .schemas import BatchCreate, BatchResponse, BatchUpdate


async def _name_taken(db: AsyncSession, name: str, exclude_id: Optional[UUID] = None) -> bool:
    stmt = select(Batch.id).where(func.lower(Batch.name) == name.lower())
    if exclude_id is not None:
        stmt = stmt.where(Batch.id != exclude_id)
    return (await db.execute(stmt.limit(1))).scalar_one_or_none() is not None


async def list_batches(db: AsyncSession) -> List[BatchResponse]:
    result = await db.execute(select(Batch).order_by(Batch.created_at.desc()))
    return [BatchResponse.model_validate(b) for b in result.scalars().all()]


async def get_batch(db: AsyncSession, batch_id: UUID) -> Optional[BatchResponse]:
    batch = await db.get(Batch, batch_id)
    return BatchResponse.model_validate(batch) if batch else None


async def create_batch(db: AsyncSession, payload: BatchCreate, user: str) -> BatchResponse:
    name = payload.name.strip()
    if not name:
        raise ServiceError("Batch name is required", status.HTTP_400_BAD_REQUEST)
    if await _name_taken(db, name):
        raise ServiceError("Batch with this name already exists", status.HTTP_400_BAD_REQUEST)
    batch = Batch(name=name)
    db.add(batch)
    await db.flush()
    log_activity(db, ActivityType.BATCH_CREATED, f'Batch "{name}" created', user, {"batch_id": str(batch.id)})
    await db.commit()
    await db.refresh(batch)
    return BatchResponse.model_validate(batch)


async def update_batch(
    db: AsyncSession,
    batch_id: UUID,
    payload: BatchUpdate,
    user: str,
) -> Optional[BatchResponse]:
    name = payload.name.strip()
    if not name:
        raise ServiceError("Batch name is required", status.HTTP_400_BAD_REQUEST)
    batch = await db.get(Batch, batch_id)
    if not batch:
        return None
    if await _name_taken(db, name, exclude_id=batch_id):
        raise ServiceError("Batch with this name already exists", status.HTTP_400_BAD_REQUEST)
    batch.name = name
    log_activity(db, ActivityType.BATCH_UPDATED, f'Batch "{name}" updated', user, {"batch_id": str(batch_id)})
    await db.commit()
    await db.refresh(batch)
    return BatchResponse.model_validate(batch)


async def delete_batch(db: AsyncSession, batch_id: UUID, user: str) -> bool:
    has_courses = (
        await db.execute(select(Course.id).where(Course.batch_id == batch_id).limit(1))
    ).scalar_one_or_none()
    if has_courses is not None:
        raise ServiceError("Cannot delete batch with existing courses", status.HTTP_400_BAD_REQUEST)
    batch = await db.get(Batch, batch_id)
    if not batch:
        return False
    log_activity(db, ActivityType.BATCH_DELETED, f'Batch "{batch.name}" deleted', user, {"batch_id": str(batch_id)})
    await db.delete(batch)
    await db.commit()
    return True
