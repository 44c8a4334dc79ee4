"""Reference options: saved values for a payment's reference and received-by fields."""

from typing import List
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tuition.api.v1.activities.service import log_activity
from tuition.core.enums import ActivityType, ReferenceType
from tuition.core.exceptions import ServiceError
from tuition.core.models import ReferenceOption

from .schemas import ReferenceOptionCreate, ReferenceOptionResponse

_LABELS = {
    ReferenceType.REFERENCE: "Reference",
    ReferenceType.RECEIVED_BY: "Received by",
}


async def list_options(db: AsyncSession, option_type: ReferenceType) -> List[ReferenceOptionResponse]:
    result = await db.execute(
        select(ReferenceOption)
        .where(ReferenceOption.type == option_type.value)
        .order_by(ReferenceOption.created_at.desc())
    )
    return [ReferenceOptionResponse.model_validate(o) for o in result.scalars().all()]


async def add_option(
    db: AsyncSession,
    option_type: ReferenceType,
    payload: ReferenceOptionCreate,
    user: str,
) -> ReferenceOptionResponse:
    value = payload.value.strip()
    label = _LABELS[option_type]
    if not value:
        raise ServiceError(f"{label} value is required", status.HTTP_400_BAD_REQUEST)
    existing = (
        await db.execute(
            select(ReferenceOption.id)
            .where(
                ReferenceOption.type == option_type.value,
                func.lower(ReferenceOption.value) == value.lower(),
            )
            .limit(1)
        )
    ).scalar_one_or_none()
    if existing is not None:
        raise ServiceError(f"{label} option already exists", status.HTTP_400_BAD_REQUEST)
    option = ReferenceOption(type=option_type.value, value=value)
    db.add(option)
    await db.flush()
    log_activity(
        db, ActivityType.REFERENCE_ADDED, f'{label} option "{value}" added', user,
        {"reference_option_id": str(option.id), "type": option_type.value},
    )
    await db.commit()
    await db.refresh(option)
    return ReferenceOptionResponse.model_validate(option)


async def delete_option(db: AsyncSession, option_type: ReferenceType, option_id: UUID, user: str) -> bool:
    option = await db.get(ReferenceOption, option_id)
    if not option or option.type != option_type.value:
        return False
    log_activity(
        db, ActivityType.REFERENCE_DELETED, f'{_LABELS[option_type]} option "{option.value}" deleted', user,
        {"reference_option_id": str(option_id), "type": option_type.value},
    )
    await db.delete(option)
    await db.commit()
    return True
