from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tuition.auth.dependencies import get_current_user
from tuition.auth.schemas import CurrentUser
from tuition.core.enums import ReferenceType
from tuition.core.exceptions import ServiceError
from tuition.db.session import get_db

from .schemas import ReferenceOptionCreate, ReferenceOptionResponse
from . import service

router = APIRouter(prefix="/api/v1/references", tags=["references"])


@router.get("/{option_type}", response_model=List[ReferenceOptionResponse])
async def list_options(
    option_type: ReferenceType,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[ReferenceOptionResponse]:
    return await service.list_options(db, option_type)


@router.post("/{option_type}", response_model=ReferenceOptionResponse, status_code=status.HTTP_201_CREATED)
async def add_option(
    option_type: ReferenceType,
    payload: ReferenceOptionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> ReferenceOptionResponse:
    try:
        return await service.add_option(db, option_type, payload, current_user.username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{option_type}/{option_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_option(
    option_type: ReferenceType,
    option_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    deleted = await service.delete_option(db, option_type, option_id, current_user.username)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Option not found")
