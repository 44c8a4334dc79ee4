from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tuition.auth.dependencies import get_current_user
from tuition.auth.schemas import CurrentUser
from tuition.core.exceptions import ServiceError
from tuition.db.session import get_db

from .schemas import MonthCreate, MonthResponse, MonthUpdate
from . import service

router = APIRouter(prefix="/api/v1/months", tags=["months"])


@router.get("", response_model=List[MonthResponse])
async def list_months(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[MonthResponse]:
    return await service.list_months(db)


@router.get("/course/{course_id}", response_model=List[MonthResponse])
async def list_months_by_course(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[MonthResponse]:
    return await service.list_months(db, course_id=course_id)


@router.post("", response_model=MonthResponse, status_code=status.HTTP_201_CREATED)
async def create_month(
    payload: MonthCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> MonthResponse:
    try:
        return await service.create_month(db, payload, current_user.username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{month_id}", response_model=MonthResponse)
async def update_month(
    month_id: UUID,
    payload: MonthUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> MonthResponse:
    try:
        month = await service.update_month(db, month_id, payload, current_user.username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not month:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Month not found")
    return month


@router.delete("/{month_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_month(
    month_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    try:
        deleted = await service.delete_month(db, month_id, current_user.username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Month not found")
