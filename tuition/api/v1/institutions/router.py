from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tuition.auth.dependencies import get_current_user
from tuition.auth.schemas import CurrentUser
from tuition.core.exceptions import ServiceError
from tuition.db.session import get_db

from .schemas import InstitutionCreate, InstitutionResponse, InstitutionUpdate
from . import service

router = APIRouter(prefix="/api/v1/institutions", tags=["institutions"])


@router.get("", response_model=List[InstitutionResponse])
async def list_institutions(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[InstitutionResponse]:
    return await service.list_institutions(db)


@router.post("", response_model=InstitutionResponse, status_code=status.HTTP_201_CREATED)
async def create_institution(
    payload: InstitutionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> InstitutionResponse:
    try:
        return await service.create_institution(db, payload, current_user.username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{institution_id}", response_model=InstitutionResponse)
async def update_institution(
    institution_id: UUID,
    payload: InstitutionUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> InstitutionResponse:
    try:
        institution = await service.update_institution(db, institution_id, payload, current_user.username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not institution:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Institution not found")
    return institution


@router.delete("/{institution_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_institution(
    institution_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    try:
        deleted = await service.delete_institution(db, institution_id, current_user.username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Institution not found")
