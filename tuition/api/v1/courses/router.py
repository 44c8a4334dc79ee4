from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from tuition.auth.dependencies import get_current_user
from tuition.auth.schemas import CurrentUser
from tuition.core.exceptions import ServiceError
from tuition.db.session import get_db

from .schemas import CourseCreate, CourseResponse, CourseUpdate
from . import service

router = APIRouter(prefix="/api/v1/courses", tags=["courses"])


@router.get("", response_model=List[CourseResponse])
async def list_courses(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[CourseResponse]:
    return await service.list_courses(db)


@router.get("/batch/{batch_id}", response_model=List[CourseResponse])
async def list_courses_by_batch(
    batch_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[CourseResponse]:
    return await service.list_courses(db, batch_id=batch_id)


@router.post("", response_model=CourseResponse, status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> CourseResponse:
    try:
        return await service.create_course(db, payload, current_user.username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{course_id}", response_model=CourseResponse)
async def update_course(
    course_id: UUID,
    payload: CourseUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> CourseResponse:
    try:
        course = await service.update_course(db, course_id, payload, current_user.username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not course:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return course


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    course_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    try:
        deleted = await service.delete_course(db, course_id, current_user.username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
