"""Payments router: collection, history, discounted payments, per-month allocation."""

from typing import Dict, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tuition.auth.dependencies import get_current_user
from tuition.auth.schemas import CurrentUser
from tuition.core.exceptions import ServiceError
from tuition.db.session import get_db

from .schemas import MonthAllocationResponse, PaymentCreate, PaymentResponse
from . import service

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.get("", response_model=List[PaymentResponse])
async def list_payments(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[PaymentResponse]:
    return await service.list_payments(db)


@router.get("/discounted", response_model=List[PaymentResponse])
async def list_discounted_payments(
    student_id: Optional[UUID] = Query(None, description="Restrict to one student's payments"),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[PaymentResponse]:
    return await service.list_discounted_payments(db, student_id=student_id)


@router.get("/student/{student_id}", response_model=List[PaymentResponse])
async def list_student_payments(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[PaymentResponse]:
    return await service.list_payments(db, student_id=student_id)


@router.get("/student/{student_id}/months", response_model=Dict[UUID, MonthAllocationResponse])
async def get_month_allocations(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> Dict[UUID, MonthAllocationResponse]:
    return await service.get_month_allocations(db, student_id)


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> PaymentResponse:
    payment = await service.get_payment(db, payment_id)
    if not payment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    return payment


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> PaymentResponse:
    try:
        return await service.create_payment(db, payload, current_user.username)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
