"""Payments service: collection with invoice numbering, history, discounts, per-month allocation."""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tuition.api.v1.activities.service import log_activity
from tuition.core.allocation import (
    AllocationEngine,
    ItemizedPayment,
    LegacyPayment,
    MonthPaymentItem,
    MonthRecord,
    PaymentRecord,
    SnapshotMonthCatalog,
    SnapshotPaymentStore,
    filter_discounted_payments,
)
from tuition.core.enums import ActivityType, DiscountType
from tuition.core.exceptions import ServiceError
from tuition.core.models import Month, Payment, PaymentMonthItem, Student

from .schemas import (
    MonthAllocationResponse,
    MonthContributionResponse,
    PaymentCreate,
    PaymentMonthItemResponse,
    PaymentResponse,
)

logger = logging.getLogger(__name__)

INVOICE_PREFIX = "INV"


def _to_uuid(val):
    if val is None:
        return None
    return val if isinstance(val, UUID) else UUID(str(val))


def _to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


def _uuid_list(values: Optional[Iterable]) -> List[UUID]:
    return [_to_uuid(v) for v in (values or [])]


# --- Record boundary ---
def to_payment_record(payment: Payment) -> PaymentRecord:
    """Resolve a stored payment into its itemized or legacy shape, once."""
    if payment.month_items:
        return ItemizedPayment(
            id=payment.id,
            student_id=payment.student_id,
            created_at=payment.created_at,
            items=tuple(
                MonthPaymentItem(
                    month_id=_to_uuid(item.month_id),
                    month_fee=_to_decimal(item.month_fee),
                    paid_amount=_to_decimal(item.paid_amount),
                    discount_amount=_to_decimal(item.discount_amount),
                )
                for item in payment.month_items
            ),
            discount_amount=_to_decimal(payment.discount_amount),
        )
    return LegacyPayment(
        id=payment.id,
        student_id=payment.student_id,
        created_at=payment.created_at,
        month_ids=tuple(_uuid_list(payment.month_ids)),
        paid_amount=_to_decimal(payment.paid_amount),
        discount_amount=_to_decimal(payment.discount_amount),
        discount_type=DiscountType(payment.discount_type or DiscountType.FIXED.value),
        discount_applicable_month_ids=tuple(_uuid_list(payment.discount_applicable_month_ids)),
    )


def _payment_to_response(payment: Payment) -> PaymentResponse:
    return PaymentResponse(
        id=_to_uuid(payment.id),
        student_id=_to_uuid(payment.student_id),
        student_name=payment.student_name,
        student_code=payment.student_code,
        invoice_number=payment.invoice_number,
        course_ids=_uuid_list(payment.course_ids),
        month_ids=_uuid_list(payment.month_ids),
        month_payments=[PaymentMonthItemResponse.model_validate(i) for i in payment.month_items],
        total_amount=_to_decimal(payment.total_amount),
        discount_amount=_to_decimal(payment.discount_amount),
        discount_type=payment.discount_type,
        discount_applicable_month_ids=_uuid_list(payment.discount_applicable_month_ids),
        discounted_amount=_to_decimal(payment.discounted_amount),
        paid_amount=_to_decimal(payment.paid_amount),
        due_amount=_to_decimal(payment.due_amount),
        reference=payment.reference,
        received_by=payment.received_by,
        created_at=payment.created_at,
    )


def _payments_query(student_id: Optional[UUID] = None):
    stmt = select(Payment).options(selectinload(Payment.month_items))
    if student_id is not None:
        stmt = stmt.where(Payment.student_id == student_id)
    return stmt


async def generate_invoice_number(db: AsyncSession, now: Optional[datetime] = None) -> str:
    """INV + year + zero-padded month + four-digit sequence (payment count + 1)."""
    now = now or datetime.now()
    count = (await db.execute(select(func.count(Payment.id)))).scalar() or 0
    return f"{INVOICE_PREFIX}{now.year}{now.month:02d}{count + 1:04d}"


# --- Payment ---
async def list_payments(db: AsyncSession, student_id: Optional[UUID] = None) -> List[PaymentResponse]:
    stmt = _payments_query(student_id).order_by(Payment.created_at.desc())
    result = await db.execute(stmt)
    return [_payment_to_response(p) for p in result.scalars().all()]


async def list_discounted_payments(
    db: AsyncSession,
    student_id: Optional[UUID] = None,
) -> List[PaymentResponse]:
    result = await db.execute(_payments_query(student_id).order_by(Payment.created_at.desc()))
    payments = result.scalars().all()
    by_id = {p.id: p for p in payments}
    discounted = filter_discounted_payments(to_payment_record(p) for p in payments)
    return [_payment_to_response(by_id[r.id]) for r in discounted]


async def get_payment(db: AsyncSession, payment_id: UUID) -> Optional[PaymentResponse]:
    result = await db.execute(_payments_query().where(Payment.id == payment_id))
    payment = result.scalar_one_or_none()
    return _payment_to_response(payment) if payment else None


async def create_payment(db: AsyncSession, payload: PaymentCreate, user: str) -> PaymentResponse:
    student = await db.get(Student, payload.student_id)
    if not student:
        raise ServiceError("Invalid student", status.HTTP_400_BAD_REQUEST)

    known = set(
        (await db.execute(select(Month.id).where(Month.id.in_(payload.month_ids)))).scalars().all()
    )
    missing = [str(m) for m in payload.month_ids if m not in known]
    if missing:
        raise ServiceError(f"Unknown month(s): {', '.join(missing)}", status.HTTP_400_BAD_REQUEST)

    try:
        payment = Payment(
            student_id=student.id,
            student_name=student.name,
            student_code=student.student_code,
            invoice_number=await generate_invoice_number(db),
            course_ids=[str(c) for c in payload.course_ids],
            month_ids=[str(m) for m in payload.month_ids],
            month_items=[
                PaymentMonthItem(
                    month_id=mp.month_id,
                    month_fee=mp.month_fee,
                    paid_amount=mp.paid_amount,
                    previously_paid=mp.previously_paid,
                    discount_amount=mp.discount_amount,
                    position=i,
                )
                for i, mp in enumerate(payload.month_payments)
            ],
            total_amount=payload.total_amount,
            discount_amount=payload.discount_amount,
            discount_type=payload.discount_type.value,
            discount_applicable_month_ids=[str(m) for m in payload.discount_applicable_month_ids],
            discounted_amount=payload.discounted_amount,
            paid_amount=payload.paid_amount,
            due_amount=payload.due_amount,
            reference=(payload.reference or "").strip() or None,
            received_by=payload.received_by.strip(),
        )
        db.add(payment)
        await db.flush()
        log_activity(
            db,
            ActivityType.PAYMENT_RECEIVED,
            f"Payment of {payload.paid_amount} received from {student.name}",
            user,
            {"payment_id": str(payment.id), "invoice_number": payment.invoice_number},
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ServiceError("Invoice number already taken, retry the payment", status.HTTP_409_CONFLICT)

    logger.info("Recorded payment %s (%s) for student %s", payment.id, payment.invoice_number, student.id)
    result = await db.execute(
        _payments_query().where(Payment.id == payment.id).execution_options(populate_existing=True)
    )
    return _payment_to_response(result.scalar_one())


# --- Month allocation ---
async def load_payment_records(db: AsyncSession, student_id: UUID) -> List[PaymentRecord]:
    stmt = _payments_query(student_id).order_by(Payment.created_at, Payment.invoice_number)
    result = await db.execute(stmt)
    return [to_payment_record(p) for p in result.scalars().all()]


async def load_month_records(db: AsyncSession, payments: Iterable[PaymentRecord]) -> List[MonthRecord]:
    """Months referenced by the legacy payments; itemized payments carry their own fee."""
    month_ids = {m for p in payments if isinstance(p, LegacyPayment) for m in p.month_ids}
    if not month_ids:
        return []
    result = await db.execute(select(Month.id, Month.payment).where(Month.id.in_(month_ids)))
    return [MonthRecord(id=_to_uuid(mid), fee=_to_decimal(fee)) for mid, fee in result.all()]


async def get_month_allocations(db: AsyncSession, student_id: UUID) -> Dict[UUID, MonthAllocationResponse]:
    """Per-month paid/discount totals for a student. Unknown student -> empty mapping."""
    payments = await load_payment_records(db, student_id)
    months = await load_month_records(db, payments)
    engine = AllocationEngine(SnapshotPaymentStore(payments), SnapshotMonthCatalog(months))
    allocations = engine.compute_month_allocations(student_id)
    return {
        month_id: MonthAllocationResponse(
            month_fee=alloc.month_fee,
            total_paid=alloc.total_paid,
            total_discount=alloc.total_discount,
            payments=[
                MonthContributionResponse(
                    payment_id=c.payment_id,
                    paid_amount=c.paid_amount,
                    discount_amount=c.discount_amount,
                    date=c.date,
                )
                for c in alloc.payments
            ],
        )
        for month_id, alloc in allocations.items()
    }
