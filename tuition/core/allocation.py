"""
Per-month payment allocation for a student.

A student's payments come in two shapes. Itemized payments carry an explicit
paid/discount split per month. Legacy payments carry only a month list and
aggregate amounts: the paid amount is split evenly across the months and the
discount is apportioned by discount type, optionally restricted to a subset
of the months. The engine merges both shapes into one mapping of
month id -> MonthAllocation.

The engine is pure: it reads a snapshot through the PaymentStore and
MonthCatalog protocols and never mutates what it reads. No rounding is
applied; callers round for display.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, Hashable, Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from tuition.core.enums import DiscountType
from tuition.core.exceptions import InvalidPaymentShape, MonthNotFound

logger = logging.getLogger(__name__)

MonthId = Hashable

ZERO = Decimal("0")
HUNDRED = Decimal("100")


@dataclass(frozen=True)
class MonthRecord:
    id: MonthId
    fee: Decimal


@dataclass(frozen=True)
class MonthPaymentItem:
    month_id: MonthId
    month_fee: Decimal
    paid_amount: Decimal
    discount_amount: Decimal = ZERO


@dataclass(frozen=True)
class ItemizedPayment:
    id: Hashable
    student_id: Hashable
    created_at: Optional[datetime]
    items: Tuple[MonthPaymentItem, ...]
    # Payment-level discount, only used by the discounted-payments filter
    discount_amount: Decimal = ZERO


@dataclass(frozen=True)
class LegacyPayment:
    id: Hashable
    student_id: Hashable
    created_at: Optional[datetime]
    month_ids: Tuple[MonthId, ...]
    paid_amount: Decimal
    discount_amount: Decimal = ZERO
    discount_type: DiscountType = DiscountType.FIXED
    discount_applicable_month_ids: Tuple[MonthId, ...] = ()


PaymentRecord = Union[ItemizedPayment, LegacyPayment]


@dataclass
class MonthContribution:
    payment_id: Hashable
    paid_amount: Decimal
    discount_amount: Decimal
    date: Optional[datetime]


@dataclass
class MonthAllocation:
    month_fee: Decimal
    total_paid: Decimal = ZERO
    total_discount: Decimal = ZERO
    payments: List[MonthContribution] = field(default_factory=list)


class PaymentStore(Protocol):
    def get_payments_by_student(self, student_id: Hashable) -> Sequence[PaymentRecord]:
        ...


class MonthCatalog(Protocol):
    def get_month_by_id(self, month_id: MonthId) -> Optional[MonthRecord]:
        ...


class SnapshotPaymentStore:
    """PaymentStore over payments already loaded into memory. Keeps the given order."""

    def __init__(self, payments: Iterable[PaymentRecord]) -> None:
        self._payments = list(payments)

    def get_payments_by_student(self, student_id: Hashable) -> Sequence[PaymentRecord]:
        return [p for p in self._payments if p.student_id == student_id]


class SnapshotMonthCatalog:
    """MonthCatalog over months already loaded into memory."""

    def __init__(self, months: Iterable[MonthRecord]) -> None:
        self._months: Dict[MonthId, MonthRecord] = {m.id: m for m in months}

    def get_month_by_id(self, month_id: MonthId) -> Optional[MonthRecord]:
        return self._months.get(month_id)


def _percentage_of(fee: Decimal, percentage: Decimal) -> Decimal:
    # Percentage applies to the month's own fee; it is never divided by the month count.
    return fee * percentage / HUNDRED


def legacy_month_discount(payment: LegacyPayment, month: MonthRecord) -> Decimal:
    """Discount a legacy payment grants to one of its months."""
    discount = payment.discount_amount or ZERO
    if discount <= 0:
        return ZERO
    is_percentage = payment.discount_type == DiscountType.PERCENTAGE
    applicable = payment.discount_applicable_month_ids
    if applicable:
        if month.id not in applicable:
            return ZERO
        if is_percentage:
            return _percentage_of(month.fee, discount)
        return discount / len(applicable)
    if is_percentage:
        return _percentage_of(month.fee, discount)
    return discount / len(payment.month_ids)


class AllocationEngine:
    """Computes month allocations from injected payment and month sources."""

    def __init__(self, payment_store: PaymentStore, month_catalog: MonthCatalog) -> None:
        self.payment_store = payment_store
        self.month_catalog = month_catalog

    def compute_month_allocations(self, student_id: Hashable) -> Dict[MonthId, MonthAllocation]:
        allocations: Dict[MonthId, MonthAllocation] = {}
        for payment in self.payment_store.get_payments_by_student(student_id):
            try:
                if isinstance(payment, ItemizedPayment) and payment.items:
                    self._allocate_itemized(allocations, payment)
                elif isinstance(payment, LegacyPayment) and payment.month_ids:
                    self._allocate_legacy(allocations, payment)
                else:
                    raise InvalidPaymentShape(payment.id)
            except InvalidPaymentShape as exc:
                logger.warning("Skipping payment during allocation: %s", exc)
        return allocations

    def _allocate_itemized(self, allocations: Dict[MonthId, MonthAllocation], payment: ItemizedPayment) -> None:
        for item in payment.items:
            discount = item.discount_amount or ZERO
            entry = allocations.get(item.month_id)
            if entry is None:
                entry = allocations[item.month_id] = MonthAllocation(month_fee=item.month_fee)
            entry.total_paid += item.paid_amount
            entry.total_discount += discount
            # Last contributing item wins; fees are not reconciled across payments.
            entry.month_fee = item.month_fee
            entry.payments.append(
                MonthContribution(
                    payment_id=payment.id,
                    paid_amount=item.paid_amount,
                    discount_amount=discount,
                    date=payment.created_at,
                )
            )

    def _allocate_legacy(self, allocations: Dict[MonthId, MonthAllocation], payment: LegacyPayment) -> None:
        amount_paid = payment.paid_amount / len(payment.month_ids)
        for month_id in payment.month_ids:
            try:
                month = self._require_month(month_id)
            except MonthNotFound as exc:
                logger.debug("Payment %s: %s, month skipped", payment.id, exc)
                continue
            discount = legacy_month_discount(payment, month)
            entry = allocations.get(month_id)
            if entry is None:
                entry = allocations[month_id] = MonthAllocation(month_fee=month.fee)
            entry.total_paid += amount_paid
            entry.total_discount += discount
            entry.payments.append(
                MonthContribution(
                    payment_id=payment.id,
                    paid_amount=amount_paid,
                    discount_amount=discount,
                    date=payment.created_at,
                )
            )

    def _require_month(self, month_id: MonthId) -> MonthRecord:
        month = self.month_catalog.get_month_by_id(month_id)
        if month is None:
            raise MonthNotFound(month_id)
        return month


def compute_month_allocations(
    student_id: Hashable,
    payment_store: PaymentStore,
    month_catalog: MonthCatalog,
) -> Dict[MonthId, MonthAllocation]:
    return AllocationEngine(payment_store, month_catalog).compute_month_allocations(student_id)


def filter_discounted_payments(payments: Iterable[PaymentRecord]) -> List[PaymentRecord]:
    """Payments whose payment-level discount is positive, in input order."""
    return [p for p in payments if (p.discount_amount or ZERO) > 0]


__all__ = [
    "AllocationEngine",
    "ItemizedPayment",
    "LegacyPayment",
    "MonthAllocation",
    "MonthCatalog",
    "MonthContribution",
    "MonthPaymentItem",
    "MonthRecord",
    "PaymentRecord",
    "PaymentStore",
    "SnapshotMonthCatalog",
    "SnapshotPaymentStore",
    "compute_month_allocations",
    "filter_discounted_payments",
    "legacy_month_discount",
]
