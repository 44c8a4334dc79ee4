"""Payments schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from tuition.core.enums import DiscountType


# --- Payment ---
class MonthPaymentItemCreate(BaseModel):
    month_id: UUID
    month_fee: Decimal = Field(..., ge=0)
    paid_amount: Decimal = Field(..., ge=0)
    previously_paid: Decimal = Field(Decimal("0"), ge=0)
    discount_amount: Decimal = Field(Decimal("0"), ge=0)


class PaymentCreate(BaseModel):
    """
    month_payments is optional: without it the payment is stored in the
    aggregate (legacy) shape and apportioned across month_ids when read.
    """

    student_id: UUID
    course_ids: List[UUID] = Field(..., min_length=1)
    month_ids: List[UUID] = Field(..., min_length=1)
    month_payments: List[MonthPaymentItemCreate] = Field(default_factory=list)
    total_amount: Decimal = Field(..., gt=0)
    discount_amount: Decimal = Field(Decimal("0"), ge=0)
    discount_type: DiscountType = DiscountType.FIXED
    discount_applicable_month_ids: List[UUID] = Field(default_factory=list)
    discounted_amount: Decimal = Field(..., ge=0)
    paid_amount: Decimal = Field(..., gt=0)
    due_amount: Decimal = Field(..., ge=0)
    reference: Optional[str] = Field(None, max_length=255)
    received_by: str = Field(..., min_length=1, max_length=255)

    @model_validator(mode="after")
    def validate_months_and_discount(self) -> "PaymentCreate":
        months = set(self.month_ids)
        if not set(self.discount_applicable_month_ids) <= months:
            raise ValueError("discount_applicable_month_ids must be a subset of month_ids")
        if not {mp.month_id for mp in self.month_payments} <= months:
            raise ValueError("month_payments may only reference months listed in month_ids")
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_amount > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class PaymentMonthItemResponse(BaseModel):
    month_id: UUID
    month_fee: Decimal
    paid_amount: Decimal
    previously_paid: Decimal
    discount_amount: Decimal

    class Config:
        from_attributes = True


class PaymentResponse(BaseModel):
    id: UUID
    student_id: UUID
    student_name: str
    student_code: str
    invoice_number: str
    course_ids: List[UUID]
    month_ids: List[UUID]
    month_payments: List[PaymentMonthItemResponse]
    total_amount: Decimal
    discount_amount: Decimal
    discount_type: DiscountType
    discount_applicable_month_ids: List[UUID]
    discounted_amount: Decimal
    paid_amount: Decimal
    due_amount: Decimal
    reference: Optional[str] = None
    received_by: str
    created_at: datetime


# --- Month allocation ---
class MonthContributionResponse(BaseModel):
    payment_id: UUID
    paid_amount: Decimal
    discount_amount: Decimal
    date: Optional[datetime] = None


class MonthAllocationResponse(BaseModel):
    """Totals for one month across all of a student's payments. Amounts are unrounded."""

    month_fee: Decimal
    total_paid: Decimal
    total_discount: Decimal
    payments: List[MonthContributionResponse]
