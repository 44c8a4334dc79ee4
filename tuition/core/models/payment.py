"""Payment received from a student, and its optional per-month breakdown."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, JSON, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from tuition.db.session import Base


class Payment(Base):
    """
    A payment collected against one or more months.

    Itemized payments carry month_items (explicit per-month paid/discount).
    Legacy payments only carry month_ids plus the aggregate paid_amount and
    discount fields; the allocation engine apportions those across months.
    month_ids, course_ids and discount_applicable_month_ids hold UUID strings.
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("discount_type IN ('fixed','percentage')", name="chk_payment_discount_type"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="RESTRICT"), nullable=False, index=True)
    # Denormalized at collection time for receipts
    student_name = Column(String(255), nullable=False)
    student_code = Column(String(20), nullable=False)
    invoice_number = Column(String(20), nullable=False, unique=True)
    course_ids = Column(JSON, nullable=False, default=list)
    month_ids = Column(JSON, nullable=False, default=list)
    total_amount = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    discount_type = Column(String(20), nullable=False, default="fixed")
    discount_applicable_month_ids = Column(JSON, nullable=False, default=list)
    discounted_amount = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False)
    due_amount = Column(Numeric(12, 2), nullable=False)
    reference = Column(String(255), nullable=True)
    received_by = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    student = relationship("Student")
    month_items = relationship(
        "PaymentMonthItem",
        back_populates="payment",
        cascade="all, delete-orphan",
        order_by="PaymentMonthItem.position",
    )


class PaymentMonthItem(Base):
    """One month's share of an itemized payment."""

    __tablename__ = "payment_month_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    payment_id = Column(UUID(as_uuid=True), ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, index=True)
    month_id = Column(UUID(as_uuid=True), ForeignKey("months.id", ondelete="RESTRICT"), nullable=False)
    month_fee = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False)
    previously_paid = Column(Numeric(12, 2), nullable=False, default=0)
    discount_amount = Column(Numeric(12, 2), nullable=False, default=0)
    position = Column(Integer, nullable=False, default=0)

    payment = relationship("Payment", back_populates="month_items")
