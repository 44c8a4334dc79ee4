"""Month of a course, carrying the nominal fee charged for it."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from tuition.db.session import Base


class Month(Base):
    """
    A billable month of a course. payment is the nominal fee for the month.
    name and month_number are unique per course.
    """

    __tablename__ = "months"
    __table_args__ = (
        UniqueConstraint("course_id", "month_number", name="uq_month_course_number"),
        CheckConstraint("month_number BETWEEN 1 AND 999", name="chk_month_number_range"),
        CheckConstraint("payment >= 0", name="chk_month_payment_non_negative"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    month_number = Column(Integer, nullable=False)
    course_id = Column(UUID(as_uuid=True), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False, index=True)
    payment = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    course = relationship("Course")
