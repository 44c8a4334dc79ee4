"""Student and course enrollments."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from tuition.db.session import Base


class Student(Base):
    """student_code is the human-facing id (BTF<yy><nnnn>); id is the internal key."""

    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint("gender IN ('Male','Female','Custom')", name="chk_student_gender"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    student_code = Column(String(20), nullable=False, unique=True)
    institution_id = Column(
        UUID(as_uuid=True),
        ForeignKey("institutions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    gender = Column(String(10), nullable=False)
    phone = Column(String(50), nullable=False)
    guardian_name = Column(String(255), nullable=False)
    guardian_phone = Column(String(50), nullable=False)
    batch_id = Column(UUID(as_uuid=True), ForeignKey("batches.id", ondelete="RESTRICT"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    institution = relationship("Institution")
    batch = relationship("Batch")
    enrollments = relationship(
        "StudentEnrollment",
        back_populates="student",
        cascade="all, delete-orphan",
        order_by="StudentEnrollment.position",
    )


class StudentEnrollment(Base):
    """Course enrollment from a starting month to an optional ending month."""

    __tablename__ = "student_enrollments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    course_id = Column(UUID(as_uuid=True), ForeignKey("courses.id", ondelete="RESTRICT"), nullable=False)
    starting_month_id = Column(UUID(as_uuid=True), ForeignKey("months.id", ondelete="RESTRICT"), nullable=False)
    ending_month_id = Column(UUID(as_uuid=True), ForeignKey("months.id", ondelete="SET NULL"), nullable=True)
    position = Column(Integer, nullable=False, default=0)

    student = relationship("Student", back_populates="enrollments")
