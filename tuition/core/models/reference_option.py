"""Saved option values offered for a payment's reference and received-by fields."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID

from tuition.db.session import Base


class ReferenceOption(Base):
    """value is unique per type case-insensitively; enforced in the service layer."""

    __tablename__ = "reference_options"
    __table_args__ = (
        CheckConstraint("type IN ('reference', 'receivedBy')", name="chk_reference_option_type"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    type = Column(String(20), nullable=False, index=True)  # see ReferenceType
    value = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
