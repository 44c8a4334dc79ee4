from enum import Enum


class DiscountType(str, Enum):
    FIXED = "fixed"
    PERCENTAGE = "percentage"


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    CUSTOM = "Custom"


class ActivityType(str, Enum):
    BATCH_CREATED = "batch_created"
    BATCH_UPDATED = "batch_updated"
    BATCH_DELETED = "batch_deleted"
    COURSE_CREATED = "course_created"
    COURSE_UPDATED = "course_updated"
    COURSE_DELETED = "course_deleted"
    MONTH_CREATED = "month_created"
    MONTH_UPDATED = "month_updated"
    MONTH_DELETED = "month_deleted"
    INSTITUTION_CREATED = "institution_created"
    INSTITUTION_UPDATED = "institution_updated"
    INSTITUTION_DELETED = "institution_deleted"
    STUDENT_ADDED = "student_added"
    STUDENT_UPDATED = "student_updated"
    STUDENT_DELETED = "student_deleted"
    PAYMENT_RECEIVED = "payment_received"
    REFERENCE_ADDED = "reference_added"
    REFERENCE_DELETED = "reference_deleted"


class ReferenceType(str, Enum):
    REFERENCE = "reference"
    RECEIVED_BY = "receivedBy"
