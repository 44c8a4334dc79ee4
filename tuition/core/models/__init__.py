from tuition.core.models.activity import Activity
from tuition.core.models.batch import Batch
from tuition.core.models.course import Course
from tuition.core.models.institution import Institution
from tuition.core.models.month import Month
from tuition.core.models.payment import Payment, PaymentMonthItem
from tuition.core.models.reference_option import ReferenceOption
from tuition.core.models.student import Student, StudentEnrollment

__all__ = [
    "Activity",
    "Batch",
    "Course",
    "Institution",
    "Month",
    "Payment",
    "PaymentMonthItem",
    "ReferenceOption",
    "Student",
    "StudentEnrollment",
]
