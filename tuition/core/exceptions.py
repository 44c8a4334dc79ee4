from fastapi import status


class ServiceError(Exception):
    """Base exception for service layer errors."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AllocationError(Exception):
    """Recoverable problem met while allocating a payment to months. Never escapes the engine."""


class InvalidPaymentShape(AllocationError):
    """Payment carries neither month items nor a non-empty month list."""

    def __init__(self, payment_id) -> None:
        super().__init__(f"Payment {payment_id} has no month items and no months")
        self.payment_id = payment_id


class MonthNotFound(AllocationError):
    """Legacy payment references a month the catalog does not know."""

    def __init__(self, month_id) -> None:
        super().__init__(f"Month {month_id} not found")
        self.month_id = month_id
