"""
Domain errors.

Every error carries the HTTP status code it maps to. They are raised from the
service layer and rendered by the exception handlers registered in ``main.py``.
"""


class AppError(Exception):
    """Base class for errors that are safe to show to API clients."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": {"message": self.message, "statusCode": self.status_code}}


class ValidationError(AppError):
    status_code = 400


class NotFoundError(AppError):
    status_code = 404

    def __init__(self, resource: str = "Resource"):
        super().__init__(f"{resource} not found")
        self.resource = resource


class SubscriptionRequiredError(AppError):
    status_code = 403

    def __init__(self, message: str = "Valid subscription required. Free quota exhausted."):
        super().__init__(message)


class QuotaExceededError(AppError):
    status_code = 403

    def __init__(self, message: str = "Quota exceeded. Please upgrade your subscription."):
        super().__init__(message)
