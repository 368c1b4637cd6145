class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class ValidationError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 422)


class AuthRequiredError(CustomBaseError):
    def __init__(self, message: str = 'Please sign in to continue') -> None:
        super().__init__(message, 401)


class PermissionDeniedError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class ConflictError(CustomBaseError):
    """Slot contention; the client should refresh the grid and retry."""

    def __init__(self, message: str) -> None:
        super().__init__(message, 409)


class ExpiredHoldError(CustomBaseError):
    def __init__(self, message: str = 'Hold has expired, please select the slot again') -> None:
        super().__init__(message, 410)


class IneligibleDiscountError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)
