class StoreError(Exception):
    """Infrastructure failure reported by the backing store."""

    def __init__(self, message: str = "Store operation failed", code: str | None = None):
        super().__init__(message)
        self.code = code


class ConstraintViolation(StoreError):
    def __init__(self, message: str = "Constraint violated", code: str | None = "23505"):
        super().__init__(message, code)


class StoreTimeout(StoreError):
    def __init__(self, message: str = "Store call timed out", code: str | None = "timeout"):
        super().__init__(message, code)


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class NotFound(DomainError):
    status_code = 404


class Unauthorized(DomainError):
    status_code = 403


class SlotUnavailable(DomainError):
    status_code = 409


class DuplicateBooking(DomainError):
    status_code = 409


class InvalidPreferences(DomainError):
    status_code = 422

    def __init__(self, errors: list[str]):
        super().__init__(f"Invalid preferences: {', '.join(errors)}")
        self.errors = errors


class InvalidRole(DomainError):
    status_code = 422


class MessagingError(Exception):
    """The messaging provider rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: int | None = None, code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
