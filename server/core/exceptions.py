# server/core/exceptions.py


class UserError(Exception):
    """
    Base class for failures raised by the user operations service.
    Each subclass knows the HTTP status and client message it maps to.
    """
    status_code = 400
    message = "Bad request"

    def __init__(self, message: str | None = None, error: str | None = None):
        self.message = message or self.message
        self.error = error
        super().__init__(self.message)


class ValidationError(UserError):
    status_code = 400
    message = "Validation error"

    def __init__(self, fields: dict[str, str]):
        self.fields = dict(fields)
        detail = "; ".join(f"{name}: {reason}" for name, reason in self.fields.items())
        super().__init__(error=detail)


class DuplicateUserError(UserError):
    status_code = 400
    message = "User with this email or username already exists"


class UserNotFoundError(UserError):
    status_code = 404
    message = "User not found"


class StoreError(UserError):
    """Persistence failure. The cause is logged server-side only."""
    status_code = 500
    message = "Server error"
