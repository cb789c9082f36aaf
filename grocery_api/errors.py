class ApiError(Exception):
    """Base class for failures reported to the client as ``{"message": ...}``."""

    status_code = 500
    default_message = "Internal server error."

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request."


class AuthError(ApiError):
    status_code = 401
    default_message = "Unauthorized."


class ForbiddenError(ApiError):
    status_code = 403
    default_message = "Forbidden."


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found."


class ConflictError(ApiError):
    status_code = 409
    default_message = "Conflict."


class InvalidStateError(ApiError):
    status_code = 400
    default_message = "Operation not allowed in the current state."


class InsufficientStockError(ApiError):
    status_code = 400
    default_message = "Insufficient stock."


class InternalError(ApiError):
    pass
