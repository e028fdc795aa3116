UNAUTHENTICATED = "unauthenticated"
FORBIDDEN = "forbidden"
NOT_FOUND = "not_found"
VALIDATION = "validation"
CONFLICT = "conflict"
STORE_FAILURE = "store_failure"
UNEXPECTED = "unexpected"

UNEXPECTED_MESSAGE = "An unexpected error occurred. Please try again."


class ServiceError(Exception):
    """Base class for failures a service reports back to its caller."""

    kind = UNEXPECTED
    default_message = UNEXPECTED_MESSAGE

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ServiceError):
    kind = UNAUTHENTICATED
    default_message = "You must be logged in."


class Forbidden(ServiceError):
    kind = FORBIDDEN
    default_message = "You do not have permission to perform this action."


class NotFound(ServiceError):
    kind = NOT_FOUND
    default_message = "Not found."


class ValidationError(ServiceError):
    kind = VALIDATION
    default_message = "Invalid input."


class Conflict(ServiceError):
    kind = CONFLICT
    default_message = "This record already exists."
