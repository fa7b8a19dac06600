"""Error taxonomy shared by the fetchers, the submission pipeline and the routers."""
from __future__ import annotations

import enum


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    AUTHORIZATION = "authorization"
    SERVER = "server"
    NETWORK = "network"
    UNKNOWN = "unknown"


class ApiError(RuntimeError):
    """Base class for failures reported by the marketplace backend."""

    kind = ErrorKind.UNKNOWN
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ApiError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Record not found"


class ConflictError(ApiError):
    kind = ErrorKind.CONFLICT
    default_message = "Booking dates conflict with existing bookings"


class ValidationError(ApiError):
    """Server-side validation failure (HTTP 422) with the backend's messages."""

    kind = ErrorKind.VALIDATION
    default_message = "Validation failed"

    def __init__(self, errors: list[str] | None = None, message: str | None = None) -> None:
        self.errors = list(errors or [])
        super().__init__(message or (", ".join(self.errors) if self.errors else None))


class AuthorizationError(ApiError):
    kind = ErrorKind.AUTHORIZATION
    default_message = "Not authorized to perform this action"


class ServerError(ApiError):
    kind = ErrorKind.SERVER
    default_message = "Server error occurred"


class NetworkError(ApiError):
    kind = ErrorKind.NETWORK
    default_message = "Network error occurred"


class SubmissionInProgressError(RuntimeError):
    """Raised when a record already has a pending submission."""


class StaleResultError(RuntimeError):
    """Raised to the awaiter of a fetch that a newer fetch superseded."""


USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.VALIDATION: "Please correct the highlighted fields and try again.",
    ErrorKind.NOT_FOUND: "This record no longer exists.",
    ErrorKind.CONFLICT: "Apartment is not available for the selected dates.",
    ErrorKind.AUTHORIZATION: "You are not allowed to perform this action.",
    ErrorKind.SERVER: "Server error occurred. Please try again later.",
    ErrorKind.NETWORK: "Network error. Check your connection and retry.",
    ErrorKind.UNKNOWN: "An unexpected error occurred.",
}


def classify(error: BaseException) -> ErrorKind:
    """Return the error kind used to pick user messaging."""

    if isinstance(error, ApiError):
        return error.kind
    return ErrorKind.UNKNOWN


def user_message(error: BaseException) -> str:
    """Return the user-facing message for a failure.

    Server-side validation failures include the backend's own messages so the
    user can see which field was rejected.
    """

    kind = classify(error)
    if isinstance(error, ValidationError) and error.errors:
        return f"{USER_MESSAGES[kind]} {'; '.join(error.errors)}"
    return USER_MESSAGES[kind]


def is_retryable(error: BaseException) -> bool:
    """NotFound is terminal for a view; everything else may be retried."""

    return classify(error) is not ErrorKind.NOT_FOUND
