"""
Application error taxonomy.

Every error carries the HTTP status it maps to; the handlers registered in
:mod:`carelink.main` render them as ``{"success": false, "message": ...}``.
"""


class AppError(Exception):
    status_code = 500
    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Missing or malformed input, or an operation not allowed in the current state."""

    status_code = 400
    default_message = "Please provide all required fields"


class AuthenticationError(AppError):
    status_code = 401
    default_message = "Invalid email or password"


class PermissionDenied(AppError):
    status_code = 403
    default_message = "Not a participant of this session"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Resource already exists"


class DependencyError(AppError):
    """A collaborator (store, assignment) could not complete the operation."""

    status_code = 500


class NoDoctorsAvailable(DependencyError):
    default_message = "No doctors available"


class AssignmentConflict(DependencyError):
    default_message = "Request is no longer pending"
