"""
Application error types.
Model functions raise these; app.register_error_handlers maps them to HTTP.
"""


class AppError(Exception):
    """Base error carrying a user-safe message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Missing or malformed input (400)."""


class NotFoundError(AppError):
    """Referenced entity does not exist (404)."""

    def __init__(self, entity: str, entity_id=None):
        super().__init__(f'{entity} not found')
        self.entity = entity
        self.entity_id = entity_id


class ConflictError(AppError):
    """Operation blocked by existing references (409)."""


class InvalidStatusTransitionError(ValidationError):
    """Status change not allowed by the transition table (400)."""

    def __init__(self, current_status: str, new_status: str):
        super().__init__(f'Cannot change status from {current_status} to {new_status}')
        self.current_status = current_status
        self.new_status = new_status


class StorageUnavailable(AppError):
    """The database could not be reached (500)."""
