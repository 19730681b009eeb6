"""
Service errors.

Services raise these with a human-readable message; callers show str(exc)
to the user (routes turn them into HTTPException details).
"""


class ServiceError(Exception):
    """A business rule rejected the operation."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ServiceError):
    """The referenced record does not exist."""


class ConfigurationError(ServiceError):
    """A required setting (gateway key, database) is missing."""
