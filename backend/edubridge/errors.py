"""Error taxonomy shared by repositories, services and the HTTP layer.

Every error maps to one HTTP status and is rendered by the application
as `{"error": <message>}`.
"""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ServiceError):
    """Missing or malformed request data."""
    status_code = 400


class NotFound(ServiceError):
    """The referenced id has no row."""
    status_code = 404


class StorageError(ServiceError):
    """Database or filesystem failure, including constraint violations."""
    status_code = 500
