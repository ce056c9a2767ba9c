"""
Error taxonomy shared by the stores, services and the HTTP layer.

Every error carries the HTTP status it maps to, so the API layer can convert
any 'MessagingError' into the '{"error": str}' response shape with a single
exception handler. Anything that is not a 'MessagingError' is treated as an
internal failure and reported with a generic message.
"""


class MessagingError(Exception):
    """Base class for all expected failures raised by the messaging core."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class BadRequest(MessagingError):
    """Missing or malformed input, or an operation rejected by a business rule."""

    status_code = 400


class Unauthorized(MessagingError):
    """Missing, malformed or expired bearer token."""

    status_code = 401


class Forbidden(MessagingError):
    """Valid identity without the privilege required by the route."""

    status_code = 403


class NotFound(MessagingError):
    """A referenced user or group does not exist."""

    status_code = 404


class InternalError(MessagingError):
    status_code = 500


INTERNAL_ERROR_MESSAGE = "Internal server error"
