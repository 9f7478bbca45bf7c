class ServiceError(Exception):
    """Base for errors whose message is safe to show to the client."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(ServiceError):
    status_code = 400


class Conflict(ServiceError):
    # signup reports duplicates as a plain 400
    status_code = 400


class Unauthorized(ServiceError):
    status_code = 401


class Unauthenticated(ServiceError):
    status_code = 401


class TokenExpired(Unauthenticated):
    pass


class TokenInvalid(Unauthenticated):
    pass


class NotFound(ServiceError):
    status_code = 404


class InternalError(ServiceError):
    status_code = 500


class StoredPayloadError(InternalError):
    """A JSON column holds something that does not decode."""
