# chatterlite/domain/errors.py


class ChatterLiteError(Exception):
    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(ChatterLiteError):
    status_code = 400
    public_message = "Invalid request"


class ConstraintViolation(ValidationError):
    public_message = "Record already exists"


class AuthenticationError(ChatterLiteError):
    status_code = 401
    public_message = "Could not validate credentials"


class ForbiddenError(ChatterLiteError):
    status_code = 403
    public_message = "Not allowed"


class NotFoundError(ChatterLiteError):
    status_code = 404
    public_message = "Not found"


class UpstreamError(ChatterLiteError):
    """A backing store or storage call failed; details stay in the server log."""

    status_code = 500
    public_message = "Internal server error"


class ConfigurationError(ChatterLiteError):
    status_code = 503
    public_message = "Service is not properly configured"
