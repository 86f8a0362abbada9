class CustomException(Exception):
    """Base for errors that map onto a structured JSON response.

    Attributes: status_code, message, details
    """

    status_code = 500

    def __init__(self, message, details=None):
        if not message:
            raise ValueError("The 'message' field is required.")
        self.message = message
        self.details = details
        super().__init__(message)

    def to_content(self, include_details=True):
        content = {"error": self.message}
        if include_details and self.details is not None:
            content["details"] = self.details
        return content


class ValidationException(CustomException):
    status_code = 400


class ConflictException(CustomException):
    status_code = 400


class FileRejectedException(CustomException):
    status_code = 400


class NotFoundException(CustomException):
    status_code = 404


class CorsRejectedException(CustomException):
    status_code = 403


class StorageException(CustomException):
    """Database failure; details are only exposed in development."""

    status_code = 500


class StartupException(CustomException):
    """Raised when the service cannot reach its database during startup."""
