"""
Request-level errors for the check-pdf endpoint.

Each error carries the HTTP status and the message returned to the caller
as ``{"error": message}``. They abort the request before any LLM call.
"""

from fastapi import status


class CheckRequestError(Exception):
    """Base class for errors that reject a whole check request."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    message: str = "Invalid request"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MalformedRulesError(CheckRequestError):
    """Raised when the rules field is not a JSON array of strings."""

    message = "Rules data is malformed."


class MissingFileError(CheckRequestError):
    """Raised when no PDF file was uploaded."""

    message = "PDF file is required"


class UnsupportedFileTypeError(CheckRequestError):
    """Raised when the upload does not declare application/pdf."""

    message = "Only PDF files are supported."


class FileTooLargeError(CheckRequestError):
    """Raised when the upload exceeds the configured size limit."""

    # Literal, the named constant was renamed across Starlette releases
    status_code = 413
    message = "PDF file is too large."


class NoRulesError(CheckRequestError):
    """Raised when no non-blank rule remains after trimming."""

    message = "At least one rule is required"


class InsufficientContentError(CheckRequestError):
    """Raised when the PDF parsed but yielded too little text."""

    message = "Extracted PDF text is too short or empty. Please check the PDF content."


class ExtractionFailedError(CheckRequestError):
    """Raised when the PDF could not be parsed at all."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Failed to read PDF content."


class InternalError(CheckRequestError):
    """Any other unexpected failure. The message never includes details."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal server error"
