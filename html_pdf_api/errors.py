"""
Error taxonomy for the conversion pipeline.

Every failure that can reach a caller is a ConversionError subclass carrying
the HTTP status it maps to. The API turns these into ``{"error": message}``
bodies; the CLI prints the message and exits non-zero.
"""


class ConversionError(Exception):
    """Base class for all conversion pipeline failures."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(ConversionError):
    """Caller omitted a required field or sent a malformed upload/options."""

    status_code = 400


class UploadTooLarge(InvalidRequest):
    """Uploaded file exceeds the configured size limit."""

    status_code = 413


class InputNotFound(ConversionError):
    """A referenced local HTML file does not exist."""

    status_code = 404


class RenderFailed(ConversionError):
    """The rendering engine raised an error or exceeded its timeout."""

    status_code = 500


def describe_validation_errors(errors) -> str:
    """
    Flatten pydantic validation errors into a single readable message.

    Args:
        errors: List of error dicts as returned by ``ValidationError.errors()``

    Returns:
        Message such as ``"options.scale: Input should be ..."``
    """
    parts = []
    for error in errors:
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"
