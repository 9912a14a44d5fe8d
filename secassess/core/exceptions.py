"""Core custom exceptions for the application."""


class PipelineError(Exception):
    """Base exception for pipeline-related errors."""


class ConfigurationError(PipelineError):
    """Exception for configuration-related errors (e.g., missing prompt templates, invalid settings)."""


class IntakeValidationError(PipelineError):
    """Raised when the request body cannot be turned into an intake form."""

    status_code: int = 400

    def __init__(self, message: str, details: str = "") -> None:
        super().__init__(message)
        self.details = details


class PayloadTooLargeError(IntakeValidationError):
    """Raised when the request body exceeds the configured size limit."""

    status_code: int = 413
