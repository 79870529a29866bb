"""Custom exceptions for Email Composer."""


class EmailComposerError(Exception):
    """Base exception for all Email Composer errors."""


class AddressSyntaxError(EmailComposerError):
    """Exception raised when an email address cannot be parsed."""

    def __init__(self, value: str, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid email address {value!r}: {reason}")


class InvalidMultipartError(EmailComposerError):
    """Exception raised for malformed multipart entities."""


class EmptyRecipientsError(EmailComposerError):
    """Exception raised when a deliverable message has no To recipients."""


class RenderError(EmailComposerError):
    """Exception raised when markup rendering fails."""


class InvalidHeaderError(EmailComposerError):
    """Exception raised for header names or values that cannot be serialized."""


class ConfigurationError(EmailComposerError):
    """Exception raised for configuration related errors."""
