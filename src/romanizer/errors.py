"""
Error types raised by the conversion pipeline and its collaborators.
"""


class RomanizerError(Exception):
    """Base error for the subtitle romanizer."""


class ConfigurationError(RomanizerError):
    """Raised when settings are missing or malformed."""


class InvalidDocumentError(RomanizerError, ValueError):
    """Raised when a file that is not an SRT subtitle file is offered."""


class NoDocumentError(RomanizerError):
    """Raised when there is no document to convert or no output to save."""


class ServiceInvocationFailure(RomanizerError):
    """Raised when a single chunk's call to the transliteration service fails."""


class PartialConversionFailure(ServiceInvocationFailure):
    """A run that failed after one or more chunks had already been converted."""

    def __init__(self, message: str, *, partial_output: str, completed: int, total: int) -> None:
        super().__init__(message)
        self.partial_output = partial_output
        self.completed = completed
        self.total = total


class ConversionCancelled(RomanizerError):
    """Raised for a run that was cancelled before all chunks were issued."""
