class ProcessingError(Exception):
    """Base class for conversion failures."""


class BlockParseError(ProcessingError):
    """Raised when a question block is structurally malformed."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ArchiveGenerationError(ProcessingError):
    """Raised when the QTI archive cannot be assembled."""
