"""Core modules for converting pasted questions into Blackboard import files."""

from .models import ArchiveResult, BlockFailure, ConversionResult, Question, QuestionKind
from .service import ConversionService

__all__ = [
    "ArchiveResult",
    "BlockFailure",
    "ConversionResult",
    "Question",
    "QuestionKind",
    "ConversionService",
]
