from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class QuestionKind(str, Enum):
    MULTIPLE_CHOICE = "MC"
    MULTIPLE_ANSWER = "MA"
    TRUE_FALSE = "TF"
    ESSAY = "ESS"
    FILL_IN_BLANK = "FIB"
    MATCHING = "MAT"
    NUMERIC = "NUM"

    @property
    def label(self) -> str:
        return KIND_LABELS[self]


KIND_LABELS = {
    QuestionKind.MULTIPLE_CHOICE: "Multiple Choice",
    QuestionKind.MULTIPLE_ANSWER: "Multiple Answer",
    QuestionKind.TRUE_FALSE: "True/False",
    QuestionKind.ESSAY: "Essay",
    QuestionKind.FILL_IN_BLANK: "Fill in the Blank",
    QuestionKind.MATCHING: "Matching",
    QuestionKind.NUMERIC: "Numeric Response",
}

# Conversion order of the seven input buffers.
KIND_ORDER = (
    QuestionKind.MULTIPLE_CHOICE,
    QuestionKind.ESSAY,
    QuestionKind.TRUE_FALSE,
    QuestionKind.FILL_IN_BLANK,
    QuestionKind.MULTIPLE_ANSWER,
    QuestionKind.MATCHING,
    QuestionKind.NUMERIC,
)


@dataclass(frozen=True)
class Choice:
    id: str
    text: str
    is_correct: bool


@dataclass(frozen=True)
class MatchPair:
    id: str
    left: str
    right: str


@dataclass(frozen=True)
class Question:
    id: str
    kind: QuestionKind
    question_text: str
    choices: tuple[Choice, ...] = ()
    correct_answer: bool = False
    accepted_answers: tuple[str, ...] = ()
    pairs: tuple[MatchPair, ...] = ()
    answer: str = ""
    tolerance: Optional[str] = None

    @property
    def correct_choices(self) -> tuple[Choice, ...]:
        return tuple(choice for choice in self.choices if choice.is_correct)


@dataclass(frozen=True)
class BlockFailure:
    kind: QuestionKind
    index: int
    reason: str

    def describe(self) -> str:
        return f"{self.kind.label} Question {self.index}: {self.reason}"


@dataclass
class ConversionResult:
    questions: list[Question] = field(default_factory=list)
    rows: str = ""
    failures: list[BlockFailure] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


@dataclass
class ArchiveResult:
    data: bytes
    test_id: str
    item_count: int
    filenames: list[str] = field(default_factory=list)
    failures: list[BlockFailure] = field(default_factory=list)
