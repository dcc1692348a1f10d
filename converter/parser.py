from __future__ import annotations

import re
from typing import Any, Callable, Optional

from .exceptions import BlockParseError
from .ids import IdGenerator
from .models import Choice, MatchPair, Question, QuestionKind
from .normalizer import ARABIC_LETTERS, extract_prefix, normalize


# Maximum number of correct choices per choice-bearing kind; None is unbounded.
MAX_CORRECT_CHOICES: dict[QuestionKind, Optional[int]] = {
    QuestionKind.MULTIPLE_CHOICE: 1,
    QuestionKind.MULTIPLE_ANSWER: None,
}


class QuestionParser:
    _CHOICE_MARKER_RE = re.compile(rf"^[a-z{ARABIC_LETTERS}]\s*[\.\)]\s*", re.IGNORECASE)
    _NUMBER_RE = re.compile(r"^[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?$")

    def __init__(self, config: dict[str, Any], ids: Optional[IdGenerator] = None) -> None:
        parsing = config.get("parsing", {})
        self.strip_metadata: bool = bool(parsing.get("strip_metadata", True))
        self.max_passes: int = int(parsing.get("max_passes", 5))
        self.strict_single_answer: bool = bool(parsing.get("strict_single_answer", False))
        self.ids = ids or IdGenerator()
        self._handlers: dict[QuestionKind, Callable[[str], Question]] = {
            QuestionKind.MULTIPLE_CHOICE: lambda block: self.parse_choice_block(
                block, QuestionKind.MULTIPLE_CHOICE
            ),
            QuestionKind.MULTIPLE_ANSWER: lambda block: self.parse_choice_block(
                block, QuestionKind.MULTIPLE_ANSWER
            ),
            QuestionKind.TRUE_FALSE: self.parse_true_false,
            QuestionKind.ESSAY: self.parse_essay,
            QuestionKind.FILL_IN_BLANK: self.parse_fill_in_blank,
            QuestionKind.MATCHING: self.parse_matching,
            QuestionKind.NUMERIC: self.parse_numeric,
        }

    def parse(self, kind: QuestionKind, block: str) -> Question:
        return self._handlers[kind](block)

    def parse_choice_block(self, block: str, kind: QuestionKind) -> Question:
        lines = self._split_lines(block)
        if len(lines) < 2:
            raise BlockParseError("must have at least a question and one choice")
        question_text = self._question_text(lines[0])

        choices: list[Choice] = []
        for line in lines[1:]:
            cleaned = self._normalize(line)
            is_correct = "*" in cleaned
            text = self._CHOICE_MARKER_RE.sub("", cleaned.replace("*", "").strip(), count=1).strip()
            if not text:
                continue
            choices.append(Choice(id=self.ids.next_id(), text=text, is_correct=is_correct))

        if not choices:
            raise BlockParseError("must have at least one choice")
        correct_count = sum(1 for choice in choices if choice.is_correct)
        if correct_count == 0:
            raise BlockParseError("must have at least one correct answer")
        limit = MAX_CORRECT_CHOICES.get(kind)
        if self.strict_single_answer and limit is not None and correct_count > limit:
            raise BlockParseError("must have exactly one correct answer")

        return Question(
            id=self.ids.next_id(),
            kind=kind,
            question_text=question_text,
            choices=tuple(choices),
        )

    def parse_true_false(self, block: str) -> Question:
        lines = [self._normalize(line) for line in self._split_lines(block)]
        lines = [line for line in lines if line]
        if not lines:
            raise BlockParseError("question text is required")
        question_text = self._question_text(lines[0], already_normalized=True)

        # Unmarked blocks default to False; when both lines are marked the last one wins.
        correct_answer = False
        for line in lines[1:]:
            if "*" not in line:
                continue
            lowered = line.lower()
            if "true" in lowered:
                correct_answer = True
            elif "false" in lowered:
                correct_answer = False

        return Question(
            id=self.ids.next_id(),
            kind=QuestionKind.TRUE_FALSE,
            question_text=question_text,
            correct_answer=correct_answer,
        )

    def parse_essay(self, block: str) -> Question:
        question_text = self._question_text(block)
        return Question(
            id=self.ids.next_id(),
            kind=QuestionKind.ESSAY,
            question_text=question_text,
        )

    def parse_fill_in_blank(self, block: str) -> Question:
        lines = self._split_lines(block)
        if not lines:
            raise BlockParseError("question text is required")
        question_text = self._question_text(lines[0])

        answers = [answer for answer in (self._normalize(line) for line in lines[1:]) if answer]
        if not answers:
            raise BlockParseError("must have at least one answer")

        return Question(
            id=self.ids.next_id(),
            kind=QuestionKind.FILL_IN_BLANK,
            question_text=question_text,
            accepted_answers=tuple(answers),
        )

    def parse_matching(self, block: str) -> Question:
        lines = self._split_lines(block)
        if not lines:
            raise BlockParseError("question text is required")
        question_text = self._question_text(lines[0])

        pairs: list[MatchPair] = []
        for line in lines[1:]:
            parts = self._normalize(line).split()
            if len(parts) < 2:
                continue
            pairs.append(MatchPair(id=self.ids.next_id(), left=parts[0], right=" ".join(parts[1:])))

        if not pairs:
            raise BlockParseError("must have at least one answer pair")

        return Question(
            id=self.ids.next_id(),
            kind=QuestionKind.MATCHING,
            question_text=question_text,
            pairs=tuple(pairs),
        )

    def parse_numeric(self, block: str) -> Question:
        lines = self._split_lines(block)
        if not lines:
            raise BlockParseError("question text is required")
        question_text = self._question_text(lines[0])

        answer = self._normalize(lines[1]) if len(lines) > 1 else ""
        if not answer:
            raise BlockParseError("must have an answer")
        if not self._NUMBER_RE.match(answer):
            raise BlockParseError(f"answer must be a number (got '{answer}')")
        tolerance = self._normalize(lines[2]) if len(lines) > 2 else ""

        return Question(
            id=self.ids.next_id(),
            kind=QuestionKind.NUMERIC,
            question_text=question_text,
            answer=answer,
            tolerance=tolerance or None,
        )

    def _normalize(self, text: str) -> str:
        return normalize(text, strip_metadata=self.strip_metadata, max_passes=self.max_passes)

    def _question_text(self, line: str, already_normalized: bool = False) -> str:
        cleaned = line if already_normalized else self._normalize(line)
        question_text = extract_prefix(cleaned).cleaned
        if not question_text:
            raise BlockParseError("question text is required")
        return question_text

    @staticmethod
    def _split_lines(block: str) -> list[str]:
        return [line.strip() for line in re.split(r"\r?\n", block or "") if line.strip()]
