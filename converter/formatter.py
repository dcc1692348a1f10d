from __future__ import annotations

from typing import Iterable

from .models import Question, QuestionKind


FIELD_SEPARATOR = "\t"
ROW_SEPARATOR = "\n"


class TabFormatter:
    """Renders questions as Blackboard tab-delimited upload rows."""

    def to_row(self, question: Question) -> str:
        fields = [question.kind.value, question.question_text]
        fields.extend(self._answer_fields(question))
        return FIELD_SEPARATOR.join(fields)

    def to_rows(self, questions: Iterable[Question]) -> str:
        return ROW_SEPARATOR.join(self.to_row(question) for question in questions)

    def _answer_fields(self, question: Question) -> list[str]:
        kind = question.kind
        if kind in (QuestionKind.MULTIPLE_CHOICE, QuestionKind.MULTIPLE_ANSWER):
            fields: list[str] = []
            for choice in question.choices:
                fields.append(choice.text)
                fields.append("correct" if choice.is_correct else "incorrect")
            return fields
        if kind == QuestionKind.TRUE_FALSE:
            return ["true" if question.correct_answer else "false"]
        if kind == QuestionKind.ESSAY:
            # Reserved slot for an example answer.
            return [""]
        if kind == QuestionKind.FILL_IN_BLANK:
            return list(question.accepted_answers)
        if kind == QuestionKind.MATCHING:
            fields = []
            for pair in question.pairs:
                fields.append(pair.left)
                fields.append(pair.right)
            return fields
        if kind == QuestionKind.NUMERIC:
            if question.tolerance:
                return [question.answer, question.tolerance]
            return [question.answer]
        raise ValueError(f"unsupported question kind: {kind}")


def validate_tab_delimited(text: str) -> bool:
    """Every non-blank row must carry at least a kind token and question text."""
    rows = [row for row in text.split(ROW_SEPARATOR) if row.strip()]
    return all(len(row.split(FIELD_SEPARATOR)) >= 2 for row in rows)
