from __future__ import annotations

from typing import Iterable

from .models import ConversionResult


def _join_lines(lines: Iterable[str]) -> str:
    return "\n".join(line for line in lines if line.strip())


def _trim_raw_error(text: str, limit: int = 700) -> str:
    raw = (text or "").strip()
    if len(raw) <= limit:
        return raw
    return raw[:limit].rstrip() + " ..."


def build_conversion_summary(result: ConversionResult) -> str:
    lines = [f"Converted {result.total} question(s)."]
    if result.has_failures:
        lines.append(f"Skipped {len(result.failures)} malformed block(s):")
        lines.extend(f"- {failure.describe()}" for failure in result.failures)
    lines.extend(result.warnings)
    if not result.total and not result.has_failures:
        lines.append("No questions found. Paste questions into at least one tab.")
    return _join_lines(lines)


def build_archive_error_message(raw_message: str) -> str:
    raw = (raw_message or "").strip()
    lower = raw.lower()

    tips: list[str]
    if "no questions to export" in lower:
        return "No questions to export. Convert at least one valid question first."
    if "not well-formed" in lower or "xml" in lower:
        tips = [
            "A question produced invalid XML.",
            "Check the question text for unusual control characters and try again.",
        ]
    elif "could not save" in lower or "permission" in lower or "errno" in lower:
        tips = [
            "The QTI archive could not be saved.",
            "Check that the output folder exists and is writable, and that the file is not open elsewhere.",
        ]
    elif "zip" in lower:
        tips = [
            "The ZIP archive could not be built.",
            "Check the available disk space and try again.",
        ]
    else:
        tips = [
            "An error occurred while exporting the QTI package.",
        ]

    detail = _trim_raw_error(raw)
    return _join_lines(
        [
            *tips,
            "",
            "[Original error]",
            detail or "(none)",
        ]
    )
