from __future__ import annotations

import re
from dataclasses import dataclass


ARABIC_LETTERS = r"\u0600-\u06FF"

NUMBERED_PREFIX_RE = re.compile(r"^\d+\.(?:\s+|$)")
LETTERED_PREFIX_RE = re.compile(rf"^[a-z{ARABIC_LETTERS}]\)(?:\s+|$)", re.IGNORECASE)

_NUMBERED_SPLIT_RE = re.compile(r"\n(?=[ \t]*\d+\.\s+)")
_LETTERED_SPLIT_RE = re.compile(
    rf"\n(?=[ \t]*(?:\d+\.\s+|[a-z{ARABIC_LETTERS}]\)\s+))", re.IGNORECASE
)
_WHITESPACE_RE = re.compile(r"\s+")

# Keywords that mark a bracket/parenthesis group as authoring metadata.
# They match whole words in any case, except "Level", which must be
# capitalized so that ordinary content such as "(sea level)" survives.
_METADATA_KEYWORDS = (
    r"(?:\bC?LO\d+\b|\bModule\b|\bDifficulty\b|(?-i:\bLevel\b)|\bAuthor\b"
    r"|وحدة|صعوبة|مستوى)"
)
_AUTHOR_MARKERS = r"(?:\bDr\b\.?|\bLa\.|\bAuthor\b|(?<!\w)د\.|دكتور|المؤلف)"


@dataclass(frozen=True)
class MetadataRule:
    pattern: re.Pattern[str]
    description: str


@dataclass(frozen=True)
class PrefixMatch:
    prefix: str
    cleaned: str


def _rule(pattern: str, description: str, flags: int = re.IGNORECASE) -> MetadataRule:
    return MetadataRule(re.compile(pattern, flags), description)


METADATA_RULES: list[MetadataRule] = [
    _rule(r"\(\s*LO\d+\s*\)", "learning outcome, e.g. (LO3)"),
    _rule(r"\(\s*CLO\d+\s*\)", "course learning outcome, e.g. (CLO2)"),
    _rule(r"\[\s*Module\s*\d+\s*\]", "module tag, e.g. [Module 7]"),
    _rule(r"\[\s*الوحدة\s*\d+\s*\]", "module tag (Arabic)"),
    _rule(
        r"\[\s*Difficulty\s+Level?\s*:\s*(?:Low|Mid|High)\s*\]",
        "difficulty tag, tolerating 'Leve'",
    ),
    _rule(
        r"\[\s*مستوى\s+الصعوبة\s*:\s*(?:منخفض|متوسط|عالي|Low|Mid|High)\s*\]",
        "difficulty tag (Arabic)",
    ),
    _rule(rf"\([^()]*{_AUTHOR_MARKERS}[^()]*\)", "author attribution"),
    _rule(rf"\([^()]*{_METADATA_KEYWORDS}[^()]*\)", "other parenthesized metadata"),
    _rule(rf"\[[^\[\]]*{_METADATA_KEYWORDS}[^\[\]]*\]", "other bracketed metadata"),
]


def collapse_whitespace(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text).strip()


def strip_metadata_tags(
    text: str,
    rules: list[MetadataRule] | None = None,
    max_passes: int = 5,
) -> str:
    """Apply the rule table repeatedly until a pass removes nothing."""
    cleaned = text
    active_rules = METADATA_RULES if rules is None else rules
    for _ in range(max(1, int(max_passes))):
        previous_length = len(cleaned)
        for rule in active_rules:
            cleaned = rule.pattern.sub("", cleaned)
        if len(cleaned) == previous_length:
            break
    return cleaned


def normalize(raw: str, strip_metadata: bool = True, max_passes: int = 5) -> str:
    if not raw:
        return ""
    text = strip_metadata_tags(raw, max_passes=max_passes) if strip_metadata else raw
    return collapse_whitespace(text)


def extract_prefix(text: str) -> PrefixMatch:
    """Split a leading "12. " or "b) " marker off the question text."""
    for pattern in (NUMBERED_PREFIX_RE, LETTERED_PREFIX_RE):
        match = pattern.match(text)
        if match:
            return PrefixMatch(prefix=match.group(0), cleaned=text[match.end():].strip())
    return PrefixMatch(prefix="", cleaned=text.strip())


def split_blocks(text: str, lettered: bool = False) -> list[str]:
    if not text or not text.strip():
        return []
    unified = text.replace("\r\n", "\n").replace("\r", "\n")
    splitter = _LETTERED_SPLIT_RE if lettered else _NUMBERED_SPLIT_RE
    blocks = [block for block in splitter.split(unified) if block.strip()]
    if not blocks:
        return [unified]
    return blocks


def count_questions(text: str, lettered: bool = False) -> int:
    if not text or not text.strip():
        return 0
    count = 0
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        if NUMBERED_PREFIX_RE.match(stripped):
            count += 1
        elif lettered and LETTERED_PREFIX_RE.match(stripped):
            count += 1
    return count
