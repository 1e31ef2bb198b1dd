"""Validation of model narratives against the voice rules.

Problems are repaired in place and recorded as issues. A repaired
narrative is still returned; only an empty one is unusable.
"""

import re
from enum import StrEnum, auto

from pydantic import BaseModel, ConfigDict, Field

from nutrition_insights.core.daily_insights.constants import (
    BANNED_WORD_REPLACEMENTS,
    DEFAULT_RESPONSE_ICON,
    MAX_SENTENCE_TERMINATORS,
    TRUNCATED_SENTENCE_COUNT,
)

# Emoji, pictographs, dingbats and their joiners/variation selectors.
LEADING_GLYPH_PATTERN = re.compile(
    r"^[\U0001F000-\U0001FAFF\u2600-\u27BF\u2B00-\u2BFF\uFE0F\u200D]+\s*"
)

# Punctuation only ends a sentence when followed by whitespace or the end,
# so decimals such as "67.5" stay whole.
SENTENCE_PATTERN = re.compile(r"\S.*?[.!?]+(?=\s|$)", re.DOTALL)

TERMINATOR_PATTERN = re.compile(r"[.!?]+(?=\s|$)")

BANNED_WORD_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(rf"\b{re.escape(word)}\b", re.IGNORECASE), replacement)
    for word, replacement in BANNED_WORD_REPLACEMENTS.items()
]


class ValidationIssueKind(StrEnum):
    """Kinds of repair applied to a narrative."""

    truncated = auto()
    banned_word = auto()
    exclamation = auto()


class ResponseValidationIssue(BaseModel):
    """One repair applied to a model narrative."""

    model_config = ConfigDict(frozen=True)

    kind: ValidationIssueKind
    detail: str


class ParsedInsight(BaseModel):
    """A validated narrative ready to cache."""

    model_config = ConfigDict(frozen=True)

    narrative: str
    icon: str = DEFAULT_RESPONSE_ICON
    glyph: str | None = Field(default=None, description="Leading emoji the model emitted.")
    issues: list[ResponseValidationIssue] = Field(default_factory=list)

    @property
    def is_usable(self) -> bool:
        """Whether anything is left to show after repairs."""
        return bool(self.narrative.strip())


def _match_case(replacement: str, original: str) -> str:
    if original[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def _truncate(text: str, issues: list[ResponseValidationIssue]) -> str:
    terminators = len(TERMINATOR_PATTERN.findall(text))
    if terminators <= MAX_SENTENCE_TERMINATORS:
        return text
    sentences = [s.strip() for s in SENTENCE_PATTERN.findall(text)]
    issues.append(
        ResponseValidationIssue(
            kind=ValidationIssueKind.truncated,
            detail=f"{terminators} sentence terminators, kept first {TRUNCATED_SENTENCE_COUNT} sentences",
        )
    )
    return " ".join(sentences[:TRUNCATED_SENTENCE_COUNT])


def _soften(text: str, issues: list[ResponseValidationIssue]) -> str:
    for pattern, replacement in BANNED_WORD_PATTERNS:
        matches = pattern.findall(text)
        if not matches:
            continue
        for match in matches:
            issues.append(
                ResponseValidationIssue(
                    kind=ValidationIssueKind.banned_word,
                    detail=f"'{match}' replaced with '{replacement}'",
                )
            )
        text = pattern.sub(lambda m, r=replacement: _match_case(r, m.group(0)), text)
    return text


def _drop_exclamations(text: str, issues: list[ResponseValidationIssue]) -> str:
    count = text.count("!")
    if not count:
        return text
    issues.append(
        ResponseValidationIssue(
            kind=ValidationIssueKind.exclamation,
            detail=f"{count} exclamation mark(s) replaced with periods",
        )
    )
    return re.sub(r"!+", ".", text)


def parse_insight_response(raw_text: str) -> ParsedInsight:
    """Clean a raw model narrative.

    Steps, in order: strip the leading emoji, truncate overly long
    answers to three sentences, soften banned words, replace
    exclamation marks with periods.

    Args:
        raw_text: Text returned by the model

    Returns:
        ParsedInsight with the repaired narrative and recorded issues
    """
    issues: list[ResponseValidationIssue] = []
    text = raw_text.strip().strip('"').strip()

    glyph = None
    match = LEADING_GLYPH_PATTERN.match(text)
    if match:
        glyph = match.group(0).strip()
        text = text[match.end():]

    text = _truncate(text, issues)
    text = _soften(text, issues)
    text = _drop_exclamations(text, issues)

    return ParsedInsight(
        narrative=text.strip(),
        icon=DEFAULT_RESPONSE_ICON,
        glyph=glyph,
        issues=issues,
    )
