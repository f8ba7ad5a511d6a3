"""
Dimension detectors.

Each configured dimension is resolved once, when the analyzer is built, into
a detector: a closure over immutable keyword tuples and precompiled regexes.
Detectors are pure, so one analyzer can serve concurrent analyze calls.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from nanorouter.errors import BadPattern
from nanorouter.utils.logging import AuditLogger


class DetectorKind(str, Enum):
    """Detector variants a dimension can use."""

    KEYWORD = "keyword"
    LENGTH = "length"
    INTERROGATIVE = "interrogative"
    MULTI_TURN = "multi_turn"


# Dimensions that pick a special detector when config does not name one
NAMED_DETECTORS: dict[str, DetectorKind] = {
    "contextual_depth": DetectorKind.LENGTH,
    "interrogative_depth": DetectorKind.INTERROGATIVE,
    "multi_turn_state": DetectorKind.MULTI_TURN,
}

MAX_MATCHES_PER_PATTERN = 3

# (exclusive word-count bound, activation, tag)
LENGTH_BUCKETS: tuple[tuple[float, float, str], ...] = (
    (20, 0.0, "very_short"),
    (50, 0.15, "short"),
    (150, 0.35, "medium"),
    (500, 0.65, "long"),
    (float("inf"), 1.0, "very_long"),
)

CONTEXT_PRONOUN_MAX_CHARS = 100
_CONTEXT_PRONOUNS: tuple[tuple[str, re.Pattern], ...] = tuple(
    (pronoun, re.compile(rf"\b{re.escape(pronoun)}\b", re.IGNORECASE))
    for pronoun in ("it", "that", "those", "them", "this one")
)
_NESTED_QUESTION = re.compile(r"\?[^?]*\?")


@dataclass(frozen=True)
class TextSample:
    """Views of one prompt shared by all detectors."""

    lower: str
    original: str
    word_count: int

    @classmethod
    def from_prompt(cls, prompt: str, system_prompt: Optional[str] = None) -> "TextSample":
        combined = f"{system_prompt}\n\n{prompt}" if system_prompt else prompt
        return cls(lower=combined.lower(), original=combined, word_count=len(combined.split()))


DetectorResult = tuple[float, list[str]]
Detector = Callable[[TextSample], DetectorResult]


def resolve_kind(name: str, kind: Optional[DetectorKind] = None) -> DetectorKind:
    """Explicit kind wins, then the name table, then KEYWORD."""
    if kind is not None:
        return kind
    return NAMED_DETECTORS.get(name, DetectorKind.KEYWORD)


def compile_pattern(dimension: str, pattern: str) -> re.Pattern:
    """Compile a case-insensitive dimension pattern."""
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as e:
        raise BadPattern(dimension, pattern, str(e)) from e


def compile_patterns(
    dimension: str,
    patterns: list[str],
    audit: Optional[AuditLogger] = None,
) -> tuple[re.Pattern, ...]:
    """Compile patterns, skipping (and reporting) the ones that do not compile."""
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(compile_pattern(dimension, pattern))
        except BadPattern as e:
            if audit is not None:
                audit.warning(str(e), dimension=dimension)
    return tuple(compiled)


def _keyword_hits(text: str, keywords: tuple[str, ...]) -> list[str]:
    return [kw for kw in keywords if kw in text]


def keyword_detector(keywords: tuple[str, ...], patterns: tuple[re.Pattern, ...]) -> Detector:
    """
    Generic keyword + regex detector.

    Activation saturates at three pieces of evidence. Each regex contributes
    at most three matches.
    """

    def detect(sample: TextSample) -> DetectorResult:
        evidence = _keyword_hits(sample.lower, keywords)
        for pattern in patterns:
            found = 0
            for match in pattern.finditer(sample.original):
                if not match.group(0):
                    continue
                evidence.append(match.group(0))
                found += 1
                if found >= MAX_MATCHES_PER_PATTERN:
                    break
        return min(len(evidence) / 3, 1.0), evidence

    return detect


def length_detector() -> Detector:
    """Word-count bucket detector."""

    def detect(sample: TextSample) -> DetectorResult:
        _, activation, tag = next(b for b in LENGTH_BUCKETS if sample.word_count < b[0])
        return activation, [f"{tag}:{sample.word_count}w"]

    return detect


def interrogative_detector(keywords: tuple[str, ...]) -> Detector:
    """Question-mark density, interrogative keywords and nested questions."""

    def detect(sample: TextSample) -> DetectorResult:
        evidence: list[str] = []
        question_marks = sample.lower.count("?")
        if question_marks:
            evidence.append(f"questions:{question_marks}")
        evidence.extend(_keyword_hits(sample.lower, keywords))
        nested = len(_NESTED_QUESTION.findall(sample.lower))
        if nested:
            evidence.append(f"nested_questions:{nested}")
        return min(question_marks * 0.25 + len(evidence) * 0.15, 1.0), evidence

    return detect


def multi_turn_detector(keywords: tuple[str, ...]) -> Detector:
    """Back-references to earlier turns; bare pronouns only count in short prompts."""

    def detect(sample: TextSample) -> DetectorResult:
        evidence = _keyword_hits(sample.lower, keywords)
        if len(sample.lower) < CONTEXT_PRONOUN_MAX_CHARS:
            for pronoun, pattern in _CONTEXT_PRONOUNS:
                if pattern.search(sample.lower):
                    evidence.append(f"context_pronoun:{pronoun}")
        return min(len(evidence) / 4, 1.0), evidence

    return detect


def build_detector(
    name: str,
    keywords: list[str],
    patterns: list[str],
    kind: Optional[DetectorKind] = None,
    audit: Optional[AuditLogger] = None,
) -> Detector:
    """Resolve a dimension's configuration into its detector."""
    lowered = tuple(kw.lower() for kw in keywords)
    resolved = resolve_kind(name, kind)

    if resolved is DetectorKind.LENGTH:
        return length_detector()
    if resolved is DetectorKind.INTERROGATIVE:
        return interrogative_detector(lowered)
    if resolved is DetectorKind.MULTI_TURN:
        return multi_turn_detector(lowered)
    return keyword_detector(lowered, compile_patterns(name, patterns, audit))
