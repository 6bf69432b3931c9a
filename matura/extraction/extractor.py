"""
Recovers a structured record from free text that should embed a JSON object.

The flow is a chain of pure steps:

    text -> scored candidates -> best candidate -> cleaned string
         -> parsed dict -> field-completed record

``ResponseExtractor.extract`` wraps the chain and returns an
``ExtractionResult``; it never raises.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Pattern, Tuple

from matura.errors import ExtractionError
from matura.extraction.cleaning import clean_json_candidate
from matura.utils.logger import logger

PRIMARY_KEY_POINTS = 10
SECONDARY_KEY_POINTS = 5
BALANCED_BRACES_POINTS = 5

_MISSING = object()


@dataclass(frozen=True)
class FieldRule:
    """
    Completion rule for one field of the target record.

    ``default`` and ``normalize`` receive the context text (the user's idea)
    so that defaults can be derived from it.
    """
    name: str
    default: Callable[[str], Any]
    aliases: Tuple[str, ...] = ()
    normalize: Optional[Callable[[Any, str], Any]] = None


@dataclass(frozen=True)
class ExtractionTarget:
    """The JSON shape a prompt asked the model to return."""
    name: str
    telltale_keys: Tuple[str, str]
    primary_keys: Tuple[str, ...]
    secondary_keys: Tuple[str, ...]
    fields: Tuple[FieldRule, ...]


@dataclass(frozen=True)
class Candidate:
    text: str
    pattern: str
    score: int


@dataclass(frozen=True)
class ExtractionResult:
    record: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    candidate: Optional[Candidate] = None
    gaps: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.record is not None


def locator_patterns(target: ExtractionTarget) -> List[Tuple[str, Pattern]]:
    """Locator patterns, most confident first."""
    first, second = (re.escape(key) for key in target.telltale_keys)
    return [
        ("fenced-json", re.compile(r"```json\s*(\{[\s\S]*?\})\s*```", re.IGNORECASE)),
        ("fenced", re.compile(r"```\s*(\{[\s\S]*?\})\s*```")),
        ("json-prefixed", re.compile(r"json\s*:\s*(\{[\s\S]*\})", re.IGNORECASE)),
        (f"key:{target.telltale_keys[0]}", re.compile(r"\{[\s\S]*[\"']?" + first + r"[\"']?\s*:[\s\S]*\}")),
        (f"flat-key:{target.telltale_keys[1]}", re.compile(r"\{[^{}]*[\"']?" + second + r"[\"']?\s*:[^{}]*\}")),
        ("any-braces", re.compile(r"\{[\s\S]+\}")),
    ]


def _has_key(text: str, key: str) -> bool:
    return re.search(r"[\"']?(?<![\w])" + re.escape(key) + r"(?![\w])[\"']?\s*:", text) is not None


def _is_single_balanced_object(text: str) -> bool:
    # Depth may only return to zero on the final closing brace
    depth = 0
    for i, ch in enumerate(text):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth < 0 or (depth == 0 and text[i + 1:].strip()):
                return False
    return depth == 0 and text.count("{") > 0


def score_candidate(text: str, target: ExtractionTarget) -> int:
    score = sum(PRIMARY_KEY_POINTS for key in target.primary_keys if _has_key(text, key))
    score += sum(SECONDARY_KEY_POINTS for key in target.secondary_keys if _has_key(text, key))
    if text.count("{") == text.count("}") and _is_single_balanced_object(text):
        score += BALANCED_BRACES_POINTS
    return score


def locate_candidates(text: str, target: ExtractionTarget) -> List[Candidate]:
    """Every match of every locator pattern, scored."""
    candidates = []
    for name, pattern in locator_patterns(target):
        for match in pattern.finditer(text):
            captured = match.group(1) if pattern.groups else match.group(0)
            candidates.append(Candidate(captured, name, score_candidate(captured, target)))
    return candidates


def select_best(candidates: List[Candidate]) -> Candidate:
    """Highest score wins; on a tie the earlier (more confident) pattern is kept."""
    if not candidates:
        raise ExtractionError("no JSON candidate located")
    best = candidates[0]
    for candidate in candidates[1:]:
        if candidate.score > best.score:
            best = candidate
    return best


def parse_candidate(candidate: str) -> Dict[str, Any]:
    cleaned = clean_json_candidate(candidate)
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ExtractionError(f"cleaned candidate does not parse: {e}") from e
    if not isinstance(parsed, dict):
        raise ExtractionError(f"expected a JSON object, got {type(parsed).__name__}")
    return parsed


def _is_blank(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def complete_record(parsed: Dict[str, Any], target: ExtractionTarget, context: str) -> Tuple[Dict[str, Any], Tuple[str, ...]]:
    """
    Per-field merge of the parsed object with the target's named defaults.

    Returns:
        The completed record and the names of fields that had to be defaulted
    """
    record = {}
    gaps = []
    for rule in target.fields:
        value = _MISSING
        for key in (rule.name, *rule.aliases):
            if not _is_blank(parsed.get(key)):
                value = parsed[key]
                break
        if value is not _MISSING and rule.normalize is not None:
            value = rule.normalize(value, context)
        if value is _MISSING or _is_blank(value):
            value = rule.default(context)
            gaps.append(rule.name)
        record[rule.name] = value
    return record, tuple(gaps)


class ResponseExtractor:
    """Extracts one target record from free-text model output."""

    def __init__(self, target: ExtractionTarget):
        self.target = target

    def extract(self, text: str, context: str = "") -> ExtractionResult:
        """
        Locate, score, clean, parse and complete the embedded JSON object.

        Args:
            text: Raw provider output
            context: Text used to derive defaults for missing fields

        Returns:
            ExtractionResult carrying either the record or the failure reason
        """
        if text is not None and not isinstance(text, str):
            logger.info(f"[{self.target.name}] extraction failed: expected text, got {type(text).__name__}")
            return ExtractionResult(error=f"expected text, got {type(text).__name__}")

        try:
            candidates = locate_candidates(text or "", self.target)
            best = select_best(candidates)
            logger.debug(
                f"[{self.target.name}] {len(candidates)} candidates, "
                f"best via {best.pattern} scored {best.score}"
            )
            parsed = parse_candidate(best.text)
        except ExtractionError as e:
            logger.info(f"[{self.target.name}] extraction failed: {e}")
            return ExtractionResult(error=str(e))

        record, gaps = complete_record(parsed, self.target, context)
        if gaps:
            logger.debug(f"[{self.target.name}] filled defaults for: {', '.join(gaps)}")
        return ExtractionResult(record=record, candidate=best, gaps=gaps)
