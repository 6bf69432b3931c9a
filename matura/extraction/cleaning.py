"""
Repairs for almost-JSON emitted by language models.

Every repair except quote normalization runs on the text outside of
double-quoted string literals, so values such as URLs or sentences with
colons survive untouched. A candidate that already parses is returned as is.
"""

import json
import re
from typing import Callable

_STRING_LITERAL = re.compile(r'("(?:\\.|[^"\\])*")')
_FENCE_OPEN = re.compile(r"^\s*```[a-zA-Z]*\s*")
_FENCE_CLOSE = re.compile(r"\s*```\s*$")
_LINE_COMMENT = re.compile(r"(^|[\s,{\[])//[^\n]*")
_BLOCK_COMMENT = re.compile(r"/\*[\s\S]*?\*/")
_SINGLE_QUOTED = re.compile(r"([\[{,:]\s*)'((?:\\.|[^'\\\n])*)'")
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_$][\w$-]*)\s*:")
_BARE_VALUE = re.compile(r"(:\s*)([^\s\"'{}\[\],:0-9\-][^,{}\[\]\n]*?)(\s*)(?=[,}\]\n]|$)")
_TRAILING_COMMA = re.compile(r",\s*([}\]])")
_REPEATED_COMMA = re.compile(r",(?:\s*,)+")

_TYPOGRAPHIC_QUOTES = {
    "“": '"', "”": '"', "„": '"', "‟": '"',
    "″": '"', "＂": '"',
    "‘": "'", "’": "'", "‚": "'", "‛": "'",
}
_JSON_LITERALS = {"true", "false", "null"}
_CONTROL_ESCAPES = {"\n": "\\n", "\r": "\\r", "\t": "\\t"}


def _outside_strings(text: str, repair: Callable[[str], str]) -> str:
    parts = _STRING_LITERAL.split(text)
    # split() with one capturing group puts string literals at odd indexes
    return "".join(part if i % 2 else repair(part) for i, part in enumerate(parts))


def _inside_strings(text: str, repair: Callable[[str], str]) -> str:
    parts = _STRING_LITERAL.split(text)
    return "".join(repair(part) if i % 2 else part for i, part in enumerate(parts))


def _parses(text: str) -> bool:
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


def strip_code_fences(text: str) -> str:
    return _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", text))


def strip_comments(text: str) -> str:
    def repair(segment: str) -> str:
        segment = _BLOCK_COMMENT.sub("", segment)
        return _LINE_COMMENT.sub(r"\1", segment)
    return _outside_strings(text, repair)


def normalize_quotes(text: str) -> str:
    """Typographic quotes become ASCII; single-quoted strings become double-quoted."""
    for fancy, plain in _TYPOGRAPHIC_QUOTES.items():
        text = text.replace(fancy, plain)

    def to_double(match: re.Match) -> str:
        body = match.group(2).replace("\\'", "'").replace('"', '\\"')
        return f'{match.group(1)}"{body}"'

    return _outside_strings(text, lambda segment: _SINGLE_QUOTED.sub(to_double, segment))


def escape_control_characters(text: str) -> str:
    """Escape raw line breaks and tabs that appear inside string literals."""
    def repair(literal: str) -> str:
        return "".join(_CONTROL_ESCAPES.get(ch, ch) for ch in literal)
    return _inside_strings(text, repair)


def quote_bare_keys(text: str) -> str:
    return _outside_strings(text, lambda segment: _BARE_KEY.sub(r'\1"\2":', segment))


def quote_bare_values(text: str) -> str:
    def quote(match: re.Match) -> str:
        value = match.group(2).strip()
        if value in _JSON_LITERALS:
            return match.group(0)
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'{match.group(1)}"{escaped}"{match.group(3)}'
    return _outside_strings(text, lambda segment: _BARE_VALUE.sub(quote, segment))


def strip_trailing_commas(text: str) -> str:
    return _outside_strings(text, lambda segment: _TRAILING_COMMA.sub(r"\1", segment))


def collapse_repeated_delimiters(text: str) -> str:
    return _outside_strings(text, lambda segment: _REPEATED_COMMA.sub(",", segment))


REPAIRS = (
    strip_code_fences,
    strip_comments,
    normalize_quotes,
    escape_control_characters,
    quote_bare_keys,
    quote_bare_values,
    strip_trailing_commas,
    collapse_repeated_delimiters,
)


def clean_json_candidate(candidate: str) -> str:
    """
    Apply the repair passes to a located JSON candidate.

    Args:
        candidate: Substring located by the extractor

    Returns:
        The repaired string. Valid JSON is returned stripped but otherwise unchanged.
    """
    text = candidate.strip()
    if _parses(text):
        return text
    for repair in REPAIRS:
        text = repair(text)
    return text.strip()
