"""
Tests for the JSON repair passes.
"""

import json
import pytest

from matura.extraction.cleaning import (
    clean_json_candidate,
    escape_control_characters,
    normalize_quotes,
    quote_bare_keys,
    strip_code_fences,
    strip_comments,
    strip_trailing_commas,
)


class TestRepairs:
    """Tests for the individual repair passes."""

    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_strip_comments_keeps_urls_in_strings(self):
        text = '{"a": 1, // note\n "url": "http://example.com/x"}'
        repaired = strip_comments(text)
        assert "note" not in repaired
        assert json.loads(repaired) == {"a": 1, "url": "http://example.com/x"}

    def test_strip_block_comments(self):
        assert json.loads(strip_comments('{/* header */"a": 1}')) == {"a": 1}

    def test_normalize_typographic_quotes(self):
        assert json.loads(normalize_quotes("{“category”: “creative”}")) == {"category": "creative"}

    def test_normalize_single_quotes(self):
        assert normalize_quotes("{'a': 'b'}") == '{"a": "b"}'

    def test_escape_raw_newlines_inside_strings(self):
        repaired = escape_control_characters('{"a": "line1\nline2"}')
        assert json.loads(repaired) == {"a": "line1\nline2"}

    def test_quote_bare_keys(self):
        assert quote_bare_keys('{name: "x", count: 2}') == '{"name": "x", "count": 2}'

    def test_bare_key_lookalike_inside_string_untouched(self):
        text = '{"note": "time: 10:00, place: here"}'
        assert quote_bare_keys(text) == text

    def test_strip_trailing_commas(self):
        assert json.loads(strip_trailing_commas('{"a": [1, 2,],}')) == {"a": [1, 2]}


class TestCleanJsonCandidate:
    """Tests for the full repair chain."""

    @pytest.mark.parametrize("candidate, expected", [
        ("{name: 'Recipe', tags: ['a', 'b']}", {"name": "Recipe", "tags": ["a", "b"]}),
        ('{"mood": modern, "layout": card}', {"mood": "modern", "layout": "card"}),
        ('{"a": 1,, "b": 2,}', {"a": 1, "b": 2}),
        ('```json\n{"ok": true, "n": null,}\n```', {"ok": True, "n": None}),
    ])
    def test_repairs_malformed_candidates(self, candidate, expected):
        assert json.loads(clean_json_candidate(candidate)) == expected

    def test_valid_json_is_unchanged(self):
        text = '{"a": "it\'s // not a comment", "b": [1, 2]}'
        assert clean_json_candidate(text) == text

    @pytest.mark.parametrize("text", [
        '{"a": 1}',
        '{"nested": {"x": [1, {"y": "z"}]}, "s": "コメント: なし"}',
        '  {"padded": true}  ',
    ])
    def test_idempotent_on_valid_json(self, text):
        once = clean_json_candidate(text)
        assert clean_json_candidate(once) == once
        assert json.loads(once) == json.loads(text)
