from __future__ import annotations

import pytest

from pf_engine.ai.decoder import decode, decode_or_raise, extract_candidate, repair, second_pass, select_text
from pf_engine.ai.errors import MalformedResponseError


def test_decode_fenced_single_quoted_with_trailing_comma() -> None:
    assert decode("```json\n{'a':1,}\n```") == {"a": 1}


def test_decode_untagged_fence() -> None:
    assert decode('Here you go:\n```\n{"x": [1, 2,]}\n```\nThanks') == {"x": [1, 2]}


def test_decode_span_inside_prose() -> None:
    text = 'Sure! The answer is {"mappings": {"Data Analyst": "Data Science"}} hope this helps'
    assert decode(text) == {"mappings": {"Data Analyst": "Data Science"}}


def test_decode_array_payload() -> None:
    assert decode('result: [{"job_title": "X", "threshold": 0.8}]') == [{"job_title": "X", "threshold": 0.8}]


def test_decode_quotes_bare_keys() -> None:
    assert decode("{mappings: {'A': 'B'}, confidence: 0.7}") == {"mappings": {"A": "B"}, "confidence": 0.7}


def test_decode_inserts_missing_comma_between_values() -> None:
    text = '{"mappings": {"A": "Course 1"\n  "B": "Course 2"}}'
    assert decode(text) == {"mappings": {"A": "Course 1", "B": "Course 2"}}


def test_bare_key_repair_is_not_quote_aware() -> None:
    # A word followed by a colon inside a value is quoted like a key and breaks the payload.
    assert decode('{"reasoning": "Note: strong overlap"}') is None


def test_string_last_value_before_closing_brace_survives() -> None:
    assert decode('{"a": "x" }') == {"a": "x"}
    assert decode('{"k": "v"\n}') == {"k": "v"}


def test_decode_second_pass_strips_non_printable() -> None:
    assert decode('{"a":\u00a0"b\x01c"}') == {"a": "bc"}


def test_decode_prefers_primary_then_secondary() -> None:
    assert decode('{"from": "primary"}', '{"from": "secondary"}') == {"from": "primary"}
    assert decode("   ", '{"from": "secondary"}') == {"from": "secondary"}


def test_decode_returns_none_for_empty_or_garbage() -> None:
    assert decode("") is None
    assert decode(None, None) is None
    assert decode("no json here at all") is None


def test_single_quote_repair_is_not_quote_aware() -> None:
    # Apostrophes inside values become double quotes and break the payload.
    assert decode('{"r": "don\'t"}') is None


def test_decode_or_raise_raises_malformed() -> None:
    with pytest.raises(MalformedResponseError):
        decode_or_raise("nothing parseable")


def test_helpers_behave_in_isolation() -> None:
    assert select_text("", "fallback") == "fallback"
    assert extract_candidate("pre {\"a\": 1} post") == '{"a": 1}'
    assert repair("junk {'k': 1,} junk") == '{"k": 1}'
    assert second_pass('{"a": 1}\n\n\n{"b": 2}') == '{"a": 1}\n{"b": 2}'
