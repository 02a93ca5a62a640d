"""JSON extractor tests: each recovery strategy and the failure path."""

from __future__ import annotations

import json
import logging

import pytest
from pydantic import BaseModel

from zuna.json_extractor import extract_json, extract_json_with_type, extract_model

PAYLOAD = {"title": "Güneş", "colors": ["sarı", "turuncu"], "meta": {"mood": "mutlu", "score": 0.8}}


class Tip(BaseModel):
    title: str
    tip: str


class TestStrategies:
    def test_direct_parse(self):
        result = extract_json(json.dumps(PAYLOAD))
        assert result.success
        assert result.data == PAYLOAD

    def test_direct_parse_with_whitespace(self):
        result = extract_json(f"\n  {json.dumps(PAYLOAD)}  \n")
        assert result.data == PAYLOAD
        assert result.raw_json == json.dumps(PAYLOAD)

    def test_json_fence(self):
        text = f"İşte analiz:\n```json\n{json.dumps(PAYLOAD, indent=2)}\n```\nUmarım yardımcı olur."
        result = extract_json(text)
        assert result.success
        assert result.data == PAYLOAD

    def test_uppercase_json_fence(self):
        result = extract_json(f"```JSON\n{json.dumps(PAYLOAD)}\n```")
        assert result.data == PAYLOAD

    def test_plain_fence(self):
        result = extract_json(f"Sonuç:\n```\n{json.dumps(PAYLOAD)}\n```")
        assert result.data == PAYLOAD

    def test_embedded_in_prose(self):
        text = f"Tabii! Sonuç şöyle: {json.dumps(PAYLOAD)} Başka sorunuz var mı?"
        result = extract_json(text)
        assert result.success
        assert result.data == PAYLOAD

    def test_balanced_scan_ignores_braces_in_strings(self):
        inner = {"text": "a } tricky { value", "n": 1}
        text = f"önce {json.dumps(inner)} sonra {{ başka }}"
        result = extract_json(text)
        assert result.data == inner
        assert result.raw_json == json.dumps(inner)

    def test_balanced_scan_handles_escaped_quotes(self):
        inner = {"quote": 'she said "}" loudly'}
        result = extract_json(f"reply: {json.dumps(inner)} end")
        assert result.data == inner

    def test_array_expected(self):
        items = [{"title": "a"}, {"title": "b"}]
        result = extract_json(f"Liste: {json.dumps(items)} bitti", expect_array=True)
        assert result.success
        assert result.data == items

    def test_object_rejected_when_array_expected(self):
        result = extract_json(json.dumps({"title": "Güneş", "mood": "mutlu"}), expect_array=True, fallback=[])
        assert not result.success
        assert result.data == []

    def test_array_expected_recovers_nested_array(self):
        result = extract_json(json.dumps(PAYLOAD), expect_array=True)
        assert result.success
        assert result.data == ["sarı", "turuncu"]

    def test_array_rejected_when_object_expected(self):
        result = extract_json("[1, 2, 3]")
        assert not result.success


class TestRepairs:
    def test_bare_keys_and_trailing_comma(self):
        result = extract_json('{name: "Ali", age: 5,}')
        assert result.success
        assert result.data == {"name": "Ali", "age": 5}

    def test_single_quotes_converted_when_no_double_quotes(self):
        result = extract_json("Cevap: {'mood': 'happy', 'level': 3}")
        assert result.data == {"mood": "happy", "level": 3}

    def test_undefined_becomes_null(self):
        result = extract_json('{"a": 1, "b": undefined}')
        assert result.data == {"a": 1, "b": None}

    def test_trailing_comma_in_array(self):
        result = extract_json('{"items": [1, 2, 3,],}')
        assert result.data == {"items": [1, 2, 3]}


class TestFailure:
    @pytest.mark.parametrize("bad", ["", None, 42])
    def test_invalid_input(self, bad):
        result = extract_json(bad, fallback={"x": 1})
        assert not result.success
        assert result.data == {"x": 1}
        assert result.error.startswith("Invalid input")

    def test_no_json_logs_preview(self, caplog):
        text = "Üzgünüm, bu isteği yerine getiremiyorum. " * 20
        with caplog.at_level(logging.WARNING, logger="zuna.json_extractor"):
            result = extract_json(text, fallback="fb")
        assert not result.success
        assert result.data == "fb"
        assert result.error == "Failed to extract valid JSON from response"
        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert str(len(text)) in record.getMessage()
        assert text[:200] in record.getMessage()
        assert text[:201] not in record.getMessage()

    def test_unrepairable(self):
        assert not extract_json("{ this is : not [ json").success


class TestTyped:
    def test_with_type_valid(self):
        data = extract_json_with_type('x {"title": "t"} y', lambda d: "title" in d, {"title": "fallback"})
        assert data == {"title": "t"}

    def test_with_type_shape_mismatch_returns_fallback(self, caplog):
        with caplog.at_level(logging.WARNING, logger="zuna.json_extractor"):
            data = extract_json_with_type('{"name": "x"}', lambda d: "title" in d, {"title": "fallback"})
        assert data == {"title": "fallback"}
        assert "fallback" in caplog.records[-1].getMessage()

    def test_extract_model(self):
        tip = extract_model('```json\n{"title": "Renk", "tip": "Mavi kullan"}\n```', Tip, None)
        assert tip == Tip(title="Renk", tip="Mavi kullan")

    def test_extract_model_list(self):
        tips = extract_model('[{"title": "a", "tip": "b"}]', list[Tip], [], expect_array=True)
        assert tips == [Tip(title="a", tip="b")]

    def test_extract_model_validation_failure(self):
        assert extract_model('{"title": "a"}', Tip, None) is None
