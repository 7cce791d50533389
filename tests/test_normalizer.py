import json

import pytest

from dreamlens.errors import InvalidResponseShapeError, MalformedResponseError
from dreamlens.i18n import LANG_RU, tr
from dreamlens.normalizer import (
    normalize_analysis,
    parse_model_json,
    repair_truncated_json,
    strip_code_fences,
)


class TestRepair:
    def test_closes_truncated_string_and_object(self):
        repaired = repair_truncated_json('{"summary":"ok","analysis":"text')
        assert json.loads(repaired) == {"summary": "ok", "analysis": "text"}

    def test_closes_brackets_before_braces(self):
        assert repair_truncated_json('{"a":[1,2') == '{"a":[1,2]}'

    def test_drops_dangling_escape(self):
        repaired = repair_truncated_json('{"a":"line\\')
        assert json.loads(repaired) == {"a": "line"}

    def test_complete_json_unchanged(self):
        assert repair_truncated_json('{"a": 1}') == '{"a": 1}'

    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'


class TestParseModelJson:
    def test_plain(self):
        assert parse_model_json('{"a": 1}') == {"a": 1}

    def test_fenced(self):
        assert parse_model_json('```json\n{"a": 1}\n```') == {"a": 1}

    def test_truncated(self):
        assert parse_model_json('{"summary":"ok","analysis":"text') == {
            "summary": "ok",
            "analysis": "text",
        }

    def test_embedded_object(self):
        assert parse_model_json('Here you go: {"a": 1} Enjoy!') == {"a": 1}

    def test_garbage_raises(self):
        with pytest.raises(MalformedResponseError) as exc_info:
            parse_model_json("not json at all", provider="OpenAI")
        assert "OpenAI" in exc_info.value.message
        assert exc_info.value.provider == "OpenAI"

    def test_garbage_returns_empty_when_asked(self):
        assert parse_model_json("not json at all", empty_on_failure=True) == {}
        assert parse_model_json("", empty_on_failure=True) == {}

    def test_empty_raises(self):
        with pytest.raises(MalformedResponseError):
            parse_model_json(None)


class TestNormalizeAnalysis:
    def test_valid_payload(self, analysis_payload):
        result = normalize_analysis(analysis_payload)
        assert result.summary == analysis_payload["summary"]
        assert result.analysis == analysis_payload["analysis"]
        assert [(s.name, s.meaning) for s in result.symbolism] == [
            ("Sea", "The unconscious."),
            ("Lighthouse", "A guiding insight."),
        ]
        assert result.advice == ["Keep a journal."]
        assert result.questions == ["What are you steering towards?"]
        assert result.model_dump() == analysis_payload

    def test_string_input_is_parsed(self, analysis_payload):
        result = normalize_analysis(json.dumps(analysis_payload))
        assert result.analysis == analysis_payload["analysis"]

    def test_unparseable_string(self):
        with pytest.raises(MalformedResponseError):
            normalize_analysis("{broken")

    def test_not_an_object(self):
        with pytest.raises(InvalidResponseShapeError):
            normalize_analysis([1, 2])

    @pytest.mark.parametrize("summary", [None, "", "   ", 42])
    def test_invalid_summary(self, summary):
        with pytest.raises(InvalidResponseShapeError):
            normalize_analysis({"summary": summary, "analysis": "text"})

    @pytest.mark.parametrize(
        "entry",
        [
            {"name": "Key"},
            {"meaning": "m"},
            {"name": "", "meaning": "m"},
            {"name": "Key", "meaning": ""},
            "Key",
        ],
    )
    def test_incomplete_symbol_rejects_reply(self, entry):
        with pytest.raises(InvalidResponseShapeError) as exc_info:
            normalize_analysis(
                {"summary": "s", "symbolism": [{"name": "Sea", "meaning": "m"}, entry]}
            )
        assert "#2" in exc_info.value.message

    def test_defaults(self):
        result = normalize_analysis(
            {"summary": "Short", "symbolism": "oops", "advice": "one", "questions": [1, "Why?"]}
        )
        assert result.symbolism == []
        assert result.analysis == "Short"
        assert result.advice == []
        assert result.questions == ["Why?"]

    def test_localized_error(self):
        with pytest.raises(InvalidResponseShapeError) as exc_info:
            normalize_analysis({"analysis": "text"}, lang=LANG_RU)
        assert "summary" in exc_info.value.message
        assert exc_info.value.message == tr(LANG_RU, "ERR_SUMMARY_INVALID")
