"""Tests for entity-extraction response parsing."""

import json

import pytest

from organizer.core.analysis import NO_SUMMARY, parse_analysis, strip_code_fences


class TestStripCodeFences:
    def test_json_fence(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_plain_fence(self):
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_no_fence(self):
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'


class TestParseAnalysis:
    def test_full_response(self):
        text = json.dumps({
            "people": [{"name": "Ada Lovelace", "confidence": 0.95, "details": {"email": "ada@example.com"}}],
            "tasks": [{"name": "Send report", "confidence": 0.8}],
            "summary": "Ada needs the report.",
        })
        result = parse_analysis(text)

        assert result.people[0].name == "Ada Lovelace"
        assert result.people[0].type == "person"
        assert result.people[0].details == {"email": "ada@example.com"}
        assert result.tasks[0].type == "task"
        assert result.projects == []
        assert result.summary == "Ada needs the report."

    def test_fenced_response(self):
        result = parse_analysis('```json\n{"meetings": [{"name": "Kickoff"}]}\n```')
        assert result.meetings[0].name == "Kickoff"
        assert result.meetings[0].confidence == 0.5
        assert result.summary == NO_SUMMARY

    def test_missing_name(self):
        result = parse_analysis('{"behaviors": [{"confidence": 0.7}]}')
        assert result.behaviors[0].name == "Unnamed behavior"

    def test_non_list_group_ignored(self):
        result = parse_analysis('{"projects": "none"}')
        assert result.projects == []

    def test_invalid_json(self):
        with pytest.raises(ValueError, match="not valid JSON"):
            parse_analysis("Sorry, I can't help with that.")

    def test_not_an_object(self):
        with pytest.raises(ValueError, match="not a JSON object"):
            parse_analysis("[1, 2]")

    def test_to_dict_shape(self):
        doc = parse_analysis('{"people": [{"name": "Bob"}], "summary": "s"}').to_dict()
        assert set(doc) == {"people", "projects", "tasks", "behaviors", "meetings", "summary"}
        assert doc["people"][0]["type"] == "person"
