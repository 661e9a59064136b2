"""Tests for the cross-submission integrity check."""

import json

import pytest

from project_grader.grading.fallbacks import build_mock_result
from project_grader.grading.integrity import (
    MISSING_SNIPPET,
    SNIPPET_DIGEST_CHARS,
    IntegrityChecker,
    build_digest,
    parse_groups,
)
from project_grader.grading.models import PlagiarismReport

from conftest import StubClient


def make_result(name, snippet="I built a task tracker with OAuth."):
    return build_mock_result(name).model_copy(update={"text_snippet": snippet})


class TestBuildDigest:

    def test_snippet_truncated(self):
        digest = build_digest(make_result("Alice", "z" * 3000))
        assert digest["name"] == "Alice"
        assert len(digest["textSnippet"]) == SNIPPET_DIGEST_CHARS

    def test_missing_snippet(self):
        digest = build_digest(make_result("Alice", "   "))
        assert digest["textSnippet"] == MISSING_SNIPPET


class TestParseGroups:

    def test_valid_group(self):
        raw = '```json\n{"groups": [{"students": ["Alice", "Bob"], "reason": "Same wording", "confidence": "high"}]}\n```'
        groups = parse_groups(raw, ["Alice", "Bob", "Carol"])

        assert len(groups) == 1
        assert groups[0].students == ["Alice", "Bob"]
        assert groups[0].confidence == "High"

    def test_bare_list_accepted(self):
        raw = '[{"students": ["Alice", "Carol"], "reason": "Shared repo", "confidence": "Medium"}]'
        assert parse_groups(raw, ["Alice", "Carol"])[0].students == ["Alice", "Carol"]

    def test_bare_list_after_prose_keeps_every_group(self):
        raw = ('Flagged pairs:\n['
               '{"students": ["Alice", "Bob"], "reason": "Same wording", "confidence": "High"}, '
               '{"students": ["Carol", "Dan"], "reason": "Same diagrams", "confidence": "Low"}]')
        groups = parse_groups(raw, ["Alice", "Bob", "Carol", "Dan"])
        assert [g.students for g in groups] == [["Alice", "Bob"], ["Carol", "Dan"]]

    def test_unknown_names_and_singletons_dropped(self):
        raw = json.dumps({"groups": [
            {"students": ["Alice", "Mallory"], "reason": "x", "confidence": "High"},
            {"students": ["Alice", "Alice"], "reason": "x", "confidence": "High"},
            {"students": ["Bob", "Carol", "Zed"], "reason": "y", "confidence": "Low"},
            {"students": ["Alice", "Bob"], "reason": "z", "confidence": "Certain"},
        ]})
        groups = parse_groups(raw, ["Alice", "Bob", "Carol"])

        assert [g.students for g in groups] == [["Bob", "Carol"]]

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_groups("nothing suspicious here", ["Alice", "Bob"])


class TestIntegrityChecker:

    @pytest.mark.asyncio
    async def test_fewer_than_two_results_skips_engine(self, sample_config):
        client = StubClient(['{"groups": []}'])
        checker = IntegrityChecker(configs=sample_config, client=client)

        assert await checker.check_plagiarism_async([]) == []
        assert await checker.check_plagiarism_async([make_result("Alice")]) == []
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_no_key_returns_empty(self, no_key_config):
        checker = IntegrityChecker(configs=no_key_config)
        results = [make_result("Alice"), make_result("Bob")]
        assert await checker.check_plagiarism_async(results) == []

    @pytest.mark.asyncio
    async def test_flags_group(self, sample_config):
        response = json.dumps({"groups": [{
            "students": ["Bob", "Alice"],
            "reason": "Identical report phrasing",
            "confidence": "High",
        }]})
        client = StubClient([response])
        checker = IntegrityChecker(configs=sample_config, client=client)
        results = [make_result("Bob"), make_result("Alice"), make_result("Carol", "Something else entirely.")]

        groups = await checker.check_plagiarism_async(results)

        assert len(groups) == 1
        assert set(groups[0].students) == {"Alice", "Bob"}
        assert groups[0].confidence == "High"

        call = client.calls[0]
        assert call["response_schema"] is PlagiarismReport
        assert call["use_search"] is False
        prompt = call["parts"][0].text
        assert prompt.index('"name": "Alice"') < prompt.index('"name": "Bob"') < prompt.index('"name": "Carol"')

    @pytest.mark.asyncio
    async def test_garbage_returns_empty(self, sample_config):
        client = StubClient(["I could not decide."])
        checker = IntegrityChecker(configs=sample_config, client=client)
        assert await checker.check_plagiarism_async([make_result("Alice"), make_result("Bob")]) == []

    @pytest.mark.asyncio
    async def test_engine_error_returns_empty(self, sample_config):
        client = StubClient([RuntimeError("boom")])
        checker = IntegrityChecker(configs=sample_config, client=client)
        assert await checker.check_plagiarism_async([make_result("Alice"), make_result("Bob")]) == []

    def test_sync_wrapper(self, sample_config):
        client = StubClient(['{"groups": []}'])
        checker = IntegrityChecker(configs=sample_config, client=client)
        assert checker.check_plagiarism([make_result("Alice"), make_result("Bob")]) == []
