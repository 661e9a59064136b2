"""Shared fixtures: a scripted inference client and sample assignment/submission data."""

import json
from typing import Any, List, Optional

import pytest

from project_grader.grading.models import AssignmentConfig, FileAttachment, StudentSubmission


class StubClient:
    """Inference client that replays canned responses and records every call."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.calls: List[dict] = []

    async def generate(self, parts, *, use_search=False, response_schema=None) -> str:
        self.calls.append({
            "parts": list(parts),
            "use_search": use_search,
            "response_schema": response_schema,
        })
        if not self.responses:
            return ""
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


class StubCollector:
    """Evidence collector returning fixed text."""

    def __init__(self, evidence: str = "--- START OF FILE: README.md ---\n# Demo\n--- END OF FILE ---"):
        self.evidence = evidence
        self.urls: List[str] = []

    async def collect(self, repo_url: str) -> str:
        self.urls.append(repo_url)
        return self.evidence


@pytest.fixture
def sample_config():
    """Configuration with an API key (clients are always injected in tests)."""
    return {
        'llm': {
            'provider': 'google',
            'model': 'gemini-2.5-flash',
            'api_key': 'test-key',
        },
        'tools': {
            'max_concurrent': 2
        },
    }


@pytest.fixture
def no_key_config():
    return {
        'llm': {
            'provider': 'google',
            'api_key': None,
        },
    }


@pytest.fixture
def assignment():
    return AssignmentConfig(
        title="Task Tracker",
        description="Build a full-stack task tracker with authentication.",
        learning_outcomes=["Implement OAuth login", "Design a REST API"],
        class_context="Advanced",
        additional_criteria="Functionality 40 pts, Report 40 pts, AI usage 20 pts. I hate copy-pasted AI code.",
    )


@pytest.fixture
def submission():
    return StudentSubmission(
        student_name="Sarah Jenkins",
        repo_url="https://github.com/sjenkins/task-tracker",
        report_text="I implemented OAuth with PKCE because the SPA cannot keep a secret.",
        prompt_log="User: how do I refresh tokens?",
    )


@pytest.fixture
def pdf_attachment():
    return FileAttachment(name="report.pdf", data="data:application/pdf;base64,JVBERi0xLjQ=",
                          mime_type="application/pdf")


@pytest.fixture
def full_response():
    """A complete, well-formed engine response."""
    return json.dumps({
        "confidenceScore": 100,
        "textSnippet": "In this project I implemented OAuth with PKCE ...",
        "scores": {"product": 88, "process": 92, "aiEfficiency": 85, "overall": 89},
        "rubricBreakdown": [
            {"criteria": "Functionality", "score": 36, "max": 40, "comment": "Works end to end."},
            {"criteria": "Report", "score": 38, "max": 40, "comment": "Clear post-mortem."},
        ],
        "aiInsights": {
            "summary": "Used AI for boilerplate, refined logic manually.",
            "efficiencyBand": "Strategic Collaborator",
            "promptQuality": "High",
        },
        "codebaseVerification": {
            "githubStructure": "Standard React layout with /components.",
            "scriptQuality": "Well commented.",
            "readmeCredibility": "README has real screenshots.",
            "overallCredibility": "High",
            "fileAnalyses": [
                {"fileName": "app.ts", "critique": "Clean routing.", "rating": "Good"},
            ],
        },
        "reportAnalysis": {
            "structureQuality": "Professional.",
            "visualEvidence": "Architecture diagram matches the code.",
            "criteriaMet": ["OAuth login", "REST API"],
            "criteriaMissed": ["Load testing"],
            "keyInferences": "Understands token refresh.",
            "additionalEffort": "Dark mode.",
        },
        "feedback": "Great ownership of the code.",
    })
