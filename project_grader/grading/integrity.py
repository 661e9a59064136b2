"""Cross-submission integrity check: ask the engine to flag collusion groups."""

import asyncio
import json
import logging
from typing import Dict, List, Optional, Sequence

from pydantic import ValidationError

from project_grader.libs.config_loader import ConfigType
from project_grader.libs.content import TextPart
from project_grader.libs.llm import InferenceClient, create_client
from .models import AnalysisResult, PlagiarismGroup, PlagiarismReport
from .normalizer import parse_json

LOG = logging.getLogger(__name__)

SNIPPET_DIGEST_CHARS = 1000
MISSING_SNIPPET = "No text textSnippet available."


def build_digest(result: AnalysisResult) -> Dict[str, str]:
    """Compact per-student summary used for cross-submission comparison."""
    snippet = (result.text_snippet or "").strip()
    return {
        "name": result.student_name,
        "textSnippet": snippet[:SNIPPET_DIGEST_CHARS] if snippet else MISSING_SNIPPET,
        "aiSummary": result.ai_insights.summary,
        "keyInferences": result.report_analysis.key_inferences,
        "githubStructure": result.codebase_verification.github_structure,
    }


def build_integrity_prompt(digests: List[Dict[str, str]]) -> str:
    return f"""You are an academic integrity officer reviewing a batch of student project submissions.

Below is one digest per student: a snippet of their report, a summary of their AI usage,
the grader's key inferences and a description of their repository structure.

Flag groups of two or more students whose submissions show ANY of:
1. Near-identical phrasing in their report snippets (beyond common technical vocabulary).
2. Suspiciously identical key inferences or AI usage summaries.
3. Identical code-structure descriptions that suggest a shared repository.

Do not flag students for sharing the assignment's required structure or terminology.
Use the student names exactly as given.

STUDENT DIGESTS:
{json.dumps(digests, indent=2, ensure_ascii=False)}

Return ONLY a JSON object of this form (an empty "groups" list when nothing is suspicious):
{{"groups": [{{"students": ["<name>", "<name>"], "reason": "<specific evidence>", "confidence": "<High|Medium|Low>"}}]}}"""


def parse_groups(raw_text: Optional[str], known_names: Sequence[str]) -> List[PlagiarismGroup]:
    """
    Decode engine output into validated groups, dropping anything malformed.

    Names that are not among ``known_names`` are discarded, and a group left
    with fewer than two students is dropped.

    Raises:
        ValueError: If no JSON can be decoded from the output
    """
    data = parse_json(raw_text)
    if isinstance(data, dict):
        data = data.get("groups", [])
    if not isinstance(data, list):
        return []

    known = set(known_names)
    groups: List[PlagiarismGroup] = []
    for raw in data:
        if not isinstance(raw, dict):
            continue
        students: List[str] = []
        for name in raw.get("students") or []:
            if isinstance(name, str) and name in known and name not in students:
                students.append(name)
        confidence = raw.get("confidence")
        if isinstance(confidence, str):
            confidence = confidence.strip().capitalize()
        try:
            groups.append(PlagiarismGroup(
                students=students,
                reason=str(raw.get("reason") or "No reason given."),
                confidence=confidence,
            ))
        except ValidationError as e:
            LOG.debug("Dropping malformed plagiarism group %r: %s", raw, e)
    return groups


class IntegrityChecker:
    """Detect likely collusion across a set of analysis results."""

    def __init__(self, configs: ConfigType,
                 model: Optional[str] = None,
                 client: Optional[InferenceClient] = None):
        """
        Initialize the checker.

        Args:
            configs: Configuration dictionary (required)
            model: Model to use (overrides config value)
            client: Inference client; built from configs when omitted
        """
        self.configs = configs
        self.client = client if client is not None else create_client(configs, model=model)

    async def check_plagiarism_async(self, results: Sequence[AnalysisResult]) -> List[PlagiarismGroup]:
        """
        Compare all results in one batched request.

        Group order (and wording) comes from the engine and is not stable
        between calls.

        Returns:
            Zero or more PlagiarismGroup values; [] on any failure
        """
        if len(results) < 2:
            return []
        if self.client is None:
            LOG.info("No API key configured, skipping plagiarism check")
            return []

        digests = sorted((build_digest(r) for r in results), key=lambda d: d["name"])
        prompt = build_integrity_prompt(digests)

        try:
            raw_text = await self.client.generate(
                [TextPart(prompt)],
                response_schema=PlagiarismReport,
            )
            groups = parse_groups(raw_text, [d["name"] for d in digests])
        except Exception as e:  # pylint: disable=broad-except
            LOG.error("Plagiarism check failed: %s", e)
            return []

        LOG.info("Plagiarism check over %d submissions flagged %d groups", len(results), len(groups))
        return groups

    def check_plagiarism(self, results: Sequence[AnalysisResult]) -> List[PlagiarismGroup]:
        """Synchronous wrapper for check_plagiarism_async."""
        return asyncio.run(self.check_plagiarism_async(results))
