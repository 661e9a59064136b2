"""Single-submission analysis: evidence, prompt, inference, normalization."""

import asyncio
import logging
from typing import Optional

from project_grader.evidence import GitHubEvidenceCollector, RepositoryPolicy
from project_grader.libs.config_loader import ConfigType, get_config
from project_grader.libs.llm import InferenceClient, create_client
from .fallbacks import build_failure_result, build_mock_result
from .models import AnalysisResponse, AnalysisResult, AssignmentConfig, StudentSubmission
from .normalizer import normalize_analysis
from .prompts import compile_analysis_prompt

LOG = logging.getLogger(__name__)


def build_collector(configs: ConfigType) -> GitHubEvidenceCollector:
    """Create the repository evidence collector with config overrides applied."""
    overrides = get_config("evidence.repository", configs, default={}) or {}
    return GitHubEvidenceCollector(policy=RepositoryPolicy.from_overrides(overrides))


class ProjectAnalyzer:
    """Analyze student project submissions with the configured reasoning engine."""

    def __init__(self, configs: ConfigType,
                 model: Optional[str] = None,
                 client: Optional[InferenceClient] = None,
                 collector: Optional[GitHubEvidenceCollector] = None):
        """
        Initialize the analyzer.

        Args:
            configs: Configuration dictionary (required)
            model: Model to use (overrides config value)
            client: Inference client; built from configs when omitted. None from
                configs means no API key, and every call returns the mock result.
            collector: Repository evidence collector (built from configs when omitted)
        """
        self.configs = configs
        self.model_name = model
        self.client = client if client is not None else create_client(configs, model=model)
        self.collector = collector or build_collector(configs)

    @property
    def mock_mode(self) -> bool:
        return self.client is None

    async def analyze_submission_async(
        self,
        assignment: AssignmentConfig,
        submission: StudentSubmission,
    ) -> AnalysisResult:
        """
        Analyze one submission asynchronously.

        Args:
            assignment: The instructor's assignment configuration
            submission: The student's submission

        Returns:
            A fully populated AnalysisResult; errors are folded into the result
        """
        if self.client is None:
            LOG.info("No API key configured, returning mock analysis for %s", submission.student_name)
            return build_mock_result(submission.student_name)

        try:
            evidence = await self.collector.collect(submission.repo_url)
            prompt = compile_analysis_prompt(assignment, submission, evidence)
            LOG.debug(
                "Analyzing %s with %d content parts (search=%s)",
                submission.student_name, len(prompt.parts), prompt.use_search,
            )
            # Schema-constrained output is unavailable while the search tool is on
            raw_text = await self.client.generate(
                prompt.parts,
                use_search=prompt.use_search,
                response_schema=None if prompt.use_search else AnalysisResponse,
            )
        except Exception as e:  # pylint: disable=broad-except
            LOG.error("Analysis failed for %s: %s", submission.student_name, e)
            return build_failure_result(submission.student_name, str(e))

        return normalize_analysis(raw_text, submission.student_name)

    def analyze_submission(
        self,
        assignment: AssignmentConfig,
        submission: StudentSubmission,
    ) -> AnalysisResult:
        """Synchronous wrapper for analyze_submission_async."""
        return asyncio.run(self.analyze_submission_async(assignment, submission))
