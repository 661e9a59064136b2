"""Batch analysis of many submissions in parallel using async/await."""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml
from tqdm.asyncio import tqdm

from project_grader.libs.config_loader import ConfigType, get_config
from .analyzer import ProjectAnalyzer
from .confidence import classify_confidence
from .integrity import IntegrityChecker
from .models import AnalysisResult, AssignmentConfig, PlagiarismGroup, StudentSubmission

LOG = logging.getLogger(__name__)


class BatchAnalyzer:
    """Analyze multiple submissions concurrently, then cross-check them."""

    def __init__(self, configs: ConfigType, model: Optional[str] = None,
                 max_concurrent: Optional[int] = None,
                 analyzer: Optional[ProjectAnalyzer] = None,
                 checker: Optional[IntegrityChecker] = None):
        """
        Initialize the batch analyzer.

        Args:
            configs: Configuration dictionary
            model: Optional model override
            max_concurrent: Maximum number of concurrent analyses (overrides config)
            analyzer: Pre-built analyzer (built from configs when omitted)
            checker: Pre-built integrity checker (built from configs when omitted)
        """
        self.configs = configs
        self.model = model

        if max_concurrent is not None:
            self.max_concurrent = max_concurrent
        else:
            self.max_concurrent = get_config("tools.max_concurrent", configs, default=4)

        self.analyzer = analyzer or ProjectAnalyzer(configs=configs, model=model)
        self.checker = checker or IntegrityChecker(configs=configs, model=model, client=self.analyzer.client)

        LOG.info(f"BatchAnalyzer initialized with max_concurrent={self.max_concurrent}")

    async def analyze_all_async(self, assignment: AssignmentConfig,
                                submissions: Sequence[StudentSubmission]) -> List[AnalysisResult]:
        """
        Analyze all submissions with concurrency control.

        Returns:
            One AnalysisResult per submission, sorted by student name
        """
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def analyze_with_semaphore(submission: StudentSubmission) -> AnalysisResult:
            async with semaphore:
                return await self.analyzer.analyze_submission_async(assignment, submission)

        tasks = [analyze_with_semaphore(s) for s in submissions]

        results = []
        for coro in tqdm.as_completed(tasks, total=len(tasks), desc="Analyzing submissions"):
            result = await coro
            LOG.debug(f"Completed: {result.student_name} - {result.scores.overall}/100")
            results.append(result)

        results.sort(key=lambda r: r.student_name)
        return results

    def analyze_all(self, assignment: AssignmentConfig,
                    submissions: Sequence[StudentSubmission]) -> List[AnalysisResult]:
        """Synchronous wrapper for analyze_all_async."""
        return asyncio.run(self.analyze_all_async(assignment, submissions))

    async def check_plagiarism_async(self, results: Sequence[AnalysisResult]) -> List[PlagiarismGroup]:
        return await self.checker.check_plagiarism_async(results)

    def save_summary(self, results: List[AnalysisResult], output_path: Path,
                     plagiarism_groups: Optional[List[PlagiarismGroup]] = None):
        """
        Save analysis summary to YAML file.

        Args:
            results: Analysis results
            output_path: Path to save summary file
            plagiarism_groups: Groups from the integrity check, if it was run
        """
        summary: Dict[str, Any] = {
            'analysis_summary': {
                'timestamp': datetime.now().isoformat(),
                'total_submissions': len(results),
                'average_overall': sum(r.scores.overall for r in results) / len(results) if results else 0,
                'confidence_bands': {
                    band: sum(1 for r in results if classify_confidence(r.confidence_score).value == band)
                    for band in ('High', 'Medium', 'Low')
                },
            },
            'submissions': [r.to_yaml_dict() for r in results],
        }
        if plagiarism_groups is not None:
            summary['plagiarism_groups'] = [g.to_yaml_dict() for g in plagiarism_groups]

        with open(output_path, 'w') as f:
            yaml.dump(summary, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
