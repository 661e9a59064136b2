#!/usr/bin/env python3
"""Command-line interface for analyzing a batch of project submissions."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from project_grader.libs.config_loader import apply_env_api_key, load_all_configs
from .batch_analyzer import BatchAnalyzer
from .confidence import classify_confidence
from .loaders import load_assignment, load_submissions

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
LOG = logging.getLogger(__name__)


async def run_batch(batch: BatchAnalyzer, assignment, submissions, check_plagiarism: bool):
    results = await batch.analyze_all_async(assignment, submissions)
    groups = await batch.check_plagiarism_async(results) if check_plagiarism else None
    return results, groups


def main():
    """Main entry point for grade-projects command."""
    parser = argparse.ArgumentParser(
        description='Analyze student project submissions (report, prompt logs, GitHub repo) with an LLM',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Analyze every submission listed in submissions.yaml
  grade-projects --assignment assignment.yaml --submissions submissions.yaml

  # Also look for collusion across the class
  grade-projects -a assignment.yaml -s submissions.yaml --check-plagiarism

  # Use a specific model and save the summary somewhere specific
  grade-projects -a assignment.yaml -s submissions.yaml --model gemini-2.5-pro --summary results.yaml
        """
    )

    parser.add_argument(
        '--assignment', '-a',
        type=Path,
        required=True,
        help='YAML file describing the assignment (title, learningOutcomes, additionalCriteria, ...)'
    )
    parser.add_argument(
        '--submissions', '-s',
        type=Path,
        required=True,
        help='YAML file listing student submissions'
    )
    parser.add_argument(
        '--summary', '-o',
        type=Path,
        default=None,
        help='Path to save summary YAML file (default: analysis_summary_TIMESTAMP.yaml next to the submissions file)'
    )
    parser.add_argument(
        '--config', '-c',
        type=Path,
        default=None,
        help='Extra YAML config merged over the packaged defaults'
    )
    parser.add_argument(
        '--model', '-m',
        type=str,
        default=None,
        help='Model to use (overrides config value)'
    )
    parser.add_argument(
        '--max-concurrent', '-t',
        type=int,
        default=None,
        help='Maximum number of concurrent analyses (overrides config value)'
    )
    parser.add_argument(
        '--check-plagiarism',
        action='store_true',
        help='Cross-reference all results for likely collusion'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.assignment.is_file():
        LOG.error(f"Assignment file does not exist: {args.assignment}")
        sys.exit(1)

    if not args.submissions.is_file():
        LOG.error(f"Submissions file does not exist: {args.submissions}")
        sys.exit(1)

    try:
        extra = [str(args.config)] if args.config else []
        config = apply_env_api_key(load_all_configs(*extra))
    except Exception as e:
        LOG.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    try:
        assignment = load_assignment(args.assignment)
        submissions = load_submissions(args.submissions)
    except Exception as e:
        LOG.error(f"Failed to load inputs: {e}")
        sys.exit(1)

    missing_report = [s.student_name for s in submissions if not s.has_report()]
    if missing_report:
        LOG.error(f"Submissions without a report (text, file or link): {', '.join(missing_report)}")
        sys.exit(1)

    if not submissions:
        LOG.error("No submissions to analyze")
        sys.exit(1)

    batch = BatchAnalyzer(configs=config, model=args.model, max_concurrent=args.max_concurrent)
    if batch.analyzer.mock_mode:
        LOG.warning("No API key configured (llm.api_key or GEMINI_API_KEY); results will be mock data")

    LOG.info(f"Analyzing {len(submissions)} submissions for '{assignment.title}'")
    results, groups = asyncio.run(run_batch(batch, assignment, submissions, args.check_plagiarism))

    if args.summary is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        summary_path = args.submissions.parent / f"analysis_summary_{timestamp}.yaml"
    else:
        summary_path = args.summary

    try:
        batch.save_summary(results, summary_path, groups)
        LOG.info(f"Summary saved to: {summary_path}")
    except Exception as e:
        LOG.error(f"Failed to save summary: {e}")

    print(f"\n{'='*60}")
    print("Project Analysis Complete")
    print(f"{'='*60}")
    print(f"Total submissions: {len(results)}")
    if results:
        avg_score = sum(r.scores.overall for r in results) / len(results)
        print(f"Average overall score: {avg_score:.1f}/100")

        print("\nScores:")
        for result in results:
            band = classify_confidence(result.confidence_score).value
            print(f"  {result.student_name}: {result.scores.overall}/100 "
                  f"(confidence {result.confidence_score}, {band})")

    if groups is not None:
        if groups:
            print("\nPossible collusion:")
            for group in groups:
                print(f"  [{group.confidence}] {', '.join(group.students)}: {group.reason}")
        else:
            print("\nNo collusion groups flagged.")

    print(f"\nSummary saved to: {summary_path}")


if __name__ == "__main__":
    main()
