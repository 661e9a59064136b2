#!/usr/bin/env python3
"""Command-line interface for suggesting learning outcomes for an assignment."""

import argparse
import logging
import sys
from pathlib import Path

from project_grader.libs.config_loader import apply_env_api_key, load_all_configs
from .loaders import load_assignment
from .outcomes import OutcomeGenerator

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
LOG = logging.getLogger(__name__)


def main():
    """Main entry point for generate-outcomes command."""
    parser = argparse.ArgumentParser(
        description='Suggest 3-5 learning outcomes for an assignment'
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--assignment', '-a',
        type=Path,
        help='YAML assignment file (description and optional assignmentFile are used)'
    )
    source.add_argument(
        '--description', '-d',
        type=str,
        help='Assignment description text'
    )
    parser.add_argument('--model', '-m', type=str, default=None, help='Model to use (overrides config value)')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = apply_env_api_key(load_all_configs())
    except Exception as e:
        LOG.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    description = args.description
    assignment_file = None
    if args.assignment is not None:
        try:
            assignment = load_assignment(args.assignment)
        except Exception as e:
            LOG.error(f"Failed to load assignment: {e}")
            sys.exit(1)
        description = assignment.description
        assignment_file = assignment.assignment_file

    generator = OutcomeGenerator(configs=config, model=args.model)
    for outcome in generator.generate_learning_outcomes(description, assignment_file):
        print(f"- {outcome}")


if __name__ == "__main__":
    main()
