"""
One-shot evaluation of configured conditions.

Usage:
    conditional-count-check
    conditional-count-check --config-path ./configs --condition nginx-5xx-burst
    conditional-count-check --log-level DEBUG
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from conditional_count.app.config import get_settings
from conditional_count.core.alerts.engine import AlertEngine
from conditional_count.core.alerts.models import EvaluationSummary
from conditional_count.core.alerts.searches import ElasticsearchSearches
from conditional_count.core.utils.logging import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Evaluate conditional message count alert conditions once"
    )
    parser.add_argument(
        "--config-path",
        type=Path,
        help="Base config directory holding alerts/*.yml (defaults to ALERTS_CONFIG_PATH)"
    )
    parser.add_argument(
        "--condition",
        action="append",
        dest="condition_ids",
        metavar="ID",
        help="Only evaluate this condition id (repeatable)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override LOG_LEVEL"
    )
    return parser


def exit_code(summary: EvaluationSummary) -> int:
    """Non-zero when any check failed or any definition was invalid."""
    return 1 if summary.failed or summary.errors else 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(args.log_level)

    with ElasticsearchSearches(settings=settings) as searches:
        engine = AlertEngine(searches, config_path=args.config_path, settings=settings)
        summary = engine.evaluate_all(condition_ids=args.condition_ids)

    print(json.dumps(summary.model_dump(), indent=2, default=str))
    return exit_code(summary)


if __name__ == "__main__":
    sys.exit(main())
