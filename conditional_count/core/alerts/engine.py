"""
Alert Engine

Runs every configured condition once.

Flow:
1. Load condition definitions from YAML
2. For each enabled condition, build it from its parameters
3. Run the check
4. Tally results into an evaluation summary

Scheduling is left to the caller.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from conditional_count.app.config import Settings, get_settings
from conditional_count.core.alerts.condition import ConditionalCountAlertCondition, create_condition
from conditional_count.core.alerts.config_loader import AlertConfigLoader, ConditionDefinition
from conditional_count.core.alerts.models import CheckStatus, EvaluationSummary
from conditional_count.core.alerts.searches import Searches
from conditional_count.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class AlertEngine:
    """
    Evaluates the conditions declared in YAML against one search backend.
    """

    def __init__(
        self,
        searches: Searches,
        config_path: Optional[Path] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize alert engine.

        Args:
            searches: Search backend shared by all conditions
            config_path: Base path for configs. Defaults to settings.alerts_config_path
            settings: Settings instance (defaults to get_settings())
        """
        self.settings = settings or get_settings()
        self.searches = searches
        self.config_loader = AlertConfigLoader(config_path or self.settings.alerts_config_path)

    def build_condition(self, definition: ConditionDefinition) -> ConditionalCountAlertCondition:
        """
        Raises:
            ConfigurationError: the definition's parameters are invalid
        """
        return create_condition(
            searches=self.searches,
            stream_id=definition.stream_id,
            id=definition.id,
            created_at=definition.created_at,
            creator_user_id=definition.creator_user_id,
            parameters=definition.parameters,
            title=definition.title,
            settings=self.settings,
        )

    def evaluate_all(
        self,
        now: Optional[datetime] = None,
        condition_ids: Optional[List[str]] = None
    ) -> EvaluationSummary:
        """
        Evaluate all enabled conditions (or specific ones if condition_ids provided).

        Args:
            now: Evaluation time shared by every check (defaults to current UTC time)
            condition_ids: Optional list of specific condition IDs to evaluate

        Returns:
            EvaluationSummary with results
        """
        start_time = datetime.now(timezone.utc)
        now = now or start_time
        summary = EvaluationSummary()

        definitions = self.config_loader.load_all_conditions()
        if condition_ids:
            definitions = [d for d in definitions if d.id in condition_ids]

        for definition in definitions:
            if not definition.enabled:
                summary.skipped_disabled += 1
                continue

            try:
                condition = self.build_condition(definition)
            except ConfigurationError as e:
                logger.error(f"Invalid condition {definition.id}: {e.message}")
                summary.errors += 1
                summary.details.append({
                    "condition_id": definition.id,
                    "status": "error",
                    "error": e.to_dict(),
                })
                continue

            result = condition.run_check(now)

            if result.status == CheckStatus.TRIGGERED:
                summary.triggered += 1
            elif result.status == CheckStatus.NOT_TRIGGERED:
                summary.not_triggered += 1
            elif result.status == CheckStatus.FAILED:
                summary.failed += 1

            summary.details.append(result.to_dict())

        summary.duration_ms = (datetime.now(timezone.utc) - start_time).total_seconds() * 1000
        logger.info(
            f"Evaluated {len(definitions)} conditions: {summary.triggered} triggered, "
            f"{summary.failed} failed, {summary.errors} invalid"
        )
        return summary
