"""
Conditional Count Alert Condition

Counts the messages of a stream that match a search query over the last
N minutes and triggers when the count is more, or less, than a threshold.

Flow:
1. Resolve the relative window into an absolute range
2. Count matching messages in the stream
3. Compare count and threshold
4. On trigger, fetch the newest matching messages as backlog
5. Build the check result
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from conditional_count.app.config import Settings, get_settings
from conditional_count.core.alerts.models import (
    AlertConditionParameters,
    CheckResult,
    CheckStatus,
    MessageSummary,
    Sorting,
    SortDirection,
    ThresholdType,
)
from conditional_count.core.alerts.schema import (
    CONDITION_DESCRIPTOR,
    ConditionalCountConfig,
    parse_parameters,
)
from conditional_count.core.alerts.searches import Searches
from conditional_count.core.alerts.timeranges import RelativeRange
from conditional_count.core.exceptions import BackendQueryError
from conditional_count.core.utils.logging import StructuredLogger, create_structured_logger

MESSAGE_TIMESTAMP_FIELD = "timestamp"


def is_triggered(threshold_type: Any, count: int, threshold: int) -> bool:
    """Threshold predicate. Unknown threshold types never trigger."""
    if threshold_type == ThresholdType.MORE:
        return count > threshold
    elif threshold_type == ThresholdType.LESS:
        return count < threshold
    else:
        return False


def format_summary(params: AlertConditionParameters, count: int) -> str:
    return (
        f"Stream had {count} messages in the last {params.window_minutes} minutes "
        f"with trigger condition {params.threshold_type.description} {params.threshold} messages. "
        f"(Current grace time: {params.grace} minutes)"
    )


def evaluate(
    params: AlertConditionParameters,
    searches: Searches,
    now: Optional[datetime] = None,
    condition_id: Optional[str] = None,
    logger: Optional[StructuredLogger] = None
) -> CheckResult:
    """
    Run one check of a conditional count condition.

    Args:
        params: Validated condition parameters
        searches: Search backend
        now: Evaluation time (defaults to current UTC time)
        condition_id: Condition id recorded on the result
        logger: Logger carrying condition context

    Returns:
        CheckResult with status TRIGGERED, NOT_TRIGGERED or FAILED. Backend
        errors become FAILED results; they never read as NOT_TRIGGERED.
    """
    logger = logger or create_structured_logger(__name__, condition_id, params.stream_id)
    now = now or datetime.now(timezone.utc)

    try:
        time_range = RelativeRange.of_minutes(params.window_minutes).to_absolute(now)
        count = searches.count(params.query, time_range, params.stream_filter).count

        if not is_triggered(params.threshold_type, count, params.threshold):
            logger.debug(f"Alert check <{condition_id}> returned no results.", count=count)
            return CheckResult(
                status=CheckStatus.NOT_TRIGGERED,
                condition_id=condition_id,
                timestamp=now,
            )

        summaries: List[MessageSummary] = []
        if params.backlog > 0:
            backlog_result = searches.search(
                "*",
                params.stream_filter,
                time_range,
                limit=params.backlog,
                offset=0,
                sorting=Sorting(field=MESSAGE_TIMESTAMP_FIELD, direction=SortDirection.DESC),
            )
            summaries = [
                MessageSummary.from_result_message(m)
                for m in backlog_result.results[:params.backlog]
            ]

    except BackendQueryError as e:
        logger.error_from(f"Alert check <{condition_id}> failed", e, error_code=e.error_code.value)
        return CheckResult(
            status=CheckStatus.FAILED,
            condition_id=condition_id,
            error=e.to_dict(),
            timestamp=now,
        )

    logger.info(
        f"Alert check <{condition_id}> triggered",
        count=count,
        threshold=params.threshold,
        backlog_size=len(summaries),
    )
    return CheckResult(
        status=CheckStatus.TRIGGERED,
        condition_id=condition_id,
        summary=format_summary(params, count),
        matching_messages=summaries,
        timestamp=now,
    )


class ConditionalCountAlertCondition:
    """
    Stream alert condition on the count of messages matching a query.

    Parameters are validated once at construction; a non-canonical threshold
    type is rewritten in ``parameters`` so the host persists the canonical value.
    """

    Config = ConditionalCountConfig
    DESCRIPTOR = CONDITION_DESCRIPTOR

    def __init__(
        self,
        searches: Searches,
        stream_id: str,
        parameters: Mapping[str, Any],
        id: Optional[str] = None,
        created_at: Optional[datetime] = None,
        creator_user_id: Optional[str] = None,
        title: Optional[str] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize the condition.

        Args:
            searches: Search backend used by checks
            stream_id: Stream the condition is attached to
            parameters: Raw parameter map from the host
            id: Condition id (generated if not provided)
            created_at: Creation time (defaults to now)
            creator_user_id: User who created the condition
            title: Optional display title
            settings: Settings instance (defaults to get_settings())

        Raises:
            ConfigurationError: a parameter is missing or invalid
        """
        self.searches = searches
        self.settings = settings or get_settings()
        self.id = id or str(uuid.uuid4())
        self.created_at = created_at or datetime.now(timezone.utc)
        self.creator_user_id = creator_user_id
        self.title = title
        self.params, self._parameters = parse_parameters(parameters, stream_id, self.settings)
        self.logger = create_structured_logger(__name__, condition_id=self.id, stream_id=stream_id)

    @property
    def type(self) -> str:
        return f"{type(self).__module__}.{type(self).__qualname__}"

    @property
    def parameters(self) -> Dict[str, Any]:
        return dict(self._parameters)

    @property
    def stream_id(self) -> str:
        return self.params.stream_id

    @property
    def query(self) -> str:
        return self.params.query

    @property
    def time(self) -> int:
        return self.params.window_minutes

    @property
    def threshold_type(self) -> ThresholdType:
        return self.params.threshold_type

    @property
    def threshold(self) -> int:
        return self.params.threshold

    @property
    def grace(self) -> int:
        return self.params.grace

    @property
    def backlog(self) -> int:
        return self.params.backlog

    @property
    def repeat_notifications(self) -> bool:
        return self.params.repeat_notifications

    def run_check(self, now: Optional[datetime] = None) -> CheckResult:
        return evaluate(self.params, self.searches, now=now, condition_id=self.id, logger=self.logger)

    @property
    def description(self) -> str:
        return (
            f"time: {self.time}"
            f", threshold_type: {self.threshold_type.description}"
            f", threshold: {self.threshold}"
            f", grace: {self.grace}"
            f", query: {self.query}"
            f", repeat notifications: {'yes' if self.repeat_notifications else 'no'}"
        )

    def __str__(self) -> str:
        return (
            f"{self.id}: conditional message count condition={{{self.description}}}"
            f", stream={{{self.stream_id}}}"
        )


def create_condition(
    searches: Searches,
    stream_id: str,
    id: Optional[str],
    created_at: Optional[datetime],
    creator_user_id: Optional[str],
    parameters: Mapping[str, Any],
    title: Optional[str] = None,
    settings: Optional[Settings] = None
) -> ConditionalCountAlertCondition:
    """Factory with the host's condition construction signature."""
    return ConditionalCountAlertCondition(
        searches=searches,
        stream_id=stream_id,
        parameters=parameters,
        id=id,
        created_at=created_at,
        creator_user_id=creator_user_id,
        title=title,
        settings=settings,
    )
