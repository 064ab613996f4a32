"""
Conditional Count Alerts

Stream alert condition on the number of messages matching a search query.

Components:
- ConditionalCountAlertCondition: Condition built from host parameters
- evaluate: Single check against a search backend
- ConditionalCountConfig: Configuration fields and validation
- ElasticsearchSearches: Search backend over the Elasticsearch REST API
- AlertConfigLoader: YAML condition definitions
- AlertEngine: One-shot evaluation of all configured conditions
"""

from .condition import ConditionalCountAlertCondition, create_condition, evaluate, is_triggered
from .config_loader import AlertConfigLoader, ConditionDefinition
from .engine import AlertEngine
from .models import (
    AlertConditionParameters,
    CheckResult,
    CheckStatus,
    CountResult,
    EvaluationSummary,
    MessageSummary,
    ResultMessage,
    SearchResult,
    Sorting,
    SortDirection,
    ThresholdType,
)
from .schema import ConditionalCountConfig, ConfigurationRequest, describe, parse_parameters
from .searches import ElasticsearchSearches, Searches
from .timeranges import AbsoluteRange, RelativeRange

__all__ = [
    "ConditionalCountAlertCondition",
    "create_condition",
    "evaluate",
    "is_triggered",
    "AlertConfigLoader",
    "ConditionDefinition",
    "AlertEngine",
    "AlertConditionParameters",
    "CheckResult",
    "CheckStatus",
    "CountResult",
    "EvaluationSummary",
    "MessageSummary",
    "ResultMessage",
    "SearchResult",
    "Sorting",
    "SortDirection",
    "ThresholdType",
    "ConditionalCountConfig",
    "ConfigurationRequest",
    "describe",
    "parse_parameters",
    "ElasticsearchSearches",
    "Searches",
    "AbsoluteRange",
    "RelativeRange",
]
