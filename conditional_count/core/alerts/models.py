"""
Alert Condition Models

Pydantic models for condition parameters, search backend results
and check results.
"""

from enum import Enum
from typing import Optional, List, Dict, Any
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field

from conditional_count.core.exceptions import InvalidThresholdTypeError


class ThresholdType(str, Enum):
    """Comparison mode between the message count and the threshold."""
    MORE = "MORE"
    LESS = "LESS"

    @property
    def description(self) -> str:
        return _THRESHOLD_DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value: Any) -> "ThresholdType":
        """
        Case-insensitive parse; parsing a canonical value yields itself.

        Raises:
            InvalidThresholdTypeError: value is not a known threshold type
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise InvalidThresholdTypeError(value)
        try:
            return cls(value.upper())
        except ValueError:
            raise InvalidThresholdTypeError(value) from None


_THRESHOLD_DESCRIPTIONS = {
    ThresholdType.MORE: "more than",
    ThresholdType.LESS: "less than",
}


class CheckStatus(str, Enum):
    """Outcome of a single condition check."""
    TRIGGERED = "triggered"
    NOT_TRIGGERED = "not_triggered"
    FAILED = "failed"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


# ============================================
# Configuration Models
# ============================================

class AlertConditionParameters(BaseModel):
    """Validated, typed view of a condition's parameter map."""
    model_config = ConfigDict(frozen=True)

    query: str = Field(..., min_length=1, description="Search query the messages must match")
    window_minutes: int = Field(..., gt=0, description="Relative time window in minutes")
    threshold_type: ThresholdType = Field(..., description="MORE or LESS")
    threshold: int = Field(..., description="Message count threshold")
    stream_id: str = Field(..., description="Stream the condition is attached to")
    backlog: int = Field(default=0, ge=0, description="Matching messages attached to a triggered alert")
    grace: int = Field(default=0, ge=0, description="Minutes the host waits before re-alerting")
    repeat_notifications: bool = Field(default=False)

    @property
    def stream_filter(self) -> str:
        return f"streams:{self.stream_id}"


# ============================================
# Search Backend Models
# ============================================

class Sorting(BaseModel):
    """Sort specification for backlog searches."""
    model_config = ConfigDict(frozen=True)

    field: str
    direction: SortDirection = SortDirection.DESC


class CountResult(BaseModel):
    count: int = Field(..., ge=0)
    took_ms: int = 0


class ResultMessage(BaseModel):
    """Single search hit: the index it lives in and the stored message."""
    model_config = ConfigDict(frozen=True)

    index: str
    message: Dict[str, Any]


class SearchResult(BaseModel):
    results: List[ResultMessage] = Field(default_factory=list)
    total_results: int = 0
    took_ms: int = 0


# ============================================
# Result Models
# ============================================

class MessageSummary(BaseModel):
    """A matching message attached to a triggered alert."""
    model_config = ConfigDict(frozen=True)

    index: str
    message: Dict[str, Any]

    @classmethod
    def from_result_message(cls, result_message: ResultMessage) -> "MessageSummary":
        return cls(index=result_message.index, message=result_message.message)

    @property
    def id(self) -> Optional[str]:
        return self.message.get("_id")

    @property
    def source(self) -> Optional[str]:
        return self.message.get("source")

    @property
    def text(self) -> Optional[str]:
        return self.message.get("message")

    @property
    def timestamp(self) -> Optional[str]:
        return self.message.get("timestamp")


class CheckResult(BaseModel):
    """Result of one condition check."""
    status: CheckStatus
    condition_id: Optional[str] = None
    summary: Optional[str] = None
    matching_messages: List[MessageSummary] = Field(default_factory=list)
    error: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def triggered(self) -> bool:
        return self.status == CheckStatus.TRIGGERED

    @property
    def failed(self) -> bool:
        return self.status == CheckStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = self.model_dump()
        result["status"] = self.status.value
        result["triggered"] = self.triggered
        result["timestamp"] = self.timestamp.isoformat()
        return result


class EvaluationSummary(BaseModel):
    """Summary of one evaluation run over many conditions."""
    triggered: int = 0
    not_triggered: int = 0
    failed: int = 0
    skipped_disabled: int = 0
    errors: int = 0
    duration_ms: float = 0
    details: List[Dict[str, Any]] = Field(default_factory=list)
