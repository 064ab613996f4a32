"""
Time ranges for count and backlog queries.

A condition is configured with a relative window ("last N minutes") that is
resolved into an absolute range at the moment of each check.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from conditional_count.core.exceptions import InvalidRangeParametersError


def _as_utc(value: datetime) -> datetime:
    # Naive datetimes are taken to be UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class AbsoluteRange:
    """Closed interval [from_, to] in UTC."""
    from_: datetime
    to: datetime

    @classmethod
    def create(cls, from_: datetime, to: datetime) -> "AbsoluteRange":
        from_, to = _as_utc(from_), _as_utc(to)
        if from_ > to:
            raise InvalidRangeParametersError(
                message="Range start is after range end",
                context={"from": from_.isoformat(), "to": to.isoformat()}
            )
        return cls(from_=from_, to=to)

    @property
    def duration(self) -> timedelta:
        return self.to - self.from_


@dataclass(frozen=True)
class RelativeRange:
    """The last ``range_seconds`` seconds, relative to evaluation time."""
    range_seconds: int

    @classmethod
    def create(cls, range_seconds: int) -> "RelativeRange":
        if range_seconds <= 0:
            raise InvalidRangeParametersError(
                message=f"Relative range must be positive, got {range_seconds}s",
                context={"range_seconds": range_seconds}
            )
        return cls(range_seconds=range_seconds)

    @classmethod
    def of_minutes(cls, minutes: int) -> "RelativeRange":
        return cls.create(minutes * 60)

    def to_absolute(self, now: Optional[datetime] = None) -> AbsoluteRange:
        to = _as_utc(now) if now is not None else datetime.now(timezone.utc)
        try:
            from_ = to - timedelta(seconds=self.range_seconds)
        except OverflowError as e:
            raise InvalidRangeParametersError(
                message=f"Relative range of {self.range_seconds}s reaches before the earliest supported date",
                context={"range_seconds": self.range_seconds},
                original_error=e
            ) from e
        return AbsoluteRange.create(from_, to)
