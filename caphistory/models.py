from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, NamedTuple

from .errors import TransportError, ZeroCapacityError


SAMPLE_FIELDS = (
    "period_start_time",
    "capacity_used",
    "data_used",
    "metadata_used",
    "snapshot_used",
    "total_usable",
)

RECORD_COLUMNS = (
    "Period",
    "CapacityUsed",
    "DataUsed",
    "MetadataUsed",
    "SnapshotUsed",
    "TotalUsable",
    "PercentUsed",
)


class Granularity(Enum):
    RAW = "raw"
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class RawSample:
    period_start_time: int
    capacity_used: int
    data_used: int
    metadata_used: int
    snapshot_used: int
    total_usable: int

    @classmethod
    def from_api(cls, row: Mapping[str, Any]) -> "RawSample":
        # Byte counts arrive as decimal strings.
        try:
            values = {name: int(row[name]) for name in SAMPLE_FIELDS}
        except KeyError as exc:
            raise TransportError(f"Sample is missing field {exc.args[0]!r}: {row!r}") from exc
        except (TypeError, ValueError) as exc:
            raise TransportError(f"Sample has a non-numeric value: {row!r}") from exc
        return cls(**values)

    def percent_used(self) -> float:
        if self.total_usable == 0:
            raise ZeroCapacityError(self.period_start_time)
        return (self.capacity_used / self.total_usable) * 100.0


class PeriodKey(NamedTuple):
    """Calendar bucket identified by the local datetime it starts at."""

    granularity: Granularity
    start: datetime

    @property
    def label(self) -> str:
        if self.granularity is Granularity.HOURLY:
            return self.start.strftime("%Y-%m-%d %H:00")
        if self.granularity is Granularity.DAILY:
            return self.start.strftime("%Y-%m-%d")
        if self.granularity is Granularity.WEEKLY:
            return self.start.strftime("Week of %Y-%m-%d")
        if self.granularity is Granularity.MONTHLY:
            return self.start.strftime("%Y-%m")
        return self.start.strftime("%Y-%m-%d %H:%M")


@dataclass(frozen=True)
class PeriodRecord:
    period: str
    capacity_used: str
    data_used: str
    metadata_used: str
    snapshot_used: str
    total_usable: str
    percent_used: str

    def as_row(self) -> Dict[str, str]:
        values = (
            self.period,
            self.capacity_used,
            self.data_used,
            self.metadata_used,
            self.snapshot_used,
            self.total_usable,
            self.percent_used,
        )
        return dict(zip(RECORD_COLUMNS, values))


@dataclass(frozen=True)
class SummaryStats:
    data_points: int
    total_usable: int
    start_time: int
    start_used: int
    start_percent: str
    end_time: int
    end_used: int
    end_percent: str
    usage_change: int
