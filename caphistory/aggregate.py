"""Bucket capacity samples into calendar periods.

Each bucket is represented by its end-of-period snapshot: the sample with
the greatest ``period_start_time`` in that bucket, not a sum or an average.
"""
from collections import defaultdict
from datetime import datetime, timedelta, tzinfo
from functools import reduce
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .models import Granularity, PeriodKey, PeriodRecord, RawSample
from .utils import format_bytes, format_percent


def local_time(timestamp: int, tz: Optional[tzinfo] = None) -> datetime:
    moment = datetime.fromtimestamp(timestamp, tz)
    # Buckets are calendar-local; drop tzinfo so keys compare as wall clock.
    return moment.replace(tzinfo=None)


def period_key(timestamp: int, granularity: Granularity, tz: Optional[tzinfo] = None) -> PeriodKey:
    moment = local_time(timestamp, tz)
    if granularity is Granularity.HOURLY:
        start = moment.replace(minute=0, second=0, microsecond=0)
    elif granularity is Granularity.DAILY:
        start = moment.replace(hour=0, minute=0, second=0, microsecond=0)
    elif granularity is Granularity.WEEKLY:
        # weekday() is 0 for Monday and 6 for Sunday, so Sunday rolls back six days.
        day = moment.replace(hour=0, minute=0, second=0, microsecond=0)
        start = day - timedelta(days=day.weekday())
    elif granularity is Granularity.MONTHLY:
        start = moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    else:
        start = moment.replace(second=0, microsecond=0)
    return PeriodKey(granularity, start)


def to_record(label: str, sample: RawSample) -> PeriodRecord:
    return PeriodRecord(
        period=label,
        capacity_used=format_bytes(sample.capacity_used),
        data_used=format_bytes(sample.data_used),
        metadata_used=format_bytes(sample.metadata_used),
        snapshot_used=format_bytes(sample.snapshot_used),
        total_usable=format_bytes(sample.total_usable),
        percent_used=format_percent(sample.percent_used()),
    )


def _later(current: RawSample, candidate: RawSample) -> RawSample:
    if candidate.period_start_time >= current.period_start_time:
        return candidate
    return current


def group_samples(
    samples: Iterable[RawSample],
    granularity: Granularity,
    tz: Optional[tzinfo] = None,
) -> Mapping[PeriodKey, Tuple[RawSample, ...]]:
    members: Dict[PeriodKey, List[RawSample]] = defaultdict(list)
    for sample in samples:
        members[period_key(sample.period_start_time, granularity, tz)].append(sample)
    return {key: tuple(bucket) for key, bucket in members.items()}


def aggregate(
    samples: Sequence[RawSample],
    granularity: Granularity,
    tz: Optional[tzinfo] = None,
) -> List[PeriodRecord]:
    if granularity is Granularity.RAW:
        raise ValueError("Raw granularity is not a calendar bucket; use raw_records()")
    groups = group_samples(samples, granularity, tz)
    return [
        to_record(key.label, reduce(_later, groups[key]))
        for key in sorted(groups, key=lambda k: k.start)
    ]


def raw_records(samples: Sequence[RawSample], tz: Optional[tzinfo] = None) -> List[PeriodRecord]:
    return [
        to_record(period_key(sample.period_start_time, Granularity.RAW, tz).label, sample)
        for sample in samples
    ]


def build_records(
    samples: Sequence[RawSample],
    granularity: Granularity = Granularity.RAW,
    tz: Optional[tzinfo] = None,
) -> List[PeriodRecord]:
    if not samples:
        return []
    if granularity is Granularity.RAW:
        return raw_records(samples, tz)
    return aggregate(samples, granularity, tz)
