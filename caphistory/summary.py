import io
from datetime import tzinfo
from typing import Optional, Sequence

from .aggregate import local_time
from .models import Granularity, RawSample, SummaryStats
from .utils import format_bytes, format_percent, format_signed_bytes


def summarize(samples: Sequence[RawSample]) -> SummaryStats:
    """Overall statistics for the window.

    Samples are taken in the order the API returned them: the first element
    is the start of the window and the last element is the end. They are not
    re-sorted.
    """
    if not samples:
        raise ValueError("Cannot summarize an empty capacity history")
    first = samples[0]
    last = samples[-1]
    return SummaryStats(
        data_points=len(samples),
        total_usable=last.total_usable,
        start_time=first.period_start_time,
        start_used=first.capacity_used,
        start_percent=format_percent(first.percent_used()),
        end_time=last.period_start_time,
        end_used=last.capacity_used,
        end_percent=format_percent(last.percent_used()),
        usage_change=last.capacity_used - first.capacity_used,
    )


def _stamp(timestamp: int, tz: Optional[tzinfo]) -> str:
    return local_time(timestamp, tz).strftime("%Y-%m-%d %H:%M")


def render_summary(
    stats: SummaryStats,
    cluster: str,
    begin: int,
    end: int,
    granularity: Granularity = Granularity.RAW,
    tz: Optional[tzinfo] = None,
) -> str:
    out = io.StringIO()
    title = f"Capacity history for {cluster}"
    print(title, file=out)
    print("=" * len(title), file=out)
    print(f"Window:        {_stamp(begin, tz)} -> {_stamp(end, tz)}", file=out)
    print(f"Granularity:   {granularity.value}", file=out)
    print(f"Data points:   {stats.data_points}", file=out)
    print(f"Total usable:  {format_bytes(stats.total_usable)}", file=out)
    print(
        f"Start usage:   {format_bytes(stats.start_used)} ({stats.start_percent}) at {_stamp(stats.start_time, tz)}",
        file=out,
    )
    print(
        f"End usage:     {format_bytes(stats.end_used)} ({stats.end_percent}) at {_stamp(stats.end_time, tz)}",
        file=out,
    )
    print(f"Usage change:  {format_signed_bytes(stats.usage_change)}", file=out)
    return out.getvalue()
