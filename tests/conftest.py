from datetime import timezone

import pytest

from caphistory.models import RawSample

# 2024-01-01 00:00:00 UTC, a Monday.
MONDAY = 1704067200
HOUR = 3600
DAY = 86400


def make_sample(ts, used=100, total=1000, data=None, metadata=0, snapshot=0):
    return RawSample(
        period_start_time=ts,
        capacity_used=used,
        data_used=used if data is None else data,
        metadata_used=metadata,
        snapshot_used=snapshot,
        total_usable=total,
    )


@pytest.fixture
def utc():
    return timezone.utc
