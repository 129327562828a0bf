import csv
import io
import json
from pathlib import Path
from typing import List, Optional, Sequence

from .models import RECORD_COLUMNS, PeriodRecord


def format_table(records: Sequence[PeriodRecord], max_rows: Optional[int] = None) -> str:
    output = io.StringIO()
    headers = list(RECORD_COLUMNS)
    rows = [list(record.as_row().values()) for record in records]

    if max_rows is not None and len(rows) > max_rows:
        shown = rows[:max_rows]
        omitted = len(rows) - max_rows
    else:
        shown = rows
        omitted = 0

    widths = [len(h) for h in headers]
    for row in shown:
        for i, v in enumerate(row):
            widths[i] = max(widths[i], len(v))

    def fmt(r: List[str]) -> str:
        return " ".join(str(r[i]).ljust(widths[i]) for i in range(len(headers))).rstrip()

    print(fmt(headers), file=output)
    print(" ".join("-" * w for w in widths), file=output)
    for row in shown:
        print(fmt(row), file=output)

    if omitted:
        print(f"... ({omitted} more rows omitted) ...", file=output)

    return output.getvalue()


def records_to_json(records: Sequence[PeriodRecord]) -> str:
    return json.dumps([record.as_row() for record in records], indent=2)


def write_csv(records: Sequence[PeriodRecord], output_path: Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="", encoding="utf-8") as handle:
        writer = csv.DictWriter(handle, fieldnames=list(RECORD_COLUMNS))
        writer.writeheader()
        for record in records:
            writer.writerow(record.as_row())
    return output_path
