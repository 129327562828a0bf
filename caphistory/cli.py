import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, TextIO

from .aggregate import build_records
from .api import get_capacity_history
from .client import ClusterClient
from .config import Settings
from .credentials import resolve_token
from .errors import ConfigurationError, TransportError, ZeroCapacityError
from .models import Granularity, PeriodRecord
from .report import format_table, records_to_json, write_csv
from .summary import render_summary, summarize
from .utils import RED, YELLOW, colorize, get_logger

DATE_FORMATS = ("%Y-%m-%d", "%Y-%m-%d %H:%M", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M:%S", "%Y-%m-%dT%H:%M:%S")

GRANULARITY_FLAGS = (
    ("hourly", Granularity.HOURLY),
    ("daily", Granularity.DAILY),
    ("weekly", Granularity.WEEKLY),
    ("monthly", Granularity.MONTHLY),
)


def build_parser(settings: Optional[Settings] = None) -> argparse.ArgumentParser:
    settings = settings or Settings()
    p = argparse.ArgumentParser(prog='caphistory', description='Summarize cluster capacity history.')
    p.add_argument('--cluster', required=True, help='cluster hostname or address')
    p.add_argument('--port', type=int, default=settings.port)
    p.add_argument('--token', help='bearer token value')
    p.add_argument('--token-file', help='file containing the bearer token')
    p.add_argument('--start', required=True, help='YYYY-MM-DD or "YYYY-MM-DD HH:MM" (local time)')
    p.add_argument('--end', required=True, help='YYYY-MM-DD or "YYYY-MM-DD HH:MM" (local time)')
    for flag, unit in (('hourly', 'hour'), ('daily', 'day'), ('weekly', 'week'), ('monthly', 'month')):
        p.add_argument(f'--{flag}', action='store_true', help=f'one row per {unit} (last sample in the {unit})')
    p.add_argument('--json', action='store_true', help='print records as JSON instead of a table')
    p.add_argument('--csv', help='also write records to this CSV file')
    p.add_argument('--verify-tls', action=argparse.BooleanOptionalAction, default=settings.verify_tls,
                   help='verify the cluster certificate (off by default: clusters use self-signed certs)')
    p.add_argument('--timeout', type=float, default=settings.timeout)
    p.add_argument('--debug', action='store_true', default=settings.debug)
    return p


def parse_date(value: str) -> int:
    for fmt in DATE_FORMATS:
        try:
            return int(datetime.strptime(value, fmt).timestamp())
        except ValueError:
            continue
    raise ConfigurationError(f"Invalid date {value!r}: expected YYYY-MM-DD or 'YYYY-MM-DD HH:MM'")


def selected_granularity(args: argparse.Namespace) -> Granularity:
    chosen = [granularity for flag, granularity in GRANULARITY_FLAGS if getattr(args, flag)]
    if len(chosen) > 1:
        names = ", ".join(f"--{g.value}" for g in chosen)
        raise ConfigurationError(f"Choose only one granularity switch (got {names})")
    return chosen[0] if chosen else Granularity.RAW


def run(
    client: ClusterClient,
    begin: int,
    end: int,
    granularity: Granularity,
    cluster: str,
    out: TextIO,
) -> List[PeriodRecord]:
    """Fetch the window, print its summary to ``out`` and return the period records."""
    samples = get_capacity_history(client, begin, end)
    if not samples:
        return []
    stats = summarize(samples)
    records = build_records(samples, granularity)
    print(render_summary(stats, cluster, begin, end, granularity), file=out)
    return records


def _error(message: str, stream: TextIO) -> None:
    print(colorize(message, RED, stream.isatty()), file=stream)


def main(argv: Optional[Sequence[str]] = None) -> int:
    settings = Settings.from_env()
    parser = build_parser(settings)
    args = parser.parse_args(argv)

    logger = get_logger('caphistory')
    if args.debug:
        logger.setLevel(logging.DEBUG)

    try:
        token = resolve_token(args.token, args.token_file)
        granularity = selected_granularity(args)
        begin = parse_date(args.start)
        end = parse_date(args.end)
        if end < begin:
            raise ConfigurationError(f"End date {args.end} is before start date {args.start}")
    except ConfigurationError as exc:
        _error(str(exc), sys.stderr)
        return 2

    summary_stream = sys.stderr if args.json else sys.stdout
    client = ClusterClient(
        args.cluster,
        token,
        port=args.port,
        timeout=args.timeout,
        verify=args.verify_tls,
        http_log_path=settings.http_log_path,
    )
    try:
        records = run(client, begin, end, granularity, args.cluster, summary_stream)
    except TransportError as exc:
        _error(f"Failed to retrieve capacity history: {exc}", sys.stderr)
        if exc.body:
            print(exc.body, file=sys.stderr)
        return 1
    except ZeroCapacityError as exc:
        _error(f"Cannot compute percent used: {exc}", sys.stderr)
        return 1
    finally:
        client.close()

    if not records:
        notice = f"No capacity data found for {args.cluster} between {args.start} and {args.end}"
        print(colorize(notice, YELLOW, summary_stream.isatty()), file=summary_stream)
        if args.json:
            print(records_to_json(records))
        return 0

    if args.json:
        print(records_to_json(records))
    else:
        print(format_table(records), end='')

    if args.csv:
        path = write_csv(records, Path(args.csv))
        logger.info('Wrote %d records to %s', len(records), path)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
