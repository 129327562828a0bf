"""End-to-end tests for the caphistory command line."""
import json
import logging
import sys
from datetime import datetime
from functools import partial

import httpx
import pytest

from caphistory import cli
from caphistory.client import ClusterClient
from caphistory.config import Settings


def local_ts(*args):
    return int(datetime(*args).timestamp())


def row(ts, used, total=1000):
    return {
        "period_start_time": ts,
        "capacity_used": str(used),
        "data_used": str(used),
        "metadata_used": "0",
        "snapshot_used": "0",
        "total_usable": str(total),
    }


ROWS = [
    row(local_ts(2024, 1, 2, 9), 100),
    row(local_ts(2024, 1, 2, 18), 120),
    row(local_ts(2024, 1, 3, 9), 150),
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("CAPHISTORY_PORT", "CAPHISTORY_TIMEOUT", "CAPHISTORY_DEBUG", "CAPHISTORY_VERIFY_TLS", "CAPHISTORY_HTTP_LOG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def restore_log_level():
    logger = logging.getLogger("caphistory")
    level = logger.level
    yield
    logger.setLevel(level)


@pytest.fixture
def fake_cluster(monkeypatch):
    state = {"requests": [], "response": httpx.Response(200, json=ROWS)}

    def handler(request):
        state["requests"].append(request)
        return state["response"]

    monkeypatch.setattr(cli, "ClusterClient", partial(ClusterClient, transport=httpx.MockTransport(handler)))
    return state


BASE_ARGS = ["--cluster", "nas01", "--token", "abc", "--start", "2024-01-01", "--end", "2024-01-31"]


class TestConfigurationErrors:
    def test_both_token_sources(self, fake_cluster, capsys, tmp_path):
        code = cli.main(BASE_ARGS + ["--token-file", str(tmp_path / "t")])
        assert code == 2
        assert "not both" in capsys.readouterr().err
        assert fake_cluster["requests"] == []

    def test_no_token_source(self, fake_cluster, capsys):
        code = cli.main(["--cluster", "nas01", "--start", "2024-01-01", "--end", "2024-01-31"])
        assert code == 2
        assert "Missing credentials" in capsys.readouterr().err

    def test_missing_token_file(self, fake_cluster, capsys, tmp_path):
        args = ["--cluster", "nas01", "--token-file", str(tmp_path / "missing"), "--start", "2024-01-01", "--end", "2024-01-31"]
        assert cli.main(args) == 2
        assert "Token file not found" in capsys.readouterr().err
        assert fake_cluster["requests"] == []

    def test_multiple_granularities(self, fake_cluster, capsys):
        assert cli.main(BASE_ARGS + ["--daily", "--weekly"]) == 2
        err = capsys.readouterr().err
        assert "--daily, --weekly" in err
        assert fake_cluster["requests"] == []

    def test_bad_date(self, fake_cluster, capsys):
        args = ["--cluster", "nas01", "--token", "abc", "--start", "01/02/2024", "--end", "2024-01-31"]
        assert cli.main(args) == 2
        assert "Invalid date" in capsys.readouterr().err

    def test_end_before_start(self, fake_cluster, capsys):
        args = ["--cluster", "nas01", "--token", "abc", "--start", "2024-02-01", "--end", "2024-01-01"]
        assert cli.main(args) == 2
        assert "before start" in capsys.readouterr().err


class TestRun:
    def test_raw_output(self, fake_cluster, capsys):
        assert cli.main(BASE_ARGS) == 0
        out = capsys.readouterr().out
        assert "Capacity history for nas01" in out
        assert "Data points:   3" in out
        assert "Usage change:  +50 B" in out
        assert "2024-01-02 09:00" in out
        assert "2024-01-02 18:00" in out
        request = fake_cluster["requests"][0]
        assert request.url.params["begin-time"] == str(local_ts(2024, 1, 1))
        assert request.url.params["end-time"] == str(local_ts(2024, 1, 31))
        assert request.headers["Authorization"] == "Bearer abc"

    def test_daily_json(self, fake_cluster, capsys):
        assert cli.main(BASE_ARGS + ["--daily", "--json"]) == 0
        captured = capsys.readouterr()
        rows = json.loads(captured.out)
        assert [(r["Period"], r["CapacityUsed"], r["PercentUsed"]) for r in rows] == [
            ("2024-01-02", "120 B", "12.00%"),
            ("2024-01-03", "150 B", "15.00%"),
        ]
        assert "Capacity history for nas01" in captured.err

    def test_csv_export(self, fake_cluster, tmp_path, capsys):
        path = tmp_path / "history.csv"
        assert cli.main(BASE_ARGS + ["--monthly", "--csv", str(path)]) == 0
        lines = path.read_text(encoding="utf-8").splitlines()
        assert lines[0] == "Period,CapacityUsed,DataUsed,MetadataUsed,SnapshotUsed,TotalUsable,PercentUsed"
        assert lines[1] == "2024-01,150 B,150 B,0 B,0 B,1000 B,15.00%"

    def test_token_file_and_port(self, fake_cluster, tmp_path):
        token_path = tmp_path / "token"
        token_path.write_text("from-file\n", encoding="utf-8")
        args = ["--cluster", "nas01", "--token-file", str(token_path), "--port", "8443",
                "--start", "2024-01-01", "--end", "2024-01-31"]
        assert cli.main(args) == 0
        request = fake_cluster["requests"][0]
        assert request.headers["Authorization"] == "Bearer from-file"
        assert request.url.port == 8443

    def test_empty_result(self, fake_cluster, capsys):
        fake_cluster["response"] = httpx.Response(200, json=[])
        assert cli.main(BASE_ARGS) == 0
        out = capsys.readouterr().out
        assert "No capacity data found for nas01" in out
        assert "Capacity history" not in out

    def test_empty_result_json(self, fake_cluster, capsys):
        fake_cluster["response"] = httpx.Response(200, json=[])
        assert cli.main(BASE_ARGS + ["--json"]) == 0
        captured = capsys.readouterr()
        assert json.loads(captured.out) == []
        assert "No capacity data found for nas01" in captured.err

    def test_malformed_row_prints_body(self, fake_cluster, capsys):
        fake_cluster["response"] = httpx.Response(200, text='[{"period_start_time": 1}]')
        assert cli.main(BASE_ARGS) == 1
        err = capsys.readouterr().err
        assert "capacity_used" in err
        assert '[{"period_start_time": 1}]' in err

    def test_transport_error_prints_body(self, fake_cluster, capsys):
        fake_cluster["response"] = httpx.Response(403, text="permission denied: ANALYTICS_READ")
        assert cli.main(BASE_ARGS) == 1
        err = capsys.readouterr().err
        assert "Failed to retrieve capacity history" in err
        assert "permission denied: ANALYTICS_READ" in err

    def test_zero_capacity(self, fake_cluster, capsys):
        fake_cluster["response"] = httpx.Response(200, json=[row(local_ts(2024, 1, 2), 10, total=0)])
        assert cli.main(BASE_ARGS) == 1
        assert "total_usable=0" in capsys.readouterr().err


def test_run_returns_records(fake_cluster, capsys):
    client = cli.ClusterClient("nas01", "abc")
    records = cli.run(client, 0, 1, cli.Granularity.WEEKLY, "nas01", out=sys.stdout)
    assert len(records) == 1
    assert records[0].period.startswith("Week of ")
    assert records[0].capacity_used == "150 B"


class TestLogging:
    def test_debug_logs_request_line(self, fake_cluster, caplog):
        assert cli.main(BASE_ARGS + ["--debug"]) == 0
        messages = [r.getMessage() for r in caplog.records if r.name == "caphistory.client"]
        assert any(m.startswith("HTTP GET https://nas01:8000/v1/analytics/capacity-history/") for m in messages)
        assert all("Bearer abc" not in m for m in messages)

    def test_debug_from_env(self, fake_cluster, caplog, monkeypatch):
        monkeypatch.setenv("CAPHISTORY_DEBUG", "1")
        assert cli.main(BASE_ARGS) == 0
        assert any(r.levelno == logging.DEBUG and r.getMessage().startswith("HTTP GET") for r in caplog.records)

    def test_no_debug_lines_by_default(self, fake_cluster, caplog):
        assert cli.main(BASE_ARGS) == 0
        assert not any(r.getMessage().startswith("HTTP GET") for r in caplog.records)

    def test_client_logs_through_single_handler(self, fake_cluster, caplog):
        assert cli.main(BASE_ARGS) == 0
        warnings = [r for r in caplog.records if "verification disabled" in r.getMessage()]
        assert len(warnings) == 1
        assert logging.getLogger("caphistory.client").handlers == []
        assert len(logging.getLogger("caphistory").handlers) == 1


class TestVerifyTls:
    def test_env_default_can_be_disabled(self):
        parser = cli.build_parser(Settings(verify_tls=True))
        args = parser.parse_args(BASE_ARGS + ["--no-verify-tls"])
        assert args.verify_tls is False

    def test_env_default_applies(self):
        args = cli.build_parser(Settings(verify_tls=True)).parse_args(BASE_ARGS)
        assert args.verify_tls is True

    def test_flag_enables(self):
        args = cli.build_parser(Settings()).parse_args(BASE_ARGS + ["--verify-tls"])
        assert args.verify_tls is True
