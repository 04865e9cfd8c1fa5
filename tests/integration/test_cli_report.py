"""Integration test: JSON journal file -> CLI -> JSON report."""

import json

import pytest
from click.testing import CliRunner

from trade_insights.cli import main

NOW = "2024-03-15T18:00:00+00:00"


def _record(i, pnl, hour, **extra):
    record = {
        "id": f"r{i}",
        "direction": "buy" if i % 2 else "sell",
        "entry_price": 100,
        "stop_loss": 99.5,
        "take_profit": 102,
        "lot_size": 1,
        "result": "win" if pnl > 0 else "loss",
        "profit_loss": pnl,
        "setup": "breakout",
        "trade_date": f"2024-03-15T{hour:02d}:00:00+00:00",
    }
    record.update(extra)
    return record


@pytest.fixture
def journal_file(tmp_path):
    pnls = [20, 10, 5, -50, -55, -50]
    hours = [8, 10, 12, 14, 16, 17]
    path = tmp_path / "journal.json"
    path.write_text(
        json.dumps([_record(i, p, h) for i, (p, h) in enumerate(zip(pnls, hours))]),
        encoding="utf-8",
    )
    return path


def _invoke(*args):
    return CliRunner().invoke(main, list(args))


class TestReportCommand:
    def test_full_report(self, journal_file):
        result = _invoke("report", str(journal_file), "--now", NOW, "--log-level", "WARNING")
        assert result.exit_code == 0, result.output

        data = json.loads(result.stdout)
        assert data["generated_at"] == NOW
        assert data["stats"]["total_trades"] == 6
        assert data["stats"]["net_profit"] == -120
        assert data["fatigue"]["score"] == 93
        assert data["fatigue"]["should_pause"] is True
        assert data["profile"]["type"] in {"impulsive", "patient", "hesitant", "aggressive", "balanced"}

    def test_config_file_applies(self, journal_file, tmp_path):
        config = tmp_path / "insights.toml"
        config.write_text("[fatigue]\nscore_cap = 80\n", encoding="utf-8")
        result = _invoke(
            "report", str(journal_file), "--now", NOW, "--config", str(config),
            "--log-level", "WARNING",
        )
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["fatigue"]["score"] == 80

    def test_invalid_now(self, journal_file):
        result = _invoke("report", str(journal_file), "--now", "yesterday")
        assert result.exit_code == 2
        assert "ISO 8601" in result.output

    def test_missing_config(self, journal_file, tmp_path):
        result = _invoke("report", str(journal_file), "--config", str(tmp_path / "nope.toml"))
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_unknown_log_format(self, journal_file, tmp_path):
        config = tmp_path / "insights.toml"
        config.write_text('[observability]\nlog_format = "xml"\n', encoding="utf-8")
        result = _invoke("report", str(journal_file), "--config", str(config))
        assert result.exit_code == 1
        assert "Unknown log format" in result.output

    def test_not_a_list(self, tmp_path):
        path = tmp_path / "journal.json"
        path.write_text('{"id": "a"}', encoding="utf-8")
        result = _invoke("report", str(path), "--log-level", "WARNING")
        assert result.exit_code == 1
        assert "JSON array" in result.output

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "journal.json"
        path.write_text("[{", encoding="utf-8")
        result = _invoke("report", str(path), "--log-level", "WARNING")
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_invalid_trade_record(self, tmp_path):
        path = tmp_path / "journal.json"
        path.write_text(json.dumps([{"id": "a", "direction": "up"}]), encoding="utf-8")
        result = _invoke("report", str(path), "--log-level", "WARNING")
        assert result.exit_code == 1
        assert "Invalid trade record" in result.output


    def test_zero_lot_record(self, tmp_path):
        path = tmp_path / "journal.json"
        path.write_text(
            json.dumps([_record(0, 10, 9, lot_size=0), _record(1, 10, 11)]), encoding="utf-8"
        )
        result = _invoke("report", str(path), "--log-level", "WARNING")
        assert result.exit_code == 1
        assert "Invalid trade record" in result.output

    def test_bad_config_value(self, journal_file, tmp_path):
        cfg = tmp_path / "insights.toml"
        cfg.write_text("[fatigue]\nscore_cap = \"high\"\n", encoding="utf-8")
        result = _invoke("report", str(journal_file), "--config", str(cfg))
        assert result.exit_code == 1
        assert "Invalid settings" in result.output


class TestShowConfig:
    def test_prints_defaults(self):
        result = _invoke("show-config")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["streaks"]["max_trades_per_day"] == 5
        assert data["stats"]["starting_capital"] == 10_000.0
