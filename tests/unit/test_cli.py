"""Unit tests for the command line interface."""

from datetime import date
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from fiscaltrail.__main__ import cli, format_processing_time, format_progress
from fiscaltrail.adapters.clock import FixedClock
from fiscaltrail.domain.models import ProcessingProgress

DATA = {
    "properties": [
        {"id": 1, "alias": "Calle Mayor 1", "state": "activo"},
        {"id": 2, "alias": "Local Norte", "state": "vendido"},
    ],
    "contracts": [
        {
            "id": 10,
            "property_id": 1,
            "start_date": "2023-01-01",
            "monthly_rent": "1000",
            "payment_day": 5,
        },
    ],
    "documents": [],
}


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    data = tmp_path / "data.yaml"
    data.write_text(yaml.safe_dump(DATA))
    config = tmp_path / "config.toml"
    config.write_text(f'[store]\npath = "{data}"\n')
    return config


@pytest.fixture
def frozen_clock():
    with patch("fiscaltrail.__main__.SystemClock", return_value=FixedClock(date(2025, 6, 15))):
        yield


def run(config_path: Path, *args: str):
    return CliRunner().invoke(cli, ["-c", str(config_path), *args])


class TestFormatting:
    """Tests for output helpers."""

    @pytest.mark.parametrize(
        "ms,expected",
        [(0, "0s"), (1400, "1s"), (59_000, "59s"), (60_000, "1m 0s"), (185_000, "3m 5s")],
    )
    def test_format_processing_time(self, ms: int, expected: str) -> None:
        assert format_processing_time(ms) == expected

    def test_format_progress(self) -> None:
        progress = ProcessingProgress("Loading historical data", 1, 5, 20, "Querying...")
        assert format_progress(progress) == "[ 20%] Loading historical data (1/5) - Querying..."

    def test_format_progress_without_details(self) -> None:
        progress = ProcessingProgress("Processing A", 1, 2, 50)
        assert format_progress(progress) == "[ 50%] Processing A (1/2)"


@pytest.mark.usefixtures("frozen_clock")
class TestReconstructCommand:
    """Tests for the reconstruct command."""

    def test_single_property(self, config_path: Path, tmp_path: Path) -> None:
        result = run(config_path, "reconstruct", "--property", "1")

        assert result.exit_code == 0, result.output
        assert "contracts: 1" in result.output
        assert "documents: 0" in result.output
        assert "fiscal summaries: 11" in result.output
        assert "carryforwards: 1" in result.output
        assert "[100%] Recomputing loss carryforwards" in result.output

        saved = yaml.safe_load((tmp_path / "data.yaml").read_text())
        years = [s["exercise_year"] for s in saved["fiscal_summaries"]]
        assert years == list(range(2015, 2026))
        income = {s["exercise_year"]: s["income"] for s in saved["fiscal_summaries"]}
        assert income[2024] == "12000"
        assert income[2022] == "0"

    def test_all_active_properties(self, config_path: Path) -> None:
        result = run(config_path, "reconstruct", "--quiet")

        assert result.exit_code == 0, result.output
        assert "fiscal summaries: 11" in result.output
        assert "Processing" not in result.output

    def test_unknown_property(self, config_path: Path) -> None:
        result = run(config_path, "reconstruct", "--property", "99")
        assert result.exit_code == 1

    def test_failure_exits_nonzero(self, config_path: Path, tmp_path: Path) -> None:
        data = dict(DATA)
        data["contracts"] = [dict(DATA["contracts"][0], payment_day=40)]
        (tmp_path / "data.yaml").write_text(yaml.safe_dump(data))

        result = run(config_path, "reconstruct", "--property", "1")

        assert result.exit_code == 1
        assert "Payment day must be between 1 and 31" in result.output

    def test_unreadable_data_file(self, config_path: Path, tmp_path: Path) -> None:
        (tmp_path / "data.yaml").write_text("properties: [broken")
        result = run(config_path, "reconstruct")
        assert result.exit_code == 1
        assert "Failed to read" in result.output


@pytest.mark.usefixtures("frozen_clock")
class TestOtherCommands:
    """Tests for window, validate and stats."""

    def test_window(self, config_path: Path) -> None:
        result = run(config_path, "window")

        assert result.exit_code == 0
        assert "minimum date: 2015-06-15" in result.output
        assert "maximum date: 2026-06-15" in result.output
        assert "fiscal years: 2015-2025 (11)" in result.output

    def test_validate_all_valid(self, config_path: Path) -> None:
        result = run(config_path, "validate")
        assert result.exit_code == 0
        assert "1 valid, 0 invalid" in result.output

    def test_validate_reports_failures(self, config_path: Path, tmp_path: Path) -> None:
        data = dict(DATA)
        data["documents"] = [
            {
                "id": 1,
                "filename": "old.pdf",
                "metadata": {
                    "entity_type": "property",
                    "entity_id": 1,
                    "financial_data": {"amount": 10, "issue_date": "2010-01-01"},
                },
            }
        ]
        (tmp_path / "data.yaml").write_text(yaml.safe_dump(data))

        result = run(config_path, "validate", "--property", "1")

        assert result.exit_code == 1
        assert "✗ old.pdf" in result.output
        assert "1 valid, 1 invalid" in result.output

    def test_stats(self, config_path: Path) -> None:
        result = run(config_path, "stats", "1")

        assert result.exit_code == 0
        assert "oldest contract: 2023-01-01" in result.output
        assert "historical years: 3" in result.output
        assert "contracts 2023: 1" in result.output
        assert "fiscal summaries: -" in result.output
