"""Unit tests for the CLI: command registration and basic behavior."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from batchsettle.cli.app import app
from batchsettle.models.assets import NULL_ADDRESS

runner = CliRunner()


@pytest.fixture
def write_plan(tmp_path):
    """Factory fixture: dump a plan dict to a JSON file and return its path."""

    def _write(plan: dict) -> str:
        path = tmp_path / "plan.json"
        path.write_text(json.dumps(plan), encoding="utf-8")
        return str(path)

    return _write


# ---------------------------------------------------------------------------
# Test: CLI help and registration
# ---------------------------------------------------------------------------


class TestCliApp:
    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        # Typer's no_args_is_help may exit with 0 or 2 depending on version
        assert result.exit_code in (0, 2)
        assert "usage" in result.output.lower()

    def test_help_flag(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("validate", "disburse", "demo"):
            assert command in result.output

    @pytest.mark.parametrize("command", ["validate", "disburse", "demo"])
    def test_command_exists(self, command):
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0


# ---------------------------------------------------------------------------
# Test: validate
# ---------------------------------------------------------------------------


class TestValidateCommand:
    def test_valid_native_plan(self, write_plan, recipients, amounts):
        path = write_plan({"recipients": recipients, "amounts": amounts})
        result = runner.invoke(app, ["validate", path])
        assert result.exit_code == 0
        assert "Plan is valid: 5 transfers, 1 distinct assets." in result.output

    def test_valid_mixed_plan(self, write_plan, recipients, amounts, tokens):
        refs = ["native", tokens[0].address, tokens[0].address, NULL_ADDRESS, tokens[1].address]
        path = write_plan({"recipients": recipients, "amounts": amounts, "asset_refs": refs})
        result = runner.invoke(app, ["validate", path])
        assert result.exit_code == 0
        assert "3 distinct assets" in result.output

    def test_zero_amount_rejected(self, write_plan, recipients, amounts):
        path = write_plan({"recipients": recipients, "amounts": [0, *amounts[1:]]})
        result = runner.invoke(app, ["validate", path])
        assert result.exit_code == 1
        assert "Invalid plan" in result.output

    def test_not_an_object(self, write_plan):
        result = runner.invoke(app, ["validate", write_plan([])])
        assert result.exit_code == 1
        assert "Invalid plan" in result.output

    @pytest.mark.parametrize("field", ["recipients", "amounts", "asset_refs"])
    def test_field_not_an_array(self, write_plan, recipients, amounts, field):
        plan = {"recipients": recipients, "amounts": amounts, field: 5}
        result = runner.invoke(app, ["validate", write_plan(plan)])
        assert result.exit_code == 1
        assert "Invalid plan" in result.output

    def test_fractional_amount(self, write_plan, recipients, amounts):
        path = write_plan({"recipients": recipients, "amounts": [10.5, *amounts[1:]]})
        result = runner.invoke(app, ["validate", path])
        assert result.exit_code == 1
        assert "Invalid plan" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["validate", str(tmp_path / "missing.json")])
        assert result.exit_code == 1
        assert "Plan file not found" in result.output


# ---------------------------------------------------------------------------
# Test: disburse
# ---------------------------------------------------------------------------


class TestDisburseCommand:
    def test_native_batch(self, write_plan, recipients, amounts):
        path = write_plan({"recipients": recipients, "amounts": amounts})
        result = runner.invoke(app, ["disburse", path])
        assert result.exit_code == 0
        assert "Journal hash chain is valid (1 entries)." in result.output

    def test_token_batch(self, write_plan, recipients, amounts, tokens):
        refs = [t.address for t in tokens]
        path = write_plan({"recipients": recipients, "amounts": amounts, "asset_refs": refs})
        result = runner.invoke(app, ["disburse", path])
        assert result.exit_code == 0

    def test_wrong_native_funds_rejected(self, write_plan, recipients, amounts):
        path = write_plan({"recipients": recipients, "amounts": amounts})
        result = runner.invoke(app, ["disburse", path, "--native-funds", "1"])
        assert result.exit_code == 1
        assert "Batch rejected" in result.output


# ---------------------------------------------------------------------------
# Test: demo and the production guard
# ---------------------------------------------------------------------------


class TestDemoCommand:
    def test_demo_runs_all_scenarios(self):
        result = runner.invoke(app, ["demo"])
        assert result.exit_code == 0
        assert "Completion rejected" in result.output
        assert "Journal hash chain is valid (5 entries)." in result.output

    def test_production_guard_blocks_commands(self, monkeypatch):
        monkeypatch.setenv("BATCHSETTLE_ENVIRONMENT", "production")
        monkeypatch.setenv("BATCHSETTLE_DEBUG", "true")
        result = runner.invoke(app, ["demo"])
        assert result.exit_code == 1
