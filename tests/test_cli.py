"""Tests for the command line interface."""

from pathlib import Path

from typer.testing import CliRunner

from rental_retire.cli import app

runner = CliRunner()
WIDE = {"COLUMNS": "200"}


def test_simulate(config_file: Path) -> None:
    result = runner.invoke(app, ["simulate", "-c", str(config_file)], env=WIDE)
    assert result.exit_code == 0, result.output
    assert "Plan Summary" in result.output
    assert "Year-by-Year Projection" in result.output


def test_simulate_with_analytics_and_export(config_file: Path, tmp_path: Path) -> None:
    out_dir = tmp_path / "runs"
    result = runner.invoke(
        app,
        ["simulate", "-c", str(config_file), "-s", "target_income=0", "-a", "-o", str(out_dir)],
        env=WIDE,
    )
    assert result.exit_code == 0, result.output
    assert "IRR" in result.output
    assert len(list(out_dir.glob("projection_*.csv"))) == 1
    assert len(list(out_dir.glob("projection_*.json"))) == 1


def test_simulate_invalid_parameter(config_file: Path) -> None:
    result = runner.invoke(app, ["simulate", "-c", str(config_file), "-s", "avg_price=-5"], env=WIDE)
    assert result.exit_code == 1
    assert "avg_price must be > 0" in result.output


def test_simulate_from_query(config_file: Path) -> None:
    result = runner.invoke(
        app,
        ["simulate", "-c", str(config_file), "-q", "?retirement-age=41&current-age=40"],
        env=WIDE,
    )
    assert result.exit_code == 0, result.output


def test_scenarios(config_file: Path) -> None:
    result = runner.invoke(app, ["scenarios", "-c", str(config_file)], env=WIDE)
    assert result.exit_code == 0, result.output
    assert "What-If Scenarios" in result.output
    assert "65% LTV" in result.output


def test_share(config_file: Path) -> None:
    result = runner.invoke(
        app,
        ["share", "-c", str(config_file), "-s", "ltv_ratio=80", "-u", "https://example.com/calc"],
        env=WIDE,
    )
    assert result.exit_code == 0, result.output
    assert "https://example.com/calc?" in result.output
    assert "ltv-ratio=80" in result.output
    assert "avg-price=250000" in result.output
