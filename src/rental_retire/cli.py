"""CLI for the rental portfolio retirement calculator."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from dotenv import load_dotenv
from typing import List, Optional

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import (
    get_scenario_settings,
    get_simulation_parameters,
    load_config,
    parse_assignments,
    parse_parameters,
    parse_query_string,
    to_query_string,
)
from .exceptions import InvalidParametersError
from .models import ExtendedKPIs, SimulationParameters, SimulationResult
from .simulation import SimulationEngine, compute_extended_kpis, describe_outcome, run_scenarios
from .storage import export_csv, export_json

app = typer.Typer(
    name="rental-retire",
    help="Project how many rental doors it takes to retire on passive income",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _run_id() -> str:
    """Generate run ID from timestamp."""
    return datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")


def _money(value: float) -> str:
    return f"${value:,.0f}"


def _resolve_parameters(
    config_path: Optional[Path],
    assignments: Optional[List[str]],
    query: Optional[str],
) -> tuple[dict, SimulationParameters]:
    """Config file, then query string, then --set overrides."""
    cfg = load_config(config_path)
    params = get_simulation_parameters(cfg)
    if query:
        params = parse_query_string(query, base=params)
    if assignments:
        params = parse_parameters(parse_assignments(assignments), base=params)
    return cfg, params


def _display_kpis(result: SimulationResult, extended: ExtendedKPIs | None = None) -> None:
    kpis = result.kpis
    table = Table(title="Plan Summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row(
        "Time to target",
        f"{kpis.time_to_target} years" if kpis.time_to_target is not None else "Not reached",
    )
    table.add_row("Properties", str(kpis.final_doors))
    table.add_row("Peak cash flow", f"{_money(kpis.peak_cash_flow)}/month")
    table.add_row("Portfolio value", _money(kpis.portfolio_value))
    table.add_row("Cash invested", _money(kpis.total_cash_invested))
    table.add_row(
        "First refinance",
        f"Age {kpis.first_refi_age}" if kpis.first_refi_age is not None else "None",
    )
    if extended:
        table.add_row("IRR", f"{extended.irr:.2f}%" if extended.irr is not None else "n/a")
        table.add_row(f"NPV @ {extended.discount_rate:g}%", _money(extended.npv))
        table.add_row(
            "Payback",
            f"{extended.payback_period:.1f} years" if extended.payback_period is not None else "n/a",
        )
        table.add_row("Cash-on-cash", f"{extended.cash_on_cash_yield:.1f}%")
        table.add_row("Leverage", f"{extended.leverage_ratio:.2f}")
        table.add_row(
            "Risk-adjusted return",
            f"{extended.risk_adjusted_return:.2f}" if extended.risk_adjusted_return is not None else "n/a",
        )
        table.add_row("Doors per year", f"{extended.scalability_index:.2f}")
        table.add_row("Efficiency", f"{extended.investment_efficiency:.2f}x")
    console.print(table)


def _display_rows(result: SimulationResult, limit: Optional[int] = None) -> None:
    table = Table(title="Year-by-Year Projection")
    table.add_column("Year", style="dim")
    table.add_column("Age", style="dim")
    table.add_column("Doors", justify="right")
    table.add_column("Equity", justify="right")
    table.add_column("Loans", justify="right")
    table.add_column("Rent/mo", justify="right")
    table.add_column("NOI/mo", justify="right")
    table.add_column("DSCR", justify="right")
    table.add_column("CF/mo", justify="right")
    table.add_column("Contributed", justify="right")
    table.add_column("Target", justify="center")

    rows = result.rows[:limit] if limit else result.rows
    for r in rows:
        table.add_row(
            str(r.year),
            str(r.age),
            str(r.doors),
            _money(r.equity),
            _money(r.loan_balance),
            _money(r.monthly_rent),
            _money(r.noi),
            f"{r.dscr:.2f}",
            _money(r.monthly_cash_flow),
            _money(r.cumulative_contribution),
            "✓" if r.reached_target_income else "",
        )
    console.print(table)


def _invalid(e: InvalidParametersError) -> None:
    for problem in e.problems:
        console.print(f"[red]Invalid parameter: {problem}[/red]")
    raise typer.Exit(1)


@app.command()
def simulate(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    assignments: Optional[List[str]] = typer.Option(None, "--set", "-s", help="Override a parameter, e.g. avg_price=250000"),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Shared calculator URL or query string"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Max years to show"),
    analytics: bool = typer.Option(False, "--analytics", "-a", help="Include IRR/NPV/payback analytics"),
    export_dir: Optional[Path] = typer.Option(None, "--export", "-o", help="Write CSV and JSON to this directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log acquisitions and refinances"),
) -> None:
    """Run the projection and display the yearly table."""
    _setup_logging(verbose)
    try:
        _, params = _resolve_parameters(config_path, assignments, query)
        result = SimulationEngine(parameters=params).simulate()
    except InvalidParametersError as e:
        _invalid(e)
        return

    extended = compute_extended_kpis(result) if analytics else None
    _display_kpis(result, extended)
    _display_rows(result, limit=limit)

    if export_dir:
        run_id = _run_id()
        csv_path = export_dir / f"projection_{run_id}.csv"
        json_path = export_dir / f"projection_{run_id}.json"
        export_csv(result, csv_path)
        export_json(result, json_path, extended=extended)
        console.print(f"  CSV:  {csv_path}")
        console.print(f"  JSON: {json_path}")


@app.command()
def scenarios(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    assignments: Optional[List[str]] = typer.Option(None, "--set", "-s", help="Override a parameter, e.g. avg_price=250000"),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Shared calculator URL or query string"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Compare what-if scenarios against the current plan."""
    _setup_logging(verbose)
    try:
        cfg, params = _resolve_parameters(config_path, assignments, query)
    except InvalidParametersError as e:
        _invalid(e)
        return

    outcomes = run_scenarios(params, settings=get_scenario_settings(cfg))

    table = Table(title="What-If Scenarios")
    table.add_column("Scenario", style="cyan")
    table.add_column("Outcome")
    table.add_column("Doors", justify="right")
    table.add_column("Peak CF", justify="right")
    for o in outcomes:
        table.add_row(
            o.label,
            describe_outcome(o),
            str(o.final_doors) if o.final_doors is not None else "-",
            _money(o.peak_cash_flow) if o.peak_cash_flow is not None else "-",
        )
    console.print(table)
    for o in outcomes:
        if o.error:
            console.print(f"[yellow]{o.label}: {o.error}[/yellow]")


@app.command()
def share(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to config.yaml"),
    assignments: Optional[List[str]] = typer.Option(None, "--set", "-s", help="Override a parameter, e.g. avg_price=250000"),
    base_url: Optional[str] = typer.Option(None, "--base-url", "-u", help="Calculator page URL"),
    all_fields: bool = typer.Option(False, "--all", help="Include parameters left at their defaults"),
) -> None:
    """Print a shareable query string for the current parameters."""
    try:
        _, params = _resolve_parameters(config_path, assignments, None)
    except InvalidParametersError as e:
        _invalid(e)
        return

    qs = to_query_string(params, only_changed=not all_fields)
    if base_url:
        console.print(f"{base_url}?{qs}" if qs else base_url, soft_wrap=True)
    else:
        console.print(qs, soft_wrap=True)


if __name__ == "__main__":
    app()
