"""Retirement simulation engine."""

from .amortization import annual_debt_service, monthly_payment, remaining_balance
from .analytics import compute_extended_kpis, investor_cash_flows, irr, npv, payback_period
from .engine import MAX_YEARS, SimulationEngine, simulate_plan
from .scenarios import build_scenarios, describe_outcome, run_scenarios

__all__ = [
    "SimulationEngine",
    "simulate_plan",
    "MAX_YEARS",
    "monthly_payment",
    "remaining_balance",
    "annual_debt_service",
    "run_scenarios",
    "build_scenarios",
    "describe_outcome",
    "compute_extended_kpis",
    "investor_cash_flows",
    "irr",
    "npv",
    "payback_period",
]
