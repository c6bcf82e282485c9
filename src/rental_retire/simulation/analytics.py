"""Investment analytics computed after a projection finishes.

Every function here is pure and works from ``SimulationResult`` rows only; none of
it feeds back into the simulation loop.

Conventions: ``irr``, ``npv`` discount rates and ``cash_on_cash_yield`` are whole-number
percentages like the inputs; ``leverage_ratio`` and ``investment_efficiency`` are plain
ratios.
"""

from __future__ import annotations

import logging

import numpy as np
import numpy_financial as npf

from ..models import ExtendedKPIs, SimulationResult

logger = logging.getLogger(__name__)


def opening_equity(result: SimulationResult) -> float:
    """Equity already held in the starting doors."""
    p = result.parameters
    return p.starting_doors * p.avg_price * (1 - p.ltv_ratio / 100)


def total_contributed(result: SimulationResult) -> float:
    """Starting savings plus every annual contribution made during the run."""
    p = result.parameters
    return p.current_savings + p.monthly_contribution * 12 * len(result.rows)


def net_worth(result: SimulationResult) -> list[float]:
    """Portfolio equity plus liquid savings, per row."""
    return [float(r.equity + r.current_savings) for r in result.rows]


def investor_cash_flows(result: SimulationResult, include_terminal: bool = True) -> list[float]:
    """Yearly flows from the investor's point of view.

    Year 0 pays in the starting savings and opening equity. Every year pays in the
    annual contribution and receives twelve months of portfolio cash flow. With
    ``include_terminal`` the last year also receives the ending net worth.
    """
    p = result.parameters
    flows = []
    for i, row in enumerate(result.rows):
        flow = row.monthly_cash_flow * 12 - p.monthly_contribution * 12
        if i == 0:
            flow -= p.current_savings + opening_equity(result)
        flows.append(float(flow))
    if include_terminal and flows:
        flows[-1] += net_worth(result)[-1]
    return flows


def npv(flows: list[float], rate_percent: float) -> float:
    """Net present value, first flow undiscounted."""
    return float(npf.npv(rate_percent / 100, flows))


def irr(flows: list[float]) -> float | None:
    """Internal rate of return in percent.

    Returns None when the flows never change sign or no finite rate solves them.
    """
    if not any(cf > 0 for cf in flows) or not any(cf < 0 for cf in flows):
        return None
    if not all(np.isfinite(cf) for cf in flows):
        logger.warning("Non-finite investor cash flow, skipping IRR.")
        return None
    try:
        rate = npf.irr(flows)
    except ValueError as e:
        logger.debug("IRR ValueError: %s", e)
        return None
    if not np.isfinite(rate):
        return None
    return float(rate) * 100


def payback_period(flows: list[float]) -> float | None:
    """Fractional years until cumulative flows turn non-negative, None if never."""
    cumulative = 0.0
    for t, cf in enumerate(flows):
        previous = cumulative
        cumulative += cf
        if cumulative >= 0:
            if t == 0 or cf <= 0:
                return float(t)
            return t - 1 + (-previous / cf)
    return None


def cash_on_cash_yield(result: SimulationResult) -> float:
    """Final annual cash flow as a percentage of cash contributed."""
    invested = total_contributed(result)
    if invested <= 0:
        return 0.0
    return result.rows[-1].monthly_cash_flow * 12 / invested * 100


def leverage_ratio(result: SimulationResult) -> float:
    """Ending debt over ending property value."""
    final = result.rows[-1]
    value = final.equity + final.loan_balance
    return final.loan_balance / value if value > 0 else 0.0


def risk_adjusted_return(result: SimulationResult) -> float | None:
    """Mean yearly net-worth return (net of contributions) over its standard deviation."""
    contribution = result.parameters.monthly_contribution * 12
    worth = net_worth(result)
    returns = [
        (current - previous - contribution) / previous
        for previous, current in zip(worth, worth[1:])
        if previous > 0
    ]
    if len(returns) < 2:
        return None
    spread = float(np.std(returns))
    if spread == 0:
        return None
    return float(np.mean(returns)) / spread


def scalability_index(result: SimulationResult) -> float:
    """Doors added per simulated year."""
    final = result.rows[-1]
    if final.year == 0:
        return 0.0
    return (final.doors - result.parameters.starting_doors) / final.year


def investment_efficiency(result: SimulationResult) -> float:
    """Ending net worth per unit of capital put in (savings, contributions, opening equity)."""
    capital = total_contributed(result) + opening_equity(result)
    if capital <= 0:
        return 0.0
    return net_worth(result)[-1] / capital


def compute_extended_kpis(result: SimulationResult, discount_rate: float = 8.0) -> ExtendedKPIs:
    """All optional analytics for one result."""
    flows = investor_cash_flows(result)
    return ExtendedKPIs(
        irr=irr(flows),
        npv=npv(flows, discount_rate),
        discount_rate=discount_rate,
        payback_period=payback_period(investor_cash_flows(result, include_terminal=False)),
        cash_on_cash_yield=cash_on_cash_yield(result),
        leverage_ratio=leverage_ratio(result),
        risk_adjusted_return=risk_adjusted_return(result),
        scalability_index=scalability_index(result),
        investment_efficiency=investment_efficiency(result),
    )
