"""What-if comparisons: independent reruns with one input perturbed."""

from __future__ import annotations

import logging
from typing import Any

from ..exceptions import InvalidParametersError
from ..models import ScenarioOutcome, ScenarioSettings, SimulationParameters
from .engine import SimulationEngine

logger = logging.getLogger(__name__)


def _fmt(value: float) -> str:
    return f"{value:g}"


def build_scenarios(
    base: SimulationParameters,
    settings: ScenarioSettings | None = None,
) -> list[tuple[str, str, dict[str, Any]]]:
    """List (name, label, changes) for every what-if run, base case first."""
    s = settings or ScenarioSettings()
    delta = s.contribution_delta
    scenarios: list[tuple[str, str, dict[str, Any]]] = [
        ("base", "Current plan", {}),
        (
            "lower_contribution",
            f"Contribute ${_fmt(delta)}/mo less",
            {"monthly_contribution": base.monthly_contribution - delta},
        ),
        (
            "higher_contribution",
            f"Contribute ${_fmt(delta)}/mo more",
            {"monthly_contribution": base.monthly_contribution + delta},
        ),
    ]
    for ltv in s.ltv_alternates:
        scenarios.append((f"ltv_{_fmt(ltv)}", f"{_fmt(ltv)}% LTV", {"ltv_ratio": ltv}))
    scenarios.append(
        (
            "rate_shock",
            f"Rates +{_fmt(s.rate_shock)} pts",
            {"interest_rate": base.interest_rate + s.rate_shock},
        )
    )
    return scenarios


def run_scenarios(
    base: SimulationParameters,
    settings: ScenarioSettings | None = None,
    engine: SimulationEngine | None = None,
) -> list[ScenarioOutcome]:
    """Run every scenario as its own full simulation.

    An invalid perturbation (e.g. contribution pushed below zero) is reported on
    its outcome instead of aborting the batch.
    """
    engine = engine or SimulationEngine(parameters=base)
    outcomes: list[ScenarioOutcome] = []
    for name, label, changes in build_scenarios(base, settings):
        outcome = ScenarioOutcome(name=name, label=label, changes=changes)
        try:
            result = engine.simulate(base.replace(**changes))
        except InvalidParametersError as e:
            logger.warning("Scenario %s skipped: %s", name, e)
            outcome.error = str(e)
            outcome.problems = e.problems
        else:
            outcome.time_to_target = result.kpis.time_to_target
            outcome.final_doors = result.kpis.final_doors
            outcome.peak_cash_flow = result.kpis.peak_cash_flow
        outcomes.append(outcome)
    return outcomes


def describe_outcome(outcome: ScenarioOutcome) -> str:
    """Short human-readable verdict for one scenario."""
    if outcome.error:
        return "Invalid inputs"
    if outcome.time_to_target is None:
        return "Target not reached"
    return f"Target in {outcome.time_to_target} years"
