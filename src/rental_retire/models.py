"""Data models for simulation parameters, properties and projection results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any


@dataclass(frozen=True)
class SimulationParameters:
    """Inputs for one projection run.

    Percentages are whole numbers (``6.5`` means 6.5%), currency is in whole units.
    """

    # Personal
    current_age: int = 35
    retirement_age: int = 65
    current_savings: float = 50000
    monthly_contribution: float = 2000
    target_income: float = 8000

    # Acquisition
    starting_doors: int = 1
    avg_price: float = 300000
    ltv_ratio: float = 75
    interest_rate: float = 6.5
    loan_term: int = 30
    closing_costs: float = 3

    # Operating assumptions
    vacancy_rate: float = 5
    maintenance_rate: float = 1
    management_rate: float = 8
    property_tax: float = 1.2
    insurance_cost: float = 1200
    rent_growth: float = 3
    appreciation: float = 4
    expense_inflation: float = 2.5

    # Lending policy
    dscr_target: float = 1.20
    refi_ltv_threshold: float = 75
    refi_seasoning: int = 6
    refi_rate_delta: float = 0.75

    def replace(self, **changes: Any) -> SimulationParameters:
        """Return a copy with the given fields changed."""
        return replace(self, **changes)

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Property:
    """One owned door. Mutated by the engine during a single run only."""

    id: int
    purchase_price: float
    loan_balance: float
    purchase_year: int
    monthly_rent: float
    last_refi_age: int
    refinance_count: int = 0


@dataclass(frozen=True)
class YearRow:
    """Aggregate portfolio snapshot for one simulated year (rounded for output)."""

    year: int
    age: int
    doors: int
    equity: int
    loan_balance: int
    monthly_rent: int
    noi: int
    dscr: float
    monthly_cash_flow: int
    cumulative_contribution: int
    portfolio_value: int
    current_savings: int
    reached_target_income: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "age": self.age,
            "doors": self.doors,
            "equity": self.equity,
            "loan_balance": self.loan_balance,
            "monthly_rent": self.monthly_rent,
            "noi": self.noi,
            "dscr": self.dscr,
            "monthly_cash_flow": self.monthly_cash_flow,
            "cumulative_contribution": self.cumulative_contribution,
            "portfolio_value": self.portfolio_value,
            "current_savings": self.current_savings,
            "reached_target_income": self.reached_target_income,
        }


@dataclass(frozen=True)
class KPISummary:
    """Headline figures derived once the row sequence ends."""

    time_to_target: int | None
    final_doors: int
    peak_cash_flow: int
    portfolio_value: int
    total_cash_invested: int
    first_refi_age: int | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "time_to_target": self.time_to_target,
            "final_doors": self.final_doors,
            "peak_cash_flow": self.peak_cash_flow,
            "portfolio_value": self.portfolio_value,
            "total_cash_invested": self.total_cash_invested,
            "first_refi_age": self.first_refi_age,
        }


@dataclass
class SimulationResult:
    """Full projection for one parameter set."""

    parameters: SimulationParameters
    rows: list[YearRow]
    kpis: KPISummary

    def to_dict(self) -> dict[str, Any]:
        return {
            "parameters": self.parameters.to_dict(),
            "rows": [r.to_dict() for r in self.rows],
            "kpis": self.kpis.to_dict(),
        }


@dataclass(frozen=True)
class ExtendedKPIs:
    """Optional investment analytics computed from a finished projection."""

    irr: float | None
    npv: float
    discount_rate: float
    payback_period: float | None
    cash_on_cash_yield: float
    leverage_ratio: float
    risk_adjusted_return: float | None
    scalability_index: float
    investment_efficiency: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "irr": self.irr,
            "npv": self.npv,
            "discount_rate": self.discount_rate,
            "payback_period": self.payback_period,
            "cash_on_cash_yield": self.cash_on_cash_yield,
            "leverage_ratio": self.leverage_ratio,
            "risk_adjusted_return": self.risk_adjusted_return,
            "scalability_index": self.scalability_index,
            "investment_efficiency": self.investment_efficiency,
        }


@dataclass
class ScenarioSettings:
    """What-if perturbations applied to a base parameter set."""

    contribution_delta: float = 250
    ltv_alternates: tuple[float, ...] = (70, 80)
    rate_shock: float = 1.5


@dataclass
class ScenarioOutcome:
    """Result of one what-if run. ``error`` is set when the perturbed inputs are invalid."""

    name: str
    label: str
    changes: dict[str, Any]
    time_to_target: int | None = None
    final_doors: int | None = None
    peak_cash_flow: int | None = None
    error: str | None = None
    problems: list[str] = field(default_factory=list)

    @property
    def reached(self) -> bool:
        return self.error is None and self.time_to_target is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "changes": self.changes,
            "time_to_target": self.time_to_target,
            "final_doors": self.final_doors,
            "peak_cash_flow": self.peak_cash_flow,
            "error": self.error,
        }
