"""Year-by-year rental portfolio projection."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

from ..config import MAX_DOORS, get_simulation_parameters, validate_parameters
from ..models import KPISummary, Property, SimulationParameters, SimulationResult, YearRow
from .amortization import annual_debt_service, remaining_balance

logger = logging.getLogger(__name__)

MAX_YEARS = 50
# Modeled gross rent as a share of purchase price (the "1% rule", slightly optimistic).
RENT_TO_PRICE = 0.012


def round_half_up(value: float) -> int:
    """Round to the nearest whole unit, halves toward +inf (browser Math.round)."""
    return int(math.floor(value + 0.5))


def _round_ratio(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


@dataclass
class _YearTotals:
    monthly_rent: float = 0.0
    noi: float = 0.0
    loan_balance: float = 0.0
    equity: float = 0.0
    dscr: float = 0.0


class SimulationEngine:
    """
    Projects a rental portfolio until the passive-income target or retirement age.
    Stateless between runs: every call to ``simulate`` builds a fresh portfolio.
    """

    def __init__(
        self,
        parameters: SimulationParameters | None = None,
        config: dict | None = None,
    ) -> None:
        if parameters is None:
            parameters = get_simulation_parameters(config) if config else SimulationParameters()
        self.parameters = parameters

    def simulate(
        self,
        params: SimulationParameters | None = None,
        **overrides: Any,
    ) -> SimulationResult:
        """Run one projection. Raises InvalidParametersError before any work on bad input."""
        p = params or self.parameters
        if overrides:
            p = p.replace(**overrides)
        p = validate_parameters(p)

        savings = float(p.current_savings)
        properties = self._seed_portfolio(p)
        rows: list[YearRow] = []

        for year in range(MAX_YEARS + 1):
            age = p.current_age + year

            totals = self._aggregate(p, properties, year)
            # NOI is reported as cash flow; debt service is not deducted.
            monthly_cash_flow = totals.noi

            savings += p.monthly_contribution * 12
            savings = self._try_acquire(p, properties, year, age, savings)
            savings = self._refinance(p, properties, year, age, savings)

            reached = monthly_cash_flow >= p.target_income
            rows.append(
                YearRow(
                    year=year,
                    age=age,
                    doors=len(properties),
                    equity=round_half_up(totals.equity),
                    loan_balance=round_half_up(totals.loan_balance),
                    monthly_rent=round_half_up(totals.monthly_rent),
                    noi=round_half_up(totals.noi),
                    dscr=_round_ratio(totals.dscr),
                    monthly_cash_flow=round_half_up(monthly_cash_flow),
                    cumulative_contribution=round_half_up(
                        p.monthly_contribution * 12 * year + (p.current_savings - savings)
                    ),
                    # Rough estimate: equity plus every door at cost, appreciated over half the elapsed years
                    portfolio_value=round_half_up(
                        totals.equity
                        + len(properties) * p.avg_price * (1 + p.appreciation / 100) ** (year / 2)
                    ),
                    current_savings=round_half_up(savings),
                    reached_target_income=reached,
                )
            )

            if age >= p.retirement_age or (year > 0 and reached):
                break

        kpis = self._summarize(p, rows, properties)
        logger.info(
            "Simulated %d years: %d doors, target %s",
            len(rows),
            kpis.final_doors,
            "not reached" if kpis.time_to_target is None else f"reached in year {kpis.time_to_target}",
        )
        return SimulationResult(parameters=p, rows=rows, kpis=kpis)

    def _seed_portfolio(self, p: SimulationParameters) -> list[Property]:
        """One property per starting door, bought at the average price."""
        loan = p.avg_price * (p.ltv_ratio / 100)
        return [
            Property(
                id=i + 1,
                purchase_price=p.avg_price,
                loan_balance=loan,
                purchase_year=0,
                monthly_rent=round_half_up(p.avg_price * RENT_TO_PRICE),
                last_refi_age=p.current_age,
            )
            for i in range(p.starting_doors)
        ]

    def _aggregate(self, p: SimulationParameters, properties: list[Property], year: int) -> _YearTotals:
        """Roll every owned property forward to ``year`` and sum the portfolio."""
        totals = _YearTotals()
        count = len(properties)

        for prop in properties:
            years_held = year - prop.purchase_year
            rent = prop.monthly_rent * (1 + p.rent_growth / 100) ** years_held
            value = prop.purchase_price * (1 + p.appreciation / 100) ** years_held

            expenses = (
                rent * (p.vacancy_rate / 100)
                + rent * (p.maintenance_rate / 100)
                + rent * (p.management_rate / 100)
                + value * (p.property_tax / 100) / 12
                + p.insurance_cost / 12
            )
            noi = rent - expenses

            # loan_balance is the principal of the current loan, amortized from
            # the last refinance (or acquisition).
            payments_made = (year - self._refi_year(p, prop)) * 12
            if payments_made > 0:
                balance = remaining_balance(prop.loan_balance, p.interest_rate, p.loan_term, payments_made)
            else:
                balance = prop.loan_balance
            balance = max(0.0, balance)

            debt_service = annual_debt_service(prop.loan_balance, p.interest_rate, p.loan_term)
            dscr = noi * 12 / debt_service if debt_service > 0 else 0.0

            totals.monthly_rent += rent
            totals.noi += noi
            totals.loan_balance += balance
            totals.equity += value - balance
            # Incremental mean weighted by the full portfolio size; order dependent.
            totals.dscr = (totals.dscr * (count - 1) + dscr) / count

        return totals

    def _try_acquire(
        self,
        p: SimulationParameters,
        properties: list[Property],
        year: int,
        age: int,
        savings: float,
    ) -> float:
        """Buy at most one average-price door this year. Returns remaining savings."""
        down_payment = p.avg_price * (p.ltv_ratio / 100)
        closing = p.avg_price * (p.closing_costs / 100)
        cost = down_payment + closing

        rent = round_half_up(p.avg_price * RENT_TO_PRICE)
        expenses = (
            rent * (p.vacancy_rate + p.maintenance_rate + p.management_rate) / 100
            + (p.avg_price * p.property_tax / 100) / 12
            + p.insurance_cost / 12
        )
        noi = rent - expenses
        debt_service = annual_debt_service(down_payment, p.interest_rate, p.loan_term)
        dscr = noi * 12 / debt_service if debt_service > 0 else 0.0

        if savings >= cost and dscr >= p.dscr_target and len(properties) < MAX_DOORS:
            properties.append(
                Property(
                    id=len(properties) + 1,
                    purchase_price=p.avg_price,
                    loan_balance=down_payment,
                    purchase_year=year,
                    monthly_rent=rent,
                    last_refi_age=age,
                )
            )
            logger.debug("Year %d (age %d): acquired door #%d, DSCR %.2f", year, age, len(properties), dscr)
            return savings - cost
        return savings

    def _refinance(
        self,
        p: SimulationParameters,
        properties: list[Property],
        year: int,
        age: int,
        savings: float,
    ) -> float:
        """Cash-out refinance every seasoned property below the LTV threshold."""
        for prop in properties:
            months_seasoned = (year - self._refi_year(p, prop)) * 12
            if months_seasoned < p.refi_seasoning:
                continue

            value = prop.purchase_price * (1 + p.appreciation / 100) ** (year - prop.purchase_year)
            current_ltv = prop.loan_balance / value * 100
            if current_ltv > p.refi_ltv_threshold:
                continue

            new_loan = value * (p.ltv_ratio / 100)
            cash_out = new_loan - prop.loan_balance - value * (p.closing_costs / 100)
            if cash_out > 0:
                savings += cash_out
                prop.loan_balance = new_loan
                prop.last_refi_age = age
                prop.refinance_count += 1
                logger.debug("Year %d (age %d): refinanced door #%d, cash out %.0f", year, age, prop.id, cash_out)
        return savings

    @staticmethod
    def _refi_year(p: SimulationParameters, prop: Property) -> int:
        """Simulation year of the last refinance, or of acquisition."""
        return prop.last_refi_age - p.current_age

    def _summarize(
        self,
        p: SimulationParameters,
        rows: list[YearRow],
        properties: list[Property],
    ) -> KPISummary:
        final = rows[-1]
        time_to_target = next((r.year for r in rows if r.reached_target_income), None)
        # Each door contributes its most recent refinance, not its first.
        refi_ages = [
            prop.last_refi_age
            for prop in properties
            if prop.refinance_count > 0 and prop.last_refi_age > p.current_age
        ]
        return KPISummary(
            time_to_target=time_to_target,
            final_doors=final.doors,
            peak_cash_flow=max(r.monthly_cash_flow for r in rows),
            portfolio_value=final.portfolio_value,
            total_cash_invested=round_half_up(
                p.monthly_contribution * 12 * final.year + (p.current_savings - final.current_savings)
            ),
            first_refi_age=min(refi_ages) if refi_ages else None,
        )


def simulate_plan(params: SimulationParameters | None = None, **overrides: Any) -> SimulationResult:
    """Run one projection with a throwaway engine."""
    return SimulationEngine().simulate(params, **overrides)
