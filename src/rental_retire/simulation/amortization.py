"""Fixed-rate mortgage amortization."""

from __future__ import annotations

from ..exceptions import InvalidParametersError


def _monthly_terms(annual_rate_percent: float, years: float) -> tuple[float, float]:
    n = years * 12
    if n == 0:
        raise InvalidParametersError("loan term must be greater than zero")
    return annual_rate_percent / 100 / 12, n


def monthly_payment(principal: float, annual_rate_percent: float, years: float) -> float:
    """Monthly principal + interest payment.

    A zero rate pays the principal down in equal installments.
    """
    r, n = _monthly_terms(annual_rate_percent, years)
    if r == 0:
        return principal / n
    return principal * (r * (1 + r) ** n) / ((1 + r) ** n - 1)


def remaining_balance(
    principal: float,
    annual_rate_percent: float,
    years: float,
    payments_made: float,
) -> float:
    """Balance left after ``payments_made`` monthly payments.

    Not clamped: past the end of the term the result goes negative and callers
    clamp it to zero.
    """
    r, n = _monthly_terms(annual_rate_percent, years)
    if r == 0:
        return principal - (principal / n * payments_made)
    return principal * ((1 + r) ** n - (1 + r) ** payments_made) / ((1 + r) ** n - 1)


def annual_debt_service(principal: float, annual_rate_percent: float, years: float) -> float:
    """Twelve monthly payments."""
    return monthly_payment(principal, annual_rate_percent, years) * 12
