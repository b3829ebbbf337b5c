"""
dcdesign/economic_model.py
==========================
Data-Center Sizing Engine — Economic Formulas

Ten-year total cost of ownership, PUE, energy cost, carbon footprint and the
discounted-cash-flow metrics (payback, NPV, IRR) for a retrofit that avoids a
baseline cost 30 % above the current annual running cost.

Rules:
    - Pure functions; rates are fractions per year, horizon in whole years.
    - Division by a zero quantity raises CalculationError rather than
      returning inf / nan.
    - IRR is a fixed-budget Newton–Raphson iteration. When it fails to
      converge the last estimate is returned and ``converged`` is False.
"""

from __future__ import annotations

from dataclasses import dataclass

from dcdesign.config import (
    BASELINE_COST_MARKUP,
    DISCOUNT_RATE,
    EVALUATION_HORIZON_YEARS,
    INFLATION_RATE,
    IRR_INITIAL_GUESS,
    IRR_MAX_ITERATIONS,
    IRR_TOLERANCE,
    OFF_PEAK_HOURS_SHARE,
    PEAK_HOURS_SHARE,
)
from dcdesign.errors import CalculationError
from dcdesign.models import CostBreakdown, EconomicParams, EconomicResult, ReturnOnInvestment


@dataclass(frozen=True)
class IrrEstimate:
    """Outcome of the Newton–Raphson IRR search.

    Attributes:
        rate:       Best estimate of the internal rate of return (fraction).
        converged:  True if successive estimates moved less than the tolerance.
        iterations: Newton steps taken.
    """
    rate:       float
    converged:  bool
    iterations: int


# ---------------------------------------------------------------------------
# Running costs
# ---------------------------------------------------------------------------

def compute_annual_cost(power_cost: float, cooling_cost: float, maintenance_cost: float) -> float:
    return power_cost + cooling_cost + maintenance_cost


def compute_tco(
    initial_investment: float,
    annual_cost: float,
    inflation_rate: float = INFLATION_RATE,
    years: int = EVALUATION_HORIZON_YEARS,
) -> float:
    """Total cost of ownership with inflated running costs.

    Equation:
        TCO = I + Σ_{y=1..N} A · (1 + i)^y
    """
    tco = initial_investment
    for year in range(1, years + 1):
        tco += annual_cost * (1.0 + inflation_rate) ** year
    return tco


def compute_pue(power_cost: float, cooling_cost: float) -> float:
    """PUE approximated from the cost split between IT power and cooling.

    Equation:
        PUE = (P + C) / P

    Raises:
        CalculationError: If ``power_cost`` is zero.
    """
    if power_cost == 0:
        raise CalculationError("Power cost is zero; PUE is undefined")
    return (power_cost + cooling_cost) / power_cost


def compute_annual_energy_cost(operational_hours: float, peak_rate: float, off_peak_rate: float) -> float:
    """60 % of operating hours billed at the peak rate, 40 % off-peak."""
    peak_hours = operational_hours * PEAK_HOURS_SHARE
    off_peak_hours = operational_hours * OFF_PEAK_HOURS_SHARE
    return peak_hours * peak_rate + off_peak_hours * off_peak_rate


def compute_carbon_footprint(annual_energy_cost: float, emission_factor: float) -> float:
    return annual_energy_cost * emission_factor


# ---------------------------------------------------------------------------
# Discounted cash flow
# ---------------------------------------------------------------------------

def compute_annual_savings(annual_cost: float) -> float:
    """Savings against a baseline running cost 30 % higher than today's."""
    return annual_cost * BASELINE_COST_MARKUP - annual_cost


def compute_payback_period(initial_investment: float, annual_savings: float) -> float:
    """Simple payback [years].

    Raises:
        CalculationError: If ``annual_savings`` is zero.
    """
    if annual_savings == 0:
        raise CalculationError("Annual savings are zero; payback period is undefined")
    return initial_investment / annual_savings


def compute_npv(
    initial_investment: float,
    annual_savings: float,
    discount_rate: float = DISCOUNT_RATE,
    years: int = EVALUATION_HORIZON_YEARS,
) -> float:
    """Equation:
        NPV = −I + Σ_{y=1..N} S / (1 + r)^y

    Example:
        >>> compute_npv(100.0, 20.0, discount_rate=0.0)
        100.0
    """
    npv = -initial_investment
    for year in range(1, years + 1):
        npv += annual_savings / (1.0 + discount_rate) ** year
    return npv


def compute_irr(
    initial_investment: float,
    annual_savings: float,
    years: int = EVALUATION_HORIZON_YEARS,
    initial_guess: float = IRR_INITIAL_GUESS,
    tolerance: float = IRR_TOLERANCE,
    max_iterations: int = IRR_MAX_ITERATIONS,
) -> IrrEstimate:
    """Internal rate of return by Newton–Raphson on the level-annuity NPV.

    Iteration:
        r[k+1] = r[k] − NPV(r[k]) / NPV'(r[k])
        NPV'(r) = −Σ y · S / (1 + r)^(y+1)

    Stops when |r[k+1] − r[k]| < tolerance. The search also stops, without
    converging, when the derivative vanishes or the rate leaves the domain
    r > −1; in both cases the current estimate is returned.
    """
    rate = initial_guess
    for iteration in range(1, max_iterations + 1):
        base = 1.0 + rate
        if base <= 0:
            return IrrEstimate(rate=rate, converged=False, iterations=iteration - 1)

        npv = -initial_investment
        derivative = 0.0
        for year in range(1, years + 1):
            npv += annual_savings / base ** year
            derivative -= year * annual_savings / base ** (year + 1)

        if derivative == 0:
            return IrrEstimate(rate=rate, converged=False, iterations=iteration - 1)

        new_rate = rate - npv / derivative
        if abs(new_rate - rate) < tolerance:
            return IrrEstimate(rate=new_rate, converged=True, iterations=iteration)
        rate = new_rate

    return IrrEstimate(rate=rate, converged=False, iterations=max_iterations)


def compute_cost_breakdown(
    initial_investment: float,
    annual_energy_cost: float,
    maintenance_cost: float,
    years: int = EVALUATION_HORIZON_YEARS,
) -> CostBreakdown:
    # opex and energy are both the undiscounted energy spend over the horizon
    return CostBreakdown(
        capex=initial_investment,
        opex=annual_energy_cost * years,
        maintenance=maintenance_cost * years,
        energy=annual_energy_cost * years,
    )


# ---------------------------------------------------------------------------
# Full evaluation
# ---------------------------------------------------------------------------

def evaluate_economic(params: EconomicParams) -> EconomicResult:
    annual_cost = compute_annual_cost(params.power_cost, params.cooling_cost, params.maintenance_cost)
    annual_energy_cost = compute_annual_energy_cost(
        params.operational_hours, params.energy_rates.peak, params.energy_rates.off_peak
    )
    annual_savings = compute_annual_savings(annual_cost)

    payback = compute_payback_period(params.initial_investment, annual_savings)
    irr = compute_irr(params.initial_investment, annual_savings)

    return EconomicResult(
        total_cost_of_ownership=compute_tco(params.initial_investment, annual_cost),
        power_usage_effectiveness=compute_pue(params.power_cost, params.cooling_cost),
        annual_energy_cost=annual_energy_cost,
        carbon_footprint=compute_carbon_footprint(annual_energy_cost, params.carbon_emission_factor),
        roi=ReturnOnInvestment(
            payback_period=payback,
            npv=compute_npv(params.initial_investment, annual_savings),
            irr=irr.rate,
            irr_converged=irr.converged,
        ),
        cost_breakdown=compute_cost_breakdown(
            params.initial_investment, annual_energy_cost, params.maintenance_cost
        ),
    )
