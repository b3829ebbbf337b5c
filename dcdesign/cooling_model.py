"""
dcdesign/cooling_model.py
=========================
Data-Center Sizing Engine — Cooling and Psychrometric Formulas

Rules:
    - Pure functions of their arguments.
    - Airflow and water flow use the imperial sensible-heat factors they were
      published with: kW → BTU/h (×3412.142), 1.08 BTU/h per CFM·°F,
      500 BTU/h per GPM·°F. The temperature difference is passed in as given.
    - Psychrometrics use the Magnus approximation over water, T in °C.
"""

from __future__ import annotations

import math

from dcdesign.config import (
    ABSOLUTE_HUMIDITY_FACTOR,
    COOLING_SAFETY_MARGIN,
    CP_DRY_AIR,
    CP_WATER_VAPOUR,
    HEAT_REJECTION_FACTOR,
    KELVIN_OFFSET,
    KW_TO_BTU_PER_H,
    LATENT_HEAT_VAPORISATION,
    MAGNUS_A,
    MAGNUS_B_C,
    SATURATION_A,
    SATURATION_B_C,
    SATURATION_PRESSURE_HPA,
    SENSIBLE_HEAT_AIR_FACTOR,
    WATER_DENSITY_LB_PER_GAL,
    WATER_HEAT_FACTOR,
)
from dcdesign.errors import CalculationError
from dcdesign.models import CoolingParams, CoolingResult, Psychrometrics, RedundancyAnalysis


# ---------------------------------------------------------------------------
# Capacity and flow
# ---------------------------------------------------------------------------

def compute_required_capacity(it_load_kw: float) -> float:
    """Q_req = IT · 1.2   [kW]"""
    return it_load_kw * COOLING_SAFETY_MARGIN


def compute_airflow(it_load_kw: float, supply_c: float, return_c: float) -> float:
    """Supply airflow needed to carry the IT heat across the aisle ΔT.

    Equation:
        CFM = IT · 3412.142 / (1.08 · (T_return − T_supply))

    Raises:
        CalculationError: If return and supply temperatures are equal.
    """
    delta_t = return_c - supply_c
    if delta_t == 0:
        raise CalculationError("Return and supply temperatures are equal; airflow is undefined")
    return it_load_kw * KW_TO_BTU_PER_H / (SENSIBLE_HEAT_AIR_FACTOR * delta_t)


def compute_chilled_water_flow(it_load_kw: float) -> float:
    """GPM = IT · 3412.142 / (500 · 8.34)"""
    return it_load_kw * KW_TO_BTU_PER_H / (WATER_HEAT_FACTOR * WATER_DENSITY_LB_PER_GAL)


def compute_heat_rejection(it_load_kw: float) -> float:
    return it_load_kw * HEAT_REJECTION_FACTOR


# ---------------------------------------------------------------------------
# Psychrometrics
# ---------------------------------------------------------------------------

def compute_dew_point(temperature_c: float, relative_humidity_pct: float) -> float:
    """Magnus-formula dew point [°C].

    Equations:
        α  = ln(RH/100) + 17.27·T / (237.3 + T)
        Td = 237.3·α / (17.27 − α)

    Raises:
        CalculationError: If ``relative_humidity_pct`` ≤ 0.
    """
    if relative_humidity_pct <= 0:
        raise CalculationError(
            f"Relative humidity must be positive for dew point; received {relative_humidity_pct!r}"
        )
    alpha = math.log(relative_humidity_pct / 100.0) + MAGNUS_A * temperature_c / (MAGNUS_B_C + temperature_c)
    return MAGNUS_B_C * alpha / (MAGNUS_A - alpha)


def compute_absolute_humidity(temperature_c: float, relative_humidity_pct: float) -> float:
    """Absolute humidity [g/m³].

    Equation:
        AH = 6.112 · exp(17.67·T / (T + 243.5)) · RH · 2.1674 / (273.15 + T)
    """
    saturation = SATURATION_PRESSURE_HPA * math.exp(
        SATURATION_A * temperature_c / (temperature_c + SATURATION_B_C)
    )
    return saturation * relative_humidity_pct * ABSOLUTE_HUMIDITY_FACTOR / (KELVIN_OFFSET + temperature_c)


def compute_enthalpy(temperature_c: float, absolute_humidity: float) -> float:
    """h = 1.006·T + AH · (2501 + 1.86·T)"""
    return CP_DRY_AIR * temperature_c + absolute_humidity * (
        LATENT_HEAT_VAPORISATION + CP_WATER_VAPOUR * temperature_c
    )


def compute_psychrometrics(temperature_c: float, relative_humidity_pct: float) -> Psychrometrics:
    absolute_humidity = compute_absolute_humidity(temperature_c, relative_humidity_pct)
    return Psychrometrics(
        dew_point=compute_dew_point(temperature_c, relative_humidity_pct),
        absolute_humidity=absolute_humidity,
        enthalpy=compute_enthalpy(temperature_c, absolute_humidity),
    )


# ---------------------------------------------------------------------------
# Redundancy
# ---------------------------------------------------------------------------

def analyze_redundancy(required_capacity_kw: float) -> RedundancyAnalysis:
    """Feasibility of N, N+1 and 2N with two standard units of half the load.

    Comparisons are inclusive: a unit set that exactly meets the requirement
    counts as meeting it.
    """
    unit_capacity = required_capacity_kw / 2.0
    return RedundancyAnalysis(
        n=True,
        n_plus_one=unit_capacity * 2 >= required_capacity_kw,
        two_n=unit_capacity * 3 >= required_capacity_kw * 2,
    )


# ---------------------------------------------------------------------------
# Full evaluation
# ---------------------------------------------------------------------------

def evaluate_cooling(params: CoolingParams) -> CoolingResult:
    required_capacity = compute_required_capacity(params.it_load)
    supply = params.temperature.supply
    return CoolingResult(
        required_capacity=required_capacity,
        airflow=compute_airflow(params.it_load, supply, params.temperature.return_),
        chilled_water_flow=compute_chilled_water_flow(params.it_load),
        heat_rejection=compute_heat_rejection(params.it_load),
        psychrometrics=compute_psychrometrics(supply, params.humidity.relative),
        redundancy_analysis=analyze_redundancy(required_capacity),
    )
