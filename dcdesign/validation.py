"""
dcdesign/validation.py
======================
Data-Center Sizing Engine — Input Validation

One validator per calculation domain. Each returns a
:class:`ValidationResult`; nothing is raised and nothing is mutated.

    errors   — hard constraint violations; the calculator refuses to run.
    warnings — out-of-guideline values; reported to the user, never blocking.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from dcdesign.config import (
    COOLING_CONNECTIONS,
    HEAT_DENSITY_HIGH_KW,
    HIGH_CURRENT_WARNING_A,
    HOURS_PER_YEAR,
    LONG_CABLE_RUN_WARNING_M,
    LOW_POWER_FACTOR_WARNING,
    NETWORK_CONNECTIONS,
    POWER_CONNECTIONS,
    RECOMMENDED_HUMIDITY_MAX_PCT,
    RECOMMENDED_HUMIDITY_MIN_PCT,
    RECOMMENDED_TEMPERATURE_MAX_C,
    RECOMMENDED_TEMPERATURE_MIN_C,
    STANDARD_VOLTAGES,
)
from dcdesign.models import ConnectionParams, CoolingParams, EconomicParams, PowerParams


@dataclass
class ValidationResult:
    errors:   list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def _check_finite(result: ValidationResult, *fields: tuple[str, float]) -> None:
    # NaN fails every ordered comparison
    for label, value in fields:
        if not math.isfinite(value):
            result.errors.append(f"{label} must be a finite number")


# ---------------------------------------------------------------------------
# Power
# ---------------------------------------------------------------------------

def validate_power(params: PowerParams) -> ValidationResult:
    """Check electrical feeder parameters.

    Errors:
        voltage ≤ 0, current ≤ 0, power factor outside (0, 1], distance < 0,
        any NaN or infinite value.

    Warnings:
        non-standard voltage, current above 1000 A, power factor below 0.8,
        cable run longer than 100 m.
    """
    result = ValidationResult()

    if params.voltage <= 0:
        result.errors.append("Voltage must be greater than 0")
    elif params.voltage not in STANDARD_VOLTAGES:
        result.warnings.append("Non-standard voltage value detected")

    if params.current <= 0:
        result.errors.append("Current must be greater than 0")
    elif params.current > HIGH_CURRENT_WARNING_A:
        result.warnings.append("High current value detected - verify requirements")

    if params.power_factor <= 0 or params.power_factor > 1:
        result.errors.append("Power factor must be between 0 and 1")
    elif params.power_factor < LOW_POWER_FACTOR_WARNING:
        result.warnings.append("Low power factor may require correction")

    if params.distance < 0:
        result.errors.append("Distance cannot be negative")
    elif params.distance > LONG_CABLE_RUN_WARNING_M:
        result.warnings.append("Long cable run may require voltage drop analysis")

    _check_finite(
        result,
        ("Voltage", params.voltage),
        ("Current", params.current),
        ("Power factor", params.power_factor),
        ("Distance", params.distance),
        ("Temperature", params.temperature),
    )
    return result


# ---------------------------------------------------------------------------
# Cooling
# ---------------------------------------------------------------------------

def validate_cooling(params: CoolingParams) -> ValidationResult:
    """Check cooling parameters against hard limits and ASHRAE guidance.

    Errors:
        IT load ≤ 0, rack density ≤ 0, any NaN or infinite value.

    Warnings:
        supply temperature outside 18–27 °C, relative humidity outside
        20–80 %, rack density above 12 kW, return air not warmer than supply.
    """
    result = ValidationResult()

    if params.it_load <= 0:
        result.errors.append("IT Load must be greater than 0")

    supply = params.temperature.supply
    if supply < RECOMMENDED_TEMPERATURE_MIN_C:
        result.warnings.append("Supply temperature below ASHRAE recommended minimum")
    if supply > RECOMMENDED_TEMPERATURE_MAX_C:
        result.warnings.append("Supply temperature above ASHRAE recommended maximum")
    if params.temperature.return_ <= supply:
        result.warnings.append("Return temperature should be above supply temperature")

    relative = params.humidity.relative
    if relative < RECOMMENDED_HUMIDITY_MIN_PCT:
        result.warnings.append("Relative humidity below ASHRAE recommended minimum")
    if relative > RECOMMENDED_HUMIDITY_MAX_PCT:
        result.warnings.append("Relative humidity above ASHRAE recommended maximum")

    if params.rack_density <= 0:
        result.errors.append("Rack density must be greater than 0")
    elif params.rack_density > HEAT_DENSITY_HIGH_KW:
        result.warnings.append("High rack density may require additional cooling")

    _check_finite(
        result,
        ("IT Load", params.it_load),
        ("Supply temperature", supply),
        ("Return temperature", params.temperature.return_),
        ("Relative humidity", relative),
        ("Rack density", params.rack_density),
    )
    return result


# ---------------------------------------------------------------------------
# Economics
# ---------------------------------------------------------------------------

def validate_economic(params: EconomicParams) -> ValidationResult:
    result = ValidationResult()

    if params.power_cost < 0:
        result.errors.append("Power cost cannot be negative")
    if params.cooling_cost < 0:
        result.errors.append("Cooling cost cannot be negative")
    if params.maintenance_cost < 0:
        result.errors.append("Maintenance cost cannot be negative")

    if params.initial_investment <= 0:
        result.errors.append("Initial investment must be greater than 0")

    if params.operational_hours <= 0 or params.operational_hours > HOURS_PER_YEAR:
        result.errors.append("Operational hours must be between 0 and 8760")

    rates = params.energy_rates
    if rates.peak <= 0:
        result.errors.append("Peak energy rate must be greater than 0")
    if rates.off_peak <= 0:
        result.errors.append("Off-peak energy rate must be greater than 0")
    if rates.off_peak >= rates.peak:
        result.warnings.append("Off-peak rate should be lower than peak rate")

    _check_finite(
        result,
        ("Power cost", params.power_cost),
        ("Cooling cost", params.cooling_cost),
        ("Maintenance cost", params.maintenance_cost),
        ("Initial investment", params.initial_investment),
        ("Operational hours", params.operational_hours),
        ("Peak energy rate", rates.peak),
        ("Off-peak energy rate", rates.off_peak),
        ("Carbon emission factor", params.carbon_emission_factor),
    )
    return result


# ---------------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------------

_CONNECTION_TABLES = {
    "power": POWER_CONNECTIONS,
    "cooling": COOLING_CONNECTIONS,
    "network": NETWORK_CONNECTIONS,
}


def validate_connection(params: ConnectionParams) -> ValidationResult:
    """Unknown connection type or negative load are errors.

    An unknown *subtype* is left to the calculator, which raises
    :class:`~dcdesign.errors.CalculationError` naming the type.
    """
    result = ValidationResult()

    if params.type not in _CONNECTION_TABLES:
        result.errors.append("Invalid connection type")
    if params.load < 0:
        result.errors.append("Connection load cannot be negative")

    _check_finite(
        result,
        ("Connection load", params.load),
        *(("Source point", v) for v in params.source_point),
        *(("Target point", v) for v in params.target_point),
    )
    return result
