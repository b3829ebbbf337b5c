"""
dcdesign/power_model.py
=======================
Data-Center Sizing Engine — Electrical Distribution Formulas

Simplified IEEE 493 / IEEE 1584 relations used to size a feeder between two
pieces of distribution gear.

Rules:
    - Every function is a pure, deterministic mathematical mapping.
    - No caching, no logging, no validation beyond guarding a division that
      would otherwise produce inf / nan.
    - Guards raise :class:`~dcdesign.errors.CalculationError`.
"""

from __future__ import annotations

from dcdesign.config import (
    ARC_FLASH_DISTANCE_FACTOR,
    ARC_FLASH_INCIDENT_ENERGY_FACTOR,
    ARC_FLASH_TIME_FACTOR,
    BREAKER_SETTINGS,
    CABLE_PROPERTIES,
    FAULT_IMPEDANCE_FACTOR,
    FAULT_VOLTAGE_FACTOR,
    FEEDER_SIZE_MARGIN,
    HARMONIC_DISTORTION_LINEAR,
    HARMONIC_DISTORTION_NONLINEAR,
    POWER_FACTOR_CORRECTION_CAP,
    POWER_FACTOR_CORRECTION_GAIN,
    SHORT_CIRCUIT_MARGIN,
)
from dcdesign.errors import CalculationError
from dcdesign.models import BreakerSetting, PowerParams, PowerResult


# ---------------------------------------------------------------------------
# Cable impedance
# ---------------------------------------------------------------------------

def cable_resistivity(cable_type: str) -> float:
    """Conductor resistivity [Ω·m].

    Only ``"COPPER"`` selects copper; every other value is treated as aluminium.

    Example:
        >>> cable_resistivity("COPPER")
        1.724e-08
    """
    key = "COPPER" if cable_type == "COPPER" else "ALUMINUM"
    return CABLE_PROPERTIES[key]["resistivity"]


def compute_impedance(cable_type: str, distance_m: float) -> float:
    """Equation:
        Z = ρ · L / 1.732
    """
    return cable_resistivity(cable_type) * distance_m / FAULT_IMPEDANCE_FACTOR


# ---------------------------------------------------------------------------
# Fault current and arc flash
# ---------------------------------------------------------------------------

def compute_fault_current(voltage_v: float, cable_type: str, distance_m: float) -> float:
    """Bolted fault current at the end of the cable run.

    Equation:
        I_f = V · 1.05 / Z

    Args:
        voltage_v:  Line voltage [V].
        cable_type: ``"COPPER"`` or ``"ALUMINUM"``.
        distance_m: Cable run [m].

    Returns:
        Fault current [A].

    Raises:
        CalculationError: If the cable impedance is zero (``distance_m == 0``).
    """
    impedance = compute_impedance(cable_type, distance_m)
    if impedance == 0:
        raise CalculationError(
            f"Cable impedance is zero; fault current is undefined for distance={distance_m!r}"
        )
    return voltage_v * FAULT_VOLTAGE_FACTOR / impedance


def compute_short_circuit_current(fault_current_a: float) -> float:
    """I_sc = I_f · 1.25"""
    return fault_current_a * SHORT_CIRCUIT_MARGIN


def compute_arc_flash_energy(fault_current_a: float) -> float:
    """Incident energy estimate.

    Equation:
        E = 1.5 · I_f · 2 / 610
    """
    return (
        ARC_FLASH_INCIDENT_ENERGY_FACTOR
        * fault_current_a
        * ARC_FLASH_TIME_FACTOR
        / ARC_FLASH_DISTANCE_FACTOR
    )


# ---------------------------------------------------------------------------
# Voltage drop, power factor, harmonics
# ---------------------------------------------------------------------------

def compute_voltage_drop(
    current_a: float,
    distance_m: float,
    power_factor: float,
    voltage_v: float,
) -> float:
    """Equation:
        ΔV = I · L · pf / (V · 1000)
    """
    return current_a * distance_m * power_factor / (voltage_v * 1000.0)


def compute_corrected_power_factor(power_factor: float) -> float:
    """Power factor after capacitor-bank correction, capped at 0.95.

    Example:
        >>> compute_corrected_power_factor(0.9)
        0.95
    """
    return min(POWER_FACTOR_CORRECTION_CAP, power_factor * POWER_FACTOR_CORRECTION_GAIN)


def compute_harmonic_distortion(load_type: str) -> float:
    if load_type == "nonlinear":
        return HARMONIC_DISTORTION_NONLINEAR
    return HARMONIC_DISTORTION_LINEAR


def compute_required_feeder_size(current_a: float) -> float:
    """Feeder ampacity with the 125 % continuous-load margin."""
    return current_a * FEEDER_SIZE_MARGIN


def compute_breaker_settings(fault_current_a: float) -> tuple[BreakerSetting, ...]:
    """Upstream/downstream breaker pair sized off the fault current."""
    return tuple(
        BreakerSetting(rating=fault_current_a * multiplier, trip_time=trip_time, coordination=True)
        for multiplier, trip_time in BREAKER_SETTINGS
    )


# ---------------------------------------------------------------------------
# Full evaluation
# ---------------------------------------------------------------------------

def evaluate_power(params: PowerParams) -> PowerResult:
    """Evaluate every power formula for one validated parameter set."""
    fault_current = compute_fault_current(params.voltage, params.cable_type, params.distance)
    return PowerResult(
        fault_current=fault_current,
        short_circuit_current=compute_short_circuit_current(fault_current),
        arc_flash_energy=compute_arc_flash_energy(fault_current),
        voltage_drop=compute_voltage_drop(
            params.current, params.distance, params.power_factor, params.voltage
        ),
        corrected_power_factor=compute_corrected_power_factor(params.power_factor),
        harmonic_distortion=compute_harmonic_distortion(params.load_type),
        required_feeder_size=compute_required_feeder_size(params.current),
        breakers=compute_breaker_settings(fault_current),
    )
