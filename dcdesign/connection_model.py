"""
dcdesign/connection_model.py
============================
Data-Center Sizing Engine — Connection Feasibility

Checks a proposed power, cooling or network link between two connection
points in the layout against the rated limits of its subtype.

Power:
    ΔV = I · d · 1.732 / V,  η = 1 − ΔV / V,  valid if η > 0.90
Cooling:
    Δp = f · (d / D) · ρ · v² / 2,  v = Q / (π (D/2)²),
    η = 1 − Δp / Δp_rated,  valid if η > 0.85
Network:
    valid if d ≤ max length
"""

from __future__ import annotations

import math

from dcdesign.config import (
    CONNECTION_MAX_VOLTAGE_DROP_FRACTION,
    COOLING_CONNECTION_MIN_EFFICIENCY,
    COOLING_CONNECTIONS,
    FAULT_IMPEDANCE_FACTOR,
    FLUID_DENSITY_KG_M3,
    NETWORK_CONNECTIONS,
    NETWORK_LENGTH_WARNING_FRACTION,
    PIPE_DIAMETER_M,
    PIPE_FRICTION_FACTOR,
    POWER_CONNECTION_MIN_EFFICIENCY,
    POWER_CONNECTIONS,
)
from dcdesign.errors import CalculationError
from dcdesign.models import ConnectionParams, ConnectionResult, Point3


def compute_distance(source: Point3, target: Point3) -> float:
    """Euclidean distance between two layout points [m]."""
    return math.sqrt(sum((t - s) ** 2 for s, t in zip(source, target)))


def compute_connection_voltage_drop(load_a: float, distance_m: float, voltage_v: float) -> float:
    return load_a * distance_m * FAULT_IMPEDANCE_FACTOR / voltage_v


def compute_pressure_drop(distance_m: float, flow_m3_s: float) -> float:
    """Darcy–Weisbach pressure drop in the standard 100 mm pipe."""
    velocity = flow_m3_s / (math.pi * (PIPE_DIAMETER_M / 2.0) ** 2)
    return PIPE_FRICTION_FACTOR * (distance_m / PIPE_DIAMETER_M) * (FLUID_DENSITY_KG_M3 * velocity ** 2) / 2.0


def _lookup(table: dict[str, dict[str, float]], kind: str, subtype: str) -> dict[str, float]:
    config = table.get(subtype)
    if config is None:
        raise CalculationError(f"Invalid {kind} connection subtype: {subtype!r}")
    return config


# ---------------------------------------------------------------------------
# Per-type checks
# ---------------------------------------------------------------------------

def evaluate_power_connection(params: ConnectionParams) -> ConnectionResult:
    config = _lookup(POWER_CONNECTIONS, "power", params.subtype)
    voltage = config["voltage"]
    distance = compute_distance(params.source_point, params.target_point)
    voltage_drop = compute_connection_voltage_drop(params.load, distance, voltage)
    efficiency = 1.0 - voltage_drop / voltage

    warnings: list[str] = []
    if voltage_drop > voltage * CONNECTION_MAX_VOLTAGE_DROP_FRACTION:
        warnings.append("High voltage drop detected")

    return ConnectionResult(
        is_valid=efficiency > POWER_CONNECTION_MIN_EFFICIENCY,
        capacity=voltage * params.load,
        loss=voltage_drop * params.load,
        efficiency=efficiency,
        warnings=tuple(warnings),
    )


def evaluate_cooling_connection(params: ConnectionParams) -> ConnectionResult:
    config = _lookup(COOLING_CONNECTIONS, "cooling", params.subtype)
    rated_drop = config["pressure_drop"]
    distance = compute_distance(params.source_point, params.target_point)
    pressure_drop = compute_pressure_drop(distance, params.load)
    efficiency = 1.0 - pressure_drop / rated_drop

    warnings: list[str] = []
    if pressure_drop > rated_drop:
        warnings.append("High pressure drop detected")

    return ConnectionResult(
        is_valid=efficiency > COOLING_CONNECTION_MIN_EFFICIENCY,
        capacity=params.load,
        loss=pressure_drop,
        efficiency=efficiency,
        warnings=tuple(warnings),
    )


def evaluate_network_connection(params: ConnectionParams) -> ConnectionResult:
    config = _lookup(NETWORK_CONNECTIONS, "network", params.subtype)
    max_length = config["max_length"]
    distance = compute_distance(params.source_point, params.target_point)

    warnings: list[str] = []
    if distance > max_length * NETWORK_LENGTH_WARNING_FRACTION:
        warnings.append("Connection length approaching maximum limit")

    return ConnectionResult(
        is_valid=distance <= max_length,
        capacity=config["bandwidth_gbps"],
        loss=distance / max_length,
        efficiency=1.0 - distance / max_length,
        warnings=tuple(warnings),
    )


_EVALUATORS = {
    "power": evaluate_power_connection,
    "cooling": evaluate_cooling_connection,
    "network": evaluate_network_connection,
}


def evaluate_connection(params: ConnectionParams) -> ConnectionResult:
    evaluator = _EVALUATORS.get(params.type)
    if evaluator is None:
        raise CalculationError(f"Invalid connection type: {params.type!r}")
    return evaluator(params)
