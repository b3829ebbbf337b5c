"""
dcdesign/config.py
==================
Data-Center Sizing Engine — Engineering Constants and Tables

Raw constants consumed by the power, cooling, economic and connection models
and by the layout history core.

Rules:
    - No calculations or derived quantities here.
    - Electrical values in SI (V, A, Ω·m); cooling formulas keep the imperial
      factors they were published with (BTU/h, CFM, GPM) and say so.
    - Monetary rates are dimensionless fractions per year.
    - No conditional expressions, no I/O.
"""


# ---------------------------------------------------------------------------
# IEEE 493 / IEEE 1584 — Fault current and arc flash
# ---------------------------------------------------------------------------

ARC_FLASH_INCIDENT_ENERGY_FACTOR: float = 1.5
"""Incident energy multiplier (dimensionless). Ref: IEEE 1584 simplified."""

ARC_FLASH_DISTANCE_FACTOR: float = 610.0
"""Working distance [mm] used to normalise incident energy. Ref: IEEE 1584."""

ARC_FLASH_TIME_FACTOR: float = 2.0
"""Arcing time factor (dimensionless). Ref: IEEE 1584 simplified."""

FAULT_IMPEDANCE_FACTOR: float = 1.732
"""√3 approximation applied to three-phase impedance. Ref: IEEE 493."""

FAULT_VOLTAGE_FACTOR: float = 1.05
"""Pre-fault voltage factor c_max (dimensionless). Ref: IEEE 493 / IEC 60909."""

SHORT_CIRCUIT_MARGIN: float = 1.25      # short-circuit = fault × 1.25
FEEDER_SIZE_MARGIN: float = 1.25        # NEC 125 % continuous-load rule
POWER_FACTOR_CORRECTION_GAIN: float = 1.2
POWER_FACTOR_CORRECTION_CAP: float = 0.95

HARMONIC_DISTORTION_NONLINEAR: float = 0.15   # THD fraction, nonlinear loads
HARMONIC_DISTORTION_LINEAR: float = 0.05      # THD fraction, linear loads

# Breaker coordination table: (rating multiplier on fault current, trip time [s])
BREAKER_SETTINGS: list[tuple[float, float]] = [
    (1.25, 0.1),
    (1.5,  0.3),
]

STANDARD_VOLTAGES: list[float] = [120.0, 208.0, 240.0, 277.0, 480.0]
HIGH_CURRENT_WARNING_A: float = 1000.0
LOW_POWER_FACTOR_WARNING: float = 0.8
LONG_CABLE_RUN_WARNING_M: float = 100.0


# ---------------------------------------------------------------------------
# Cable properties
# ---------------------------------------------------------------------------

# Resistivity [Ω·m], temperature coefficient [1/K], thermal conductivity [W/(m·K)]
CABLE_PROPERTIES: dict[str, dict[str, float]] = {
    "COPPER": {
        "resistivity": 1.724e-8,
        "temperature_coefficient": 0.00393,
        "thermal_conductivity": 401.0,
    },
    "ALUMINUM": {
        "resistivity": 2.82e-8,
        "temperature_coefficient": 0.00403,
        "thermal_conductivity": 237.0,
    },
}


# ---------------------------------------------------------------------------
# ASHRAE TC 9.9 — Thermal guidelines
# ---------------------------------------------------------------------------

COOLING_SAFETY_MARGIN: float = 1.2
"""Required cooling capacity multiplier over IT load (dimensionless)."""

RECOMMENDED_TEMPERATURE_MIN_C: float = 18.0
RECOMMENDED_TEMPERATURE_MAX_C: float = 27.0

RECOMMENDED_HUMIDITY_MIN_PCT: float = 20.0
RECOMMENDED_HUMIDITY_MAX_PCT: float = 80.0

# Rack heat density bands [kW/rack]
HEAT_DENSITY_LOW_KW: float = 4.0
HEAT_DENSITY_MEDIUM_KW: float = 8.0
HEAT_DENSITY_HIGH_KW: float = 12.0

# Sensible heat and water-side factors (imperial, as published)
KW_TO_BTU_PER_H: float = 3412.142       # 1 kW = 3412.142 BTU/h
SENSIBLE_HEAT_AIR_FACTOR: float = 1.08  # BTU/h per CFM·°F
WATER_HEAT_FACTOR: float = 500.0        # BTU/h per GPM·°F
WATER_DENSITY_LB_PER_GAL: float = 8.34

HEAT_REJECTION_FACTOR: float = 1.3      # cooling plant overhead on IT heat

# Magnus formula coefficients (dew point)
MAGNUS_A: float = 17.27
MAGNUS_B_C: float = 237.3

# Saturation vapour pressure coefficients (absolute humidity)
SATURATION_PRESSURE_HPA: float = 6.112
SATURATION_A: float = 17.67
SATURATION_B_C: float = 243.5
ABSOLUTE_HUMIDITY_FACTOR: float = 2.1674
KELVIN_OFFSET: float = 273.15

# Moist-air enthalpy [kJ/kg]
CP_DRY_AIR: float = 1.006
LATENT_HEAT_VAPORISATION: float = 2501.0
CP_WATER_VAPOUR: float = 1.86


# ---------------------------------------------------------------------------
# Economic assumptions
# ---------------------------------------------------------------------------

INFLATION_RATE: float = 0.02
DISCOUNT_RATE: float = 0.08
ENERGY_PRICE_ESCALATION: float = 0.03
MAINTENANCE_FACTOR: float = 0.1

EVALUATION_HORIZON_YEARS: int = 10
BASELINE_COST_MARKUP: float = 1.3       # counterfactual baseline = current × 1.3

PEAK_HOURS_SHARE: float = 0.6
OFF_PEAK_HOURS_SHARE: float = 0.4
HOURS_PER_YEAR: float = 8760.0

IRR_INITIAL_GUESS: float = 0.1
IRR_TOLERANCE: float = 1e-4
IRR_MAX_ITERATIONS: int = 100


# ---------------------------------------------------------------------------
# Connection types
# ---------------------------------------------------------------------------

POWER_CONNECTIONS: dict[str, dict[str, float]] = {
    "PRIMARY":     {"voltage": 480.0, "phases": 3, "wire_count": 4},
    "UPS_TO_PDU":  {"voltage": 208.0, "phases": 3, "wire_count": 4},
    "PDU_TO_RACK": {"voltage": 120.0, "phases": 1, "wire_count": 3},
}

COOLING_CONNECTIONS: dict[str, dict[str, float]] = {
    "CHILLED_WATER": {"supply_temp": 7.0, "return_temp": 13.0, "pressure_drop": 30.0},
    "VRF":           {"min_temp": -5.0, "max_temp": 43.0, "cop": 3.5, "pressure_drop": 30.0},
}

# bandwidth [Gb/s], max_length [m]
NETWORK_CONNECTIONS: dict[str, dict[str, float]] = {
    "FIBER":  {"bandwidth_gbps": 100.0, "max_length": 10000.0},
    "COPPER": {"bandwidth_gbps": 10.0,  "max_length": 100.0},
}

CONNECTION_MAX_VOLTAGE_DROP_FRACTION: float = 0.05
POWER_CONNECTION_MIN_EFFICIENCY: float = 0.9
COOLING_CONNECTION_MIN_EFFICIENCY: float = 0.85
NETWORK_LENGTH_WARNING_FRACTION: float = 0.8

PIPE_FRICTION_FACTOR: float = 0.02
PIPE_DIAMETER_M: float = 0.1
FLUID_DENSITY_KG_M3: float = 1000.0


# ---------------------------------------------------------------------------
# Calculation service and layout history
# ---------------------------------------------------------------------------

CALCULATION_TIME_WARNING_MS: float = 1000.0
CACHE_SWEEP_INTERVAL_S: float = 30 * 60.0

HISTORY_LIMIT: int = 50
AUTOSAVE_DELAY_S: float = 2.0
