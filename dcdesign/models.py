"""
dcdesign/models.py
==================
Data-Center Sizing Engine — Parameter and Result Containers

Immutable value objects passed between the UI layer, the validators and the
calculators. Field names are snake_case; ``from_dict`` accepts the camelCase
keys posted by the editor front end and ``to_dict`` produces them back.

Units:
    - Power: kW (IT load, rack density) or V / A (electrical).
    - Temperature: °C.  Humidity: % relative.
    - Distance: m.  Money: currency units per year unless stated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping

LoadType = Literal["linear", "nonlinear"]
ConnectionKind = Literal["power", "cooling", "network"]


def _get(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first key present in ``data`` (camelCase or snake_case)."""
    for key in keys:
        if key in data:
            return data[key]
    return default


# ---------------------------------------------------------------------------
# Power
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PowerParams:
    """Electrical feeder parameters.

    Attributes:
        voltage:      Line voltage [V].
        current:      Design load current [A].
        power_factor: Displacement power factor, (0, 1].
        distance:     One-way cable run [m].
        cable_type:   ``"COPPER"`` or ``"ALUMINUM"``.
        temperature:  Conductor ambient temperature [°C] (informational).
        load_type:    ``"linear"`` or ``"nonlinear"``.
    """
    voltage:      float
    current:      float
    power_factor: float
    distance:     float
    cable_type:   str = "COPPER"
    temperature:  float = 25.0
    load_type:    LoadType = "linear"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PowerParams":
        return cls(
            voltage=float(data["voltage"]),
            current=float(data["current"]),
            power_factor=float(_get(data, "powerFactor", "power_factor")),
            distance=float(data["distance"]),
            cable_type=str(_get(data, "cableType", "cable_type", default="COPPER")),
            temperature=float(data.get("temperature", 25.0)),
            load_type=_get(data, "loadType", "load_type", default="linear"),
        )


@dataclass(frozen=True)
class BreakerSetting:
    rating:       float
    trip_time:    float
    coordination: bool


@dataclass(frozen=True)
class PowerResult:
    fault_current:          float
    short_circuit_current:  float
    arc_flash_energy:       float
    voltage_drop:           float
    corrected_power_factor: float
    harmonic_distortion:    float
    required_feeder_size:   float
    breakers:               tuple[BreakerSetting, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "faultCurrent": self.fault_current,
            "shortCircuitCurrent": self.short_circuit_current,
            "arcFlashEnergy": self.arc_flash_energy,
            "voltageDrop": self.voltage_drop,
            "correctedPowerFactor": self.corrected_power_factor,
            "harmonicDistortion": self.harmonic_distortion,
            "requiredFeederSize": self.required_feeder_size,
            "breakers": [
                {"rating": b.rating, "tripTime": b.trip_time, "coordination": b.coordination}
                for b in self.breakers
            ],
        }


# ---------------------------------------------------------------------------
# Cooling
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Temperatures:
    """Air temperatures [°C]. ``return_`` is the hot-aisle return."""
    supply:  float
    return_: float
    ambient: float = 25.0


@dataclass(frozen=True)
class Humidity:
    """Relative humidity and its set-point [%]."""
    relative: float
    target:   float = 50.0


@dataclass(frozen=True)
class RoomDimensions:
    """White-space dimensions [m]."""
    length: float = 0.0
    width:  float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class CoolingParams:
    """Cooling design parameters.

    Attributes:
        it_load:         IT heat load [kW].
        temperature:     Supply / return / ambient air temperatures [°C].
        humidity:        Relative humidity and target [%].
        rack_density:    Average rack power density [kW/rack].
        room_dimensions: White-space dimensions [m].
    """
    it_load:         float
    temperature:     Temperatures
    humidity:        Humidity
    rack_density:    float
    room_dimensions: RoomDimensions = field(default_factory=RoomDimensions)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CoolingParams":
        temperature = data["temperature"]
        humidity = data["humidity"]
        room = _get(data, "roomDimensions", "room_dimensions", default={}) or {}
        return cls(
            it_load=float(_get(data, "itLoad", "it_load")),
            temperature=Temperatures(
                supply=float(temperature["supply"]),
                return_=float(_get(temperature, "return", "return_")),
                ambient=float(temperature.get("ambient", 25.0)),
            ),
            humidity=Humidity(
                relative=float(humidity["relative"]),
                target=float(humidity.get("target", 50.0)),
            ),
            rack_density=float(_get(data, "rackDensity", "rack_density")),
            room_dimensions=RoomDimensions(
                length=float(room.get("length", 0.0)),
                width=float(room.get("width", 0.0)),
                height=float(room.get("height", 0.0)),
            ),
        )


@dataclass(frozen=True)
class Psychrometrics:
    dew_point:         float   # °C
    absolute_humidity: float   # g/m³
    enthalpy:          float   # kJ/kg


@dataclass(frozen=True)
class RedundancyAnalysis:
    n:          bool
    n_plus_one: bool
    two_n:      bool


@dataclass(frozen=True)
class CoolingResult:
    required_capacity:   float   # kW
    airflow:             float   # CFM
    chilled_water_flow:  float   # GPM
    heat_rejection:      float   # kW
    psychrometrics:      Psychrometrics
    redundancy_analysis: RedundancyAnalysis

    def to_dict(self) -> dict[str, Any]:
        return {
            "requiredCapacity": self.required_capacity,
            "airflow": self.airflow,
            "chilledWaterFlow": self.chilled_water_flow,
            "heatRejection": self.heat_rejection,
            "psychrometrics": {
                "dewPoint": self.psychrometrics.dew_point,
                "absoluteHumidity": self.psychrometrics.absolute_humidity,
                "enthalpy": self.psychrometrics.enthalpy,
            },
            "redundancyAnalysis": {
                "n": self.redundancy_analysis.n,
                "nPlusOne": self.redundancy_analysis.n_plus_one,
                "twoN": self.redundancy_analysis.two_n,
            },
        }


# ---------------------------------------------------------------------------
# Economics
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EnergyRates:
    """Tariff per unit of energy for peak and off-peak hours."""
    peak:     float
    off_peak: float


@dataclass(frozen=True)
class EconomicParams:
    """Economic parameters. Costs are annual except ``initial_investment``."""
    power_cost:             float
    cooling_cost:           float
    maintenance_cost:       float
    initial_investment:     float
    operational_hours:      float
    energy_rates:           EnergyRates
    carbon_emission_factor: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EconomicParams":
        rates = _get(data, "energyRates", "energy_rates")
        return cls(
            power_cost=float(_get(data, "powerCost", "power_cost")),
            cooling_cost=float(_get(data, "coolingCost", "cooling_cost")),
            maintenance_cost=float(_get(data, "maintenanceCost", "maintenance_cost")),
            initial_investment=float(_get(data, "initialInvestment", "initial_investment")),
            operational_hours=float(_get(data, "operationalHours", "operational_hours")),
            energy_rates=EnergyRates(
                peak=float(rates["peak"]),
                off_peak=float(_get(rates, "offPeak", "off_peak")),
            ),
            carbon_emission_factor=float(
                _get(data, "carbonEmissionFactor", "carbon_emission_factor", default=0.0)
            ),
        )


@dataclass(frozen=True)
class ReturnOnInvestment:
    payback_period: float   # years
    npv:            float
    irr:            float   # fraction per year
    irr_converged:  bool


@dataclass(frozen=True)
class CostBreakdown:
    capex:       float
    opex:        float
    maintenance: float
    energy:      float


@dataclass(frozen=True)
class EconomicResult:
    total_cost_of_ownership:   float
    power_usage_effectiveness: float
    annual_energy_cost:        float
    carbon_footprint:          float
    roi:                       ReturnOnInvestment
    cost_breakdown:            CostBreakdown

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalCostOfOwnership": self.total_cost_of_ownership,
            "powerUsageEffectiveness": self.power_usage_effectiveness,
            "annualEnergyCost": self.annual_energy_cost,
            "carbonFootprint": self.carbon_footprint,
            "roi": {
                "paybackPeriod": self.roi.payback_period,
                "npv": self.roi.npv,
                "irr": self.roi.irr,
                "irrConverged": self.roi.irr_converged,
            },
            "costBreakdown": {
                "capex": self.cost_breakdown.capex,
                "opex": self.cost_breakdown.opex,
                "maintenance": self.cost_breakdown.maintenance,
                "energy": self.cost_breakdown.energy,
            },
        }


# ---------------------------------------------------------------------------
# Connections
# ---------------------------------------------------------------------------

Point3 = tuple[float, float, float]


@dataclass(frozen=True)
class ConnectionParams:
    """A proposed link between two connection points in the layout.

    Attributes:
        type:         ``"power"``, ``"cooling"`` or ``"network"``.
        subtype:      Key into the matching table in :mod:`dcdesign.config`
                      (e.g. ``"UPS_TO_PDU"``, ``"CHILLED_WATER"``, ``"FIBER"``).
        source_point: Source coordinates [m].
        target_point: Target coordinates [m].
        load:         Current [A] for power, flow [m³/s] for cooling; unused for network.
    """
    type:         ConnectionKind
    subtype:      str
    source_point: Point3
    target_point: Point3
    load:         float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ConnectionParams":
        source = _get(data, "sourcePoint", "source_point")
        target = _get(data, "targetPoint", "target_point")
        return cls(
            type=data["type"],
            subtype=str(data["subtype"]),
            source_point=(float(source[0]), float(source[1]), float(source[2])),
            target_point=(float(target[0]), float(target[1]), float(target[2])),
            load=float(data.get("load", 0.0)),
        )


@dataclass(frozen=True)
class ConnectionResult:
    is_valid:   bool
    capacity:   float
    loss:       float
    efficiency: float
    warnings:   tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "capacity": self.capacity,
            "loss": self.loss,
            "efficiency": self.efficiency,
            "warnings": list(self.warnings),
        }
