"""
sizing_runner.py
================
Data-Center Sizing Engine — Sample Hall Sizing Run

Runs one representative 1 MW white-space through the calculation service in
the order an engineer fills in the editor's calculator panels:

    1. Power distribution feeder        (CalculationService.calculate_power)
    2. Cooling plant and psychrometrics (CalculationService.calculate_cooling)
    3. Ten-year economics               (CalculationService.calculate_economics)
    4. Feasibility of the main links    (CalculationService.calculate_connection)
    5. Print console summary
    6. Plot cost breakdown and cumulative discounted cash flow

Usage:
    python sizing_runner.py
"""

from __future__ import annotations

import asyncio
import logging

import matplotlib.pyplot as plt
import matplotlib.ticker as mticker

from dcdesign.calculation_service import CalculationService, SizingReport
from dcdesign.config import DISCOUNT_RATE, EVALUATION_HORIZON_YEARS
from dcdesign.economic_model import compute_annual_cost, compute_annual_savings
from dcdesign.logging_config import setup_logging
from dcdesign.models import (
    ConnectionParams,
    ConnectionResult,
    CoolingParams,
    EconomicParams,
    EnergyRates,
    Humidity,
    PowerParams,
    RoomDimensions,
    Temperatures,
)
from dcdesign.monitoring import RecordingMonitor
from dcdesign.settings import load_settings
from dcdesign.validation import validate_cooling, validate_economic, validate_power

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Sample hall (inputs — not engineering constants)
# ---------------------------------------------------------------------------

POWER = PowerParams(
    voltage=480.0,
    current=800.0,
    power_factor=0.9,
    distance=45.0,
    cable_type="COPPER",
    temperature=30.0,
    load_type="nonlinear",
)

COOLING = CoolingParams(
    it_load=1000.0,
    temperature=Temperatures(supply=22.0, return_=35.0, ambient=30.0),
    humidity=Humidity(relative=45.0, target=50.0),
    rack_density=10.0,
    room_dimensions=RoomDimensions(length=40.0, width=25.0, height=4.5),
)

ECONOMICS = EconomicParams(
    power_cost=850_000.0,
    cooling_cost=280_000.0,
    maintenance_cost=120_000.0,
    initial_investment=1_200_000.0,
    operational_hours=8760.0,
    energy_rates=EnergyRates(peak=0.18, off_peak=0.09),
    carbon_emission_factor=0.4,
)

CONNECTIONS: list[tuple[str, ConnectionParams]] = [
    ("UPS → PDU", ConnectionParams("power", "UPS_TO_PDU", (0.0, 0.0, 0.0), (12.0, 0.0, 3.0), 0.4)),
    ("CHW loop", ConnectionParams("cooling", "CHILLED_WATER", (0.0, 0.0, 0.0), (30.0, 0.0, 0.0), 0.05)),
    ("Core fibre", ConnectionParams("network", "FIBER", (0.0, 0.0, 0.0), (120.0, 40.0, 0.0))),
]

PLOT_OUTPUT_FILE: str = "sizing_summary.png"


# ---------------------------------------------------------------------------
# Steps 1–4: calculations
# ---------------------------------------------------------------------------

async def run_calculations(service: CalculationService) -> tuple[SizingReport, list[ConnectionResult]]:
    report = await service.calculate_all(POWER, COOLING, ECONOMICS)
    links = [await service.calculate_connection(params) for _, params in CONNECTIONS]
    return report, links


# ---------------------------------------------------------------------------
# Step 5: console summary
# ---------------------------------------------------------------------------

def print_console_summary(report: SizingReport, links: list[ConnectionResult]) -> None:
    sep = "─" * 60
    power, cooling, economic = report.power, report.cooling, report.economic

    print(f"\n{'═' * 60}")
    print("  DATA-CENTER SIZING — SAMPLE HALL SUMMARY")
    print(f"{'═' * 60}")

    print(f"\n{sep}")
    print("  POWER DISTRIBUTION")
    print(sep)
    print(f"    Feeder            :  {POWER.voltage:.0f} V, {POWER.current:.0f} A, "
          f"{POWER.distance:.0f} m {POWER.cable_type.lower()}")
    print(f"    Fault current     :  {power.fault_current:12.4e} A")
    print(f"    Short circuit     :  {power.short_circuit_current:12.4e} A")
    print(f"    Arc flash energy  :  {power.arc_flash_energy:12.4e}")
    print(f"    Voltage drop      :  {power.voltage_drop:12.4f} V")
    print(f"    Corrected PF      :  {power.corrected_power_factor:12.2f}")
    print(f"    THD estimate      :  {power.harmonic_distortion:12.0%}")
    print(f"    Feeder size       :  {power.required_feeder_size:12.1f} A")
    for i, breaker in enumerate(power.breakers, start=1):
        print(f"    Breaker {i}         :  {breaker.rating:12.4e} A @ {breaker.trip_time:.1f} s")

    print(f"\n{sep}")
    print("  COOLING")
    print(sep)
    print(f"    Required capacity :  {cooling.required_capacity:10.1f} kW")
    print(f"    Airflow           :  {cooling.airflow:10.0f} CFM")
    print(f"    Chilled water     :  {cooling.chilled_water_flow:10.1f} GPM")
    print(f"    Heat rejection    :  {cooling.heat_rejection:10.1f} kW")
    psy = cooling.psychrometrics
    print(f"    Dew point         :  {psy.dew_point:10.2f} °C")
    print(f"    Absolute humidity :  {psy.absolute_humidity:10.2f} g/m³")
    print(f"    Enthalpy          :  {psy.enthalpy:10.2f} kJ/kg")
    red = cooling.redundancy_analysis
    print(f"    Redundancy        :  N {'✔' if red.n else '✘'}   "
          f"N+1 {'✔' if red.n_plus_one else '✘'}   2N {'✔' if red.two_n else '✘'}")

    print(f"\n{sep}")
    print(f"  ECONOMICS  ({EVALUATION_HORIZON_YEARS}-year horizon)")
    print(sep)
    print(f"    TCO               :  {economic.total_cost_of_ownership:14,.0f}")
    print(f"    PUE               :  {economic.power_usage_effectiveness:14.3f}")
    print(f"    Annual energy     :  {economic.annual_energy_cost:14,.2f}")
    print(f"    Carbon footprint  :  {economic.carbon_footprint:14,.2f}")
    print(f"    Payback           :  {economic.roi.payback_period:14.2f} years")
    print(f"    NPV @ {DISCOUNT_RATE:.0%}        :  {economic.roi.npv:14,.0f}")
    irr_note = "" if economic.roi.irr_converged else "  (not converged)"
    print(f"    IRR               :  {economic.roi.irr:14.2%}{irr_note}")

    print(f"\n{sep}")
    print("  CONNECTIONS")
    print(sep)
    for (label, _), result in zip(CONNECTIONS, links):
        status = "✔ OK" if result.is_valid else "✘ FAIL"
        print(f"    {label:<12} :  efficiency {result.efficiency:7.2%}  [{status}]"
              + (f"  {'; '.join(result.warnings)}" if result.warnings else ""))

    warnings = (
        validate_power(POWER).warnings
        + validate_cooling(COOLING).warnings
        + validate_economic(ECONOMICS).warnings
    )
    if warnings:
        print(f"\n{sep}")
        print("  INPUT WARNINGS")
        print(sep)
        for warning in warnings:
            print(f"    • {warning}")
    print(f"{'═' * 60}\n")


# ---------------------------------------------------------------------------
# Step 6: plot
# ---------------------------------------------------------------------------

def plot_economics(report: SizingReport) -> None:
    """Cost breakdown bars and cumulative discounted cash flow."""
    breakdown = report.economic.cost_breakdown
    labels = ["CAPEX", "OPEX", "Maintenance", "Energy"]
    values = [breakdown.capex, breakdown.opex, breakdown.maintenance, breakdown.energy]

    savings = compute_annual_savings(
        compute_annual_cost(ECONOMICS.power_cost, ECONOMICS.cooling_cost, ECONOMICS.maintenance_cost)
    )
    years = list(range(0, EVALUATION_HORIZON_YEARS + 1))
    cumulative = [-ECONOMICS.initial_investment]
    for year in years[1:]:
        cumulative.append(cumulative[-1] + savings / (1.0 + DISCOUNT_RATE) ** year)

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(12, 5))
    fig.suptitle(
        "Data-Center Sizing — Economics\n"
        f"PUE = {report.economic.power_usage_effectiveness:.2f}  |  "
        f"NPV = {report.economic.roi.npv:,.0f}  |  IRR = {report.economic.roi.irr:.1%}",
        fontsize=12, fontweight="bold",
    )

    ax1.bar(labels, values, color=["#2196F3", "#4CAF50", "#FF9800", "#9C27B0"])
    ax1.set_ylabel("Cost over horizon", fontsize=11)
    ax1.yaxis.set_major_formatter(mticker.StrMethodFormatter("{x:,.0f}"))
    ax1.grid(True, axis="y", linestyle="--", alpha=0.5)

    ax2.plot(years, cumulative, color="#2196F3", linewidth=2, marker="o", label="Cumulative DCF")
    ax2.axhline(0, color="#F44336", linewidth=1.2, linestyle="--", label="Break-even")
    ax2.axvline(report.economic.roi.payback_period, color="#FF9800", linewidth=1.2,
                linestyle="-.", label=f"Simple payback ({report.economic.roi.payback_period:.1f} y)")
    ax2.set_xlabel("Year", fontsize=11)
    ax2.set_ylabel("Discounted cash flow", fontsize=11)
    ax2.yaxis.set_major_formatter(mticker.StrMethodFormatter("{x:,.0f}"))
    ax2.legend(fontsize=9, loc="lower right")
    ax2.grid(True, linestyle="--", alpha=0.5)

    plt.tight_layout()
    plt.savefig(PLOT_OUTPUT_FILE, dpi=150, bbox_inches="tight")
    print(f"  [plot] Saved → {PLOT_OUTPUT_FILE}")
    plt.show()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main() -> None:
    settings = load_settings()
    setup_logging(log_level=settings.log_level, log_dir=settings.log_dir)

    monitor = RecordingMonitor()
    service = CalculationService(
        monitor=monitor,
        sweep_interval_s=settings.cache_sweep_interval_s,
        slow_calculation_ms=settings.slow_calculation_ms,
    )

    report, links = asyncio.run(run_calculations(service))
    logger.info("Sizing complete: %d metrics recorded", len(monitor.metrics))

    print_console_summary(report, links)
    plot_economics(report)


if __name__ == "__main__":
    main()
