"""
tests/test_power_calculations.py
================================
Feeder sizing — unit tests for power_model.py and PowerCalculator.

Expected values are recomputed from the published relations rather than
typed in as literals, because the fault current of a short copper run is
of order 1e9 A and sensitive to floating-point ordering.
"""

import asyncio
import dataclasses

import pytest

from dcdesign import calculators
from dcdesign.calculators import PowerCalculator
from dcdesign.config import CABLE_PROPERTIES
from dcdesign.errors import CalculationError, ValidationError
from dcdesign.power_model import (
    cable_resistivity,
    compute_arc_flash_energy,
    compute_breaker_settings,
    compute_corrected_power_factor,
    compute_fault_current,
    compute_harmonic_distortion,
    compute_voltage_drop,
    evaluate_power,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def calculator(monitor):
    return PowerCalculator(monitor=monitor)


@pytest.fixture
def result(power_params):
    return evaluate_power(power_params)


# ---------------------------------------------------------------------------
# Fault current and arc flash
# ---------------------------------------------------------------------------

class TestFaultCurrent:
    """I_f = V · 1.05 / (ρ · L / 1.732)"""

    def test_reference_feeder_matches_formula(self, result):
        expected = 400 * 1.05 / ((1.724e-8 * 50) / 1.732)
        assert result.fault_current == pytest.approx(expected, rel=1e-12)

    def test_reference_feeder_order_of_magnitude(self, result):
        assert 1e8 < result.fault_current < 1e9

    def test_aluminium_has_lower_fault_current(self):
        copper = compute_fault_current(480.0, "COPPER", 30.0)
        aluminium = compute_fault_current(480.0, "ALUMINUM", 30.0)
        assert aluminium < copper
        assert copper / aluminium == pytest.approx(2.82e-8 / 1.724e-8, rel=1e-12)

    def test_unknown_cable_type_treated_as_aluminium(self):
        assert cable_resistivity("XLPE") == CABLE_PROPERTIES["ALUMINUM"]["resistivity"]

    def test_zero_distance_raises(self):
        with pytest.raises(CalculationError, match="impedance is zero"):
            compute_fault_current(480.0, "COPPER", 0.0)

    def test_short_circuit_is_125_percent_of_fault(self, result):
        assert result.short_circuit_current == pytest.approx(1.25 * result.fault_current, rel=1e-12)

    def test_arc_flash_energy(self, result):
        expected = 1.5 * result.fault_current * 2 / 610
        assert compute_arc_flash_energy(result.fault_current) == pytest.approx(expected, rel=1e-12)
        assert result.arc_flash_energy == pytest.approx(expected, rel=1e-12)


# ---------------------------------------------------------------------------
# Voltage drop, power factor, harmonics, feeder, breakers
# ---------------------------------------------------------------------------

class TestFeederQuantities:

    def test_voltage_drop(self, result):
        assert result.voltage_drop == pytest.approx(1000 * 50 * 0.9 / (400 * 1000), rel=1e-12)

    def test_voltage_drop_scales_with_distance(self):
        short = compute_voltage_drop(100.0, 10.0, 0.9, 480.0)
        long = compute_voltage_drop(100.0, 20.0, 0.9, 480.0)
        assert long == pytest.approx(2 * short, rel=1e-12)

    @pytest.mark.parametrize("pf", [0.1, 0.5, 0.79, 0.8, 0.9, 1.0])
    def test_corrected_power_factor_capped(self, pf):
        corrected = compute_corrected_power_factor(pf)
        assert corrected <= 0.95
        assert corrected == pytest.approx(min(0.95, pf * 1.2), rel=1e-12)

    def test_low_power_factor_improves_by_20_percent(self):
        assert compute_corrected_power_factor(0.5) == pytest.approx(0.6, rel=1e-12)

    def test_harmonic_distortion_by_load_type(self):
        assert compute_harmonic_distortion("nonlinear") == 0.15
        assert compute_harmonic_distortion("linear") == 0.05

    def test_required_feeder_size(self, result):
        assert result.required_feeder_size == pytest.approx(1250.0, rel=1e-12)

    def test_breaker_coordination_table(self, result):
        breakers = compute_breaker_settings(result.fault_current)
        assert len(breakers) == 2
        assert breakers[0].rating == pytest.approx(result.fault_current * 1.25, rel=1e-12)
        assert breakers[0].trip_time == 0.1
        assert breakers[1].rating == pytest.approx(result.fault_current * 1.5, rel=1e-12)
        assert breakers[1].trip_time == 0.3
        assert all(b.coordination for b in breakers)
        assert result.breakers == breakers


# ---------------------------------------------------------------------------
# PowerCalculator contract
# ---------------------------------------------------------------------------

class TestPowerCalculator:

    def test_calculate_matches_pure_model(self, calculator, power_params):
        assert asyncio.run(calculator.calculate(power_params)) == evaluate_power(power_params)

    def test_identical_input_is_served_from_cache(self, calculator, power_params, monkeypatch):
        calls = []
        original = calculators.evaluate_power

        def spy(params):
            calls.append(params)
            return original(params)

        monkeypatch.setattr(calculators, "evaluate_power", spy)

        first = asyncio.run(calculator.calculate(power_params))
        second = asyncio.run(calculator.calculate(dataclasses.replace(power_params)))

        assert second is first
        assert len(calls) == 1
        assert calculator.cache.hits == 1

    def test_integer_inputs_hit_cache_of_equal_float_inputs(self, calculator, power_params):
        first = asyncio.run(calculator.calculate(power_params))
        as_ints = dataclasses.replace(power_params, voltage=400, current=1000, distance=50)
        second = asyncio.run(calculator.calculate(as_ints))

        assert second is first
        assert calculator.computations == 1

    def test_clear_cache_forces_recomputation_with_same_value(self, calculator, power_params, monkeypatch):
        calls = []
        original = calculators.evaluate_power

        def spy(params):
            calls.append(params)
            return original(params)

        monkeypatch.setattr(calculators, "evaluate_power", spy)

        first = asyncio.run(calculator.calculate(power_params))
        calculator.clear_cache()
        second = asyncio.run(calculator.calculate(power_params))

        assert len(calls) == 2
        assert second == first

    def test_invalid_parameters_rejected_with_joined_message(self, calculator, power_params):
        bad = dataclasses.replace(power_params, voltage=0.0, current=-5.0)
        with pytest.raises(ValidationError) as excinfo:
            asyncio.run(calculator.calculate(bad))
        assert str(excinfo.value) == (
            "Invalid parameters: Voltage must be greater than 0, Current must be greater than 0"
        )
        assert len(calculator.cache) == 0

    def test_performance_metric_emitted_on_computation(self, calculator, power_params, monitor):
        asyncio.run(calculator.calculate(power_params))
        assert len(monitor.metrics) == 1
        assert monitor.metrics[0].operation_type == "power_calculation"
        assert monitor.metrics[0].operation_duration >= 0

    def test_degenerate_distance_reports_error_event(self, calculator, power_params, monitor):
        with pytest.raises(CalculationError):
            asyncio.run(calculator.calculate(dataclasses.replace(power_params, distance=0.0)))
        assert monitor.actions(status="error") == ["power_calculation"]
        assert len(calculator.cache) == 0

    def test_failing_monitor_does_not_break_calculation(self, power_params):
        class BrokenMonitor:
            def log_operation(self, event):
                raise RuntimeError("monitor down")

            def log_performance_metric(self, metric):
                raise RuntimeError("monitor down")

        calculator = PowerCalculator(monitor=BrokenMonitor())
        result = asyncio.run(calculator.calculate(power_params))
        assert result.fault_current > 0
