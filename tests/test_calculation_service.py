"""
tests/test_calculation_service.py
=================================
Timing, slow-call warnings and cache sweeps of CalculationService, driven by
fake clocks so no test sleeps.
"""

import asyncio
import dataclasses

import pytest

from dcdesign.calculation_service import CalculationService, SizingReport
from dcdesign.errors import ValidationError


class SteppingClock:
    """Advances by ``step`` seconds every time it is read."""

    def __init__(self, step=0.0):
        self.t = 0.0
        self.step = step

    def __call__(self):
        value = self.t
        self.t += self.step
        return value


class WallClock:

    def __init__(self):
        self.t = 0.0

    def __call__(self):
        return self.t


@pytest.fixture
def wall():
    return WallClock()


@pytest.fixture
def service(monitor, wall):
    return CalculationService(
        monitor=monitor,
        clock=SteppingClock(),
        wall_clock=wall,
        memory_probe=lambda: 0.0,
        sweep_interval_s=1800.0,
    )


def cleanups(monitor):
    return [e for e in monitor.operations if e.action == "cache_cleanup"]


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:

    @pytest.mark.parametrize("interval", [0.0, -5.0])
    def test_non_positive_interval_rejected(self, interval):
        with pytest.raises(ValueError, match="sweep_interval_s"):
            CalculationService(sweep_interval_s=interval)

    def test_zero_call_budget_rejected(self):
        with pytest.raises(ValueError, match="sweep_every_calls"):
            CalculationService(sweep_every_calls=0)

    def test_calculators_share_monitor(self, service, power_params, monitor):
        asyncio.run(service.calculate_power(power_params))
        types = sorted(m.operation_type for m in monitor.metrics)
        assert types == ["power", "power_calculation"]


# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------

class TestTiming:

    def test_slow_calculation_emits_warning_event(self, monitor, wall, power_params):
        memory = iter([1000.0, 5000.0])
        service = CalculationService(
            monitor=monitor,
            clock=SteppingClock(step=2.0),
            wall_clock=wall,
            memory_probe=lambda: next(memory),
        )
        asyncio.run(service.calculate_power(power_params))

        warnings = monitor.actions(status="warning")
        assert warnings == ["calculation_performance_warning"]
        details = monitor.operations[-1].details
        assert details["operationType"] == "power"
        assert details["duration"] == pytest.approx(2000.0)
        assert details["memoryDelta"] == pytest.approx(4000.0)

    def test_fast_calculation_emits_metric_only(self, service, monitor, cooling_params):
        asyncio.run(service.calculate_cooling(cooling_params))
        assert monitor.actions(status="warning") == []
        assert [m.operation_type for m in monitor.metrics if m.operation_type == "cooling"] == ["cooling"]

    def test_metric_recorded_even_when_calculation_fails(self, service, monitor, power_params):
        with pytest.raises(ValidationError):
            asyncio.run(service.calculate_power(dataclasses.replace(power_params, voltage=0.0)))
        assert [m.operation_type for m in monitor.metrics] == ["power"]


# ---------------------------------------------------------------------------
# Cache sweeps
# ---------------------------------------------------------------------------

class TestCacheSweeps:

    def test_interval_sweep_clears_every_calculator(self, service, wall, monitor, power_params, cooling_params):
        asyncio.run(service.calculate_power(power_params))
        asyncio.run(service.calculate_cooling(cooling_params))
        assert len(service.power.cache) == 1

        wall.t = 1799.0
        asyncio.run(service.calculate_power(power_params))
        assert service.sweeps == 0
        assert service.power.computations == 1

        wall.t = 1800.0
        asyncio.run(service.calculate_power(power_params))
        assert service.sweeps == 1
        assert service.power.computations == 2
        assert len(service.cooling.cache) == 0

        event = cleanups(monitor)[0]
        assert event.details == {"reason": "interval", "entries": 2}

    def test_sweep_every_n_calls(self, monitor, wall, power_params):
        service = CalculationService(
            monitor=monitor,
            clock=SteppingClock(),
            wall_clock=wall,
            memory_probe=lambda: 0.0,
            sweep_every_calls=3,
        )
        for _ in range(3):
            asyncio.run(service.calculate_power(power_params))
        assert service.sweeps == 0
        assert service.power.computations == 1

        asyncio.run(service.calculate_power(power_params))
        assert service.sweeps == 1
        assert service.power.computations == 2
        assert cleanups(monitor)[0].details["reason"] == "call_count"

    def test_clear_all_caches_forces_recomputation(self, service, monitor, economic_params):
        first = asyncio.run(service.calculate_economics(economic_params))
        service.clear_all_caches()
        second = asyncio.run(service.calculate_economics(economic_params))

        assert second == first
        assert second is not first
        assert service.economic.computations == 2
        assert cleanups(monitor)[0].details["reason"] == "manual"


# ---------------------------------------------------------------------------
# Combined run
# ---------------------------------------------------------------------------

class TestCalculateAll:

    def test_report_collects_three_results(self, service, power_params, cooling_params, economic_params):
        report = asyncio.run(service.calculate_all(power_params, cooling_params, economic_params))
        assert isinstance(report, SizingReport)
        assert set(report.to_dict()) == {"power", "cooling", "economic"}
        assert report.cooling.required_capacity == pytest.approx(600.0)

    def test_first_failure_propagates(self, service, power_params, cooling_params, economic_params):
        bad = dataclasses.replace(cooling_params, it_load=-1.0)
        with pytest.raises(ValidationError):
            asyncio.run(service.calculate_all(power_params, bad, economic_params))
        assert service.economic.computations == 0
