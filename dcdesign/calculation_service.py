"""
dcdesign/calculation_service.py
===============================
Data-Center Sizing Engine — Aggregating Calculation Service

Front door used by the editor: routes each request to its calculator, times
it, samples memory before and after, reports slow calculations, and sweeps
every calculator cache on a fixed wall-clock interval (and, optionally, every
N calls).

The sweep is checked at the start of each call rather than by a background
timer, so the service holds no threads and is driven entirely by its
injected clocks.
"""

from __future__ import annotations

import logging
import time
import tracemalloc
from dataclasses import dataclass
from typing import Any, Callable

from dcdesign.calculators import (
    CachedCalculator,
    ConnectionCalculator,
    CoolingCalculator,
    EconomicCalculator,
    PowerCalculator,
)
from dcdesign.config import CACHE_SWEEP_INTERVAL_S, CALCULATION_TIME_WARNING_MS
from dcdesign.models import (
    ConnectionParams,
    ConnectionResult,
    CoolingParams,
    CoolingResult,
    EconomicParams,
    EconomicResult,
    PowerParams,
    PowerResult,
)
from dcdesign.monitoring import Monitor, OperationEvent, PerformanceMetric, safe_monitor

logger = logging.getLogger(__name__)


def traced_memory_bytes() -> float:
    """Current traced heap size [bytes]; 0 when tracemalloc is not tracing."""
    if not tracemalloc.is_tracing():
        return 0.0
    current, _peak = tracemalloc.get_traced_memory()
    return float(current)


@dataclass(frozen=True)
class SizingReport:
    """Results of a combined power + cooling + economic sizing run."""
    power:    PowerResult
    cooling:  CoolingResult
    economic: EconomicResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "power": self.power.to_dict(),
            "cooling": self.cooling.to_dict(),
            "economic": self.economic.to_dict(),
        }


class CalculationService:
    """Instrumented facade over the four calculators.

    Args:
        power, cooling, economic, connection:
            Calculator instances; new ones sharing ``monitor`` are built when
            omitted.
        monitor:             Monitoring collaborator.
        clock:               Monotonic clock for durations [s].
        wall_clock:          Clock for the sweep interval [s].
        memory_probe:        Returns current memory use; defaults to tracemalloc.
        sweep_interval_s:    Wall-clock period between cache sweeps [s].
        sweep_every_calls:   If set, also sweep once this many calls have run
                             since the previous sweep.
        slow_calculation_ms: Duration above which a warning event is emitted.

    Raises:
        ValueError: If ``sweep_interval_s`` ≤ 0 or ``sweep_every_calls`` < 1.
    """

    def __init__(
        self,
        power: PowerCalculator | None = None,
        cooling: CoolingCalculator | None = None,
        economic: EconomicCalculator | None = None,
        connection: ConnectionCalculator | None = None,
        monitor: Monitor | None = None,
        clock: Callable[[], float] = time.perf_counter,
        wall_clock: Callable[[], float] = time.monotonic,
        memory_probe: Callable[[], float] = traced_memory_bytes,
        sweep_interval_s: float = CACHE_SWEEP_INTERVAL_S,
        sweep_every_calls: int | None = None,
        slow_calculation_ms: float = CALCULATION_TIME_WARNING_MS,
    ) -> None:
        if sweep_interval_s <= 0:
            raise ValueError(
                f"sweep_interval_s must be positive; received sweep_interval_s={sweep_interval_s!r}"
            )
        if sweep_every_calls is not None and sweep_every_calls < 1:
            raise ValueError(
                f"sweep_every_calls must be at least 1; received sweep_every_calls={sweep_every_calls!r}"
            )

        self._monitor = safe_monitor(monitor)
        self.power = power or PowerCalculator(monitor=self._monitor)
        self.cooling = cooling or CoolingCalculator(monitor=self._monitor)
        self.economic = economic or EconomicCalculator(monitor=self._monitor)
        self.connection = connection or ConnectionCalculator(monitor=self._monitor)

        self._clock = clock
        self._wall_clock = wall_clock
        self._memory_probe = memory_probe
        self._sweep_interval_s = sweep_interval_s
        self._sweep_every_calls = sweep_every_calls
        self._slow_calculation_ms = slow_calculation_ms

        self._last_sweep_s: float = wall_clock()
        self._calls_since_sweep: int = 0
        self.sweeps: int = 0

    @property
    def calculators(self) -> tuple[CachedCalculator, ...]:
        return (self.power, self.cooling, self.economic, self.connection)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def calculate_power(self, params: PowerParams) -> PowerResult:
        return await self._run("power", self.power, params)

    async def calculate_cooling(self, params: CoolingParams) -> CoolingResult:
        return await self._run("cooling", self.cooling, params)

    async def calculate_economics(self, params: EconomicParams) -> EconomicResult:
        return await self._run("economic", self.economic, params)

    async def calculate_connection(self, params: ConnectionParams) -> ConnectionResult:
        return await self._run("connection", self.connection, params)

    async def calculate_all(
        self,
        power: PowerParams,
        cooling: CoolingParams,
        economic: EconomicParams,
    ) -> SizingReport:
        """Run the three sizing calculations in order; the first failure propagates."""
        return SizingReport(
            power=await self.calculate_power(power),
            cooling=await self.calculate_cooling(cooling),
            economic=await self.calculate_economics(economic),
        )

    def clear_all_caches(self) -> None:
        self._sweep(reason="manual")

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    async def _run(self, operation_type: str, calculator: CachedCalculator, params: Any) -> Any:
        self._maybe_sweep()
        self._calls_since_sweep += 1

        start = self._clock()
        memory_before = self._memory_probe()
        try:
            return await calculator.calculate(params)
        finally:
            self._record(operation_type, start, memory_before)

    def _record(self, operation_type: str, start: float, memory_before: float) -> None:
        duration_ms = (self._clock() - start) * 1000.0
        memory_after = self._memory_probe()

        if duration_ms > self._slow_calculation_ms:
            logger.warning("%s calculation took %.1f ms", operation_type, duration_ms)
            self._monitor.log_operation(
                OperationEvent(
                    type="calculation",
                    action="calculation_performance_warning",
                    status="warning",
                    details={
                        "duration": duration_ms,
                        "operationType": operation_type,
                        "memoryDelta": memory_after - memory_before,
                    },
                )
            )

        self._monitor.log_performance_metric(
            PerformanceMetric(
                operation_duration=duration_ms,
                memory_usage=memory_after,
                operation_type=operation_type,
            )
        )

    def _maybe_sweep(self) -> None:
        if self._sweep_every_calls is not None and self._calls_since_sweep >= self._sweep_every_calls:
            self._sweep(reason="call_count")
        elif self._wall_clock() - self._last_sweep_s >= self._sweep_interval_s:
            self._sweep(reason="interval")

    def _sweep(self, reason: str) -> None:
        entries = sum(len(c.cache) for c in self.calculators)
        for calculator in self.calculators:
            calculator.clear_cache()

        self._last_sweep_s = self._wall_clock()
        self._calls_since_sweep = 0
        self.sweeps += 1

        logger.info("Cleared %d cached calculation results (%s)", entries, reason)
        self._monitor.log_operation(
            OperationEvent(
                type="calculation",
                action="cache_cleanup",
                status="success",
                details={"reason": reason, "entries": entries},
            )
        )
