"""
dcdesign/calculators.py
=======================
Data-Center Sizing Engine — Cached Calculators

Each calculator owns one :class:`~dcdesign.cache.ResultCache` and wraps one
pure ``evaluate_*`` function with the common contract:

    1. validate — hard errors raise ValidationError ("Invalid parameters: a, b");
    2. look up the canonical key of the parameters in the cache;
    3. on a miss evaluate, store, and report the duration to the monitor;
    4. arithmetic failures are reported to the monitor and re-raised as
       CalculationError.

``calculate`` is a coroutine so callers can await instrumentation; it never
performs I/O. Instances are independent, so tests and sessions can each build
their own.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Generic, TypeVar

from dcdesign.cache import ResultCache, canonical_key
from dcdesign.connection_model import evaluate_connection
from dcdesign.cooling_model import evaluate_cooling
from dcdesign.economic_model import evaluate_economic
from dcdesign.errors import CalculationError, ValidationError
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
from dcdesign.power_model import evaluate_power
from dcdesign.validation import (
    ValidationResult,
    validate_connection,
    validate_cooling,
    validate_economic,
    validate_power,
)

logger = logging.getLogger(__name__)

P = TypeVar("P")
R = TypeVar("R")


class CachedCalculator(Generic[P, R]):
    """Validation, caching and instrumentation around one evaluate function.

    Args:
        monitor: Monitoring collaborator; defaults to a logging monitor.
        clock:   Monotonic clock in seconds, injectable for tests.
    """

    name: str = "calculation"
    event_type: str = "calculation"

    def __init__(
        self,
        monitor: Monitor | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.cache: ResultCache[R] = ResultCache()
        self.computations: int = 0
        self._monitor = safe_monitor(monitor)
        self._clock = clock

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def validate(self, params: P) -> ValidationResult:
        raise NotImplementedError

    def evaluate(self, params: P) -> R:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def calculate(self, params: P) -> R:
        """Validate, then return the cached or freshly evaluated result.

        Raises:
            ValidationError:  If validation reports any error.
            CalculationError: If a formula cannot be evaluated.
        """
        start = self._clock()
        validation = self.validate(params)
        if not validation.is_valid:
            raise ValidationError(validation)

        key = canonical_key(params)
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            result = self.evaluate(params)
        except CalculationError as exc:
            self._report_error(exc)
            raise
        except (ArithmeticError, ValueError) as exc:
            self._report_error(exc)
            raise CalculationError(f"{self.name} failed: {exc}") from exc

        self.cache.put(key, result)
        self.computations += 1

        self._monitor.log_performance_metric(
            PerformanceMetric(
                operation_duration=(self._clock() - start) * 1000.0,
                operation_type=self.name,
            )
        )
        return result

    def clear_cache(self) -> None:
        self.cache.clear()

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _report_error(self, exc: Exception) -> None:
        logger.error("%s failed: %s", self.name, exc)
        self._monitor.log_operation(
            OperationEvent(
                type=self.event_type,
                action=self.name,
                status="error",
                error=str(exc) or type(exc).__name__,
            )
        )


class PowerCalculator(CachedCalculator[PowerParams, PowerResult]):
    name = "power_calculation"

    def validate(self, params: PowerParams) -> ValidationResult:
        return validate_power(params)

    def evaluate(self, params: PowerParams) -> PowerResult:
        return evaluate_power(params)


class CoolingCalculator(CachedCalculator[CoolingParams, CoolingResult]):
    name = "cooling_calculation"

    def validate(self, params: CoolingParams) -> ValidationResult:
        return validate_cooling(params)

    def evaluate(self, params: CoolingParams) -> CoolingResult:
        return evaluate_cooling(params)


class EconomicCalculator(CachedCalculator[EconomicParams, EconomicResult]):
    name = "economic_calculation"

    def validate(self, params: EconomicParams) -> ValidationResult:
        return validate_economic(params)

    def evaluate(self, params: EconomicParams) -> EconomicResult:
        return evaluate_economic(params)


class ConnectionCalculator(CachedCalculator[ConnectionParams, ConnectionResult]):
    name = "connection_validation"
    event_type = "connection"

    def validate(self, params: ConnectionParams) -> ValidationResult:
        return validate_connection(params)

    def evaluate(self, params: ConnectionParams) -> ConnectionResult:
        return evaluate_connection(params)
