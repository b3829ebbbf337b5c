"""
dcdesign/monitoring.py
======================
Monitoring collaborator: operation events and performance metrics.

The core reports through the :class:`Monitor` protocol. Every monitor handed
to a calculator, the calculation service or the layout state is wrapped in
:class:`SafeMonitor`, so a failing monitor is logged and otherwise ignored.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

logger = logging.getLogger(__name__)

OperationStatus = Literal["success", "warning", "error"]


def now_ms() -> float:
    """Wall-clock timestamp in epoch milliseconds."""
    return time.time() * 1000.0


@dataclass(frozen=True)
class OperationEvent:
    """A discrete operation outcome.

    Attributes:
        type:      Subsystem (``"calculation"``, ``"layout"``, ``"connection"``).
        action:    What was attempted (``"power_calculation"``, ``"autosave"``, ...).
        status:    ``"success"``, ``"warning"`` or ``"error"``.
        timestamp: Epoch milliseconds.
        error:     Error message when ``status == "error"``.
        details:   Free-form context.
    """
    type:      str
    action:    str
    status:    OperationStatus
    timestamp: float = field(default_factory=now_ms)
    error:     str | None = None
    details:   dict[str, Any] | None = None


@dataclass(frozen=True)
class PerformanceMetric:
    operation_duration: float            # ms
    timestamp:          float = field(default_factory=now_ms)
    memory_usage:       float | None = None
    operation_type:     str | None = None


class Monitor(Protocol):
    def log_operation(self, event: OperationEvent) -> None: ...

    def log_performance_metric(self, metric: PerformanceMetric) -> None: ...


class LoggingMonitor:
    """Default monitor: writes events to the ``dcdesign.monitoring`` logger."""

    _LEVELS = {"success": logging.INFO, "warning": logging.WARNING, "error": logging.ERROR}

    def log_operation(self, event: OperationEvent) -> None:
        logger.log(
            self._LEVELS.get(event.status, logging.INFO),
            "%s/%s %s%s%s",
            event.type,
            event.action,
            event.status,
            f" error={event.error}" if event.error else "",
            f" details={event.details}" if event.details else "",
        )

    def log_performance_metric(self, metric: PerformanceMetric) -> None:
        logger.debug(
            "%s took %.3f ms (memory=%s)",
            metric.operation_type or "operation",
            metric.operation_duration,
            metric.memory_usage,
        )


class RecordingMonitor:
    """Keeps every event in memory; used by the runner summary and by tests."""

    def __init__(self) -> None:
        self.operations: list[OperationEvent] = []
        self.metrics: list[PerformanceMetric] = []

    def log_operation(self, event: OperationEvent) -> None:
        self.operations.append(event)

    def log_performance_metric(self, metric: PerformanceMetric) -> None:
        self.metrics.append(metric)

    def actions(self, status: str | None = None) -> list[str]:
        return [e.action for e in self.operations if status is None or e.status == status]


class SafeMonitor:
    """Fire-and-forget wrapper: exceptions from the inner monitor never propagate."""

    def __init__(self, inner: Monitor) -> None:
        self.inner = inner

    def log_operation(self, event: OperationEvent) -> None:
        try:
            self.inner.log_operation(event)
        except Exception:
            logger.exception("Monitor failed to record operation %s/%s", event.type, event.action)

    def log_performance_metric(self, metric: PerformanceMetric) -> None:
        try:
            self.inner.log_performance_metric(metric)
        except Exception:
            logger.exception("Monitor failed to record performance metric")


def safe_monitor(monitor: Monitor | None) -> SafeMonitor:
    """Wrap ``monitor`` (default :class:`LoggingMonitor`) unless it already is wrapped."""
    if isinstance(monitor, SafeMonitor):
        return monitor
    return SafeMonitor(monitor if monitor is not None else LoggingMonitor())
