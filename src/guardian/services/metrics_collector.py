"""
Metrics Collector service for scan observability.

Provides in-memory timing of named operations (file scans, workspace
sweeps, analyzer calls) with averages, success rates and percentile
calculations (p50, p95), plus counters for file watch events.
"""

import logging
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)


def calculate_percentile(values: list[float], percentile: float) -> float:
    """
    Calculate the given percentile of a list of values.

    Args:
        values: List of numeric values
        percentile: Percentile to calculate (0-100)

    Returns:
        The percentile value, or 0.0 if the list is empty
    """
    if not values:
        return 0.0

    sorted_values = sorted(values)
    n = len(sorted_values)

    # Use linear interpolation for percentile calculation
    index = (percentile / 100.0) * (n - 1)
    lower_idx = int(index)
    upper_idx = min(lower_idx + 1, n - 1)
    fraction = index - lower_idx

    return sorted_values[lower_idx] + fraction * (
        sorted_values[upper_idx] - sorted_values[lower_idx]
    )


@dataclass
class OperationMetric:
    """
    A single timed operation.

    Attributes:
        operation: Operation name, e.g. ``scan_file``
        duration_ms: Wall-clock duration in milliseconds
        success: Whether the operation completed without raising
        error: Error message for failed operations
        metadata: Free-form context supplied by the caller
        recorded_at: When the sample was recorded
    """

    operation: str
    duration_ms: float
    success: bool = True
    error: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    recorded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class WatchMetrics:
    """Counters for real-time scanning."""

    events_received: int = 0
    events_by_type: dict[str, int] = field(default_factory=dict)
    rescans_triggered: int = 0
    last_event_timestamp: datetime | None = None


class MetricsCollector:
    """
    Lightweight in-memory metrics collector for scan operations.

    Keeps the most recent ``max_samples`` operation samples and logs a
    warning for operations slower than ``slow_operation_ms``.
    """

    # Maximum number of samples to retain
    MAX_SAMPLES = 100

    def __init__(self, max_samples: int = MAX_SAMPLES, slow_operation_ms: float = 5000) -> None:
        self._max_samples = max_samples
        self._slow_operation_ms = slow_operation_ms
        self._samples: list[OperationMetric] = []
        self._watch_metrics = WatchMetrics()
        self._lock = threading.Lock()

    @property
    def slow_operation_ms(self) -> float:
        return self._slow_operation_ms

    def record_operation(
        self,
        operation: str,
        duration_ms: float,
        success: bool = True,
        error: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> OperationMetric:
        """
        Record a completed operation.

        Args:
            operation: Operation name
            duration_ms: Duration in milliseconds
            success: Whether the operation succeeded
            error: Error message for failures
            metadata: Optional context

        Returns:
            The recorded sample
        """
        metric = OperationMetric(
            operation=operation,
            duration_ms=duration_ms,
            success=success,
            error=error,
            metadata=dict(metadata or {}),
        )

        with self._lock:
            self._samples.append(metric)
            # Trim to max samples to prevent unbounded memory growth
            if len(self._samples) > self._max_samples:
                self._samples = self._samples[-self._max_samples :]

        if duration_ms > self._slow_operation_ms:
            logger.warning(
                f"Slow operation detected: {operation} took {duration_ms:.0f}ms",
                extra={"operation": operation, "duration_ms": duration_ms},
            )
        if not success and error:
            logger.error(
                f"Operation failed: {operation} - {error}",
                extra={"operation": operation, "error": error},
            )

        return metric

    @contextmanager
    def measure(self, operation: str, metadata: dict[str, Any] | None = None) -> Iterator[None]:
        """
        Time the enclosed block and record it.

        Exceptions are recorded as failures and re-raised.
        """
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            self.record_operation(
                operation,
                (time.perf_counter() - start) * 1000,
                success=False,
                error=str(e) or type(e).__name__,
                metadata=metadata,
            )
            raise
        self.record_operation(operation, (time.perf_counter() - start) * 1000, metadata=metadata)

    def get_metrics(self) -> list[OperationMetric]:
        """Get a copy of the retained samples, oldest first."""
        with self._lock:
            return list(self._samples)

    def get_metrics_by_operation(self, operation: str) -> list[OperationMetric]:
        return [m for m in self.get_metrics() if m.operation == operation]

    def get_average_time(self, operation: str) -> float:
        """Average duration in milliseconds, 0.0 when nothing was recorded."""
        samples = self.get_metrics_by_operation(operation)
        if not samples:
            return 0.0
        return sum(m.duration_ms for m in samples) / len(samples)

    def get_success_rate(self, operation: str) -> float:
        """Percentage of successful runs, 0.0 when nothing was recorded."""
        samples = self.get_metrics_by_operation(operation)
        if not samples:
            return 0.0
        return sum(1 for m in samples if m.success) / len(samples) * 100

    def operations(self) -> list[str]:
        """Distinct operation names in first-seen order."""
        return list(dict.fromkeys(m.operation for m in self.get_metrics()))

    def get_summary(self) -> dict:
        """
        Get aggregated metrics as a dictionary.

        Returns:
            Dictionary containing per-operation {count, avg, p50, p95,
            success_rate, failures} and watch counters
        """
        summary: dict[str, Any] = {"operations": {}}
        for operation in self.operations():
            samples = self.get_metrics_by_operation(operation)
            durations = [m.duration_ms for m in samples]
            summary["operations"][operation] = {
                "count": len(samples),
                "avg": sum(durations) / len(durations),
                "p50": calculate_percentile(durations, 50),
                "p95": calculate_percentile(durations, 95),
                "success_rate": self.get_success_rate(operation),
                "failures": sum(1 for m in samples if not m.success),
            }

        if self._watch_metrics.events_received > 0:
            summary["watch"] = self.get_watch_metrics()

        return summary

    def generate_report(self) -> str:
        """Render the retained samples as a markdown report."""
        samples = self.get_metrics()
        lines = [
            "# Guardian Security Performance Report",
            "",
            f"Generated: {datetime.now(timezone.utc).isoformat()}",
            f"Total Operations: {len(samples)}",
            "",
        ]

        for operation in self.operations():
            op_samples = [m for m in samples if m.operation == operation]
            durations = [m.duration_ms for m in op_samples]
            failures = [m for m in op_samples if not m.success]

            lines.append(f"## {operation}")
            lines.append(f"- Total Runs: {len(op_samples)}")
            lines.append(f"- Average Time: {self.get_average_time(operation):.2f}ms")
            lines.append(f"- P95 Time: {calculate_percentile(durations, 95):.2f}ms")
            lines.append(f"- Success Rate: {self.get_success_rate(operation):.1f}%")
            lines.append(f"- Failures: {len(failures)}")
            if failures:
                errors = list(dict.fromkeys(m.error for m in failures if m.error))
                if errors:
                    lines.append(f"- Common Errors: {', '.join(errors)}")
            lines.append("")

        return "\n".join(lines)

    def record_watch_event(self, event_type: str) -> None:
        """
        Record a file watch event.

        Args:
            event_type: Type of event (created, modified, deleted, moved)
        """
        with self._lock:
            self._watch_metrics.events_received += 1
            self._watch_metrics.events_by_type[event_type] = (
                self._watch_metrics.events_by_type.get(event_type, 0) + 1
            )
            self._watch_metrics.last_event_timestamp = datetime.now(timezone.utc)

    def record_rescan(self) -> None:
        """Record a debounced re-scan."""
        with self._lock:
            self._watch_metrics.rescans_triggered += 1

    def get_watch_metrics(self) -> dict:
        with self._lock:
            return {
                "events_received": self._watch_metrics.events_received,
                "events_by_type": dict(self._watch_metrics.events_by_type),
                "rescans_triggered": self._watch_metrics.rescans_triggered,
                "last_event_timestamp": (
                    self._watch_metrics.last_event_timestamp.isoformat()
                    if self._watch_metrics.last_event_timestamp
                    else None
                ),
            }

    def clear_metrics(self) -> None:
        """Reset all metrics to initial state."""
        with self._lock:
            self._samples = []
            self._watch_metrics = WatchMetrics()
