"""Metrics collector: Prometheus counters, gauges, histograms.

Kept in a private registry per process; nothing is exported over HTTP.

- ``proton_relay_messages_total`` counter-vec (direction)
- ``proton_relay_dropped_total`` counter-vec (direction)
- ``proton_supervisor_state`` gauge-vec (state; 1 for the current state)
- ``proton_forced_exits_total`` counter
- ``proton_shutdown_seconds`` histogram
- ``proton_cron_histogram`` / ``proton_cron_last_execution_gauge`` (job_name)
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

_PREFIX = "proton"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`ShellMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def gauge(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Gauge:
        """Register and return a Gauge."""
        return Gauge(name, doc, labels, registry=self._registry)

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class ShellMetrics:
    """Relay, lifecycle and cron metrics for one process."""

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._relayed = self._collector.counter(
            f"{_PREFIX}_relay_messages",
            "Messages handed to a process endpoint",
            ("direction",),
        )
        self._dropped = self._collector.counter(
            f"{_PREFIX}_relay_dropped",
            "Messages dropped because the receiving endpoint was gone",
            ("direction",),
        )
        self._state = self._collector.gauge(
            f"{_PREFIX}_supervisor_state",
            "Current supervisor lifecycle state (1 = active)",
            ("state",),
        )
        self._forced_exits = self._collector.counter(
            f"{_PREFIX}_forced_exits",
            "Shutdowns that hit the forced-exit timer",
        )
        self._shutdown = self._collector.histogram(
            f"{_PREFIX}_shutdown_seconds",
            "Time from quit request to process exit",
        )

        self._cron_histogram = self._collector.histogram(
            f"{_PREFIX}_cron_histogram",
            "Duration of cron job executions",
            ("job_name",),
        )
        self._cron_last = self._collector.gauge(
            f"{_PREFIX}_cron_last_execution_gauge",
            "Timestamp of last cron execution",
            ("job_name",),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    # -- Relay --

    def message_relayed(self, direction: str) -> None:
        self._relayed.labels(direction=direction).inc()

    def message_dropped(self, direction: str) -> None:
        self._dropped.labels(direction=direction).inc()

    # -- Lifecycle --

    def set_state(self, state: str, all_states: Iterable[str]) -> None:
        """Mark *state* as current (1) and every other state as 0."""
        for name in all_states:
            self._state.labels(state=name).set(1 if name == state else 0)

    def forced_exit(self) -> None:
        self._forced_exits.inc()

    def observe_shutdown(self, seconds: float) -> None:
        self._shutdown.observe(seconds)

    # -- Cron --

    @contextmanager
    def track_cron(self, job_name: str) -> Iterator[None]:
        """Track the duration of a cron job and record last execution time."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._cron_histogram.labels(job_name=job_name).observe(time.monotonic() - start)
            self._cron_last.labels(job_name=job_name).set(time.time())
