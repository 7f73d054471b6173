"""Metrics: Prometheus metrics collection."""

from __future__ import annotations

from proton_wallet.metrics.collector import MetricsCollector, ShellMetrics

__all__ = ["MetricsCollector", "ShellMetrics"]
