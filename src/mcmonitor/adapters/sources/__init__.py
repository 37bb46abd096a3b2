"""Metrics source adapters."""

from mcmonitor.adapters.sources.http import HttpMetricsSource

__all__ = ["HttpMetricsSource"]
