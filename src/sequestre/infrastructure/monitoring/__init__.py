"""Logging."""

from sequestre.infrastructure.monitoring.system_reporter import SystemReporter

__all__ = ["SystemReporter"]
