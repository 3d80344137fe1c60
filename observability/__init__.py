"""Observability package for the command library API."""

from .logging import setup_logging, get_logger, log_performance, JSONFormatter, ColoredFormatter
from .prometheus_metrics import (
    setup_prometheus_metrics,
    record_db_metrics,
    normalize_endpoint,
    PrometheusMiddleware,
    linuxcmd_registry
)

__all__ = [
    'setup_logging',
    'get_logger',
    'log_performance',
    'JSONFormatter',
    'ColoredFormatter',
    'setup_prometheus_metrics',
    'record_db_metrics',
    'normalize_endpoint',
    'PrometheusMiddleware',
    'linuxcmd_registry'
]
