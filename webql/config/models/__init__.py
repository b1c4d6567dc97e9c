"""Configuration models for each section of the settings file."""

from webql.config.models.engine import EngineConfig
from webql.config.models.observability import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
)

__all__ = [
    "EngineConfig",
    "LoggingConfig",
    "MetricsConfig",
    "ObservabilityConfig",
]
