"""Configuration loading for WebQL.

Usage:
    from webql.config import get_settings

    settings = get_settings()
    prefix = settings.engine.builtin_prefix
"""

from functools import lru_cache

from webql.config.loader import load_config
from webql.config.settings import Settings, set_toml_config
from webql.observability.logging import setup_logging
from webql.observability.metrics import set_metrics_enabled


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings instance.

    The result is cached; call ``reload_settings()`` to pick up changes.
    """
    set_toml_config(load_config())
    return Settings()


def reload_settings() -> Settings:
    """Clear the settings cache and reload configuration."""
    get_settings.cache_clear()
    return get_settings()


def configure_observability(settings: Settings | None = None) -> Settings:
    """Apply the logging and metrics sections of the settings.

    Returns:
        The settings that were applied
    """
    settings = settings or get_settings()
    log_config = settings.observability.logging
    setup_logging(
        level="DEBUG" if settings.debug else log_config.level,
        format=log_config.format,
        redact_pii=log_config.redact_pii,
        max_value_length=log_config.max_value_length,
    )
    set_metrics_enabled(settings.observability.metrics.enabled)
    return settings


__all__ = ["get_settings", "reload_settings", "configure_observability", "Settings"]
