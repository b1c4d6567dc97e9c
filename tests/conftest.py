"""Shared test fixtures for the WebQL test suite."""

from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from webql.cache.store import ResolverCache
from webql.engine import WebQL
from webql.resources.registry import ResourceRegistry


class FrozenClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def cache(clock: FrozenClock) -> ResolverCache:
    return ResolverCache(clock=clock)


@pytest.fixture
def engine(cache: ResolverCache) -> WebQL:
    """An engine with an empty registry and a frozen-clock cache."""
    return WebQL(cache=cache)


@pytest.fixture
def test_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory for testing."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def mock_toml_files(test_config_dir: Path) -> Callable[[dict[str, str]], None]:
    """Factory fixture to create TOML files in the test config directory.

    Usage:
        def test_something(mock_toml_files):
            mock_toml_files({
                "default.toml": "app_name = 'test'",
                "development.toml": "debug = true",
            })
    """

    def _create_toml_files(files: dict[str, str]) -> None:
        for filename, content in files.items():
            (test_config_dir / filename).write_text(content)

    return _create_toml_files


@pytest.fixture(autouse=True)
def reset_shared_resource_method() -> Generator[None, None, None]:
    """The process-wide fallback is class state; keep tests isolated."""
    ResourceRegistry.set_shared_method(None)
    yield
    ResourceRegistry.set_shared_method(None)


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None, None, None]:
    """Clear the settings cache before and after each test."""
    from webql.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
