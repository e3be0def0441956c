"""Shared pytest fixtures and test helpers for neurolint tests."""

from __future__ import annotations

from collections.abc import Generator

import pytest

from neurolint.layers.base import LayerRegistry
from neurolint.layers.registry import build_default_registry
from neurolint.services.cache import TransformationCache
from neurolint.services.pipeline import PipelineService
from neurolint.services.telemetry import _current_span, disable_telemetry


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TransformationCache:
    """Isolated cache driven by the fake clock."""
    return TransformationCache(ttl_seconds=300, clock=clock)


@pytest.fixture
def registry() -> LayerRegistry:
    return build_default_registry()


@pytest.fixture
def service(registry: LayerRegistry, cache: TransformationCache) -> PipelineService:
    """Pipeline on the default layers with an isolated cache."""
    return PipelineService(registry, cache)


@pytest.fixture(autouse=True)
def _reset_telemetry_state() -> Generator[None]:
    """Ensure no test leaks an enabled telemetry context."""
    yield
    disable_telemetry()
    _current_span.set(None)

