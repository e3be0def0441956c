"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, neurolint.toml only contains
overrides.  An empty file is a valid configuration.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

# --- neurolint.toml sections ---


class PipelineConfig(BaseModel):
    """[pipeline] section."""

    model_config = {"frozen": True}

    default_layers: list[int] = Field(default_factory=lambda: [1, 2, 3, 4])
    use_cache: bool = True
    slow_layer_ms: float = 10_000.0

    @field_validator("default_layers")
    @classmethod
    def _sorted_unique(cls, value: list[int]) -> list[int]:
        return sorted(set(value))


class CacheConfig(BaseModel):
    """[cache] section."""

    model_config = {"frozen": True}

    ttl_seconds: float = Field(default=300.0, gt=0)


class ValidatorConfig(BaseModel):
    """[validator] section."""

    model_config = {"frozen": True}

    max_lines: int = Field(default=50_000, gt=0)
    max_complexity_increase: int = 50

