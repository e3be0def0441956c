"""Frozen result records produced by the pipeline and the validator.

INVARIANT: every record here is immutable once produced.
Callers (UI widgets, batch processors) consume them via
``model_dump()`` / ``model_dump_json()``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from neurolint.domain.types import RiskLevel


class LayerResult(BaseModel):
    """Outcome of one attempted layer within a single pipeline run.

    Attributes:
        layer_id: Stable id of the layer (defines execution order).
        success: False when the layer raised or its output was reverted.
        change_count: Index-aligned line differences plus the length delta.
        execution_time_ms: Wall time spent inside the layer's transform.
        message: Failure or revert explanation, if any.
        improvements: Human-readable notes on what the layer changed.
    """

    model_config = {"frozen": True}

    layer_id: int
    name: str
    description: str
    success: bool
    change_count: int = 0
    execution_time_ms: float = 0.0
    message: str | None = None
    improvements: list[str] = Field(default_factory=list)


class PipelineRun(BaseModel):
    """One execution of the enabled layer subset over one input text.

    ``results`` is empty when ``cache_hit`` is True: diagnostics only
    exist for fresh runs.  ``layer_outputs`` starts with the input and
    records the running text after every attempted layer.
    """

    model_config = {"frozen": True}

    input_text: str
    enabled_layer_ids: list[int] = Field(default_factory=list)
    output_text: str
    results: list[LayerResult] = Field(default_factory=list)
    layer_outputs: list[str] = Field(default_factory=list)
    cache_hit: bool = False
    meta: dict[str, Any] | None = None

    @property
    def changed(self) -> bool:
        return self.output_text != self.input_text

    @property
    def failed_layers(self) -> list[int]:
        return [r.layer_id for r in self.results if not r.success]


class ValidationReport(BaseModel):
    """Structural risk classification of a single text."""

    model_config = {"frozen": True}

    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    corruption_detected: bool = False
    performance_issues: list[str] = Field(default_factory=list)
    security_issues: list[str] = Field(default_factory=list)


class RevertMetrics(BaseModel):
    """Numbers behind a revert recommendation."""

    model_config = {"frozen": True}

    lines_changed: int = 0
    complexity_delta: int = 0
    error_count: int = 0


class RevertDecision(BaseModel):
    """Advisory accept/revert recommendation for a (before, after) pair."""

    model_config = {"frozen": True}

    should_revert: bool
    risk_level: RiskLevel
    reason: str | None = None
    metrics: RevertMetrics = Field(default_factory=RevertMetrics)
