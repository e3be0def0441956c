"""PipelineService: drives the enabled layers over one text.

Layers run strictly sequentially in ascending id order, each on the
previous layer's output.  Three error tiers:

1. Per-layer isolation: an exception inside a layer becomes that layer's
   ``success=False`` result and the running text stays at its pre-layer
   value.  Nothing retries.
2. Advisory revert: the validator's recommendation is only acted on when
   the caller opts in with ``revert_on_risk=True``.
3. Boundary inputs: ``run`` expects text; anything else is unsupported.
"""

from __future__ import annotations

import time
import uuid
from collections.abc import Iterable
from typing import TYPE_CHECKING

import structlog

from neurolint.domain.models import LayerResult, PipelineRun
from neurolint.layers.base import Layer, LayerRegistry
from neurolint.layers.registry import (
    HYDRATION_LAYER,
    NEXTJS_LAYER,
    QUALITY_LAYER,
    get_default_registry,
)
from neurolint.services._helpers import calculate_changes, detect_improvements
from neurolint.services.cache import TransformationCache, cache_key, get_default_cache
from neurolint.services.telemetry import trace_span, traced
from neurolint.services.validation import CodeValidator, RevertCheck, get_default_validator

if TYPE_CHECKING:
    from neurolint.config.settings import NeuroLintSettings

log = structlog.get_logger(__name__)

DEFAULT_LAYERS: tuple[int, ...] = (1, 2, 3, 4)
DEFAULT_SLOW_LAYER_MS = 10_000.0

LENIENT_LAYERS = frozenset({HYDRATION_LAYER, NEXTJS_LAYER})
ADVANCED_LAYERS = frozenset({QUALITY_LAYER})


def check_for_layer(layer_id: int, validator: CodeValidator | None = None) -> RevertCheck:
    """Pick the revert check appropriate to a layer.

    Environment-guard and framework-convention layers get the lenient
    check and the quality layer the advanced conflict checks.  Every other
    layer uses the standard comparison.
    """
    v = validator or get_default_validator()
    if layer_id in LENIENT_LAYERS:
        return v.lenient_validation
    if layer_id in ADVANCED_LAYERS:
        return v.validate_advanced_transform
    return v.compare_before_after


class PipelineService:
    """Runs an injected layer registry with an injected cache."""

    def __init__(
        self,
        registry: LayerRegistry,
        cache: TransformationCache | None = None,
        *,
        validator: CodeValidator | None = None,
        default_layers: Iterable[int] = DEFAULT_LAYERS,
        slow_layer_ms: float = DEFAULT_SLOW_LAYER_MS,
        cache_enabled: bool = True,
    ) -> None:
        self._registry = registry
        self._cache = cache if cache is not None else TransformationCache()
        self._validator = validator or get_default_validator()
        self._default_layers = tuple(default_layers)
        self._slow_layer_ms = slow_layer_ms
        self._cache_enabled = cache_enabled

    @classmethod
    def default(cls) -> PipelineService:
        """Default registry, process-wide cache, code-baked defaults."""
        return cls(get_default_registry(), get_default_cache())

    @classmethod
    def from_settings(
        cls,
        settings: NeuroLintSettings,
        *,
        registry: LayerRegistry | None = None,
        cache: TransformationCache | None = None,
    ) -> PipelineService:
        """Build a service from :class:`~neurolint.config.settings.NeuroLintSettings`."""
        return cls(
            registry if registry is not None else get_default_registry(),
            cache if cache is not None else TransformationCache(settings.cache.ttl_seconds),
            validator=CodeValidator(
                max_lines=settings.validator.max_lines,
                max_complexity_increase=settings.validator.max_complexity_increase,
            ),
            default_layers=settings.pipeline.default_layers,
            slow_layer_ms=settings.pipeline.slow_layer_ms,
            cache_enabled=settings.pipeline.use_cache,
        )

    @property
    def registry(self) -> LayerRegistry:
        return self._registry

    @property
    def cache(self) -> TransformationCache:
        return self._cache

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @traced
    def run(
        self,
        input_text: str,
        enabled_layer_ids: Iterable[int] | None = None,
        use_cache: bool = True,
        *,
        file_path: str | None = None,
        revert_on_risk: bool = False,
    ) -> PipelineRun:
        """Apply the enabled layers to *input_text*.

        ``enabled_layer_ids`` may be in any order and contain duplicates
        or unknown ids; registry order governs execution.  ``file_path``
        is a caller hint and is not used.  A cache hit returns the cached
        text with an empty ``results`` list; a service built with
        ``cache_enabled=False`` never reads or writes the cache.
        """
        requested = self._default_layers if enabled_layer_ids is None else tuple(enabled_layer_ids)
        layers = self._registry.select(requested)
        enabled = [layer.id for layer in layers]

        structlog.contextvars.bind_contextvars(run_id=uuid.uuid4().hex[:12])
        try:
            variant = "revert" if revert_on_risk else ""
            key: str | None = None
            if use_cache and self._cache_enabled:
                key = cache_key(input_text, enabled, variant=variant)
            if key is not None:
                cached = self._cache.get(key)
                if cached is not None:
                    log.debug("pipeline.cache_hit", layers=enabled)
                    return PipelineRun(
                        input_text=input_text,
                        enabled_layer_ids=enabled,
                        output_text=cached,
                        layer_outputs=[input_text, cached],
                        cache_hit=True,
                    )

            current = input_text
            results: list[LayerResult] = []
            outputs = [input_text]
            for layer in layers:
                result, current = self._apply(layer, current, revert_on_risk=revert_on_risk)
                results.append(result)
                outputs.append(current)

            self._warn_on_regression(input_text, current)

            if key is not None:
                self._cache.set(key, current)

            log.debug(
                "pipeline.complete",
                layers=enabled,
                failed=[r.layer_id for r in results if not r.success],
                changed=current != input_text,
            )
            return PipelineRun(
                input_text=input_text,
                enabled_layer_ids=enabled,
                output_text=current,
                results=results,
                layer_outputs=outputs,
            )
        finally:
            structlog.contextvars.unbind_contextvars("run_id")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply(self, layer: Layer, before: str, *, revert_on_risk: bool) -> tuple[LayerResult, str]:
        """Run one layer; return its result and the new running text."""
        with trace_span(f"layer_{layer.id}") as span:
            start = time.perf_counter()
            try:
                after = layer.transform(before)
            except Exception as exc:
                elapsed = (time.perf_counter() - start) * 1000
                log.warning("layer.failed", layer_id=layer.id, layer=layer.name, error=str(exc))
                if span is not None:
                    span.annotate("success", False)
                return (
                    LayerResult(
                        layer_id=layer.id,
                        name=layer.name,
                        description=layer.description,
                        success=False,
                        execution_time_ms=elapsed,
                        message=f"Layer failed: {exc}",
                    ),
                    before,
                )
            elapsed = (time.perf_counter() - start) * 1000

            message: str | None = None
            improvements = detect_improvements(before, after)
            success = True
            if revert_on_risk and after != before:
                decision = check_for_layer(layer.id, self._validator)(before, after)
                if decision.should_revert:
                    log.warning(
                        "layer.reverted",
                        layer_id=layer.id,
                        risk=str(decision.risk_level),
                        reason=decision.reason,
                    )
                    after = before
                    success = False
                    message = f"Transformation reverted: {decision.reason}"
                    improvements = ["Prevented code corruption"]

            if elapsed > self._slow_layer_ms:
                log.warning("layer.slow", layer_id=layer.id, duration_ms=round(elapsed, 2))

            change_count = calculate_changes(before, after)
            if span is not None:
                span.annotate("success", success)
                span.annotate("change_count", change_count)

        return (
            LayerResult(
                layer_id=layer.id,
                name=layer.name,
                description=layer.description,
                success=success,
                change_count=change_count,
                execution_time_ms=elapsed,
                message=message,
                improvements=improvements,
            ),
            after,
        )

    def _warn_on_regression(self, input_text: str, output_text: str) -> None:
        if input_text == output_text:
            return
        initial = self._validator.validate(input_text)
        final = self._validator.validate(output_text)
        if not final.is_valid and len(final.errors) > len(initial.errors):
            log.warning(
                "pipeline.more_errors_than_input",
                before=len(initial.errors),
                after=len(final.errors),
            )
