"""neurolint: layered, safety-checked source transformation pipeline."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from collections.abc import Iterable

    from neurolint.domain.models import PipelineRun


def run(
    input_text: str,
    enabled_layer_ids: Iterable[int] | None = None,
    use_cache: bool = True,
    *,
    file_path: str | None = None,
) -> PipelineRun:
    """Run the default pipeline (default registry, process-wide cache)."""
    from neurolint.services.pipeline import PipelineService

    return PipelineService.default().run(
        input_text,
        enabled_layer_ids,
        use_cache,
        file_path=file_path,
    )
