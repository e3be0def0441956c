"""The default, process-wide layer registry.

Built once at import time; callers receive it through
:func:`get_default_registry` and pass it to the pipeline explicitly.
"""

from __future__ import annotations

from neurolint.layers import components, config, entities, hydration, nextjs, quality
from neurolint.layers.base import Layer, LayerRegistry

CONFIG_LAYER = 1
ENTITY_LAYER = 2
COMPONENT_LAYER = 3
HYDRATION_LAYER = 4
NEXTJS_LAYER = 5
QUALITY_LAYER = 6


def build_default_registry() -> LayerRegistry:
    return LayerRegistry(
        [
            Layer(
                id=CONFIG_LAYER,
                name="Configuration Validation",
                description=(
                    "Optimizes TypeScript, Next.js config, and package.json with modern settings."
                ),
                transform=config.transform,
            ),
            Layer(
                id=ENTITY_LAYER,
                name="Pattern & Entity Fixes",
                description="Cleans up HTML entities and escaped punctuation in source text.",
                transform=entities.transform,
            ),
            Layer(
                id=COMPONENT_LAYER,
                name="Component Best Practices",
                description="Adds missing key props, image alt text, and missing hook imports.",
                transform=components.transform,
            ),
            Layer(
                id=HYDRATION_LAYER,
                name="Hydration & SSR Guard",
                description="Fixes hydration bugs and adds SSR/localStorage protection.",
                transform=hydration.transform,
            ),
            Layer(
                id=NEXTJS_LAYER,
                name="Next.js Optimization",
                description=(
                    "Optimizes Next.js App Router patterns, 'use client' directives, "
                    "and import order."
                ),
                transform=nextjs.transform,
            ),
            Layer(
                id=QUALITY_LAYER,
                name="Quality & Performance",
                description="Adds error handling, loading states, and export hygiene.",
                transform=quality.transform,
            ),
        ]
    )


_DEFAULT_REGISTRY = build_default_registry()


def get_default_registry() -> LayerRegistry:
    return _DEFAULT_REGISTRY
