"""Layer record, the immutable layer registry, and layer errors."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, replace

Transform = Callable[[str], str]


class LayerError(ValueError):
    """Raised by a layer that cannot transform its input."""


class RegistryError(ValueError):
    """Raised when a layer registry is built from inconsistent layers."""


@dataclass(frozen=True)
class Layer:
    """One ordered rewrite pass with a stable id."""

    id: int
    name: str
    description: str
    transform: Transform

    def __call__(self, code: str) -> str:
        return self.transform(code)


class LayerRegistry:
    """Immutable, id-ordered collection of layers.

    Built once at process start and passed by reference to the pipeline.
    Registry order (ascending id) always governs execution order,
    whatever order callers request ids in.
    """

    __slots__ = ("_by_id", "_layers")

    def __init__(self, layers: Iterable[Layer]) -> None:
        ordered = tuple(sorted(layers, key=lambda layer: layer.id))
        by_id: dict[int, Layer] = {}
        for layer in ordered:
            if layer.id in by_id:
                msg = f"Duplicate layer id {layer.id}: {by_id[layer.id].name!r}, {layer.name!r}"
                raise RegistryError(msg)
            by_id[layer.id] = layer
        self._layers = ordered
        self._by_id = by_id

    def __iter__(self) -> Iterator[Layer]:
        return iter(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    def __contains__(self, layer_id: object) -> bool:
        return layer_id in self._by_id

    def __repr__(self) -> str:
        return f"LayerRegistry(ids={list(self.ids)})"

    @property
    def ids(self) -> tuple[int, ...]:
        return tuple(layer.id for layer in self._layers)

    def get(self, layer_id: int) -> Layer:
        try:
            return self._by_id[layer_id]
        except KeyError:
            raise RegistryError(f"Unknown layer id {layer_id}") from None

    def select(self, layer_ids: Iterable[int]) -> list[Layer]:
        """Return the requested layers in registry order.

        Duplicates collapse and unknown ids are ignored.
        """
        wanted = set(layer_ids)
        return [layer for layer in self._layers if layer.id in wanted]

    def with_transform(self, layer_id: int, transform: Transform) -> LayerRegistry:
        """Return a new registry with one layer's transform swapped out."""
        original = self.get(layer_id)
        swapped = replace(original, transform=transform)
        return LayerRegistry(swapped if layer.id == layer_id else layer for layer in self._layers)
