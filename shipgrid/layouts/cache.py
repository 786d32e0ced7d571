from dataclasses import dataclass, field
from typing import Dict, Optional

from shipgrid.domain.heatmap import HeatMap

from .builder import BuildResult
from .definition import LayoutDefinition


@dataclass
class LayoutRuntime:
    definition: LayoutDefinition
    result: BuildResult
    _heatmap: Optional[HeatMap] = field(default=None, repr=False)

    @property
    def heatmap(self) -> HeatMap:
        if self._heatmap is None:
            self._heatmap = HeatMap.from_boards(self.result.boards)
        return self._heatmap


class PlacementCache:
    def __init__(self):
        self._cache: Dict[str, LayoutRuntime] = {}

    def _key(self, layout: LayoutDefinition) -> str:
        return f"{layout.layout_hash}:{layout.layout_version}"

    def get(self, layout: LayoutDefinition) -> LayoutRuntime:
        key = self._key(layout)
        if key not in self._cache:
            result = layout.to_builder().build()
            self._cache[key] = LayoutRuntime(layout, result)
        return self._cache[key]

    def clear(self) -> None:
        self._cache.clear()


DEFAULT_PLACEMENT_CACHE = PlacementCache()
