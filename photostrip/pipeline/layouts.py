import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List

import yaml

from photostrip.errors import UnknownLayout


@dataclass(frozen=True)
class LayoutPreset:
    """How many poses a strip holds and how they are arranged."""
    id: str
    pose_count: int
    grid_columns: int
    strip_width: int  # px

    def __post_init__(self):
        if self.pose_count <= 0:
            raise ValueError(f"Layout {self.id!r}: pose_count must be > 0, got {self.pose_count}")
        if self.grid_columns not in (1, 2):
            raise ValueError(f"Layout {self.id!r}: grid_columns must be 1 or 2, got {self.grid_columns}")
        if self.strip_width <= 0:
            raise ValueError(f"Layout {self.id!r}: strip_width must be > 0, got {self.strip_width}")

    @property
    def grid_rows(self) -> int:
        return -(-self.pose_count // self.grid_columns)


DEFAULT_LAYOUTS = (
    LayoutPreset("A", pose_count=4, grid_columns=2, strip_width=350),
    LayoutPreset("B", pose_count=3, grid_columns=1, strip_width=220),
    LayoutPreset("C", pose_count=2, grid_columns=1, strip_width=220),
    LayoutPreset("D", pose_count=6, grid_columns=2, strip_width=350),
)


class LayoutCatalog:
    """
    Static lookup table of layout presets.

    The catalog is the single source of truth for pose count and grid
    geometry: the session loop and the strip composer both resolve through it.
    """

    def __init__(self, presets: Iterable[LayoutPreset] = DEFAULT_LAYOUTS):
        self.log = logging.getLogger("LayoutCatalog")
        table: Dict[str, LayoutPreset] = {}
        for preset in presets:
            if preset.id in table:
                raise ValueError(f"Duplicate layout id: {preset.id!r}")
            table[preset.id] = preset
        if not table:
            raise ValueError("Layout catalog needs at least one preset")
        self._presets = table

    @classmethod
    def from_yaml(cls, path) -> "LayoutCatalog":
        """
        Build a catalog from a YAML document of the form::

            layouts:
              - {id: A, pose_count: 4, grid_columns: 2, strip_width: 350}
        """
        with open(Path(path), "r") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Layouts file {path} is not valid YAML: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Layouts file {path} must contain a mapping, got {type(data).__name__}")

        entries = data.get("layouts") or []
        presets: List[LayoutPreset] = []
        for n, entry in enumerate(entries):
            try:
                presets.append(
                    LayoutPreset(
                        id=str(entry["id"]),
                        pose_count=int(entry["pose_count"]),
                        grid_columns=int(entry.get("grid_columns", 1)),
                        strip_width=int(entry.get("strip_width", 220)),
                    )
                )
            except KeyError as e:
                raise ValueError(f"Layout entry {n} in {path} is missing key {e}") from e
            except (TypeError, AttributeError) as e:
                raise ValueError(f"Layout entry {n} in {path} is malformed: {e}") from e
        catalog = cls(presets)
        catalog.log.info(f"Loaded {len(presets)} layouts from {path}")
        return catalog

    def resolve(self, layout_id: str) -> LayoutPreset:
        """Return the preset for ``layout_id`` or raise UnknownLayout."""
        try:
            return self._presets[layout_id]
        except (KeyError, TypeError):
            raise UnknownLayout(layout_id) from None

    def ids(self) -> List[str]:
        return list(self._presets)

    def __contains__(self, layout_id) -> bool:
        return layout_id in self._presets

    def __iter__(self) -> Iterator[LayoutPreset]:
        return iter(self._presets.values())

    def __len__(self) -> int:
        return len(self._presets)
