"""
Building footprint catalog.
Read-only lookup of the building types that can be placed on parcels.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional

# Function codes
FUNCTION_RESIDENTIAL = 1
FUNCTION_COMMERCIAL = 2
FUNCTION_PUBLIC = 3
FUNCTION_CULTURAL = 4

FUNCTION_NAMES = {
    FUNCTION_RESIDENTIAL: "residential",
    FUNCTION_COMMERCIAL: "commercial",
    FUNCTION_PUBLIC: "public",
    FUNCTION_CULTURAL: "cultural",
}

# Floor type codes: 1 low-rise, 2 mid-rise, 3 high-rise, 4 super high-rise
FLOOR_TYPES = (1, 2, 3, 4)

# Material codes
MATERIAL_GLASS = 1
MATERIAL_CONCRETE = 2


@dataclass(frozen=True)
class BuildingFootprint:
    """A building type and the space it needs."""

    id: int
    length: float  # extent consumed along a row
    width: float
    function: int
    floor_type: int
    material: int
    name: str = ""
    height: Optional[float] = None


class BuildingCatalog:
    """Building footprints keyed by type id."""

    def __init__(self, footprints: Iterable[BuildingFootprint] = ()):
        self._footprints: Dict[int, BuildingFootprint] = {}
        for footprint in footprints:
            if footprint.id in self._footprints:
                raise ValueError(f"Duplicate building id {footprint.id} in catalog")
            if footprint.length <= 0 or footprint.width <= 0:
                raise ValueError(
                    f"Building {footprint.id} has non-positive dimensions "
                    f"({footprint.length} x {footprint.width})"
                )
            self._footprints[footprint.id] = footprint

    def __len__(self) -> int:
        return len(self._footprints)

    def __contains__(self, building_id: int) -> bool:
        return building_id in self._footprints

    def __iter__(self) -> Iterator[BuildingFootprint]:
        return iter(self._footprints.values())

    def get(self, building_id: int) -> Optional[BuildingFootprint]:
        return self._footprints.get(building_id)

    def filter(self, function: int, floor_type: int, max_length: float) -> List[BuildingFootprint]:
        """Footprints of the given function and floor type no longer than ``max_length``."""
        return [
            footprint
            for footprint in self._footprints.values()
            if footprint.function == function
            and footprint.floor_type == floor_type
            and footprint.length <= max_length
        ]

    def with_function(self, function: int) -> List[BuildingFootprint]:
        return [f for f in self._footprints.values() if f.function == function]
