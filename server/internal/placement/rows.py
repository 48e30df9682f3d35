"""
Greedy row filling.

A row is a straight run along one side of a parcel. Buildings are chosen at
random from the footprints that still fit, laid end to end with a fixed gap
between neighbours, until the leftover length is too short to try again.
"""

import random
from dataclasses import dataclass
from typing import Any, Dict, List

from .catalog import BuildingCatalog, BuildingFootprint
from .geometry import Vec3, add, scale
from .parcels import UsageTable

# Constants
MIN_REMAINING_LENGTH = 20.0  # rows stop once this much or less is left
MAX_USES_PER_PARCEL = 3  # copies of one building type per parcel


@dataclass
class Placement:
    """One building to instantiate under a parcel's container."""

    building_id: int
    position: Vec3
    rotation_yaw: float  # degrees about the vertical axis
    parcel_id: int
    area: str = "main"  # "main" or "additional"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "building_id": self.building_id,
            "position": list(self.position),
            "rotation_yaw": self.rotation_yaw,
            "parcel_id": self.parcel_id,
            "area": self.area,
        }


def eligible_footprints(
    catalog: BuildingCatalog,
    usage: UsageTable,
    parcel_id: int,
    function: int,
    floor_type: int,
    max_length: float,
) -> List[BuildingFootprint]:
    """Footprints that fit in ``max_length`` and are under the per-parcel cap."""
    return [
        footprint
        for footprint in catalog.filter(function, floor_type, max_length)
        if usage.count(parcel_id, footprint.id) < MAX_USES_PER_PARCEL
    ]


def fill_row(
    catalog: BuildingCatalog,
    usage: UsageTable,
    parcel_id: int,
    max_length: float,
    start: Vec3,
    direction: Vec3,
    function: int,
    floor_type: int,
    material: int,
    rotation_yaw: float,
    min_gap: float,
    rng: random.Random,
    area: str = "main",
) -> List[Placement]:
    """
    Fill a row with randomly chosen buildings.

    The first building sits flush against ``start``; every later one is
    preceded by ``min_gap``. Usage counts for ``parcel_id`` are incremented
    as buildings are placed.

    Args:
        catalog: Footprints to choose from
        usage: Per-parcel usage counters
        parcel_id: Parcel the counters are charged to
        max_length: Length available along the row
        start: Row start point
        direction: Unit vector the row extends along
        function: Required function code
        floor_type: Required floor type code
        material: Requested material code (not used for selection)
        rotation_yaw: Yaw given to every building in the row
        min_gap: Gap left between neighbouring buildings
        rng: Random source for selection
        area: Label attached to the placements

    Returns:
        Placements in row order, possibly empty
    """
    placements: List[Placement] = []
    current = start
    remaining = max_length

    while remaining > MIN_REMAINING_LENGTH:
        first = not placements
        search_length = remaining if first else remaining - min_gap

        candidates = eligible_footprints(
            catalog, usage, parcel_id, function, floor_type, search_length
        )
        if not candidates:
            break

        selected = rng.choice(candidates)
        lead = 0.0 if first else min_gap
        position = add(current, scale(direction, lead + selected.length / 2.0))

        placements.append(
            Placement(
                building_id=selected.id,
                position=position,
                rotation_yaw=rotation_yaw,
                parcel_id=parcel_id,
                area=area,
            )
        )
        usage.increment(parcel_id, selected.id)

        consumed = selected.length + lead
        current = add(current, scale(direction, consumed))
        remaining -= consumed

    return placements
