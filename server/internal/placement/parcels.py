"""
Parcel records and the store that owns their mutable bookkeeping.

Geometry and type flags are fixed once loaded. Usage counts live in a
separate table keyed by (parcel_id, building_id), so any record sharing a
parcel id (such as the additional area of a T=1 parcel) draws from the
same counters.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional, Tuple

from .geometry import Orientation, Vec3, classify_orientation

logger = logging.getLogger(__name__)

NO_SUMMARY_TEXT = "No design summary is available for this plot yet."


@dataclass
class Zoning:
    """Zoning assigned to a parcel by the planner (raw codes as strings)."""

    function: str
    floor_type: str
    material: str
    energy_consumption: int = 0  # 1-100 estimate, 0 when unknown


@dataclass
class Parcel:
    """A rectangular lot that buildings are placed on."""

    id: int
    length: float  # long axis, rows are filled along it
    width: float
    position: Vec3
    orientation: Optional[Orientation]
    world_yaw: float
    type_t: int = 0
    type_s: int = 0
    authored_angle: float = 0.0
    zoning: Optional[Zoning] = None
    summary: str = ""

    @classmethod
    def create(
        cls,
        parcel_id: int,
        length: float,
        width: float,
        position: Vec3,
        rotation_y: float,
        type_t: int = 0,
        type_s: int = 0,
        world_yaw: Optional[float] = None,
    ) -> "Parcel":
        """
        Build a parcel from its authored values.

        Args:
            rotation_y: Authored yaw; classified into an Orientation
            world_yaw: Yaw of the parcel in the scene, if it differs from
                the authored one

        Returns:
            Parcel, with orientation None when rotation_y is not cardinal
        """
        orientation = classify_orientation(rotation_y)
        if orientation is None:
            logger.warning(
                "Parcel %s has unsupported rotation %.2f; only a special building can be placed on it",
                parcel_id,
                rotation_y,
            )
        return cls(
            id=parcel_id,
            length=float(length),
            width=float(width),
            position=(float(position[0]), float(position[1]), float(position[2])),
            orientation=orientation,
            world_yaw=float(rotation_y if world_yaw is None else world_yaw),
            type_t=int(type_t),
            type_s=int(type_s),
            authored_angle=float(rotation_y),
        )


class UsageTable:
    """Placement counters keyed by (parcel_id, building_id)."""

    def __init__(self):
        self._counts: Dict[Tuple[int, int], int] = {}

    def count(self, parcel_id: int, building_id: int) -> int:
        return self._counts.get((parcel_id, building_id), 0)

    def increment(self, parcel_id: int, building_id: int) -> int:
        key = (parcel_id, building_id)
        self._counts[key] = self._counts.get(key, 0) + 1
        return self._counts[key]

    def for_parcel(self, parcel_id: int) -> Dict[int, int]:
        return {bid: n for (pid, bid), n in self._counts.items() if pid == parcel_id}

    def clear(self) -> None:
        self._counts.clear()

    def __len__(self) -> int:
        return len(self._counts)


class ParcelStore:
    """Parcels keyed by id, plus their usage counts, zoning and summaries."""

    def __init__(self, parcels: Iterable[Parcel] = ()):
        self._parcels: Dict[int, Parcel] = {}
        self.usage = UsageTable()
        for parcel in parcels:
            if parcel.id in self._parcels:
                raise ValueError(f"Duplicate parcel id {parcel.id}")
            self._parcels[parcel.id] = parcel

    def __len__(self) -> int:
        return len(self._parcels)

    def __contains__(self, parcel_id: int) -> bool:
        return parcel_id in self._parcels

    def __iter__(self) -> Iterator[Parcel]:
        return iter(self._parcels.values())

    def get(self, parcel_id: int) -> Optional[Parcel]:
        return self._parcels.get(parcel_id)

    def set_zoning(
        self,
        parcel_id: int,
        function: str,
        floor_type: str,
        material: str,
        energy_consumption: int = 0,
    ) -> bool:
        parcel = self._parcels.get(parcel_id)
        if parcel is None:
            logger.error("set_zoning: parcel %s not found", parcel_id)
            return False
        parcel.zoning = Zoning(
            str(function), str(floor_type), str(material), int(energy_consumption)
        )
        return True

    def set_summary(self, parcel_id: int, text: Optional[str]) -> bool:
        parcel = self._parcels.get(parcel_id)
        if parcel is None:
            logger.error("set_summary: parcel %s not found, summary not stored", parcel_id)
            return False
        parcel.summary = text or ""
        return True

    def get_summary(self, parcel_id: int) -> str:
        parcel = self._parcels.get(parcel_id)
        if parcel is None:
            return f"Information for land plot ID {parcel_id} not found."
        return parcel.summary or NO_SUMMARY_TEXT

    def increment_usage(self, parcel_id: int, building_id: int) -> int:
        return self.usage.increment(parcel_id, building_id)

    def usage_count(self, parcel_id: int, building_id: int) -> int:
        return self.usage.count(parcel_id, building_id)

    def clear_all(self) -> None:
        """Reset usage counts and summaries; geometry and zoning are kept."""
        self.usage.clear()
        for parcel in self._parcels.values():
            parcel.summary = ""
