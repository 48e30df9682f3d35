"""
Parcel placement dispatcher.

Routes each parcel to one of four layouts based on its type flags and the
requested function:

* S=1 parcels get a single building from a small pool of special types,
  each of which may appear only once per session.
* Cultural parcels (function 4) get 72 x 72 modules, either repeated along
  the parcel (T=0) or in a fixed L/T-shaped cluster (T=1).
* Every other parcel is filled with one or two greedy rows.
* T=1 parcels that are not cultural also get an additional area with two
  perpendicular rows, sharing usage caps with the main parcel.
"""

import dataclasses
import logging
import math
import random
from typing import List, Optional, Sequence, Tuple, Union

from . import geometry
from .catalog import FUNCTION_CULTURAL, BuildingCatalog
from .parcels import Parcel, ParcelStore
from .rows import Placement, fill_row
from .seeds import seeded_random
from .session import PlacementSession

logger = logging.getLogger(__name__)

# Constants
DEFAULT_MIN_GAP = 10.0
DEFAULT_SPECIAL_IDS = (235, 236)
MAX_SPECIAL_USES_PER_PARCEL = 2
DOUBLE_ROW_WIDTH = 72.0  # parcels this wide take a second row
CULTURAL_PARCEL_WIDTH = 72.0
ADDITIONAL_AREA_LENGTH = 100.0
ADDITIONAL_AREA_WIDTH = 72.0
WIDTH_TOLERANCE = 1e-3

ZoningCode = Union[int, str]


class ZoningFormatError(ValueError):
    """A zoning code supplied by the planner is not an integer."""


def parse_zoning_code(name: str, value: ZoningCode) -> int:
    """Convert a planner-supplied code such as "2" into an int."""
    if isinstance(value, bool):
        raise ZoningFormatError(f"Invalid {name} code: {value!r}")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ZoningFormatError(f"Invalid {name} code: {value!r}") from None


def approximately(value: float, target: float) -> bool:
    return math.isclose(value, target, abs_tol=WIDTH_TOLERANCE)


class PlacementEngine:
    """Places buildings on parcels and keeps the bookkeeping that goes with it."""

    def __init__(
        self,
        catalog: BuildingCatalog,
        store: ParcelStore,
        session: Optional[PlacementSession] = None,
        rng: Optional[random.Random] = None,
        min_gap: float = DEFAULT_MIN_GAP,
        special_ids: Sequence[int] = DEFAULT_SPECIAL_IDS,
        seed: Optional[int] = None,
    ):
        self.catalog = catalog
        self.store = store
        self.session = session if session is not None else PlacementSession()
        self.seed = seed
        self.rng = rng if rng is not None else seeded_random(seed)
        self.min_gap = float(min_gap)
        self.special_ids: Tuple[int, ...] = tuple(special_ids)
        self.plans_applied = 0

    def set_summary(self, parcel_id: int, text: Optional[str]) -> bool:
        return self.store.set_summary(parcel_id, text)

    def get_summary(self, parcel_id: int) -> str:
        return self.store.get_summary(parcel_id)

    def set_zoning(
        self,
        parcel_id: int,
        function: str,
        floor_type: str,
        material: str,
        energy_consumption: int = 0,
    ) -> bool:
        return self.store.set_zoning(
            parcel_id, function, floor_type, material, energy_consumption
        )

    def usage_count(self, parcel_id: int, building_id: int) -> int:
        return self.store.usage_count(parcel_id, building_id)

    def clear_all(self) -> None:
        """Forget all usage, summaries and used special/cultural ids."""
        self.store.clear_all()
        self.session.reset()
        logger.info("Cleared placement state for %d parcels", len(self.store))

    def place_on_parcel(
        self,
        parcel_id: int,
        function: ZoningCode,
        floor_type: ZoningCode,
        material: ZoningCode,
        rng: Optional[random.Random] = None,
    ) -> List[Placement]:
        """
        Decide which buildings go on a parcel.

        Args:
            parcel_id: Parcel to build on
            function: Function code (1-4), int or numeric string
            floor_type: Floor type code (1-4), int or numeric string
            material: Material code (1-2), int or numeric string
            rng: Random source for this call; defaults to the engine's

        Returns:
            Placements in spawn order; empty when nothing could be placed

        Raises:
            ZoningFormatError: if any code is not an integer
        """
        function_code = parse_zoning_code("function", function)
        floor_code = parse_zoning_code("floor type", floor_type)
        material_code = parse_zoning_code("material", material)
        rng = rng if rng is not None else self.rng

        if len(self.catalog) == 0:
            logger.error("Building catalog is empty; cannot place buildings")
            return []
        if len(self.store) == 0:
            logger.error("Parcel store has not been initialised; cannot place buildings")
            return []

        parcel = self.store.get(parcel_id)
        if parcel is None:
            logger.error("Parcel %s not found; known parcels: %d", parcel_id, len(self.store))
            return []

        if parcel.type_s == 1:
            return self.place_special(parcel, rng)

        if parcel.orientation is None:
            logger.warning(
                "Parcel %s has unsupported rotation %.2f; skipping",
                parcel.id,
                parcel.authored_angle,
            )
            return []

        placements: List[Placement] = []
        if function_code == FUNCTION_CULTURAL:
            placements.extend(self.place_cultural(parcel, rng))
        else:
            placements.extend(
                self.place_standard(parcel, function_code, floor_code, material_code, rng)
            )
            if parcel.type_t == 1:
                placements.extend(
                    self.place_additional(parcel, function_code, floor_code, material_code, rng)
                )
        return placements

    def place_special(self, parcel: Parcel, rng: random.Random) -> List[Placement]:
        """Place one building from the special pool at the parcel centre."""
        available = [
            building_id
            for building_id in self.special_ids
            if not self.session.is_special_used(building_id)
            and self.store.usage_count(parcel.id, building_id) < MAX_SPECIAL_USES_PER_PARCEL
        ]
        if not available:
            logger.warning(
                "Special buildings %s are all used or at their limit on parcel %s",
                "/".join(str(i) for i in self.special_ids),
                parcel.id,
            )
            return []

        selected = rng.choice(available)
        if selected not in self.catalog:
            logger.error(
                "Special building %s is not in the catalog; nothing placed on parcel %s",
                selected,
                parcel.id,
            )
            return []

        self.session.mark_special(selected)
        self.store.increment_usage(parcel.id, selected)

        position = geometry.add(parcel.position, geometry.special_offset(parcel.orientation))
        return [Placement(selected, position, parcel.world_yaw, parcel.id)]

    def place_cultural(self, parcel: Parcel, rng: random.Random) -> List[Placement]:
        """Place 72 x 72 cultural modules in the pattern given by the parcel's T flag."""
        if not approximately(parcel.width, CULTURAL_PARCEL_WIDTH):
            logger.error(
                "Cultural parcel %s (position %s) has width %.2f, expected 72; "
                "cannot place cultural buildings",
                parcel.id,
                parcel.position,
                parcel.width,
            )
            return []

        if parcel.type_t == 1:
            offsets = geometry.cultural_cluster_offsets(parcel.orientation)
        else:
            slots = int(math.floor(parcel.length / geometry.CULTURAL_MODULE))
            if slots == 0:
                logger.warning(
                    "Parcel %s (T=0, length %.2f) is too short for a 72 x 72 cultural building",
                    parcel.id,
                    parcel.length,
                )
                return []
            spacing = geometry.CULTURAL_MODULE + self.min_gap
            offsets = [
                geometry.cultural_module_offset(parcel.orientation, i, spacing)
                for i in range(slots)
            ]

        placements: List[Placement] = []
        for offset in offsets:
            candidates = self.catalog.with_function(FUNCTION_CULTURAL)
            if not candidates:
                continue
            selected = rng.choice(candidates)
            self.session.mark_cultural(selected.id)
            self.store.increment_usage(parcel.id, selected.id)
            position = geometry.add(parcel.position, offset)
            placements.append(Placement(selected.id, position, parcel.world_yaw, parcel.id))

        if not placements:
            logger.warning(
                "Parcel %s: planned %d cultural positions but placed none",
                parcel.id,
                len(offsets),
            )
        return placements

    def place_standard(
        self,
        parcel: Parcel,
        function: int,
        floor_type: int,
        material: int,
        rng: random.Random,
    ) -> List[Placement]:
        """Fill the first row, and the second when the parcel is double width."""
        row1, row2, direction = geometry.row_starts(parcel.orientation, parcel.position)

        starts = [row1]
        if approximately(parcel.width, DOUBLE_ROW_WIDTH):
            starts.append(row2)

        placements: List[Placement] = []
        for start in starts:
            row = self._fill(parcel, start, direction, function, floor_type, material,
                             parcel.world_yaw, rng, area="main")
            if not row:
                logger.warning(
                    "No footprint for function %s / floor type %s fits on parcel %s",
                    function,
                    floor_type,
                    parcel.id,
                )
            placements.extend(row)
        return placements

    def place_additional(
        self,
        parcel: Parcel,
        function: int,
        floor_type: int,
        material: int,
        rng: random.Random,
    ) -> List[Placement]:
        """Fill two perpendicular rows in the additional area of a T=1 parcel."""
        row1 = geometry.additional_row_start(
            parcel.orientation, parcel.position, geometry.ROW_HALF_OFFSET
        )
        row2 = geometry.additional_row_start(
            parcel.orientation, parcel.position, geometry.ROW_FULL_OFFSET
        )
        # Same id as the parent, so usage caps are shared
        area = dataclasses.replace(
            parcel,
            length=ADDITIONAL_AREA_LENGTH,
            width=ADDITIONAL_AREA_WIDTH,
            position=row1,
            orientation=parcel.orientation.rotated(90.0),
            world_yaw=parcel.world_yaw + 90.0,
        )
        direction = geometry.placement_direction(area.orientation)

        placements: List[Placement] = []
        for start in (row1, row2):
            placements.extend(
                self._fill(area, start, direction, function, floor_type, material,
                           area.world_yaw, rng, area="additional")
            )
        return placements

    def _fill(
        self,
        parcel: Parcel,
        start: geometry.Vec3,
        direction: geometry.Vec3,
        function: int,
        floor_type: int,
        material: int,
        rotation_yaw: float,
        rng: random.Random,
        area: str,
    ) -> List[Placement]:
        return fill_row(
            self.catalog,
            self.store.usage,
            parcel.id,
            parcel.length,
            start,
            direction,
            function,
            floor_type,
            material,
            rotation_yaw,
            self.min_gap,
            rng,
            area=area,
        )
