"""
Orientation and offset helpers for parcel layouts.

All positions are world-space (x, y, z) tuples with y up. Parcels are
authored with a yaw of 0, 90, 180 or 270 degrees; the helpers here map a
yaw to the axis rows are filled along and to the fixed offsets the
special and cultural layouts use. Footprints are projected onto the X/Z
plane as shapely polygons for containment checks.
"""

from enum import Enum
from typing import List, Optional, Tuple

import shapely.geometry as sg

Vec3 = Tuple[float, float, float]

# Constants
ANGLE_TOLERANCE = 1.0  # degrees either side of a cardinal angle
ROW_HALF_OFFSET = 36.0  # centre line of the first row
ROW_FULL_OFFSET = 72.0  # centre line of the second row
ADDITIONAL_AREA_OFFSET = 100.0  # distance from the anchor to the additional area
SPECIAL_OFFSET = 86.0  # half of a 172 x 172 special parcel
CULTURAL_MODULE = 72.0  # cultural buildings are 72 x 72 modules


class Orientation(Enum):
    """Cardinal parcel yaw in degrees."""

    DEG_0 = 0
    DEG_90 = 90
    DEG_180 = 180
    DEG_270 = 270

    @property
    def degrees(self) -> float:
        return float(self.value)

    def rotated(self, degrees: float) -> Optional["Orientation"]:
        """Orientation after adding ``degrees`` of yaw."""
        return classify_orientation(self.value + degrees)


def normalize_angle(angle: float) -> float:
    """Wrap an angle into [0, 360)."""
    normalized = angle % 360.0
    # -1e-9 % 360 rounds to 360.0
    if normalized >= 360.0:
        normalized -= 360.0
    return normalized


def classify_orientation(angle: float) -> Optional[Orientation]:
    """
    Match an angle to a cardinal orientation.

    Args:
        angle: Yaw in degrees, any range

    Returns:
        The matching Orientation, or None if the angle is further than
        ANGLE_TOLERANCE from every cardinal value
    """
    normalized = normalize_angle(angle)
    for orientation in Orientation:
        delta = abs(normalized - orientation.value)
        # 359.5 is within tolerance of 0
        delta = min(delta, 360.0 - delta)
        if delta < ANGLE_TOLERANCE:
            return orientation
    return None


_DIRECTIONS = {
    Orientation.DEG_0: (1.0, 0.0, 0.0),
    Orientation.DEG_90: (0.0, 0.0, -1.0),
    Orientation.DEG_180: (-1.0, 0.0, 0.0),
    Orientation.DEG_270: (0.0, 0.0, 1.0),
}

# Rows are stacked across the parcel, perpendicular to the fill direction
_ACROSS = {
    Orientation.DEG_0: (0.0, 0.0, 1.0),
    Orientation.DEG_90: (1.0, 0.0, 0.0),
    Orientation.DEG_180: (0.0, 0.0, -1.0),
    Orientation.DEG_270: (-1.0, 0.0, 0.0),
}

_SPECIAL_OFFSETS = {
    Orientation.DEG_0: (SPECIAL_OFFSET, 0.0, SPECIAL_OFFSET),
    Orientation.DEG_90: (SPECIAL_OFFSET, 0.0, -SPECIAL_OFFSET),
    Orientation.DEG_180: (-SPECIAL_OFFSET, 0.0, -SPECIAL_OFFSET),
    Orientation.DEG_270: (-SPECIAL_OFFSET, 0.0, SPECIAL_OFFSET),
}

# L/T-shaped cluster of four cultural modules on T=1 parcels
_CULTURAL_CLUSTERS = {
    Orientation.DEG_0: (
        (36.0, 0.0, 36.0),
        (136.0, 0.0, 36.0),
        (236.0, 0.0, 36.0),
        (136.0, 0.0, -64.0),
    ),
    Orientation.DEG_90: (
        (36.0, 0.0, -36.0),
        (36.0, 0.0, -136.0),
        (36.0, 0.0, -236.0),
        (-64.0, 0.0, -136.0),
    ),
    Orientation.DEG_180: (
        (-36.0, 0.0, -36.0),
        (-136.0, 0.0, -36.0),
        (-236.0, 0.0, -36.0),
        (-136.0, 0.0, 64.0),
    ),
    Orientation.DEG_270: (
        (-36.0, 0.0, 36.0),
        (-36.0, 0.0, 136.0),
        (-36.0, 0.0, 236.0),
        (64.0, 0.0, 136.0),
    ),
}


def add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def scale(v: Vec3, factor: float) -> Vec3:
    return (v[0] * factor, v[1] * factor, v[2] * factor)


def placement_direction(orientation: Orientation) -> Vec3:
    """Unit vector successive buildings in a row are laid out along."""
    return _DIRECTIONS[orientation]


def across_direction(orientation: Orientation) -> Vec3:
    """Unit vector from a parcel's anchor edge towards its far side."""
    return _ACROSS[orientation]


def row_starts(orientation: Orientation, position: Vec3) -> Tuple[Vec3, Vec3, Vec3]:
    """
    Start points of the two rows of a parcel and their fill direction.

    Args:
        orientation: Parcel orientation
        position: Parcel anchor point

    Returns:
        (row1_start, row2_start, direction); row 1 runs 36 units across
        the parcel, row 2 runs 72 units across
    """
    across = across_direction(orientation)
    row1 = add(position, scale(across, ROW_HALF_OFFSET))
    row2 = add(position, scale(across, ROW_FULL_OFFSET))
    return row1, row2, placement_direction(orientation)


def additional_row_start(orientation: Orientation, position: Vec3, offset: float) -> Vec3:
    """
    Start point of a row in the additional area of a T=1 parcel.

    The additional area begins ADDITIONAL_AREA_OFFSET units from the anchor
    along the parcel's fill direction; ``offset`` is measured within it.
    """
    direction = placement_direction(orientation)
    return add(position, scale(direction, ADDITIONAL_AREA_OFFSET + offset))


def special_offset(orientation: Optional[Orientation]) -> Vec3:
    """Offset from the anchor to the centre of a special parcel; 0 degrees when unknown."""
    return _SPECIAL_OFFSETS.get(orientation, _SPECIAL_OFFSETS[Orientation.DEG_0])


def cultural_module_offset(orientation: Orientation, index: int, spacing: float) -> Vec3:
    """Offset of the ``index``-th cultural module along a T=0 parcel."""
    half = CULTURAL_MODULE / 2.0
    along = half + index * spacing
    direction = placement_direction(orientation)
    across = across_direction(orientation)
    return add(scale(direction, along), scale(across, half))


def cultural_cluster_offsets(orientation: Orientation) -> List[Vec3]:
    """The four fixed module offsets of a T=1 cultural parcel."""
    return list(_CULTURAL_CLUSTERS[orientation])


def _box_from_corners(a: Tuple[float, float], b: Tuple[float, float]) -> sg.Polygon:
    return sg.box(min(a[0], b[0]), min(a[1], b[1]), max(a[0], b[0]), max(a[1], b[1]))


def area_polygon(
    orientation: Orientation, position: Vec3, length: float, width: float
) -> sg.Polygon:
    """Rectangle on the X/Z plane spanned from an anchor point."""
    far = add(
        add(position, scale(placement_direction(orientation), length)),
        scale(across_direction(orientation), width),
    )
    return _box_from_corners((position[0], position[2]), (far[0], far[2]))


def footprint_polygon(
    center: Vec3, length: float, width: float, orientation: Orientation
) -> sg.Polygon:
    """
    Footprint of a placed building on the X/Z plane.

    Args:
        center: Building centre
        length: Extent along the row the building was placed in
        width: Extent across that row
        orientation: Orientation of the row
    """
    direction = placement_direction(orientation)
    half_length = length / 2.0
    half_width = width / 2.0
    if direction[0] != 0.0:
        dx, dz = half_length, half_width
    else:
        dx, dz = half_width, half_length
    x, _, z = center
    return sg.box(x - dx, z - dz, x + dx, z + dz)
