"""
Cross-parcel uniqueness registries for one planning session.
"""

from typing import Set


class PlacementSession:
    """Tracks special and cultural building ids used on any parcel."""

    def __init__(self):
        self.used_special_ids: Set[int] = set()
        self.used_cultural_ids: Set[int] = set()

    def is_special_used(self, building_id: int) -> bool:
        return building_id in self.used_special_ids

    def mark_special(self, building_id: int) -> None:
        self.used_special_ids.add(building_id)

    def mark_cultural(self, building_id: int) -> None:
        self.used_cultural_ids.add(building_id)

    def reset(self) -> None:
        self.used_special_ids.clear()
        self.used_cultural_ids.clear()
