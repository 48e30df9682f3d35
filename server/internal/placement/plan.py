"""
Zoning plans: parsing planner output and applying it to the parcels.

A plan is a JSON array with one object per parcel:

    {"EmptyID": "12", "Function": "2", "FloorType": "3", "Material": "1",
     "EnergyConsumption": "65", "Summary": "..."}

Planner output is often wrapped in markdown fences or surrounded by prose,
so the outermost JSON array is extracted before validation.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from .placement import PlacementEngine, ZoningFormatError
from .rows import Placement
from .seeds import get_parcel_seed, get_plan_seed, seeded_random

logger = logging.getLogger(__name__)


class PlanFormatError(ValueError):
    """Planner output could not be read as a list of plan entries."""


class PlanEntry(BaseModel):
    """Zoning decision for one parcel"""

    model_config = ConfigDict(populate_by_name=True)

    empty_id: str = Field(..., alias="EmptyID", description="Parcel id")
    function: str = Field(..., alias="Function", description="1-4 function code")
    floor_type: str = Field(..., alias="FloorType", description="1-4 floor type code")
    material: str = Field(..., alias="Material", description="1-2 material code")
    energy_consumption: Optional[str] = Field(
        default=None, alias="EnergyConsumption", description="1-100 estimate"
    )
    summary: Optional[str] = Field(default="", alias="Summary", description="Design rationale")

    @field_validator("*", mode="before")
    @classmethod
    def _numbers_as_text(cls, value: Any) -> Any:
        # Planners emit both "3" and 3
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def parcel_id(self) -> Optional[int]:
        try:
            return int(self.empty_id.strip())
        except ValueError:
            return None

    @property
    def energy_score(self) -> int:
        """Energy consumption in 1..100, or 0 when missing or out of range."""
        try:
            value = int((self.energy_consumption or "").strip())
        except ValueError:
            return 0
        return value if 1 <= value <= 100 else 0


_ENTRIES = TypeAdapter(List[PlanEntry])


def extract_plan_json(text: str) -> str:
    """Strip markdown fences and return the outermost JSON array in ``text``."""
    content = text.replace("```json", "").replace("```", "").strip()
    if content.startswith("[") and content.endswith("]"):
        return content

    start = content.find("[")
    end = content.rfind("]")
    if start == -1 or end <= start:
        raise PlanFormatError("Plan does not contain a JSON array")
    return content[start : end + 1]


def parse_plan(text: str) -> List[PlanEntry]:
    """
    Parse planner output into plan entries.

    Raises:
        PlanFormatError: if the text holds no valid JSON array of entries
    """
    content = extract_plan_json(text)
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise PlanFormatError(f"Invalid plan JSON: {e}") from e

    try:
        return _ENTRIES.validate_python(data)
    except ValidationError as e:
        raise PlanFormatError(f"Plan entries do not match the expected schema: {e}") from e


@dataclass
class PlanOutcome:
    """What applying a plan produced."""

    placements: Dict[int, List[Placement]] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)

    @property
    def total_placements(self) -> int:
        return sum(len(p) for p in self.placements.values())


def apply_plan(engine: PlacementEngine, entries: List[PlanEntry]) -> PlanOutcome:
    """
    Replace the current layout with the one described by ``entries``.

    All usage counts, summaries and used special/cultural ids are cleared
    first. Entries with an unknown parcel id or non-numeric codes are
    logged and skipped, and leave no summary or zoning behind; the rest of
    the plan is still applied. A parcel listed twice is placed twice and
    both batches are reported. When the engine is seeded each parcel draws
    from its own derived seed.
    """
    engine.clear_all()
    outcome = PlanOutcome()

    if not entries:
        logger.warning("Plan contains no entries; no buildings will be placed")
        return outcome

    plan_seed = None
    if engine.seed is not None:
        plan_seed = get_plan_seed(engine.seed, engine.plans_applied)
    engine.plans_applied += 1

    for entry in entries:
        parcel_id = entry.parcel_id
        if parcel_id is None or parcel_id not in engine.store:
            logger.error("Plan entry for unknown parcel %r skipped", entry.empty_id)
            outcome.skipped.append(entry.empty_id)
            continue

        if parcel_id in outcome.placements:
            logger.warning(
                "Parcel %s appears more than once in the plan; placing again", parcel_id
            )

        rng = None
        if plan_seed is not None:
            rng = seeded_random(get_parcel_seed(plan_seed, parcel_id))

        try:
            placements = engine.place_on_parcel(
                parcel_id, entry.function, entry.floor_type, entry.material, rng=rng
            )
        except ZoningFormatError as e:
            logger.error("Plan entry for parcel %s skipped: %s", parcel_id, e)
            outcome.skipped.append(entry.empty_id)
            continue
        engine.set_summary(parcel_id, entry.summary)
        engine.set_zoning(
            parcel_id, entry.function, entry.floor_type, entry.material, entry.energy_score
        )
        outcome.placements.setdefault(parcel_id, []).extend(placements)

    logger.info(
        "Applied plan: %d parcels, %d buildings, %d skipped",
        len(outcome.placements),
        outcome.total_placements,
        len(outcome.skipped),
    )
    return outcome
