"""
Stored city layouts that are applied the same way as planner output.

Each preset is a JSON plan file in the preset directory, named by its file
stem (``presets/mixed_city.json`` is the preset ``mixed_city``).
"""

import logging
from pathlib import Path
from typing import List

from . import plan
from .placement import PlacementEngine

logger = logging.getLogger(__name__)

PRESET_SUFFIX = ".json"


class PresetNotFoundError(LookupError):
    """No preset with the requested name exists."""


def list_presets(directory: Path) -> List[str]:
    """Names of the presets in ``directory``, sorted."""
    directory = Path(directory)
    if not directory.is_dir():
        logger.warning("Preset directory %s does not exist", directory)
        return []
    return sorted(p.stem for p in directory.glob(f"*{PRESET_SUFFIX}") if p.is_file())


def read_preset(directory: Path, name: str) -> str:
    """
    Read the raw plan text of a preset.

    Only names returned by list_presets are accepted, so a name can never
    point outside the preset directory.

    Raises:
        PresetNotFoundError: if there is no such preset
    """
    if name not in list_presets(directory):
        raise PresetNotFoundError(f"Preset '{name}' not found")
    return (Path(directory) / f"{name}{PRESET_SUFFIX}").read_text(encoding="utf-8")


def apply_preset(engine: PlacementEngine, directory: Path, name: str) -> plan.PlanOutcome:
    """
    Replace the current layout with a stored preset.

    Raises:
        PresetNotFoundError: if there is no such preset
        plan.PlanFormatError: if the preset file is not a valid plan
    """
    content = read_preset(directory, name)
    logger.info("Applying preset '%s'", name)
    return plan.apply_plan(engine, plan.parse_plan(content))
