"""
CSV loaders for the building catalog and the parcel list.

buildingprefab.csv columns: ID, Length, Width, Function, FloorType, Material
(optionally Name, Height).
emptyland.csv columns: ID, Length, Width, StartPosX, StartPosY, StartPosZ,
RotationY, T, S.

Columns are located by header name. Rows that fail to parse are logged and
skipped so one bad line does not take the whole catalog down.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, List, Optional

from .catalog import BuildingCatalog, BuildingFootprint
from .config import Config
from .parcels import Parcel, ParcelStore
from .placement import PlacementEngine

logger = logging.getLogger(__name__)


def _read_rows(path: Path) -> List[Dict[str, str]]:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    with path.open("r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        rows = []
        for row in reader:
            # Skip blank lines and normalise header whitespace
            if not any((value or "").strip() for value in row.values()):
                continue
            rows.append({(key or "").strip(): (value or "").strip() for key, value in row.items()})
    if not rows:
        logger.warning("%s was loaded but contains no data rows", path.name)
    return rows


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def parse_footprint(row: Dict[str, str]) -> BuildingFootprint:
    """
    Build a footprint from one buildingprefab.csv row.

    Raises:
        KeyError: if a required column is missing
        ValueError: if a value does not parse or a dimension is not positive
    """
    footprint = BuildingFootprint(
        id=int(row["ID"]),
        length=float(row["Length"]),
        width=float(row["Width"]),
        function=int(row["Function"]),
        floor_type=int(row["FloorType"]),
        material=int(row["Material"]),
        name=row.get("Name", ""),
        height=_optional_float(row.get("Height")),
    )
    if footprint.length <= 0 or footprint.width <= 0:
        raise ValueError(
            f"Building {footprint.id} has non-positive size {footprint.length} x {footprint.width}"
        )
    return footprint


def parse_parcel(row: Dict[str, str]) -> Parcel:
    """Build a parcel from one emptyland.csv row."""
    return Parcel.create(
        parcel_id=int(row["ID"]),
        length=float(row["Length"]),
        width=float(row["Width"]),
        position=(
            float(row["StartPosX"]),
            float(row["StartPosY"]),
            float(row["StartPosZ"]),
        ),
        rotation_y=float(row["RotationY"]),
        type_t=int(row.get("T") or 0),
        type_s=int(row.get("S") or 0),
    )


def load_building_catalog(path: Path) -> BuildingCatalog:
    """
    Load the building footprint catalog.

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: if two rows share an id
    """
    footprints: Dict[int, BuildingFootprint] = {}
    for line_no, row in enumerate(_read_rows(path), start=2):
        try:
            footprint = parse_footprint(row)
        except (KeyError, ValueError) as e:
            logger.error("Skipping %s line %d: %s", Path(path).name, line_no, e)
            continue
        if footprint.id in footprints:
            raise ValueError(f"Duplicate building id {footprint.id} in {Path(path).name}")
        footprints[footprint.id] = footprint

    catalog = BuildingCatalog(footprints.values())
    logger.info("Loaded %d building footprints from %s", len(catalog), Path(path).name)
    return catalog


def load_parcels(path: Path) -> ParcelStore:
    """
    Load parcel geometry and type flags.

    Raises:
        FileNotFoundError: if the file does not exist
    """
    parcels: Dict[int, Parcel] = {}
    for line_no, row in enumerate(_read_rows(path), start=2):
        try:
            parcel = parse_parcel(row)
        except (KeyError, ValueError) as e:
            logger.error("Skipping %s line %d: %s", Path(path).name, line_no, e)
            continue
        if parcel.id in parcels:
            logger.error("Skipping %s line %d: duplicate parcel id %d", Path(path).name, line_no, parcel.id)
            continue
        parcels[parcel.id] = parcel

    store = ParcelStore(parcels.values())
    logger.info("Loaded %d parcels from %s", len(store), Path(path).name)
    return store


def build_engine(cfg: Config) -> PlacementEngine:
    """Load both catalogs named by ``cfg`` and wire up an engine."""
    catalog = load_building_catalog(cfg.building_catalog_path)
    store = load_parcels(cfg.parcel_catalog_path)

    missing = [i for i in cfg.special_ids if i not in catalog]
    if missing:
        logger.warning("Special building ids %s are not in the catalog", missing)

    return PlacementEngine(
        catalog,
        store,
        min_gap=cfg.min_gap,
        special_ids=cfg.special_ids,
        seed=cfg.seed,
    )
