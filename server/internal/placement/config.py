"""
Configuration management for the parcel placement service.
"""

import os
from pathlib import Path
from typing import Optional, Tuple

# config lives at server/config
_DATA_DIR = Path(__file__).resolve().parents[2] / "config"

# Two generations of the placement engine were authored against different
# catalogs: the CSV-backed one and the older database-backed one.
PLACEMENT_SCHEMES = {
    "csv": {"min_gap": 10.0, "special_ids": (235, 236)},
    "database": {"min_gap": 5.0, "special_ids": (237, 238)},
}


def _parse_id_list(raw: str) -> Tuple[int, ...]:
    return tuple(int(part) for part in raw.split(",") if part.strip())


class Config:
    """Configuration for parcel placement service"""

    def __init__(self):
        # Server configuration
        self.host = os.getenv("PLACEMENT_SERVICE_HOST", "0.0.0.0")
        self.port = int(os.getenv("PLACEMENT_SERVICE_PORT", "8082"))
        self.environment = os.getenv("ENVIRONMENT", "development")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Data files
        self.building_catalog_path = Path(
            os.getenv("BUILDING_CATALOG_PATH", str(_DATA_DIR / "buildingprefab.csv"))
        )
        self.parcel_catalog_path = Path(
            os.getenv("PARCEL_CATALOG_PATH", str(_DATA_DIR / "emptyland.csv"))
        )
        self.preset_dir = Path(os.getenv("PRESET_DIR", str(_DATA_DIR / "presets")))

        # Placement configuration
        self.scheme = os.getenv("PLACEMENT_SCHEME", "csv").lower().strip()
        if self.scheme not in PLACEMENT_SCHEMES:
            raise ValueError(
                f"Unknown placement scheme '{self.scheme}'. "
                f"Expected one of: {', '.join(sorted(PLACEMENT_SCHEMES))}"
            )
        scheme = PLACEMENT_SCHEMES[self.scheme]

        gap_override = os.getenv("PLACEMENT_MIN_GAP")
        self.min_gap = float(gap_override) if gap_override else scheme["min_gap"]

        ids_override = os.getenv("PLACEMENT_SPECIAL_IDS")
        self.special_ids = (
            _parse_id_list(ids_override) if ids_override else scheme["special_ids"]
        )

        seed = os.getenv("PLACEMENT_SEED")
        self.seed: Optional[int] = int(seed) if seed else None


def load_config() -> Config:
    """Load configuration from environment variables"""
    return Config()
