"""
Tests for service configuration.
"""

import sys
from pathlib import Path

# Add server directory to path
server_dir = Path(__file__).parent.parent.parent.parent
sys.path.insert(0, str(server_dir))

import pytest
from internal.placement import config

ENV_VARS = [
    "PLACEMENT_SCHEME",
    "PLACEMENT_MIN_GAP",
    "PLACEMENT_SPECIAL_IDS",
    "PLACEMENT_SEED",
    "BUILDING_CATALOG_PATH",
    "PRESET_DIR",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    """Test the CSV scheme is the default"""
    cfg = config.load_config()

    assert cfg.scheme == "csv"
    assert cfg.min_gap == 10.0
    assert cfg.special_ids == (235, 236)
    assert cfg.seed is None
    assert cfg.building_catalog_path.name == "buildingprefab.csv"
    assert cfg.parcel_catalog_path.exists()
    assert cfg.preset_dir.is_dir()


def test_database_scheme(clean_env):
    """Test the older database scheme constants"""
    clean_env.setenv("PLACEMENT_SCHEME", "Database")

    cfg = config.load_config()

    assert cfg.min_gap == 5.0
    assert cfg.special_ids == (237, 238)


def test_overrides(clean_env):
    """Test individual values can be overridden"""
    clean_env.setenv("PLACEMENT_MIN_GAP", "7.5")
    clean_env.setenv("PLACEMENT_SPECIAL_IDS", "300, 301,302")
    clean_env.setenv("PLACEMENT_SEED", "42")
    clean_env.setenv("BUILDING_CATALOG_PATH", "/tmp/catalog.csv")

    cfg = config.load_config()

    assert cfg.min_gap == 7.5
    assert cfg.special_ids == (300, 301, 302)
    assert cfg.seed == 42
    assert cfg.building_catalog_path == Path("/tmp/catalog.csv")


def test_unknown_scheme(clean_env):
    """Test unknown schemes are rejected"""
    clean_env.setenv("PLACEMENT_SCHEME", "legacy")

    with pytest.raises(ValueError):
        config.load_config()
