"""
Pytest configuration and fixtures for placement service tests.
"""

import os
import sys
from pathlib import Path

import pytest
from dotenv import load_dotenv

server_dir = Path(__file__).parent.parent
sys.path.insert(0, str(server_dir))

from internal.placement import config, loaders

# Try multiple paths for .env file
env_paths = [
    Path(".env"),  # Current directory
    server_dir / ".env",  # server/.env
    server_dir.parent / ".env",  # project root .env
]

for env_path in env_paths:
    if env_path.exists():
        load_dotenv(env_path, override=False)
        break


@pytest.fixture(scope="session")
def test_seed():
    """World seed for reproducible layouts."""
    return int(os.getenv("TEST_PLACEMENT_SEED", "12345"))


@pytest.fixture
def placement_config(monkeypatch, test_seed):
    """Configuration pointing at the shipped catalogs."""
    monkeypatch.setenv("PLACEMENT_SEED", str(test_seed))
    monkeypatch.delenv("BUILDING_CATALOG_PATH", raising=False)
    monkeypatch.delenv("PARCEL_CATALOG_PATH", raising=False)
    return config.load_config()


@pytest.fixture
def shipped_engine(placement_config):
    """Seeded engine loaded from server/config."""
    return loaders.build_engine(placement_config)
