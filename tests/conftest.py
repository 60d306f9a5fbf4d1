"""
Shared pytest fixtures for all tests.
"""

import pytest
from pathlib import Path

# Add the project root to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from titan_catalog.config import CatalogConfig
from titan_catalog.overrides import OverrideLoader, clear_override_cache

from tests.fixtures.overrides import CATALOG_URL, OVERRIDES_URL


# =============================================================================
# Isolation
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """Keep the per-user config dir and the process-wide override cache out of tests."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    clear_override_cache()
    yield
    clear_override_cache()


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def catalog_config():
    """Config pointing at the mocked catalog and override hosts, one file."""
    return CatalogConfig(
        base_url=CATALOG_URL,
        files=["Battlegroup.cat"],
        overrides_url=OVERRIDES_URL,
        timeout=5,
    )


@pytest.fixture
def override_loader():
    """Fresh override loader with an empty cache."""
    return OverrideLoader()
