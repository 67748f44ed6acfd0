"""Shared fixtures."""
import pytest

from churnbird.config import ENV_OVERRIDES
from churnbird.population import Population


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's environment from leaking into config tests."""
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def population():
    return Population.generate(num_families=5, max_series_per_family=20, seed=42)
