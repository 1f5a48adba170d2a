"""
Config test fixtures: clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(isolated_environment):
    """Environment with every provisioning variable removed."""
    return isolated_environment
