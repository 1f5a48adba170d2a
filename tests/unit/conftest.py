"""
Unit test fixtures: factory-built models.
"""

import pytest

from tests.factories.model_factories import (
    make_database_target,
    make_trigger_spec,
    make_custom_resource_event,
)


@pytest.fixture
def database_target():
    """DatabaseTarget for namespace acct_svc_dev on the new database."""
    return make_database_target()


@pytest.fixture
def trigger_spec():
    """AFTER ROW trigger on public.events for INSERT OR UPDATE."""
    return make_trigger_spec()


@pytest.fixture
def create_event():
    """Raw Create request for a Trigger resource."""
    return make_custom_resource_event("Create")
