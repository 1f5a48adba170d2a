"""
Root conftest.py: sys.path, env vars, shared fixtures.

Sets up the test environment so all production code can be imported
without a database, AWS credentials or a reachable ResponseURL.
"""

import os
import sys

import pytest

# Add project root to sys.path so 'core', 'services', 'config', etc. are importable
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from config import reset_config  # noqa: E402
from tests.factories.model_factories import RecordingExecutor  # noqa: E402


# Env vars read by config; cleared per test so the host environment never leaks in
PROVISIONING_ENV_VARS = [
    "PG_CONNECTION_STRING",
    "PG_EVENT_NAMESPACE",
    "PG_EVENT_ROLE_NAME",
    "PG_EVENT_FUNCTION_NAME",
    "PG_SSLMODE",
    "PG_CONNECT_TIMEOUT",
    "PG_STATEMENT_TIMEOUT_MS",
    "CFN_RESPONSE_TIMEOUT",
    "AWS_ACCOUNT_ID",
]


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Clear provisioning env vars and the config singleton around every test."""
    for var in PROVISIONING_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield monkeypatch
    reset_config()


@pytest.fixture
def recording_executor():
    """Executor that records (connection_string, rendered statements) calls."""
    return RecordingExecutor()
