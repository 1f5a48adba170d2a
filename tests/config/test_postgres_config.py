"""
Connection string resolution and process configuration.
"""

import pytest
from pydantic import ValidationError

from config import (
    MISSING_CONNECTION_STRING,
    PostgresEventConfig,
    debug_config,
    get_config,
    reset_config,
    resolve_connection_string,
)
from exceptions import ConfigurationError


class TestResolveConnectionString:
    """Explicit value, then process default, then fatal."""

    def test_explicit_wins(self, clean_env):
        clean_env.setenv("PG_CONNECTION_STRING", "postgresql://env")
        assert resolve_connection_string("postgresql://explicit") == "postgresql://explicit"

    def test_passed_default_used(self, clean_env):
        assert resolve_connection_string(None, "postgresql://default") == "postgresql://default"

    def test_env_used_when_no_default_passed(self, clean_env):
        clean_env.setenv("PG_CONNECTION_STRING", "postgresql://env")
        assert resolve_connection_string("") == "postgresql://env"

    def test_empty_everything_is_fatal(self, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            resolve_connection_string(None)
        assert str(exc_info.value) == MISSING_CONNECTION_STRING

    def test_empty_env_is_fatal(self, clean_env):
        clean_env.setenv("PG_CONNECTION_STRING", "")
        with pytest.raises(ConfigurationError):
            resolve_connection_string("")


class TestPostgresEventConfig:
    def test_defaults(self, clean_env):
        config = PostgresEventConfig.from_environment()
        assert config.connection_string is None
        assert config.function_name == "lambda_invoker"
        assert config.sslmode == "require"
        assert config.connect_timeout_seconds == 10
        assert config.statement_timeout_ms == 60000
        assert config.response_timeout_seconds == 30

    def test_env_overrides(self, clean_env):
        clean_env.setenv("PG_CONNECT_TIMEOUT", "3")
        clean_env.setenv("PG_STATEMENT_TIMEOUT_MS", "0")
        clean_env.setenv("PG_SSLMODE", "verify-full")
        clean_env.setenv("PG_EVENT_NAMESPACE", "custom_ns")
        config = PostgresEventConfig.from_environment()
        assert config.connect_timeout_seconds == 3
        assert config.statement_timeout_ms == 0
        assert config.sslmode == "verify-full"
        assert config.namespace == "custom_ns"

    def test_zero_connect_timeout_rejected(self):
        with pytest.raises(ValidationError):
            PostgresEventConfig(connect_timeout_seconds=0)

    def test_debug_dict_masks_connection_string(self, clean_env):
        clean_env.setenv("PG_CONNECTION_STRING", "postgresql://app:secret@db/app")
        masked = PostgresEventConfig.from_environment().debug_dict()
        assert masked["connection_string"] == "***MASKED***"
        assert "secret" not in str(masked)


class TestSingleton:
    def test_get_config_is_cached_until_reset(self, clean_env):
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first

    def test_debug_config_reports_validation_errors(self, clean_env):
        clean_env.setenv("PG_CONNECT_TIMEOUT", "0")
        assert "error" in debug_config()
