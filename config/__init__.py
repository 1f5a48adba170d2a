"""
Configuration Package.

Structure:
    config/
    ├── __init__.py          # This file - exports and singleton
    ├── defaults.py          # Default values and env var names
    └── postgres_config.py   # Connection resolution and session limits

Usage:
    from config import get_config
    config = get_config()
    timeout = config.connect_timeout_seconds

    from config import resolve_connection_string
    conn = resolve_connection_string(props.database.connection_string)
"""

from typing import Optional

from .defaults import PostgresDefaults, EnvVars, AwsDefaults
from .postgres_config import (
    PostgresEventConfig,
    resolve_connection_string,
    MISSING_CONNECTION_STRING,
)


# ============================================================================
# SINGLETON PATTERN
# ============================================================================

_config_instance: Optional[PostgresEventConfig] = None


def get_config() -> PostgresEventConfig:
    """
    Get global configuration singleton.

    Returns:
        PostgresEventConfig instance loaded from environment
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = PostgresEventConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get sanitized configuration for debugging (masks the connection string).
    """
    try:
        return get_config().debug_dict()
    except Exception as e:
        return {'error': f'Configuration validation failed: {e}'}


__all__ = [
    'PostgresEventConfig',
    'PostgresDefaults',
    'EnvVars',
    'AwsDefaults',
    'get_config',
    'reset_config',
    'debug_config',
    'resolve_connection_string',
    'MISSING_CONNECTION_STRING',
]
