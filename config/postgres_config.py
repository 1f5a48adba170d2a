"""
PostgreSQL Event Trigger Configuration.

Provides configuration for:
    - Connection string resolution (explicit value, then process default)
    - Database object naming overrides (namespace, role, invoker function)
    - Session limits (sslmode, connect timeout, statement timeout)

Connection string resolution order:
    1. Explicit value (custom.postgres.connectionString / Database.ConnectionString)
    2. PG_CONNECTION_STRING environment variable
    3. ConfigurationError - no DDL runs without a target

Exports:
    PostgresEventConfig: Process-level configuration model
    resolve_connection_string: Layered connection string lookup
    MISSING_CONNECTION_STRING: Error message for an unresolved target
"""

import os
from typing import Optional
from pydantic import BaseModel, Field

from exceptions import ConfigurationError
from .defaults import PostgresDefaults, EnvVars, AwsDefaults


MISSING_CONNECTION_STRING = (
    "Missing Postgres connection string. Set custom.postgres.connectionString "
    "(Database.ConnectionString) or the PG_CONNECTION_STRING env var."
)


def resolve_connection_string(
    explicit: Optional[str] = None,
    default: Optional[str] = None
) -> str:
    """
    Resolve the connection string for one database target.

    Args:
        explicit: Value from the function/resource configuration
        default: Process-wide fallback; read from PG_CONNECTION_STRING when None

    Returns:
        Non-empty connection string

    Raises:
        ConfigurationError: If neither source yields a value
    """
    if explicit:
        return explicit

    if default is None:
        default = os.environ.get(EnvVars.CONNECTION_STRING, "")

    if default:
        return default

    raise ConfigurationError(MISSING_CONNECTION_STRING)


class PostgresEventConfig(BaseModel):
    """
    Process-level settings for the provisioning runtime.

    Naming overrides are optional here; when absent the deployment
    identity (service + stage) determines them.
    """

    connection_string: Optional[str] = Field(
        default=None,
        description="Default connection string used when a target has none"
    )

    namespace: Optional[str] = Field(
        default=None,
        description="Schema / object namespace override"
    )

    role_name: Optional[str] = Field(
        default=None,
        description="Role owning the invoker function (default: <namespace>_lambda_invoker)"
    )

    function_name: str = Field(
        default=PostgresDefaults.FUNCTION_NAME,
        description="Name of the plpgsql trigger handler function"
    )

    sslmode: str = Field(
        default=PostgresDefaults.SSLMODE,
        description="libpq sslmode applied unless the connection string sets one"
    )

    connect_timeout_seconds: int = Field(
        default=PostgresDefaults.CONNECT_TIMEOUT_SECONDS,
        ge=1,
        description="Seconds to wait for a connection before failing"
    )

    statement_timeout_ms: int = Field(
        default=PostgresDefaults.STATEMENT_TIMEOUT_MS,
        ge=0,
        description="Per-statement timeout in milliseconds (0 disables)"
    )

    response_timeout_seconds: float = Field(
        default=AwsDefaults.RESPONSE_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for the custom resource response PUT"
    )

    @property
    def has_connection_string(self) -> bool:
        return bool(self.connection_string)

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            connection_string=os.environ.get(EnvVars.CONNECTION_STRING) or None,
            namespace=os.environ.get(EnvVars.NAMESPACE) or None,
            role_name=os.environ.get(EnvVars.ROLE_NAME) or None,
            function_name=os.environ.get(EnvVars.FUNCTION_NAME, PostgresDefaults.FUNCTION_NAME),
            sslmode=os.environ.get(EnvVars.SSLMODE, PostgresDefaults.SSLMODE),
            connect_timeout_seconds=int(os.environ.get(
                EnvVars.CONNECT_TIMEOUT, str(PostgresDefaults.CONNECT_TIMEOUT_SECONDS)
            )),
            statement_timeout_ms=int(os.environ.get(
                EnvVars.STATEMENT_TIMEOUT_MS, str(PostgresDefaults.STATEMENT_TIMEOUT_MS)
            )),
            response_timeout_seconds=float(os.environ.get(
                EnvVars.RESPONSE_TIMEOUT, str(AwsDefaults.RESPONSE_TIMEOUT_SECONDS)
            )),
        )

    def debug_dict(self) -> dict:
        """Configuration for logging with the connection string masked."""
        return {
            'connection_string': '***MASKED***' if self.connection_string else None,
            'namespace': self.namespace,
            'role_name': self.role_name,
            'function_name': self.function_name,
            'sslmode': self.sslmode,
            'connect_timeout_seconds': self.connect_timeout_seconds,
            'statement_timeout_ms': self.statement_timeout_ms,
            'response_timeout_seconds': self.response_timeout_seconds,
        }
