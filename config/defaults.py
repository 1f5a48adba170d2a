"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - PostgresDefaults: Database object naming, session limits
    - EnvVars: Environment variable names read by the config layer
    - AwsDefaults: Partition and region fallbacks for ARN construction

Usage:
    from config.defaults import PostgresDefaults

    # In Pydantic Field definitions:
    function_name: str = Field(default=PostgresDefaults.FUNCTION_NAME, ...)
"""


# =============================================================================
# POSTGRES DEFAULTS
# =============================================================================

class PostgresDefaults:
    """
    Database object naming and session defaults.

    The role name default is derived from the namespace at runtime:
        f"{namespace}{ROLE_SUFFIX}"
    """

    # Extensions created by the prerequisites step, in creation order
    EXTENSIONS = ("pgcrypto", "aws_commons", "aws_lambda")

    # Schemas holding the Lambda invocation functions (granted to the role)
    LAMBDA_SCHEMAS = ("aws_lambda", "aws_commons")

    DEFAULT_SCHEMA = "public"
    NAMESPACE_PREFIX = "sls"
    FUNCTION_NAME = "lambda_invoker"
    ROLE_SUFFIX = "_lambda_invoker"

    # RDS presents a certificate not in the system trust store;
    # "require" encrypts without verifying it
    SSLMODE = "require"
    CONNECT_TIMEOUT_SECONDS = 10
    STATEMENT_TIMEOUT_MS = 60000

    # Postgres truncates identifiers beyond this length
    MAX_IDENTIFIER_LENGTH = 63


# =============================================================================
# ENVIRONMENT VARIABLE NAMES
# =============================================================================

class EnvVars:
    """Environment variables consulted by config.from_environment()."""

    CONNECTION_STRING = "PG_CONNECTION_STRING"
    NAMESPACE = "PG_EVENT_NAMESPACE"
    ROLE_NAME = "PG_EVENT_ROLE_NAME"
    FUNCTION_NAME = "PG_EVENT_FUNCTION_NAME"
    SSLMODE = "PG_SSLMODE"
    CONNECT_TIMEOUT = "PG_CONNECT_TIMEOUT"
    STATEMENT_TIMEOUT_MS = "PG_STATEMENT_TIMEOUT_MS"
    RESPONSE_TIMEOUT = "CFN_RESPONSE_TIMEOUT"
    ACCOUNT_ID = "AWS_ACCOUNT_ID"


# =============================================================================
# AWS DEFAULTS
# =============================================================================

class AwsDefaults:
    """Partition mapping and transport defaults."""

    DEFAULT_PARTITION = "aws"
    CHINA_PARTITION = "aws-cn"
    GOVCLOUD_PARTITION = "aws-us-gov"
    DEFAULT_REGION = "us-east-1"
    DEFAULT_STAGE = "dev"

    # Seconds to wait for the custom resource response PUT
    RESPONSE_TIMEOUT_SECONDS = 30
