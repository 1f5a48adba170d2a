"""
Event Registration Surface.

Reads a deployment's service definition and discovers which functions
declare a postgres event. A function may carry any mix of event types;
only entries with a non-empty "postgres" key count, and at most one is
allowed per function.

Service definition (JSON):
    {
        "service": "svc",
        "stage": "dev",
        "region": "us-east-1",
        "account_id": "123456789012",            # optional
        "custom": {"postgres": {
            "connectionString": "postgresql://...",   # optional
            "namespace": "acct_svc_dev",               # optional
            "roleName": "...", "functionName": "..."   # optional
        }},
        "functions": {
            "onEvent": {"name": "svc-dev-onEvent", "events": [
                {"postgres": {"table": "public.events", "operations": ["INSERT"]}}
            ]}
        }
    }

Exports:
    ServiceDefinition: Deployment identity, postgres settings and functions
    load_service_definition: Read a ServiceDefinition from a JSON file
    resolve_database_target: DatabaseTarget with naming defaults applied
    get_postgres_triggers: (function key, trigger) pairs in declared order
    get_functions_with_postgres_event: Functions with their trigger and ARN
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from config import get_config
from config.defaults import AwsDefaults
from core.logic.naming import (
    default_namespace,
    default_role_name,
    derive_lambda_arn,
    partition_from_region,
)
from core.models import DatabaseTarget, FunctionWithPostgresEvent, TriggerSpec
from exceptions import ConfigurationError
from infrastructure.aws_identity import resolve_account_id
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "EventRegistration")


# ============================================================================
# SERVICE DEFINITION MODELS
# ============================================================================

class PostgresSettings(BaseModel):
    """custom.postgres block. Every key is optional."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    connection_string: Optional[str] = Field(default=None, alias="connectionString")
    namespace: Optional[str] = Field(default=None, alias="namespace")
    role_name: Optional[str] = Field(default=None, alias="roleName")
    function_name: Optional[str] = Field(default=None, alias="functionName")


class CustomSection(BaseModel):
    model_config = ConfigDict(extra="allow")

    postgres: PostgresSettings = Field(default_factory=PostgresSettings)


class FunctionDefinition(BaseModel):
    """One deployable function and its heterogeneous event list."""

    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    events: List[Dict[str, Any]] = Field(default_factory=list)


class ServiceDefinition(BaseModel):
    """
    Deployment identity plus declared functions, in declared order.
    """

    model_config = ConfigDict(extra="ignore")

    service: str = Field(..., min_length=1)
    stage: str = Field(default=AwsDefaults.DEFAULT_STAGE, min_length=1)
    region: str = Field(default=AwsDefaults.DEFAULT_REGION, min_length=1)
    account_id: Optional[str] = None
    custom: CustomSection = Field(default_factory=CustomSection)
    functions: Dict[str, FunctionDefinition] = Field(default_factory=dict)

    @property
    def postgres(self) -> PostgresSettings:
        return self.custom.postgres

    def function_name(self, key: str) -> str:
        """Deployed name: explicit, else <service>-<stage>-<key>."""
        declared = self.functions[key].name
        return declared or f"{self.service}-{self.stage}-{key}"


def load_service_definition(path: Union[str, Path]) -> ServiceDefinition:
    """
    Read a service definition from a JSON file.

    Raises:
        ConfigurationError: Unreadable file, invalid JSON or invalid shape
    """
    path = Path(path)
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read service definition {path}: {e}") from e

    try:
        return ServiceDefinition.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid service definition {path}: {e}") from e


# ============================================================================
# DISCOVERY
# ============================================================================

def resolve_database_target(service: ServiceDefinition) -> DatabaseTarget:
    """
    DatabaseTarget for a deployment.

    Precedence per field: custom.postgres, then process config
    (PG_EVENT_* env vars), then the derived default. The connection
    string stays unset when not declared so the engine falls back to
    PG_CONNECTION_STRING at execution time.
    """
    settings = service.postgres
    config = get_config()

    namespace = settings.namespace or config.namespace or default_namespace(service.service, service.stage)
    return DatabaseTarget(
        connection_string=settings.connection_string or None,
        namespace=namespace,
        role_name=settings.role_name or config.role_name or default_role_name(namespace),
        function_name=settings.function_name or config.function_name,
    )


def _postgres_events(events: List[Dict[str, Any]]) -> List[Any]:
    return [event["postgres"] for event in events if isinstance(event, dict) and event.get("postgres")]


def get_postgres_triggers(service: ServiceDefinition) -> List[Tuple[str, TriggerSpec]]:
    """
    (function key, trigger) pairs in declared order, without target ARNs.

    Raises:
        ConfigurationError: More than one postgres event on a function or
            an invalid trigger declaration
    """
    triggers = []
    for key, definition in service.functions.items():
        postgres_events = _postgres_events(definition.events)
        if len(postgres_events) > 1:
            raise ConfigurationError(
                f'Function "{key}" has {len(postgres_events)} postgres events; '
                f'only one is supported per function.'
            )
        if not postgres_events:
            continue

        declaration = postgres_events[0]
        if not isinstance(declaration, dict):
            raise ConfigurationError(f'Function "{key}" has an invalid postgres event: {declaration!r}')
        triggers.append((key, TriggerSpec.from_config(declaration, function_key=key)))

    return triggers


def get_functions_with_postgres_event(
    service: ServiceDefinition,
    account_id: Optional[str] = None
) -> List[FunctionWithPostgresEvent]:
    """
    Functions declaring a postgres event, in declared order.

    Args:
        service: Service definition
        account_id: Account for ARN construction; resolved lazily (service
            definition, AWS_ACCOUNT_ID, then STS) only when needed

    Raises:
        ConfigurationError: See get_postgres_triggers
    """
    triggers = get_postgres_triggers(service)
    if not triggers:
        logger.debug("No functions declare a postgres event")
        return []

    account_id = resolve_account_id(account_id or service.account_id, service.region)
    partition = partition_from_region(service.region)

    functions = []
    for key, trigger in triggers:
        name = service.function_name(key)
        arn = derive_lambda_arn(partition, service.region, account_id, name)
        functions.append(FunctionWithPostgresEvent(
            key=key,
            name=name,
            arn=arn,
            trigger=trigger.model_copy(update={"target_arn": arn})
        ))

    logger.info(f"📋 Found {len(functions)} function(s) with a postgres event")
    return functions
