"""
Custom Resource Template Generator.

Emits the custom resource declarations that let the orchestrator drive
trigger provisioning at deploy time. The provider Lambda named by
service_token receives these properties as ResourceProperties.

Generated resources:
    PostgresPrerequisites            Custom::PostgresPrerequisites
    <Fn>PostgresTrigger (per fn)     Custom::PostgresTrigger
        DependsOn: PostgresPrerequisites, <Fn>LambdaFunction
        TargetArn: Fn::GetAtt [<Fn>LambdaFunction, Arn]

Exports:
    generate_custom_resources: Resources fragment for one service
    merge_into_template: Add a fragment to a template's Resources
"""

from typing import Any, Dict

from core.logic.naming import normalize_logical_name
from core.models import ServiceType
from exceptions import ConfigurationError
from services.registration import ServiceDefinition, get_postgres_triggers, resolve_database_target
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "TemplateGenerator")

PREREQUISITES_LOGICAL_ID = "PostgresPrerequisites"
PREREQUISITES_RESOURCE_TYPE = "Custom::PostgresPrerequisites"
TRIGGER_RESOURCE_TYPE = "Custom::PostgresTrigger"


def function_logical_id(function_key: str) -> str:
    return f"{normalize_logical_name(function_key)}LambdaFunction"


def trigger_logical_id(function_key: str) -> str:
    return f"{normalize_logical_name(function_key)}PostgresTrigger"


def generate_custom_resources(service: ServiceDefinition, service_token: Any) -> Dict[str, Any]:
    """
    Build the Resources fragment for a service.

    Args:
        service: Service definition
        service_token: Provider Lambda ARN or an intrinsic resolving to it

    Returns:
        {logical_id: resource} with the prerequisites first, then one
        trigger per function in declared order. Empty when no function
        declares a postgres event.
    """
    triggers = get_postgres_triggers(service)
    if not triggers:
        return {}

    database = resolve_database_target(service).to_properties()

    resources: Dict[str, Any] = {
        PREREQUISITES_LOGICAL_ID: {
            "Type": PREREQUISITES_RESOURCE_TYPE,
            "Properties": {
                "ServiceToken": service_token,
                "ServiceType": ServiceType.PREREQUISITES.value,
                "Database": database,
            },
        }
    }

    for key, trigger in triggers:
        logical_id = trigger_logical_id(key)
        if logical_id in resources:
            raise ConfigurationError(f'Function keys collide on logical id "{logical_id}"')

        fn_logical_id = function_logical_id(key)
        resources[logical_id] = {
            "Type": TRIGGER_RESOURCE_TYPE,
            "DependsOn": [PREREQUISITES_LOGICAL_ID, fn_logical_id],
            "Properties": {
                "ServiceToken": service_token,
                "ServiceType": ServiceType.TRIGGER.value,
                "Database": database,
                "Trigger": trigger.to_presence_flags(),
                "TargetArn": {"Fn::GetAtt": [fn_logical_id, "Arn"]},
                "FunctionKey": key,
            },
        }

    logger.info(f"🧩 Generated {len(resources)} custom resource(s) for '{service.service}'")
    return resources


def merge_into_template(template: Dict[str, Any], resources: Dict[str, Any]) -> Dict[str, Any]:
    """
    Add resources to template["Resources"] in place.

    Raises:
        ConfigurationError: A logical id already exists in the template
    """
    existing = template.setdefault("Resources", {})
    collisions = sorted(set(existing) & set(resources))
    if collisions:
        raise ConfigurationError(f"Template already defines resources: {', '.join(collisions)}")

    existing.update(resources)
    return template
