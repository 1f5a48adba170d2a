"""
Custom resource declarations for the orchestrator.
"""

import pytest

from core.models import TriggerSpec, parse_resource_properties
from exceptions import ConfigurationError
from services.registration import ServiceDefinition
from services.template_generator import generate_custom_resources, merge_into_template
from tests.factories.model_factories import NAMESPACE, NEW_CONN, make_service_definition_dict

SERVICE_TOKEN = {"Fn::GetAtt": ["PostgresTriggerProviderLambdaFunction", "Arn"]}


@pytest.fixture
def resources():
    service = ServiceDefinition.model_validate(make_service_definition_dict())
    return generate_custom_resources(service, SERVICE_TOKEN)


def test_prerequisites_resource(resources):
    prereq = resources["PostgresPrerequisites"]
    assert prereq["Type"] == "Custom::PostgresPrerequisites"
    assert prereq["Properties"] == {
        "ServiceToken": SERVICE_TOKEN,
        "ServiceType": "Prerequisites",
        "Database": {
            "ConnectionString": NEW_CONN,
            "Namespace": NAMESPACE,
            "RoleName": f"{NAMESPACE}_lambda_invoker",
            "FunctionName": "lambda_invoker",
        },
    }


def test_one_trigger_per_postgres_function(resources):
    assert list(resources) == ["PostgresPrerequisites", "OnEventPostgresTrigger"]

    trigger = resources["OnEventPostgresTrigger"]
    assert trigger["Type"] == "Custom::PostgresTrigger"
    assert trigger["DependsOn"] == ["PostgresPrerequisites", "OnEventLambdaFunction"]
    props = trigger["Properties"]
    assert props["TargetArn"] == {"Fn::GetAtt": ["OnEventLambdaFunction", "Arn"]}
    assert props["FunctionKey"] == "onEvent"
    assert props["Trigger"] == {
        "table": "public.events",
        "insert": {},
        "update": {},
        "order": "AFTER",
        "level": "ROW",
    }


def test_generated_properties_parse_back(resources):
    props = dict(resources["OnEventPostgresTrigger"]["Properties"])
    props["TargetArn"] = "arn:aws:lambda:us-east-1:123456789012:function:svc-dev-onEvent"
    spec = parse_resource_properties(props).trigger_spec()
    assert isinstance(spec, TriggerSpec)
    assert spec.function_key == "onEvent"
    assert spec.operation_names == ["INSERT", "UPDATE"]


def test_no_postgres_functions_no_resources():
    service = ServiceDefinition.model_validate(make_service_definition_dict(functions={}))
    assert generate_custom_resources(service, SERVICE_TOKEN) == {}


def test_merge_into_template(resources):
    template = {"Resources": {"OnEventLambdaFunction": {"Type": "AWS::Lambda::Function"}}}
    merged = merge_into_template(template, resources)
    assert merged is template
    assert set(template["Resources"]) == {"OnEventLambdaFunction", "PostgresPrerequisites", "OnEventPostgresTrigger"}


def test_merge_creates_resources_section(resources):
    assert "PostgresPrerequisites" in merge_into_template({}, resources)["Resources"]


def test_merge_collision_rejected(resources):
    template = {"Resources": {"PostgresPrerequisites": {}}}
    with pytest.raises(ConfigurationError, match="PostgresPrerequisites"):
        merge_into_template(template, resources)
