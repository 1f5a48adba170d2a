"""
Custom Resource Contract Models.

Typed request/response models for the orchestrator boundary. Field
aliases match the CloudFormation custom resource wire format.

Request:
    RequestType, ResponseURL, StackId, RequestId, LogicalResourceId,
    PhysicalResourceId (Update/Delete), ResourceProperties,
    OldResourceProperties (Update)

Response:
    Status, Reason, PhysicalResourceId, StackId, RequestId,
    LogicalResourceId, NoEcho, Data

Exports:
    ResourceProperties: Provider properties (Database, Trigger, TargetArn)
    CustomResourceEvent: Request envelope
    CustomResourceResponse: Outcome body PUT to the ResponseURL
    parse_resource_properties: Properties validation with ConfigurationError
    parse_drop_properties: Reduced validation for deletes
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from exceptions import ConfigurationError
from .enums import RequestType, ServiceType, ResponseStatus
from .trigger import DatabaseTarget, TriggerSpec


class ResourceProperties(BaseModel):
    """
    Properties of one Prerequisites or Trigger resource.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    service_type: ServiceType = Field(..., alias="ServiceType")
    database: DatabaseTarget = Field(..., alias="Database")
    trigger: Optional[TriggerSpec] = Field(default=None, alias="Trigger")
    target_arn: Optional[str] = Field(default=None, alias="TargetArn")
    function_key: Optional[str] = Field(default=None, alias="FunctionKey")

    def trigger_spec(self) -> TriggerSpec:
        """
        Trigger declaration with the invocation target merged in.

        Raises:
            ConfigurationError: If the Trigger block or TargetArn is missing
        """
        if self.trigger is None:
            raise ConfigurationError("Missing Trigger properties")
        if not self.target_arn:
            raise ConfigurationError("Missing TargetArn")
        return self.trigger.model_copy(update={
            "target_arn": self.target_arn,
            "function_key": self.function_key or self.trigger.function_key,
        })

    def drop_spec(self) -> TriggerSpec:
        """
        Trigger declaration for a drop, where TargetArn is optional.

        Raises:
            ConfigurationError: If the Trigger block is missing
        """
        if self.trigger is None:
            raise ConfigurationError("Missing Trigger properties")
        return self.trigger.model_copy(update={
            "target_arn": self.target_arn,
            "function_key": self.function_key or self.trigger.function_key,
        })


def parse_resource_properties(raw: Optional[Dict[str, Any]]) -> ResourceProperties:
    """
    Validate raw ResourceProperties.

    Raises:
        ConfigurationError: On missing or malformed properties
    """
    if not raw:
        raise ConfigurationError("Missing ResourceProperties")
    try:
        return ResourceProperties.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid ResourceProperties: {e}") from e


def parse_drop_properties(raw: Optional[Dict[str, Any]]) -> ResourceProperties:
    """
    Validate only what dropping a trigger needs.

    A declaration that fails full validation (unknown order, level or
    operation) is reduced to its table, so a resource whose create was
    rejected can still be deleted.

    Raises:
        ConfigurationError: If Database or ServiceType is unreadable
    """
    try:
        return parse_resource_properties(raw)
    except ConfigurationError:
        declaration = raw.get("Trigger") if raw else None
        if not isinstance(declaration, dict) or not declaration.get("table"):
            raise
        reduced = dict(raw)
        reduced["Trigger"] = {"table": declaration["table"]}
        return parse_resource_properties(reduced)


class CustomResourceEvent(BaseModel):
    """
    Custom resource request envelope.

    Properties stay raw here so a malformed property block can still be
    answered with a FAILED response.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_type: RequestType = Field(..., alias="RequestType")
    response_url: str = Field(..., alias="ResponseURL")
    stack_id: str = Field(..., alias="StackId")
    request_id: str = Field(..., alias="RequestId")
    logical_resource_id: str = Field(..., alias="LogicalResourceId")
    resource_type: Optional[str] = Field(default=None, alias="ResourceType")
    physical_resource_id: Optional[str] = Field(default=None, alias="PhysicalResourceId")
    resource_properties: Dict[str, Any] = Field(default_factory=dict, alias="ResourceProperties")
    old_resource_properties: Optional[Dict[str, Any]] = Field(default=None, alias="OldResourceProperties")

    def properties(self) -> ResourceProperties:
        return parse_resource_properties(self.resource_properties)

    def drop_properties(self) -> ResourceProperties:
        return parse_drop_properties(self.resource_properties)

    def old_properties(self) -> Optional[ResourceProperties]:
        if not self.old_resource_properties:
            return None
        return parse_resource_properties(self.old_resource_properties)


class CustomResourceResponse(BaseModel):
    """
    Outcome reported for one request.
    """

    model_config = ConfigDict(populate_by_name=True)

    status: ResponseStatus = Field(..., alias="Status")
    reason: str = Field(..., alias="Reason")
    physical_resource_id: str = Field(..., alias="PhysicalResourceId")
    stack_id: str = Field(..., alias="StackId")
    request_id: str = Field(..., alias="RequestId")
    logical_resource_id: str = Field(..., alias="LogicalResourceId")
    no_echo: bool = Field(default=False, alias="NoEcho")
    data: Dict[str, Any] = Field(default_factory=dict, alias="Data")

    @property
    def succeeded(self) -> bool:
        return self.status == ResponseStatus.SUCCESS

    def to_body(self) -> Dict[str, Any]:
        """JSON-ready body with wire field names."""
        return self.model_dump(by_alias=True, mode="json")
