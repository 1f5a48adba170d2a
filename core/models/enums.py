"""
Pure Enumeration Types for Core Framework.

Defines the vocabulary of trigger declarations and the custom resource
lifecycle. No business logic - pure type definitions only.

Exports:
    Operation: Row event that fires a trigger
    TriggerOrder: BEFORE / AFTER
    TriggerLevel: ROW / STATEMENT
    RequestType: Custom resource lifecycle action
    ServiceType: Custom resource kind handled by the provider
    ResponseStatus: Outcome reported back to the orchestrator
"""

from enum import Enum


class Operation(str, Enum):
    """
    Row events a trigger can fire on.

    Order of members is the default operation order when a declaration
    requests none.
    """

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class TriggerOrder(str, Enum):
    """
    Trigger timing. Only AFTER is provisioned; BEFORE is accepted in
    declarations so that it can be rejected with a clear message.
    """

    BEFORE = "BEFORE"
    AFTER = "AFTER"


class TriggerLevel(str, Enum):
    """
    Trigger granularity. Only ROW is provisioned.
    """

    ROW = "ROW"
    STATEMENT = "STATEMENT"


class RequestType(str, Enum):
    """
    Custom resource lifecycle actions sent by the orchestrator.

    Values match the CloudFormation RequestType field exactly.
    """

    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


class ServiceType(str, Enum):
    """
    Resource kinds served by the provider function.
    """

    PREREQUISITES = "Prerequisites"
    TRIGGER = "Trigger"


class ResponseStatus(str, Enum):
    """
    Outcome reported to the orchestrator for one request.
    """

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
