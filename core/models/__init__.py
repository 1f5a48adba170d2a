"""
Core Data Models Package.

Contains pure data structures without business logic.
All business logic is in the core.logic package.

Exports:
    Operation, TriggerOrder, TriggerLevel: Trigger declaration enums
    RequestType, ServiceType, ResponseStatus: Custom resource enums
    OperationSpec, TriggerSpec, DatabaseTarget, FunctionWithPostgresEvent: Declarations
    ResourceProperties, CustomResourceEvent, CustomResourceResponse: Orchestrator contract
    DropResult, ReconciliationResult: Result types
"""

# Enums
from .enums import (
    Operation,
    TriggerOrder,
    TriggerLevel,
    RequestType,
    ServiceType,
    ResponseStatus
)

# Declarations
from .trigger import (
    OperationSpec,
    TriggerSpec,
    DatabaseTarget,
    FunctionWithPostgresEvent
)

# Orchestrator contract
from .custom_resource import (
    ResourceProperties,
    CustomResourceEvent,
    CustomResourceResponse,
    parse_resource_properties,
    parse_drop_properties
)

# Results
from .results import (
    DropResult,
    ReconciliationResult
)

__all__ = [
    'Operation',
    'TriggerOrder',
    'TriggerLevel',
    'RequestType',
    'ServiceType',
    'ResponseStatus',
    'OperationSpec',
    'TriggerSpec',
    'DatabaseTarget',
    'FunctionWithPostgresEvent',
    'ResourceProperties',
    'CustomResourceEvent',
    'CustomResourceResponse',
    'parse_resource_properties',
    'parse_drop_properties',
    'DropResult',
    'ReconciliationResult',
]
