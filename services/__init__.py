"""
Service Layer - Reconciliation, Registration and Generation.

Explicit imports, no auto-discovery. If it isn't imported here, it isn't
part of the service surface.

    reconciliation      Create/Update/Delete -> DDL against the right database
    registration        Service definition -> functions with a postgres event
    deployer            Lifecycle hooks for the imperative deploy client
    template_generator  Custom resource declarations for the orchestrator
"""

from .reconciliation import ReconciliationEngine, StatementExecutor
from .registration import (
    ServiceDefinition,
    load_service_definition,
    resolve_database_target,
    get_postgres_triggers,
    get_functions_with_postgres_event,
)
from .deployer import PostgresEventDeployer
from .template_generator import generate_custom_resources, merge_into_template

__all__ = [
    'ReconciliationEngine',
    'StatementExecutor',
    'ServiceDefinition',
    'load_service_definition',
    'resolve_database_target',
    'get_postgres_triggers',
    'get_functions_with_postgres_event',
    'PostgresEventDeployer',
    'generate_custom_resources',
    'merge_into_template',
]
