"""
Core Database Schema Package.

Contains the DDL builders for Lambda-forwarding triggers.

Exports:
    sql_create_prerequisites, build_operations, sql_create_trigger,
    sql_drop_trigger, render_statements
"""

from .trigger_sql import (
    sql_create_prerequisites,
    build_operations,
    sql_create_trigger,
    sql_drop_trigger,
    render_statements
)

__all__ = [
    'sql_create_prerequisites',
    'build_operations',
    'sql_create_trigger',
    'sql_drop_trigger',
    'render_statements',
]
