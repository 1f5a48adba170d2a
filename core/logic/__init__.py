"""
Core Business Logic Package.

Contains pure logic that operates on names and data models.

Exports:
    Naming: quote_identifier, split_qualified_name, derive_trigger_name, slugify,
            default_namespace, default_role_name, lambda_name_from_arn,
            partition_from_region, derive_lambda_arn, normalize_logical_name
"""

from .naming import (
    QualifiedName,
    quote_identifier,
    split_qualified_name,
    slugify,
    default_namespace,
    default_role_name,
    derive_trigger_name,
    lambda_name_from_arn,
    partition_from_region,
    derive_lambda_arn,
    normalize_logical_name
)

__all__ = [
    'QualifiedName',
    'quote_identifier',
    'split_qualified_name',
    'slugify',
    'default_namespace',
    'default_role_name',
    'derive_trigger_name',
    'lambda_name_from_arn',
    'partition_from_region',
    'derive_lambda_arn',
    'normalize_logical_name',
]
