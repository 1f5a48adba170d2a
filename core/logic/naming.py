"""
Identifier Quoting and Name Derivation.

Pure functions. The trigger name is the join key between declared
configuration and live database state - there is no registry table,
so derive_trigger_name must never change for a given deployment.

Exports:
    QualifiedName: (schema, name) pair
    quote_identifier: Double-quote an identifier, doubling embedded quotes
    split_qualified_name: "schema.table" -> QualifiedName
    slugify: Lowercase, underscore-separated slug
    default_namespace: Namespace derived from service + stage
    default_role_name: Role name derived from the namespace
    derive_trigger_name: namespace + "_" + function key
    lambda_name_from_arn: Function name portion of a Lambda ARN
    partition_from_region: AWS partition for a region
    derive_lambda_arn: Lambda function ARN from its parts
    normalize_logical_name: Template logical-id normalization

Dependencies:
    psycopg.sql: Identifier rendering
"""

import re
from typing import NamedTuple

from psycopg import sql

from exceptions import ConfigurationError
from config.defaults import PostgresDefaults, AwsDefaults


class QualifiedName(NamedTuple):
    schema: str
    name: str


def quote_identifier(raw: str) -> str:
    """
    Render an identifier as a quoted SQL identifier.

    Embedded double quotes are doubled. Uses the same rendering as the
    sql.Identifier objects in the DDL builder.
    """
    return sql.Identifier(raw).as_string(None)


def split_qualified_name(qualified: str) -> QualifiedName:
    """
    Split "schema.table" on the first dot.

    Args:
        qualified: Bare ("events") or qualified ("public.events") name

    Returns:
        QualifiedName with schema defaulting to "public"

    Raises:
        ConfigurationError: If a dot is present but either side is empty
    """
    if "." in qualified:
        schema, name = qualified.split(".", 1)
        if not schema or not name:
            raise ConfigurationError(f'Invalid table qualified name: "{qualified}"')
        return QualifiedName(schema, name)

    return QualifiedName(PostgresDefaults.DEFAULT_SCHEMA, qualified)


def slugify(value: str) -> str:
    """
    Lowercase slug safe for schema and role names.

    "sls_Acct-Svc_dev" -> "sls_acct_svc_dev"
    """
    slug = re.sub(r"[^a-z0-9_]+", "_", value.lower())
    slug = re.sub(r"_+", "_", slug)
    return slug.strip("_")


def default_namespace(service: str, stage: str) -> str:
    """Namespace for a deployment: slugify("sls_<service>_<stage>")."""
    segments = [PostgresDefaults.NAMESPACE_PREFIX, service, stage]
    return slugify("_".join(segment for segment in segments if segment))


def default_role_name(namespace: str) -> str:
    return f"{namespace}{PostgresDefaults.ROLE_SUFFIX}"


def derive_trigger_name(namespace: str, function_key: str) -> str:
    """
    Stable trigger name for one function in one namespace.

    Identical inputs always produce the identical name, so a drop by
    name always finds the trigger created for that function.
    """
    return "_".join([namespace, function_key])


def lambda_name_from_arn(arn: str) -> str:
    """
    Function name portion of a Lambda ARN.

    "arn:aws:lambda:us-east-1:123:function:svc-dev-fn" -> "svc-dev-fn"
    Falls back to the last ':' segment, then "lambda".
    """
    marker = ":function:"
    index = arn.find(marker)
    if index == -1:
        return arn.split(":")[-1] or "lambda"
    return arn[index + len(marker):]


def partition_from_region(region: str) -> str:
    if region.startswith("cn-"):
        return AwsDefaults.CHINA_PARTITION
    if region.startswith("us-gov-"):
        return AwsDefaults.GOVCLOUD_PARTITION
    return AwsDefaults.DEFAULT_PARTITION


def derive_lambda_arn(partition: str, region: str, account_id: str, function_name: str) -> str:
    return f"arn:{partition}:lambda:{region}:{account_id}:function:{function_name}"


def normalize_logical_name(key: str) -> str:
    """
    Logical-id normalization used for function resources in templates.

    "my-func_name" -> "MyDashfuncUnderscorename"
    """
    if not key:
        return key
    normalized = key[0].upper() + key[1:]
    return normalized.replace("-", "Dash").replace("_", "Underscore")
