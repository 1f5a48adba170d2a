"""
Lambda Trigger DDL Builder.

Generates the PostgreSQL DDL that forwards row events to Lambda through
the RDS aws_lambda extension. All builders are pure and return lists of
psycopg.sql.Composed statements for direct execution, one per statement.

Identifiers always go through sql.Identifier and values through
sql.Literal. The one exception is the WHEN predicate, which is itself a
SQL boolean expression supplied by the function author and is inserted
verbatim.

Statements:
    Prerequisites (once per namespace, idempotent):
        extensions -> role -> grants -> schema -> invoker function -> owner
    Create trigger:
        DROP TRIGGER IF EXISTS ... CASCADE; CREATE TRIGGER ...
    Drop trigger:
        DROP TRIGGER IF EXISTS ... CASCADE

Exports:
    sql_create_prerequisites: Extensions, role, schema and invoker function
    build_operations: "INSERT OR UPDATE OF ..." clause
    sql_create_trigger: Drop-then-create for one function's trigger
    sql_drop_trigger: Drop one trigger by derived name
    render_statements: Script text for previews and logs
"""

from typing import Iterable, List, Optional, Sequence

from psycopg import sql

from exceptions import ConfigurationError
from config.defaults import PostgresDefaults
from core.models.enums import Operation, TriggerOrder, TriggerLevel
from core.models.trigger import OperationSpec, TriggerSpec
from core.logic.naming import split_qualified_name


# Invoker function body. tg_argv[0] is the ARN literal captured when the
# trigger was created; 'Event' makes the invocation asynchronous.
_INVOKER_FUNCTION = """
CREATE OR REPLACE FUNCTION {namespace}.{function}()
RETURNS trigger
LANGUAGE plpgsql
SECURITY DEFINER
SET search_path = {namespace}, pg_temp
AS $$
DECLARE
    arn text := tg_argv[0];
    payload jsonb := jsonb_build_object(
        'type', tg_op,
        'schema', tg_table_schema,
        'table', tg_table_name,
        'record', CASE WHEN tg_op IN ('INSERT', 'UPDATE') THEN to_jsonb(new) ELSE NULL END,
        'old_record', CASE WHEN tg_op IN ('UPDATE', 'DELETE') THEN to_jsonb(old) ELSE NULL END
    );
BEGIN
    PERFORM aws_lambda.invoke(aws_commons.create_lambda_function_arn(arn), payload::json, 'Event');
    RETURN NULL;
END;
$$
"""

# CREATE ROLE has no IF NOT EXISTS
_CREATE_ROLE = """
DO $$
BEGIN
    IF NOT EXISTS (SELECT 1 FROM pg_roles WHERE rolname = {role_name}) THEN
        CREATE ROLE {role} NOLOGIN;
    END IF;
END
$$
"""


def sql_create_prerequisites(
    role_name: str,
    namespace: str,
    function_name: str
) -> List[sql.Composed]:
    """
    Idempotent setup for one namespace.

    Args:
        role_name: Role that will own the invoker function
        namespace: Schema holding the invoker function
        function_name: Name of the invoker function

    Returns:
        Statements in execution order
    """
    role = sql.Identifier(role_name)
    statements: List[sql.Composed] = []

    for extension in PostgresDefaults.EXTENSIONS:
        statements.append(
            sql.SQL("CREATE EXTENSION IF NOT EXISTS {}").format(sql.Identifier(extension))
        )

    statements.append(
        sql.SQL(_CREATE_ROLE).format(role_name=sql.Literal(role_name), role=role)
    )

    statements.append(
        sql.SQL("GRANT USAGE ON SCHEMA {schemas} TO {role}").format(
            schemas=sql.SQL(", ").join(sql.Identifier(s) for s in PostgresDefaults.LAMBDA_SCHEMAS),
            role=role
        )
    )
    for schema in PostgresDefaults.LAMBDA_SCHEMAS:
        statements.append(
            sql.SQL("GRANT EXECUTE ON ALL FUNCTIONS IN SCHEMA {schema} TO {role}").format(
                schema=sql.Identifier(schema),
                role=role
            )
        )

    statements.append(
        sql.SQL("CREATE SCHEMA IF NOT EXISTS {}").format(sql.Identifier(namespace))
    )

    statements.append(
        sql.SQL(_INVOKER_FUNCTION).format(
            namespace=sql.Identifier(namespace),
            function=sql.Identifier(function_name)
        )
    )

    statements.append(
        sql.SQL("ALTER FUNCTION {namespace}.{function}() OWNER TO {role}").format(
            namespace=sql.Identifier(namespace),
            function=sql.Identifier(function_name),
            role=role
        )
    )

    return statements


def build_operations(operations: Sequence[OperationSpec]) -> sql.Composed:
    """
    Operations clause joined with OR.

    No operations means all three. UPDATE with columns renders as
    UPDATE OF "col1", "col2".
    """
    if not operations:
        operations = [OperationSpec(operation=op) for op in Operation]

    parts = []
    for spec in operations:
        if spec.is_column_scoped:
            parts.append(
                sql.SQL("UPDATE OF {}").format(
                    sql.SQL(", ").join(sql.Identifier(c) for c in spec.columns)
                )
            )
        else:
            parts.append(sql.SQL(spec.operation.value))

    return sql.SQL(" OR ").join(parts)


def sql_create_trigger(
    trigger_name: str,
    trigger: TriggerSpec,
    namespace: str,
    function_name: str,
    target_arn: Optional[str] = None
) -> List[sql.Composed]:
    """
    Drop-then-create for one function's trigger.

    Dropping first makes redeploys idempotent without a catalog check.

    Args:
        trigger_name: Derived trigger name
        trigger: Normalized declaration
        namespace: Schema holding the invoker function
        function_name: Invoker function name
        target_arn: Invocation target; defaults to trigger.target_arn

    Returns:
        [DROP TRIGGER, CREATE TRIGGER]

    Raises:
        ConfigurationError: Order other than AFTER, level other than ROW,
            missing target ARN or malformed table name. Raised before
            any SQL is composed.
    """
    if trigger.order != TriggerOrder.AFTER:
        raise ConfigurationError(
            f'Only AFTER triggers are supported; got "{trigger.order.value}" for table {trigger.table}'
        )
    if trigger.level != TriggerLevel.ROW:
        raise ConfigurationError(
            f'Only ROW triggers are supported; got "{trigger.level.value}" for table {trigger.table}'
        )

    arn = target_arn or trigger.target_arn
    if not arn:
        raise ConfigurationError("Missing TargetArn")

    schema, table = split_qualified_name(trigger.table)

    when_clause = sql.SQL("")
    if trigger.when and trigger.when.strip():
        when_clause = sql.SQL("\nWHEN ({})").format(sql.SQL(trigger.when.strip()))

    create_stmt = sql.SQL(
        "CREATE TRIGGER {name}\n"
        "{order} {operations} ON {schema}.{table}\n"
        "FOR EACH {level}{when}\n"
        "EXECUTE FUNCTION {namespace}.{function}({arn})"
    ).format(
        name=sql.Identifier(trigger_name),
        order=sql.SQL(trigger.order.value),
        operations=build_operations(trigger.operations),
        schema=sql.Identifier(schema),
        table=sql.Identifier(table),
        level=sql.SQL(trigger.level.value),
        when=when_clause,
        namespace=sql.Identifier(namespace),
        function=sql.Identifier(function_name),
        arn=sql.Literal(arn)
    )

    return sql_drop_trigger(trigger_name, schema, table) + [create_stmt]


def sql_drop_trigger(trigger_name: str, schema: str, table: str) -> List[sql.Composed]:
    """Drop a trigger by derived name if it exists, cascading."""
    return [
        sql.SQL("DROP TRIGGER IF EXISTS {name} ON {schema}.{table} CASCADE").format(
            name=sql.Identifier(trigger_name),
            schema=sql.Identifier(schema),
            table=sql.Identifier(table)
        )
    ]


def render_statements(statements: Iterable[sql.Composable]) -> str:
    """
    Render statements as a script, one terminated statement per block.

    Rendering uses no connection, so literals are escaped client-side.
    """
    return "\n".join(f"{stmt.as_string(None).strip()};" for stmt in statements)
