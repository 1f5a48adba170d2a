"""
Reconciliation Engine - Create/Update/Delete for prerequisites and triggers.

Turns one lifecycle action into DDL against the right database. There is
no registry of created triggers: the trigger name is recomputed from
(namespace, function key) on every call, so a drop by name always finds
what an earlier create made.

Action Semantics:
    Prerequisites:
        Create  -> run prerequisites, physical id = namespace
        Update  -> run prerequisites, physical id = previous id or namespace
        Delete  -> no SQL (prerequisites are shared and never dropped)
    Trigger:
        Create  -> drop-if-exists + create on the current database
        Update  -> best-effort drop (old database when its connection
                   differs, else current), then create on the current database
        Delete  -> best-effort drop on the current database

Best-effort drops never raise; their outcome is returned as DropResult and
logged as a warning on failure. Creates and prerequisites propagate errors.

Exports:
    ReconciliationEngine: Lifecycle reconciliation over an injectable executor
    StatementExecutor: Executor callable signature
"""

from typing import Callable, List, Optional, Sequence

from psycopg import sql

from config.defaults import PostgresDefaults
from core.logic.naming import derive_trigger_name, lambda_name_from_arn, split_qualified_name
from core.models import (
    DatabaseTarget,
    DropResult,
    ReconciliationResult,
    RequestType,
    TriggerSpec,
)
from core.schema import sql_create_prerequisites, sql_create_trigger, sql_drop_trigger
from exceptions import ConfigurationError
from infrastructure.postgresql import describe_target, execute_statements
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "ReconciliationEngine")

# (connection_string, statements) -> number of statements executed
StatementExecutor = Callable[[str, Sequence[sql.Composable]], int]


def arn_suffix(arn: Optional[str]) -> str:
    """Last 16 characters of an ARN for log lines."""
    if not arn:
        return "<none>"
    return f"...{arn[-16:]}" if len(arn) > 16 else arn


class ReconciliationEngine:
    """
    Applies Create/Update/Delete actions for one deployment.

    Usage:
        engine = ReconciliationEngine()
        engine.reconcile_prerequisites(RequestType.CREATE, database)
        engine.reconcile_trigger(RequestType.CREATE, database, trigger)

    Tests inject a recording executor instead of execute_statements.
    """

    def __init__(
        self,
        executor: Optional[StatementExecutor] = None,
        default_connection_string: Optional[str] = None
    ):
        """
        Args:
            executor: Runs statements against one connection string
            default_connection_string: Process-wide fallback; when None the
                PG_CONNECTION_STRING environment variable is consulted
        """
        self._executor = executor or execute_statements
        self._default_connection_string = default_connection_string

    # ========================================================================
    # NAMING AND PLANNING
    # ========================================================================

    def resolve_connection_string(self, database: DatabaseTarget) -> str:
        return database.resolve_connection_string(self._default_connection_string)

    @staticmethod
    def trigger_name_for(database: DatabaseTarget, trigger: TriggerSpec) -> str:
        """
        Derived trigger name.

        The function key wins; without one the Lambda name from the target
        ARN is the function-specific suffix.
        """
        suffix = trigger.function_key or lambda_name_from_arn(trigger.target_arn or "")
        name = derive_trigger_name(database.namespace, suffix)
        if len(name) > PostgresDefaults.MAX_IDENTIFIER_LENGTH:
            logger.warning(
                f"⚠️ Trigger name '{name}' exceeds {PostgresDefaults.MAX_IDENTIFIER_LENGTH} "
                f"characters; PostgreSQL will truncate it"
            )
        return name

    def plan_prerequisites(self, database: DatabaseTarget) -> List[sql.Composed]:
        return sql_create_prerequisites(
            database.role_name,
            database.namespace,
            database.function_name
        )

    def plan_trigger(self, database: DatabaseTarget, trigger: TriggerSpec) -> List[sql.Composed]:
        """Drop-then-create statements for one trigger."""
        if not trigger.target_arn:
            raise ConfigurationError("Missing TargetArn")
        return sql_create_trigger(
            self.trigger_name_for(database, trigger),
            trigger,
            database.namespace,
            database.function_name,
            trigger.target_arn
        )

    # ========================================================================
    # PREREQUISITES
    # ========================================================================

    def reconcile_prerequisites(
        self,
        request_type: RequestType,
        database: DatabaseTarget,
        physical_resource_id: Optional[str] = None
    ) -> ReconciliationResult:
        """
        Reconcile the shared per-namespace objects.

        Raises:
            ConfigurationError: No connection string resolvable
            DatabaseError: DDL failed
        """
        request_type = RequestType(request_type)

        if request_type == RequestType.CREATE:
            physical_id = database.namespace
        else:
            physical_id = physical_resource_id or database.namespace

        if request_type == RequestType.DELETE:
            logger.info(f"⏭️ Prerequisites for '{database.namespace}' are kept on delete")
            return ReconciliationResult(physical_resource_id=physical_id)

        connection_string = self.resolve_connection_string(database)

        logger.info(
            f"🔧 {request_type.value} prerequisites for namespace '{database.namespace}' "
            f"on {describe_target(connection_string)}"
        )
        executed = self._executor(connection_string, self.plan_prerequisites(database))
        logger.info(f"✅ Prerequisites ready for '{database.namespace}'")

        return ReconciliationResult(physical_resource_id=physical_id, statements_executed=executed)

    # ========================================================================
    # TRIGGERS
    # ========================================================================

    def reconcile_trigger(
        self,
        request_type: RequestType,
        database: DatabaseTarget,
        trigger: TriggerSpec,
        old_database: Optional[DatabaseTarget] = None,
        old_trigger: Optional[TriggerSpec] = None
    ) -> ReconciliationResult:
        """
        Reconcile one function's trigger.

        Args:
            request_type: Create, Update or Delete
            database: Current database target
            trigger: Current trigger declaration (target_arn required except on Delete)
            old_database: Previous database target (Update only)
            old_trigger: Previous trigger declaration (Update only)

        Raises:
            ConfigurationError: Missing TargetArn or connection string,
                unsupported order/level
            DatabaseError: The create step failed
        """
        request_type = RequestType(request_type)
        if request_type == RequestType.DELETE:
            return self._delete(database, trigger)

        if not trigger.target_arn:
            raise ConfigurationError("Missing TargetArn")

        connection_string = self.resolve_connection_string(database)
        trigger_name = self.trigger_name_for(database, trigger)
        drops: List[DropResult] = []

        logger.info(
            f"🎯 {request_type.value} trigger '{trigger_name}' on {trigger.table} "
            f"-> {arn_suffix(trigger.target_arn)}"
        )

        # Build first so an unsupported declaration fails before the drop
        statements = self.plan_trigger(database, trigger)

        if request_type == RequestType.UPDATE:
            drops.append(self._drop_previous(database, trigger, connection_string, old_database, old_trigger))

        executed = self._create(connection_string, database, trigger, statements)
        return ReconciliationResult(
            physical_resource_id=trigger_name,
            statements_executed=executed,
            drops=drops
        )

    def _delete(self, database: DatabaseTarget, trigger: TriggerSpec) -> ReconciliationResult:
        """Best-effort drop on the current database; never raises on the drop."""
        trigger_name = self.trigger_name_for(database, trigger)
        logger.info(f"🎯 Delete trigger '{trigger_name}' on {trigger.table}")
        drop = self.drop_trigger(database, trigger, target="current")
        return ReconciliationResult(physical_resource_id=trigger_name, drops=[drop])

    def _drop_previous(
        self,
        database: DatabaseTarget,
        trigger: TriggerSpec,
        connection_string: str,
        old_database: Optional[DatabaseTarget],
        old_trigger: Optional[TriggerSpec]
    ) -> DropResult:
        """Drop what the previous revision created, wherever it lives."""
        previous_database = old_database or database
        previous_trigger = self._merge_previous_trigger(trigger, old_trigger)

        old_connection_string = connection_string
        if old_database is not None:
            try:
                old_connection_string = self.resolve_connection_string(old_database)
            except ConfigurationError as e:
                logger.warning(f"⚠️ Previous connection string unresolvable ({e}); dropping on current database")

        if old_connection_string != connection_string:
            logger.info("🔀 Connection changed; dropping previous trigger on the old database")
            return self.drop_trigger(previous_database, previous_trigger, old_connection_string, target="old")

        return self.drop_trigger(previous_database, previous_trigger, connection_string, target="current")

    @staticmethod
    def _merge_previous_trigger(trigger: TriggerSpec, old_trigger: Optional[TriggerSpec]) -> TriggerSpec:
        """Previous declaration, borrowing the current naming inputs it lacks."""
        if old_trigger is None:
            return trigger
        if old_trigger.function_key or old_trigger.target_arn:
            return old_trigger
        return old_trigger.model_copy(update={
            "function_key": trigger.function_key,
            "target_arn": trigger.target_arn,
        })

    def create_trigger(
        self,
        database: DatabaseTarget,
        trigger: TriggerSpec,
        connection_string: Optional[str] = None
    ) -> str:
        """
        Drop-if-exists then create one trigger.

        Returns:
            The derived trigger name

        Raises:
            ConfigurationError, DatabaseError
        """
        self._create(connection_string or self.resolve_connection_string(database), database, trigger)
        return self.trigger_name_for(database, trigger)

    def _create(
        self,
        connection_string: str,
        database: DatabaseTarget,
        trigger: TriggerSpec,
        statements: Optional[List[sql.Composed]] = None
    ) -> int:
        if statements is None:
            statements = self.plan_trigger(database, trigger)
        executed = self._executor(connection_string, statements)
        logger.info(
            f"✅ Trigger '{self.trigger_name_for(database, trigger)}' created on "
            f"{describe_target(connection_string)} ({', '.join(trigger.operation_names)})"
        )
        return executed

    def drop_trigger(
        self,
        database: DatabaseTarget,
        trigger: TriggerSpec,
        connection_string: Optional[str] = None,
        target: str = "current"
    ) -> DropResult:
        """
        Best-effort drop of one trigger.

        Any failure (unresolvable connection, bad table name, DDL error) is
        logged and returned as a failed DropResult.
        """
        trigger_name = self.trigger_name_for(database, trigger)
        try:
            resolved = connection_string or self.resolve_connection_string(database)
            schema, table = split_qualified_name(trigger.table)
            self._executor(resolved, sql_drop_trigger(trigger_name, schema, table))
        except Exception as e:
            logger.warning(f"⚠️ Best-effort drop of '{trigger_name}' on {target} database failed: {e}")
            return DropResult(
                trigger_name=trigger_name,
                table=trigger.table,
                target=target,
                success=False,
                error=str(e)
            )

        logger.info(f"🗑️ Dropped trigger '{trigger_name}' on {target} database")
        return DropResult(trigger_name=trigger_name, table=trigger.table, target=target, success=True)
