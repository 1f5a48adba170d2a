"""
Imperative Deploy Client - lifecycle hooks that issue DDL directly.

Runs from the deploy tool rather than from the orchestrator: after a
deploy it ensures the prerequisites and (re)creates one trigger per
function; before a remove it drops the triggers. Prerequisites are never
removed.

Hooks:
    initialize                    -> validate that a connection string resolves
    after:deploy:deploy           -> apply_triggers
    after:deploy:function:deploy  -> apply_triggers
    before:remove:remove          -> drop_triggers

Exports:
    PostgresEventDeployer: Hook-driven deploy client
"""

from typing import Callable, Dict, List, Optional

from core.models import DropResult, RequestType
from core.schema import render_statements
from services.reconciliation import ReconciliationEngine, arn_suffix
from services.registration import (
    ServiceDefinition,
    get_functions_with_postgres_event,
    resolve_database_target,
)
from util_logger import LoggerFactory, ComponentType, log_exceptions

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "PostgresEventDeployer")


class PostgresEventDeployer:
    """
    Deploy-time trigger provisioning for one service.

    Usage:
        deployer = PostgresEventDeployer(load_service_definition("service.json"))
        deployer.run_hook("after:deploy:deploy")
    """

    def __init__(
        self,
        service: ServiceDefinition,
        engine: Optional[ReconciliationEngine] = None,
        account_id: Optional[str] = None
    ):
        self.service = service
        self.engine = engine or ReconciliationEngine()
        self.account_id = account_id
        self.database = resolve_database_target(service)

        self.hooks: Dict[str, Callable[[], object]] = {
            "initialize": self.validate_connection,
            "after:deploy:deploy": self.apply_triggers,
            "after:deploy:function:deploy": self.apply_triggers,
            "before:remove:remove": self.drop_triggers,
        }

    def run_hook(self, name: str):
        """Invoke a lifecycle hook by name; unknown names raise KeyError."""
        logger.debug(f"Running hook '{name}'")
        return self.hooks[name]()

    def validate_connection(self) -> None:
        """Fail fast when no connection string resolves."""
        self.engine.resolve_connection_string(self.database)

    @log_exceptions(ComponentType.TRIGGER, "PostgresEventDeployer")
    def apply_triggers(self) -> List[str]:
        """
        Ensure prerequisites, then create each function's trigger in
        declared order.

        Returns:
            Trigger names created
        """
        logger.info("🚀 Applying RDS Postgres extensions, roles, function, and triggers...")

        functions = get_functions_with_postgres_event(self.service, self.account_id)
        self.engine.reconcile_prerequisites(RequestType.CREATE, self.database)

        created = []
        for fn in functions:
            logger.info(
                f"Creating trigger on {fn.trigger.table} for [{', '.join(fn.trigger.operation_names)}] "
                f"-> {arn_suffix(fn.arn)}"
            )
            result = self.engine.reconcile_trigger(RequestType.CREATE, self.database, fn.trigger)
            created.append(result.physical_resource_id)

        logger.info("✅ All triggers created.")
        return created

    def drop_triggers(self) -> List[DropResult]:
        """Best-effort drop of each function's trigger."""
        logger.info("🗑️ Dropping triggers...")

        results = []
        for fn in get_functions_with_postgres_event(self.service, self.account_id):
            results.append(self.engine.drop_trigger(self.database, fn.trigger))

        failed = [r for r in results if not r.success]
        if failed:
            logger.warning(f"⚠️ {len(failed)} of {len(results)} trigger drop(s) failed")
        else:
            logger.info("✅ All triggers dropped.")
        return results

    def preview_sql(self) -> str:
        """SQL script apply_triggers would run, without connecting."""
        statements = list(self.engine.plan_prerequisites(self.database))
        for fn in get_functions_with_postgres_event(self.service, self.account_id):
            statements.extend(self.engine.plan_trigger(self.database, fn.trigger))
        return render_statements(statements)
