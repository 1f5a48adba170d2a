"""
Reconciliation engine with a recording executor.

Covers Create/Update/Delete for both resource kinds, the old-vs-current
database choice on Update and the best-effort drop policy.
"""

import pytest

from core.models import RequestType
from exceptions import ConfigurationError, DatabaseError
from services.reconciliation import ReconciliationEngine, arn_suffix
from tests.factories.model_factories import (
    NAMESPACE,
    NEW_CONN,
    OLD_CONN,
    RecordingExecutor,
    make_database_target,
    make_trigger_spec,
)

TRIGGER_NAME = f"{NAMESPACE}_onEvent"


def _is_drop(statement):
    return statement.startswith("DROP TRIGGER")


def _is_create(statement):
    return statement.startswith("CREATE TRIGGER")


class TestPrerequisites:
    def test_create_runs_prerequisites(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        result = engine.reconcile_prerequisites(RequestType.CREATE, make_database_target(), "ignored")

        assert result.physical_resource_id == NAMESPACE
        assert result.statements_executed == 10
        assert recording_executor.connections() == [NEW_CONN]

    def test_update_keeps_previous_physical_id(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        result = engine.reconcile_prerequisites("Update", make_database_target(), "previous-id")
        assert result.physical_resource_id == "previous-id"
        assert len(recording_executor.calls) == 1

    def test_update_without_previous_id_uses_namespace(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        assert engine.reconcile_prerequisites("Update", make_database_target()).physical_resource_id == NAMESPACE

    def test_delete_is_noop(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        result = engine.reconcile_prerequisites(RequestType.DELETE, make_database_target(), "previous-id")
        assert result.physical_resource_id == "previous-id"
        assert recording_executor.calls == []

    @pytest.mark.parametrize("request_type", ["Create", "Update"])
    def test_missing_connection_string_is_fatal(self, recording_executor, request_type):
        engine = ReconciliationEngine(executor=recording_executor)
        database = make_database_target(ConnectionString=None)
        with pytest.raises(ConfigurationError, match="Missing Postgres connection string"):
            engine.reconcile_prerequisites(request_type, database)
        assert recording_executor.calls == []

    def test_delete_needs_no_connection_string(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        result = engine.reconcile_prerequisites("Delete", make_database_target(ConnectionString=None), "previous-id")
        assert result.physical_resource_id == "previous-id"
        assert recording_executor.calls == []

    def test_default_connection_string_used(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor, default_connection_string="postgresql://fallback")
        engine.reconcile_prerequisites("Create", make_database_target(ConnectionString=None))
        assert recording_executor.connections() == ["postgresql://fallback"]


class TestTriggerCreate:
    def test_create(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        result = engine.reconcile_trigger("Create", make_database_target(), make_trigger_spec())

        assert result.physical_resource_id == TRIGGER_NAME
        assert result.statements_executed == 2
        assert result.drops == []
        [(conn, statements)] = recording_executor.calls
        assert conn == NEW_CONN
        assert _is_drop(statements[0]) and _is_create(statements[1])

    def test_missing_target_arn(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        with pytest.raises(ConfigurationError, match="Missing TargetArn"):
            engine.reconcile_trigger("Create", make_database_target(), make_trigger_spec(target_arn=None))
        assert recording_executor.calls == []

    def test_name_from_arn_without_function_key(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        result = engine.reconcile_trigger("Create", make_database_target(), make_trigger_spec(function_key=None))
        assert result.physical_resource_id == f"{NAMESPACE}_svc-dev-onEvent"

    def test_create_failure_propagates(self):
        engine = ReconciliationEngine(executor=RecordingExecutor(fail_on=["CREATE TRIGGER"]))
        with pytest.raises(DatabaseError):
            engine.reconcile_trigger("Create", make_database_target(), make_trigger_spec())

    def test_unsupported_order_rejected_before_any_sql(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        with pytest.raises(ConfigurationError, match="Only AFTER"):
            engine.reconcile_trigger("Update", make_database_target(), make_trigger_spec(order="BEFORE"))
        assert recording_executor.calls == []


class TestTriggerUpdate:
    def test_changed_connection_drops_on_old_then_creates_on_new(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        result = engine.reconcile_trigger(
            "Update",
            make_database_target(),
            make_trigger_spec(),
            old_database=make_database_target(ConnectionString=OLD_CONN),
            old_trigger=make_trigger_spec(),
        )

        assert recording_executor.connections() == [OLD_CONN, NEW_CONN]
        [old_drop] = recording_executor.calls[0][1]
        assert _is_drop(old_drop)
        assert _is_create(recording_executor.calls[1][1][-1])
        assert [d.target for d in result.drops] == ["old"]
        assert result.drops[0].success

    def test_same_connection_drops_then_creates_on_it(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        result = engine.reconcile_trigger(
            "Update",
            make_database_target(),
            make_trigger_spec(),
            old_database=make_database_target(),
        )

        assert recording_executor.connections() == [NEW_CONN, NEW_CONN]
        assert _is_drop(recording_executor.calls[0][1][0])
        assert _is_create(recording_executor.calls[1][1][-1])
        assert [d.target for d in result.drops] == ["current"]

    def test_old_drop_uses_previous_namespace_and_table(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        engine.reconcile_trigger(
            "Update",
            make_database_target(),
            make_trigger_spec(),
            old_database=make_database_target(ConnectionString=OLD_CONN, Namespace="old_ns"),
            old_trigger=make_trigger_spec(table="audit.events"),
        )
        old_drop = recording_executor.calls[0][1][0]
        assert old_drop == 'DROP TRIGGER IF EXISTS "old_ns_onEvent" ON "audit"."events" CASCADE'

    @pytest.mark.parametrize("old_conn", [OLD_CONN, NEW_CONN])
    def test_drop_failure_does_not_prevent_create(self, old_conn):
        executor = RecordingExecutor(fail_calls=[1])
        engine = ReconciliationEngine(executor=executor)

        result = engine.reconcile_trigger(
            "Update",
            make_database_target(),
            make_trigger_spec(),
            old_database=make_database_target(ConnectionString=old_conn),
        )

        assert executor.connections() == [old_conn, NEW_CONN]
        assert _is_create(executor.calls[1][1][-1])
        assert not result.drops[0].success
        assert "simulated failure on call 1" in result.drops[0].error
        assert result.failed_drops == result.drops
        assert result.statements_executed == 2

    def test_no_old_properties_drops_on_current(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        engine.reconcile_trigger("Update", make_database_target(), make_trigger_spec())
        assert recording_executor.connections() == [NEW_CONN, NEW_CONN]

    def test_unresolvable_old_connection_falls_back_to_current(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        engine.reconcile_trigger(
            "Update",
            make_database_target(),
            make_trigger_spec(),
            old_database=make_database_target(ConnectionString=None),
        )
        assert recording_executor.connections() == [NEW_CONN, NEW_CONN]


class TestTriggerDelete:
    def test_delete_drops_once_without_prerequisites(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        result = engine.reconcile_trigger("Delete", make_database_target(), make_trigger_spec())

        assert result.physical_resource_id == TRIGGER_NAME
        [(conn, statements)] = recording_executor.calls
        assert conn == NEW_CONN
        assert statements == [f'DROP TRIGGER IF EXISTS "{TRIGGER_NAME}" ON "public"."events" CASCADE']
        assert not any("EXTENSION" in s or "FUNCTION" in s for s in recording_executor.statements)

    def test_delete_drop_failure_is_not_fatal(self):
        engine = ReconciliationEngine(executor=RecordingExecutor(fail_on=["DROP TRIGGER"]))
        result = engine.reconcile_trigger("Delete", make_database_target(), make_trigger_spec())
        assert result.physical_resource_id == TRIGGER_NAME
        assert result.failed_drops[0].trigger_name == TRIGGER_NAME

    def test_delete_without_target_arn_drops_by_function_key(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        result = engine.reconcile_trigger("Delete", make_database_target(), make_trigger_spec(target_arn=None))
        assert result.physical_resource_id == TRIGGER_NAME
        assert recording_executor.statements == [
            f'DROP TRIGGER IF EXISTS "{TRIGGER_NAME}" ON "public"."events" CASCADE'
        ]

    def test_delete_without_connection_string_is_a_failed_drop(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        result = engine.reconcile_trigger("Delete", make_database_target(ConnectionString=None), make_trigger_spec())
        assert result.physical_resource_id == TRIGGER_NAME
        assert "Missing Postgres connection string" in result.failed_drops[0].error
        assert recording_executor.calls == []


class TestHelpers:
    def test_drop_trigger_captures_bad_table(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        result = engine.drop_trigger(make_database_target(), make_trigger_spec(table="public."))
        assert not result.success
        assert "Invalid table qualified name" in result.error
        assert recording_executor.calls == []

    def test_create_trigger_returns_name(self, recording_executor):
        engine = ReconciliationEngine(executor=recording_executor)
        assert engine.create_trigger(make_database_target(), make_trigger_spec()) == TRIGGER_NAME

    def test_arn_suffix(self):
        assert arn_suffix("arn:aws:lambda:us-east-1:123456789012:function:svc-dev-onEvent") == "...:svc-dev-onEvent"
        assert arn_suffix(None) == "<none>"
