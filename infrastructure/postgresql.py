"""
PostgreSQL Session Executor - Direct Database Access

One connection per reconciliation step: open, run, commit, close. No
pooling and no reuse across steps; a provisioning run is short-lived and
isolation between steps matters more than connection reuse.

Connection Settings:
    - sslmode=require unless the connection string sets its own
      (RDS certificates are not in the default trust store)
    - connect_timeout bounded by config (default 10s)
    - statement_timeout applied through the startup options (default 60s)

Transaction Notes:
    - All statements of one step run in one transaction
    - Commit on success, rollback on error, close on every exit path
    - psycopg errors surface as DatabaseError with the original chained

Exports:
    get_connection: Context manager for one provisioning session
    with_connection: Run an action against one session and return its result
    execute_statements: Run DDL statements in one session
    describe_target: Host/database label safe for logs
"""

from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Sequence, TypeVar

import psycopg
from psycopg import sql
from psycopg.conninfo import conninfo_to_dict, make_conninfo

from config import PostgresEventConfig, get_config
from exceptions import DatabaseError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "PostgreSQLSession")

T = TypeVar("T")


def describe_target(connection_string: str) -> str:
    """
    host/dbname label for log lines. Never includes credentials.
    """
    try:
        params = conninfo_to_dict(connection_string)
    except psycopg.ProgrammingError:
        return "<unparseable connection string>"
    host = params.get("host") or "localhost"
    dbname = params.get("dbname") or "?"
    return f"{host}/{dbname}"


def build_session_conninfo(connection_string: str, config: PostgresEventConfig) -> str:
    """
    Apply session defaults to a connection string.

    Values already present in the connection string win, except the
    statement timeout, which is appended to any existing options.
    """
    params = conninfo_to_dict(connection_string)
    params.setdefault("sslmode", config.sslmode)
    params.setdefault("connect_timeout", str(config.connect_timeout_seconds))

    if config.statement_timeout_ms:
        options = params.get("options") or ""
        params["options"] = f"{options} -c statement_timeout={config.statement_timeout_ms}".strip()

    return make_conninfo("", **params)


@contextmanager
def get_connection(
    connection_string: str,
    config: Optional[PostgresEventConfig] = None
) -> Iterator[psycopg.Connection]:
    """
    Context manager for one provisioning session.

    Yields:
        psycopg.Connection (autocommit off)

    Raises:
        DatabaseError: On connection or execution failures
    """
    config = config or get_config()
    target = describe_target(connection_string)
    conn = None
    try:
        logger.debug(f"🔗 Connecting to {target}")
        conn = psycopg.connect(build_session_conninfo(connection_string, config))
        yield conn
        conn.commit()
        logger.debug(f"✅ Session on {target} committed")

    except psycopg.Error as e:
        logger.error(f"❌ PostgreSQL error on {target}: {e}")
        logger.error(f"  Error type: {type(e).__name__}")
        _rollback_quietly(conn)
        raise DatabaseError(f"PostgreSQL error on {target}: {e}") from e

    except Exception:
        _rollback_quietly(conn)
        raise

    finally:
        if conn is not None and not conn.closed:
            conn.close()


def _rollback_quietly(conn: Optional[psycopg.Connection]) -> None:
    """Roll back after a failure; a rollback error must not replace the original one."""
    if conn is None or conn.closed:
        return
    try:
        conn.rollback()
    except psycopg.Error as e:
        logger.warning(f"⚠️ Rollback failed (connection discarded): {e}")


def with_connection(
    connection_string: str,
    action: Callable[[psycopg.Connection], T],
    config: Optional[PostgresEventConfig] = None
) -> T:
    """
    Open one session, invoke action with it, and always close it.

    Args:
        connection_string: Resolved, non-empty connection string
        action: Callable receiving the open connection
        config: Session settings; defaults to get_config()

    Returns:
        Whatever action returns
    """
    with get_connection(connection_string, config) as conn:
        return action(conn)


def execute_statements(
    connection_string: str,
    statements: Sequence[sql.Composable],
    config: Optional[PostgresEventConfig] = None
) -> int:
    """
    Execute DDL statements one by one in a single session.

    Args:
        connection_string: Resolved, non-empty connection string
        statements: Composed statements from core.schema
        config: Session settings; defaults to get_config()

    Returns:
        Number of statements executed
    """
    def _run(conn: psycopg.Connection) -> int:
        with conn.cursor() as cursor:
            for index, stmt in enumerate(statements, start=1):
                logger.debug(f"Executing statement {index}/{len(statements)}")
                cursor.execute(stmt)
        return len(statements)

    count = with_connection(connection_string, _run, config)
    logger.info(f"✅ Executed {count} statement(s) on {describe_target(connection_string)}")
    return count
