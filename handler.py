"""
Lambda entry point for the Postgres trigger provider.

The orchestrator invokes this function for every Custom::PostgresPrerequisites
and Custom::PostgresTrigger resource. Configure the runtime handler as
"handler.handler".

Architecture:
    Custom resource request -> CustomResourceHandler -> ReconciliationEngine
                                       |                        |
                              ResponseURL PUT            DDL Builder -> psycopg session

Environment:
    PG_CONNECTION_STRING     Default connection string when Database.ConnectionString is unset
    PG_CONNECT_TIMEOUT       Connect timeout in seconds (default 10)
    PG_STATEMENT_TIMEOUT_MS  Statement timeout in milliseconds (default 60000)
    CFN_RESPONSE_TIMEOUT     Response PUT timeout in seconds (default 30)
    DEBUG_LOGGING            "true" for DEBUG level logs

Exports:
    handler: Lambda handler
"""

from typing import Any, Dict, Optional

from config import debug_config
from triggers.custom_resource import CustomResourceHandler
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "LambdaHandler")

# Created on first invocation, reused while the container stays warm
_handler: Optional[CustomResourceHandler] = None


def get_handler() -> CustomResourceHandler:
    global _handler
    if _handler is None:
        logger.debug(f"Initializing provider with config: {debug_config()}")
        _handler = CustomResourceHandler()
    return _handler


def handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """
    Lambda handler.

    Returns the delivered response body. Errors are re-raised after a
    FAILED response was attempted, so the invocation is marked failed.
    """
    if context is not None:
        logger.debug(f"Invocation {getattr(context, 'aws_request_id', '?')}")
    return get_handler().handle(event).to_body()
