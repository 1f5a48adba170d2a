"""
Structured JSON logging.

Every record is written to stdout as a single JSON object so CloudWatch
Logs Insights can filter on fields. Loggers are created per component
through LoggerFactory; correlation fields from the current custom
resource request travel in customDimensions.

Exports:
    ComponentType: Layer a logger belongs to
    LogLevel: Log level enum
    LogContext: Request correlation fields
    ComponentConfig: Per-component level settings
    JSONFormatter: One-line JSON formatter
    LoggerFactory: Logger construction
    log_exceptions: Decorator that logs and re-raises

Environment:
    DEBUG_LOGGING  "true" lowers every component to DEBUG
"""

from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from dataclasses import dataclass, asdict
import logging
import sys
import os
import json
from functools import wraps


class ComponentType(Enum):
    """Layers of the provider, used as the logger name prefix."""
    TRIGGER = "trigger"        # Lambda handler and deploy hooks
    SERVICE = "service"        # Reconciliation, registration, templates
    REPOSITORY = "repository"  # Database sessions
    ADAPTER = "adapter"        # Response transport, STS


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    def to_python_level(self) -> int:
        return getattr(logging, self.value)


@dataclass
class LogContext:
    """
    Correlation fields for one orchestrator request.

    Unset fields are left out of the emitted record.
    """
    request_id: Optional[str] = None
    stack_id: Optional[str] = None
    logical_resource_id: Optional[str] = None
    request_type: Optional[str] = None
    namespace: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class ComponentConfig:
    component_type: ComponentType
    log_level: LogLevel = LogLevel.INFO


# DEBUG_LOGGING=true lowers every component to DEBUG
DEFAULT_LEVEL = LogLevel.DEBUG if os.getenv('DEBUG_LOGGING', '').lower() == 'true' else LogLevel.INFO


class JSONFormatter(logging.Formatter):
    """Formats a record as one JSON document."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}.{record.funcName}:{record.lineno}",
        }

        lambda_name = os.getenv('AWS_LAMBDA_FUNCTION_NAME')
        if lambda_name:
            payload['lambda'] = lambda_name

        dims = getattr(record, 'custom_dimensions', None)
        if dims:
            payload['customDimensions'] = dims

        if record.exc_info and record.exc_info[0] is not None:
            payload['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info),
            }

        return json.dumps(payload, default=str)


class LoggerFactory:
    """
    Creates component loggers that write JSON to stdout.

    Example:
        logger = LoggerFactory.create_logger(ComponentType.SERVICE, "ReconciliationEngine")
        logger.info("Reconciling trigger")
    """

    DEFAULT_CONFIGS = {
        component: ComponentConfig(component_type=component, log_level=DEFAULT_LEVEL)
        for component in ComponentType
    }

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        context: Optional[LogContext] = None,
        config: Optional[ComponentConfig] = None
    ) -> logging.Logger:
        """
        Return the logger "<component>.<name>", configured for JSON output.

        Calling again with the same name reuses the logger and replaces its
        context.
        """
        config = config or cls.DEFAULT_CONFIGS[component_type]
        level = config.log_level.to_python_level()

        logger = logging.getLogger(f"{component_type.value}.{name}")
        logger.setLevel(level)

        if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
            stream = logging.StreamHandler(sys.stdout)
            stream.setFormatter(JSONFormatter())
            logger.addHandler(stream)

        # The Lambda runtime installs a root handler of its own
        logger.propagate = False
        logger._log_context = context

        if not getattr(logger, '_context_wrapped', False):
            emit = logger._log

            def log_with_context(level, msg, args, exc_info=None, extra=None, stack_info=False, stacklevel=1):
                extra = dict(extra or {})
                current = getattr(logger, '_log_context', None)
                dims = current.to_dict() if current else {}
                dims['component_type'] = component_type.value
                dims['component_name'] = name
                dims.update(extra.pop('custom_dimensions', {}))
                extra['custom_dimensions'] = dims
                emit(level, msg, args, exc_info=exc_info, extra=extra,
                     stack_info=stack_info, stacklevel=stacklevel + 1)

            logger._log = log_with_context
            logger._context_wrapped = True

        return logger

    @classmethod
    def create_with_context(
        cls,
        component_type: ComponentType,
        name: str,
        request_id: Optional[str] = None,
        stack_id: Optional[str] = None,
        logical_resource_id: Optional[str] = None,
        request_type: Optional[str] = None,
        namespace: Optional[str] = None
    ) -> logging.Logger:
        """Logger whose records carry the given request correlation fields."""
        context = LogContext(
            request_id=request_id,
            stack_id=stack_id,
            logical_resource_id=logical_resource_id,
            request_type=request_type,
            namespace=namespace,
        )
        return cls.create_logger(component_type, name, context=context if context.to_dict() else None)

    @staticmethod
    def clear_context(logger: logging.Logger) -> None:
        """Drop request correlation fields once the request is finished."""
        logger._log_context = None


def log_exceptions(component_type: ComponentType = ComponentType.SERVICE,
                   component_name: Optional[str] = None,
                   logger: Optional[logging.Logger] = None):
    """
    Log any exception escaping the decorated function, then re-raise it.

    Usage:
        @log_exceptions(ComponentType.TRIGGER, "PostgresEventDeployer")
        def apply_triggers(self): ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                log = logger or LoggerFactory.create_logger(
                    component_type, component_name or func.__module__
                )
                log.error(
                    f"❌ {func.__name__} failed: {e}",
                    exc_info=True,
                    extra={'custom_dimensions': {
                        'function_name': func.__qualname__,
                        'exception_type': type(e).__name__,
                    }}
                )
                raise
        return wrapper
    return decorator
