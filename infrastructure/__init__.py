"""
Infrastructure Package - Lazy Loading Implementation.

Adapters for everything outside the process: PostgreSQL sessions, the
custom resource response URL and AWS account identity.

Imports are deferred until first access so that importing the handler
module does not read configuration or create boto3/httpx clients before
the Lambda runtime has set up the environment.

Exports:
    get_connection, with_connection, execute_statements, describe_target
    CustomResourceResponder, build_response
    resolve_account_id, get_caller_account_id
"""

from typing import TYPE_CHECKING

# For type checking only - doesn't actually import at runtime
if TYPE_CHECKING:
    from .postgresql import get_connection as _get_connection
    from .postgresql import with_connection as _with_connection
    from .postgresql import execute_statements as _execute_statements
    from .postgresql import describe_target as _describe_target
    from .cfn_response import CustomResourceResponder as _CustomResourceResponder
    from .cfn_response import build_response as _build_response
    from .aws_identity import resolve_account_id as _resolve_account_id
    from .aws_identity import get_caller_account_id as _get_caller_account_id


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    # PostgreSQL session
    if name in ("get_connection", "with_connection", "execute_statements", "describe_target"):
        from . import postgresql
        return getattr(postgresql, name)

    # Custom resource response
    elif name in ("CustomResourceResponder", "build_response"):
        from . import cfn_response
        return getattr(cfn_response, name)

    # Account identity
    elif name in ("resolve_account_id", "get_caller_account_id"):
        from . import aws_identity
        return getattr(aws_identity, name)

    else:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "get_connection",
    "with_connection",
    "execute_statements",
    "describe_target",
    "CustomResourceResponder",
    "build_response",
    "resolve_account_id",
    "get_caller_account_id",
]
