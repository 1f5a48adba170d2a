"""
Custom Exception Hierarchy

Distinguishes between:
1. Configuration errors (fatal, raised before any DDL runs)
2. Business Logic Failures (expected runtime issues while provisioning)

Configuration errors are surfaced verbatim to the caller or orchestrator.
Runtime failures are either propagated (primary create/update path) or
caught and logged by best-effort operations such as trigger drops.

Exports:
    ConfigurationError: Invalid or missing configuration
    BusinessLogicError: Base class for runtime failures
    DatabaseError: DDL execution or connection failure
    ResponseDeliveryError: Outcome could not be reported to the orchestrator
"""


class ConfigurationError(Exception):
    """
    System configuration error.

    These are fatal and indicate misconfiguration that prevents any
    database work from starting.

    Examples:
        - Missing connection string (no explicit value, no PG_CONNECTION_STRING)
        - Missing TargetArn on a trigger request
        - More than one postgres event declared on one function
        - Unsupported trigger order or level
        - Malformed qualified table name ("public." or ".events")
    """
    pass


class BusinessLogicError(Exception):
    """
    Base class for expected runtime failures.

    These occur during normal provisioning (database unavailable,
    permission denied, orchestrator endpoint unreachable) and are
    handled according to the operation's failure policy.
    """
    pass


class DatabaseError(BusinessLogicError):
    """
    Database operation failures.

    Examples:
        - Connection refused or timed out
        - Extension creation not permitted
        - Syntax error in a user supplied WHEN predicate
        - Table referenced by a trigger does not exist
    """
    pass


class ResponseDeliveryError(BusinessLogicError):
    """
    Custom resource response could not be delivered.

    Raised when the PUT to the pre-signed ResponseURL fails or returns
    a non-2xx status.
    """
    pass
