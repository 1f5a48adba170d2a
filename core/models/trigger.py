"""
Trigger Declaration Models.

Pure data structures describing where a trigger lives and what fires it.
Declarations arrive in two shapes and are normalized here:

    Array form (function events):
        {"table": "public.events", "operations": ["INSERT", "UPDATE"],
         "order": "AFTER", "level": "ROW", "when": "NEW.status = 'PUBLISHED'"}

    Presence-flag form (custom resource properties):
        {"table": "events", "insert": {}, "update": {"columns": ["status"]}}

Exports:
    OperationSpec: One operation, optionally column-scoped
    TriggerSpec: Normalized trigger declaration for one function
    DatabaseTarget: Database holding prerequisites and triggers
    FunctionWithPostgresEvent: Function key, name, ARN and its trigger
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from exceptions import ConfigurationError
from config.defaults import PostgresDefaults
from config.postgres_config import resolve_connection_string
from .enums import Operation, TriggerOrder, TriggerLevel


# Presence-flag keys, in the order operations are collected
_FLAG_KEYS = (
    ("insert", Operation.INSERT),
    ("delete", Operation.DELETE),
    ("update", Operation.UPDATE),
)


def _flag_is_set(value: Any) -> bool:
    """Orchestrators stringify booleans in resource properties."""
    if value is None or value is False:
        return False
    if isinstance(value, str) and value.strip().lower() in ("", "false"):
        return False
    return True


class OperationSpec(BaseModel):
    """
    One trigger operation.

    Columns only matter for UPDATE (UPDATE OF col1, col2); they are kept
    but ignored for INSERT and DELETE.
    """

    operation: Operation
    columns: List[str] = Field(default_factory=list)

    @field_validator("operation", mode="before")
    @classmethod
    def _upper_operation(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("columns", mode="before")
    @classmethod
    def _coerce_columns(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value.strip()] if value.strip() else []
        return [str(column) for column in value if column]

    @property
    def is_column_scoped(self) -> bool:
        return self.operation == Operation.UPDATE and bool(self.columns)


class TriggerSpec(BaseModel):
    """
    Normalized trigger declaration for one deployable function.

    Defaults: order AFTER, level ROW, empty WHEN predicate. An empty
    operations list means "all three" and is expanded by the DDL builder.
    """

    model_config = ConfigDict(extra="ignore")

    table: str = Field(..., min_length=1, description="Bare or schema-qualified table name")
    operations: List[OperationSpec] = Field(default_factory=list)
    order: TriggerOrder = TriggerOrder.AFTER
    level: TriggerLevel = TriggerLevel.ROW
    when: str = Field(default="", description="Raw SQL boolean expression, inserted verbatim")
    target_arn: Optional[str] = Field(default=None, description="Invocation target identity")
    function_key: Optional[str] = Field(default=None, description="Function key used for the trigger name")

    @model_validator(mode="before")
    @classmethod
    def _normalize_declaration(cls, data):
        if not isinstance(data, dict):
            return data

        data = dict(data)
        collected: List[Dict[str, Any]] = []

        raw_operations = data.pop("operations", None) or []
        if isinstance(raw_operations, str):
            raw_operations = [raw_operations]
        for item in raw_operations:
            if isinstance(item, str):
                collected.append({"operation": item})
            elif isinstance(item, OperationSpec):
                collected.append(item.model_dump())
            else:
                collected.append(dict(item))

        for key, operation in _FLAG_KEYS:
            flag = data.pop(key, None)
            if not _flag_is_set(flag):
                continue
            columns = flag.get("columns") if isinstance(flag, dict) else None
            collected.append({"operation": operation.value, "columns": columns})

        # First declaration of an operation wins
        seen = set()
        operations = []
        for item in collected:
            name = str(item.get("operation", "")).strip().upper()
            if name in seen:
                continue
            seen.add(name)
            operations.append(item)
        data["operations"] = operations

        for key in ("order", "level"):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip().upper()
            elif data.get(key) is None:
                data.pop(key, None)

        if data.get("when") is None:
            data["when"] = ""

        return data

    @classmethod
    def from_config(cls, raw: Dict[str, Any], **overrides) -> "TriggerSpec":
        """
        Build a TriggerSpec from a declaration, converting validation
        failures into ConfigurationError.

        Args:
            raw: Declaration in array or presence-flag form
            **overrides: Fields set after normalization (target_arn, function_key)
        """
        try:
            spec = cls.model_validate(raw)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid postgres trigger declaration: {e}") from e
        if overrides:
            spec = spec.model_copy(update=overrides)
        return spec

    @property
    def operation_names(self) -> List[str]:
        """Operation names for log lines, defaulting like the DDL builder does."""
        if not self.operations:
            return [operation.value for operation in Operation]
        return [spec.operation.value for spec in self.operations]

    def to_presence_flags(self) -> Dict[str, Any]:
        """Declaration in presence-flag form, as emitted into templates."""
        props: Dict[str, Any] = {"table": self.table}
        for spec in self.operations:
            props[spec.operation.value.lower()] = {"columns": spec.columns} if spec.columns else {}
        props["order"] = self.order.value
        props["level"] = self.level.value
        if self.when:
            props["when"] = self.when
        return props


class DatabaseTarget(BaseModel):
    """
    One logical database: where the namespace's prerequisites and
    triggers live.

    Field aliases match the custom resource "Database" property block.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    connection_string: Optional[str] = Field(default=None, alias="ConnectionString")
    namespace: str = Field(..., min_length=1, alias="Namespace")
    role_name: str = Field(..., min_length=1, alias="RoleName")
    function_name: str = Field(default=PostgresDefaults.FUNCTION_NAME, min_length=1, alias="FunctionName")

    def resolve_connection_string(self, default: Optional[str] = None) -> str:
        """Explicit connection string, then the process default, else ConfigurationError."""
        return resolve_connection_string(self.connection_string, default)

    def to_properties(self) -> Dict[str, Any]:
        """Custom resource property block; an unset connection string is omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FunctionWithPostgresEvent(BaseModel):
    """
    A deployable function with exactly one postgres event.
    """

    key: str = Field(..., description="Function key in the service definition")
    name: str = Field(..., description="Deployed function name")
    arn: str = Field(..., description="Invocation target ARN")
    trigger: TriggerSpec
