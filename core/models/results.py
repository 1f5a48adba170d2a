"""
Reconciliation Result Data Models.

Represents the outcome of reconciliation steps.
No business logic - pure data structures.

Exports:
    DropResult: Outcome of a best-effort trigger drop
    ReconciliationResult: Outcome of one reconcile call
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class DropResult(BaseModel):
    """
    Outcome of a best-effort drop.

    A failed drop is recorded here instead of raised; callers proceed
    with the compensating create (Update) or report success (Delete).
    """

    trigger_name: str = Field(..., description="Derived trigger name that was dropped")
    table: str = Field(..., description="Table the drop targeted")
    target: str = Field(..., description="'old' or 'current' database")
    success: bool = Field(..., description="True if the DROP statement executed")
    error: Optional[str] = Field(default=None, description="Error message if the drop failed")


class ReconciliationResult(BaseModel):
    """
    Outcome of one reconcile call.
    """

    physical_resource_id: str = Field(..., description="Identifier reported to the orchestrator")
    statements_executed: int = Field(default=0, ge=0, description="DDL statements run by the primary step")
    drops: List[DropResult] = Field(default_factory=list, description="Best-effort drops attempted")

    @property
    def failed_drops(self) -> List[DropResult]:
        return [drop for drop in self.drops if not drop.success]
