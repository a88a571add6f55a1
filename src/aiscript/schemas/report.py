"""Schema for the outcome of a reconciliation run."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class Outcome(str, Enum):
    """What happened to one component during a run."""

    DELETED = "deleted"
    SKIPPED = "skipped"
    GENERATED = "generated"
    FAILED = "failed"


class ComponentOutcome(BaseModel):
    """Result for a single component."""

    component_name: str
    outcome: Outcome
    artifact_path: Optional[Path] = None
    error: Optional[str] = None


class ReconcileReport(BaseModel):
    """Summary of one reconciliation pass over the output directory."""

    output_dir: Path
    outcomes: list[ComponentOutcome] = Field(default_factory=list)
    indexed: list[str] = Field(default_factory=list, description="Component names listed in the index")
    index_path: Optional[Path] = None

    def names(self, outcome: Outcome) -> list[str]:
        """Component names with the given outcome, in the order they were recorded."""
        return [o.component_name for o in self.outcomes if o.outcome is outcome]

    @property
    def deleted(self) -> list[str]:
        return self.names(Outcome.DELETED)

    @property
    def skipped(self) -> list[str]:
        return self.names(Outcome.SKIPPED)

    @property
    def generated(self) -> list[str]:
        return self.names(Outcome.GENERATED)

    @property
    def failed(self) -> list[str]:
        return self.names(Outcome.FAILED)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)
