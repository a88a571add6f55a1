"""Pydantic schemas shared across aiscript."""

from aiscript.schemas.report import ComponentOutcome, Outcome, ReconcileReport
from aiscript.schemas.usage import Dialect, Framework, Language, UsageMap, UsageRecord

__all__ = [
    "ComponentOutcome",
    "Dialect",
    "Framework",
    "Language",
    "Outcome",
    "ReconcileReport",
    "UsageMap",
    "UsageRecord",
]
