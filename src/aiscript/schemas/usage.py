"""Schemas for scanned component usages and their dialects."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Framework(str, Enum):
    """UI framework a generated component targets."""

    REACT = "React"
    VUE = "Vue"


class Language(str, Enum):
    """Typing discipline of a generated component."""

    TYPESCRIPT = "TypeScript"
    JAVASCRIPT = "JavaScript"


class Dialect(BaseModel):
    """Framework and language of an artifact, derived from its usage site."""

    model_config = ConfigDict(frozen=True)

    framework: Framework
    language: Language
    output_extension: str = Field(description="Artifact file extension: '.tsx', '.jsx' or '.vue'")

    @property
    def is_vue(self) -> bool:
        return self.framework is Framework.VUE

    @property
    def is_typescript(self) -> bool:
        return self.language is Language.TYPESCRIPT


class UsageRecord(BaseModel):
    """First file, in scan order, that references a component."""

    model_config = ConfigDict(frozen=True)

    component_name: str = Field(description="Bare component name without the namespace prefix")
    source_file: Path = Field(description="File whose content is used as generation context")


# Ordered: insertion order is discovery order
UsageMap = dict[str, UsageRecord]
