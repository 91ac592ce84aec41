"""Core data models for repoqa."""

from typing import Literal, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator


class RepositoryFile(BaseModel):
    """A single entry of an ingested repository."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str = ""
    type: Literal["file", "directory"] = "file"
    size: int = 0


class RepositoryContext(BaseModel):
    """Immutable snapshot of a repository handed to the reasoning layer."""

    model_config = ConfigDict(frozen=True)

    files: Tuple[RepositoryFile, ...] = ()
    structure: str = ""
    total_files: int = 0
    total_size: int = 0


class ReasoningResult(BaseModel):
    """Output of a single heuristic analyzer run."""

    model_config = ConfigDict(frozen=True)

    source: str
    insights: Tuple[str, ...] = ()
    confidence: float = Field(ge=0.0, le=1.0)
    focus_areas: Tuple[str, ...] = ()
    suggested_prompts: Tuple[str, ...] = ()

    @field_validator("focus_areas")
    @classmethod
    def _dedupe_focus_areas(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        return tuple(dict.fromkeys(value))


class CombinedReasoning(BaseModel):
    """Merged report built from several ReasoningResults."""

    model_config = ConfigDict(frozen=True)

    summary: str
    security_concerns: Tuple[str, ...] = ()
    architecture_insights: Tuple[str, ...] = ()
    code_quality_issues: Tuple[str, ...] = ()
    aggregated_confidence: float = 0.0
    focus_areas: Tuple[str, ...] = ()
    suggested_prompts: Tuple[str, ...] = ()


class ModelDefinition(BaseModel):
    """Catalogue entry describing one generation backend."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    description: str = ""
    is_uncensored: bool = False
    source_ref: str = ""
    quantization: Optional[str] = None
    backend_library_id: Optional[str] = "litellm"  # "litellm" or "langchain"
    model_route: Optional[str] = None
    vram_required_mb: int = 1024

    @property
    def route(self) -> str:
        """Identifier handed to the backend library."""
        return self.model_route or self.id


class GenerationAttemptResult(BaseModel):
    """The accepted response of a fallback generation run."""

    model_config = ConfigDict(frozen=True)

    content: str
    backend_used: str
    is_refusal: bool = False
