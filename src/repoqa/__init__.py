"""repoqa - Question answering over code repositories with heuristic pre-analysis."""

__version__ = "0.1.0"

from .assistant import RepositoryAssistant
from .config import Config
from .models import (
    CombinedReasoning,
    GenerationAttemptResult,
    ModelDefinition,
    ReasoningResult,
    RepositoryContext,
    RepositoryFile,
)

__all__ = [
    "RepositoryAssistant",
    "Config",
    "CombinedReasoning",
    "GenerationAttemptResult",
    "ModelDefinition",
    "ReasoningResult",
    "RepositoryContext",
    "RepositoryFile",
]
