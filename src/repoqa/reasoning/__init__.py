"""Rule-based pre-analysis of repository contexts."""

from .adaptive import AdaptiveReasoner
from .base import HeuristicAnalyzer
from .orchestrator import ReasoningOrchestrator, ReasoningTimeoutError
from .structural import StructuralReasoner

__all__ = [
    "AdaptiveReasoner",
    "HeuristicAnalyzer",
    "ReasoningOrchestrator",
    "ReasoningTimeoutError",
    "StructuralReasoner",
]
