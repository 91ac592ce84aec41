"""Base class for heuristic repository analyzers."""

from abc import ABC, abstractmethod
from ..models import RepositoryContext, ReasoningResult


class HeuristicAnalyzer(ABC):
    """Derives insights, confidence and focus areas from a repository context.

    Implementations must not raise for any well-formed context, including one
    without files.
    """

    name: str = "HeuristicAnalyzer"

    @abstractmethod
    def analyze(self, context: RepositoryContext, question: str) -> ReasoningResult:
        """Analyze the context in light of the question.

        Args:
            context: Repository snapshot (read-only)
            question: The user's natural-language question

        Returns:
            ReasoningResult for this analyzer
        """
        pass


def matches_any(text: str, keywords) -> bool:
    """Case-insensitive substring test against any keyword."""
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)
