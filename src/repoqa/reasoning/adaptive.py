"""Ecosystem- and perspective-adaptive repository reasoning."""

import posixpath
from collections import Counter
from typing import Optional
from ..models import RepositoryContext, ReasoningResult
from .base import HeuristicAnalyzer, matches_any


LARGE_REPOSITORY_FILES = 100

# extensions -> (focus areas, insight)
ECOSYSTEM_RULES = (
    (
        frozenset({"js", "ts", "jsx", "tsx"}),
        ("NPM Dependencies", "Async/Await Usage", "React/Node patterns"),
        "Checking for common JS/TS risks (prototype pollution, injection).",
    ),
    (
        frozenset({"py"}),
        ("Pip Dependencies", "Pythonic Idioms", "Type Hinting"),
        "Checking for common Python risks (pickle, eval, input).",
    ),
    (
        frozenset({"rs"}),
        ("Memory Safety", "Concurrency"),
        "Rust codebase detected. Focusing on safety guarantees.",
    ),
    (
        frozenset({"go"}),
        ("Goroutines", "Error Handling"),
        "Go codebase detected. Focusing on concurrency patterns.",
    ),
)

PERFORMANCE_KEYWORDS = ("optimize", "fast")
ATTACKER_KEYWORDS = ("hack", "secure")

PERFORMANCE_PERSPECTIVE = (
    "Perspective: Performance Engineer - Focusing on loops, database queries, and resource usage."
)
ATTACKER_PERSPECTIVE = (
    "Perspective: Attacker - Looking for entry points, unvalidated inputs, and weak auth."
)
MAINTAINER_PERSPECTIVE = (
    "Perspective: Maintainer - Evaluating code clarity, documentation, and structure."
)

CONFIDENCE = 0.9


class AdaptiveReasoner(HeuristicAnalyzer):
    """Picks ecosystem checks, an analysis scale and a reviewer perspective."""

    name = "AdaReasoner"

    def analyze(self, context: RepositoryContext, question: str) -> ReasoningResult:
        insights: list[str] = []
        focus_areas: list[str] = []

        dominant = self.dominant_extension(context)
        if dominant:
            insights.append(
                f"Dominant language detected: {dominant}. "
                f"Applying {dominant}-specific heuristics."
            )
            for extensions, ecosystem_focus, ecosystem_insight in ECOSYSTEM_RULES:
                if dominant in extensions:
                    focus_areas.extend(ecosystem_focus)
                    insights.append(ecosystem_insight)
                    break

        if context.total_files > LARGE_REPOSITORY_FILES:
            insights.append(
                "Large repository detected (>100 files). "
                "Applying macro-level architectural analysis first."
            )
            focus_areas.extend(["Module Boundaries", "Microservices/Monolith Structure"])
        else:
            insights.append("Small/Medium repository. Applying micro-level code analysis.")
            focus_areas.extend(["Function Logic", "Variable Naming", "Code Style"])

        if matches_any(question, PERFORMANCE_KEYWORDS):
            insights.append(PERFORMANCE_PERSPECTIVE)
        elif matches_any(question, ATTACKER_KEYWORDS):
            insights.append(ATTACKER_PERSPECTIVE)
        else:
            insights.append(MAINTAINER_PERSPECTIVE)

        return ReasoningResult(
            source=self.name,
            insights=tuple(insights),
            confidence=CONFIDENCE,
            focus_areas=tuple(focus_areas),
        )

    @staticmethod
    def dominant_extension(context: RepositoryContext) -> Optional[str]:
        """Most frequent file extension; ties go to the lexically smallest.

        A file name without a dot counts under its whole name.
        """
        counts = Counter(
            posixpath.basename(entry.path).rsplit(".", 1)[-1] or "unknown"
            for entry in context.files
            if entry.type == "file"
        )
        if not counts:
            return None
        return min(counts.items(), key=lambda item: (-item[1], item[0]))[0]
