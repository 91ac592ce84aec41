"""Concurrent fan-out over heuristic analyzers and deterministic merge."""

import logging
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Optional, Sequence

from ..models import CombinedReasoning, ReasoningResult, RepositoryContext
from ..observability import trace_function
from .adaptive import AdaptiveReasoner
from .base import HeuristicAnalyzer, matches_any
from .structural import StructuralReasoner

logger = logging.getLogger(__name__)

SECURITY_MARKERS = ("security", "vulnerability", "auth")
ARCHITECTURE_MARKERS = ("architecture", "structure", "flow")
CODE_QUALITY_MARKERS = ("todo", "technical debt", "readability", "code quality")


class ReasoningTimeoutError(TimeoutError):
    """Raised when analyzers do not finish before the deadline."""


def _unique(items) -> tuple:
    return tuple(dict.fromkeys(items))


class ReasoningOrchestrator:
    """Runs every analyzer concurrently and merges their results.

    All analyzers must finish before a CombinedReasoning is produced. The
    first analyzer failure is re-raised to the caller.
    """

    def __init__(
        self,
        analyzers: Optional[Sequence[HeuristicAnalyzer]] = None,
        timeout: Optional[float] = None,
    ):
        self.analyzers: tuple[HeuristicAnalyzer, ...] = tuple(
            analyzers if analyzers is not None else (StructuralReasoner(), AdaptiveReasoner())
        )
        self.timeout = timeout

    @trace_function(name="combined_reasoning")
    def analyze(
        self, context: RepositoryContext, question: str, timeout: Optional[float] = None
    ) -> CombinedReasoning:
        """Fan out to all analyzers, join, and merge.

        Args:
            context: Repository snapshot
            question: The user's question
            timeout: Seconds to wait for all analyzers (default: instance timeout)

        Worker threads cannot be interrupted. On timeout the call returns at
        the deadline, but an analyzer that already started keeps running in
        the background and is joined at interpreter exit.

        Returns:
            CombinedReasoning built from every analyzer's result

        Raises:
            ReasoningTimeoutError: If analyzers are still running at the deadline
        """
        if not self.analyzers:
            return self.combine([])

        timeout = timeout if timeout is not None else self.timeout
        executor = ThreadPoolExecutor(
            max_workers=len(self.analyzers), thread_name_prefix="reasoner"
        )
        try:
            futures = [
                executor.submit(analyzer.analyze, context, question)
                for analyzer in self.analyzers
            ]
            done, pending = wait(futures, timeout=timeout, return_when=FIRST_EXCEPTION)

            for future in futures:
                if future in done and future.exception() is not None:
                    for other in pending:
                        other.cancel()
                    raise future.exception()

            if pending:
                for other in pending:
                    other.cancel()
                raise ReasoningTimeoutError(
                    f"{len(pending)} of {len(futures)} analyzers did not finish "
                    f"within {timeout}s"
                )

            results = [future.result() for future in futures]
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        logger.debug(
            "Reasoning complete: %s",
            ", ".join(f"{r.source}={r.confidence:.2f}" for r in results),
        )
        return self.combine(results)

    @staticmethod
    def combine(results: Sequence[ReasoningResult]) -> CombinedReasoning:
        """Merge results in order: dedupe insights, bucket them, average confidence."""
        insights = _unique(insight for result in results for insight in result.insights)
        focus_areas = _unique(area for result in results for area in result.focus_areas)
        suggested_prompts = _unique(
            prompt for result in results for prompt in result.suggested_prompts
        )

        sources = " and ".join(result.source for result in results)
        if results:
            confidence = sum(result.confidence for result in results) / len(results)
        else:
            confidence = 0.0

        return CombinedReasoning(
            summary=f"Combined analysis from {sources}. Focus: {', '.join(focus_areas)}",
            security_concerns=tuple(i for i in insights if matches_any(i, SECURITY_MARKERS)),
            architecture_insights=tuple(
                i for i in insights if matches_any(i, ARCHITECTURE_MARKERS)
            ),
            code_quality_issues=tuple(
                i for i in insights if matches_any(i, CODE_QUALITY_MARKERS)
            ),
            aggregated_confidence=confidence,
            focus_areas=focus_areas,
            suggested_prompts=suggested_prompts,
        )
