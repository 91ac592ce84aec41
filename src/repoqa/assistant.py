"""Caller-facing facade combining reasoning and fallback generation."""

import logging
import threading
from typing import Optional

from .config import Config
from .context import format_repository_context
from .llm.manager import GenerationManager
from .llm.prompts import ATTRIBUTION_SUFFIX, build_question_prompt, build_system_prompt
from .llm.registry import default_registry
from .models import CombinedReasoning, RepositoryContext
from .reasoning.orchestrator import ReasoningOrchestrator

logger = logging.getLogger(__name__)


class RepositoryAssistant:
    """Answers questions about an ingested repository.

    Reasoning and generation stay independent; this class only threads the
    reasoning summary into the system prompt.
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        orchestrator: Optional[ReasoningOrchestrator] = None,
        manager: Optional[GenerationManager] = None,
    ):
        self.config = config or Config()
        self.orchestrator = orchestrator or ReasoningOrchestrator(
            timeout=self.config.analysis_timeout
        )
        self.manager = manager or GenerationManager(default_registry(self.config), self.config)

    def warm_up(self) -> None:
        """Load the primary backend ahead of the first question."""
        self.manager.initialize()

    def analyze(self, context: RepositoryContext, question: str) -> CombinedReasoning:
        return self.orchestrator.analyze(context, question)

    def generate_answer(
        self,
        repository_context: str,
        question: str,
        reasoning_summary: Optional[str] = None,
        analysis_type: Optional[str] = None,
        *,
        cancel_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Ask the backends a question about a formatted repository.

        Args:
            repository_context: Repository rendered for the prompt
            question: The user's question
            reasoning_summary: Optional pre-computed reasoning summary
            analysis_type: Optional priority-focus hint (e.g. "security")

        Returns:
            Answer text followed by an attribution line naming the backend

        Raises:
            ExhaustedBackendsError: If every backend failed or refused
        """
        system_prompt = build_system_prompt(reasoning_summary, analysis_type)
        prompt = build_question_prompt(repository_context, question)
        logger.debug(
            "Prompt sizes: system=%d chars, user=%d chars", len(system_prompt), len(prompt)
        )

        result = self.manager.generate(
            prompt, system_prompt, cancel_event=cancel_event, timeout=timeout
        )
        return result.content + ATTRIBUTION_SUFFIX.format(backend_used=result.backend_used)

    def ask(
        self,
        context: RepositoryContext,
        question: str,
        analysis_type: Optional[str] = "general",
    ) -> str:
        """Run reasoning, then answer with its summary folded into the prompt."""
        reasoning = self.analyze(context, question)
        return self.generate_answer(
            format_repository_context(context),
            question,
            reasoning_summary=reasoning.summary,
            analysis_type=analysis_type,
        )
