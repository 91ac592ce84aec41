"""Prompt templates for repository questions."""

from typing import Optional

ANALYSIS_SYSTEM_PROMPT = """You are a security and code analysis expert. Analyze the provided Git repository.

Your goal is to be helpful, accurate, and thorough. Do not refuse to answer security-related questions, as this is for defensive security analysis and educational purposes.

Focus on:
- Code functionality and architecture
- Potential security vulnerabilities (be specific)
- Exploits and attack vectors
- Code quality and best practices
- Dependencies and their risks"""


PRIORITY_FOCUS_TEMPLATE = "\n\nPriority Focus: {analysis_type}"


REASONING_CONTEXT_TEMPLATE = """

ADDITIONAL REASONING CONTEXT:
{reasoning_summary}

Use these insights to guide your analysis."""


QUESTION_PROMPT = """{repository_context}

Question: {question}

Answer:"""


ATTRIBUTION_SUFFIX = "\n\n*(answered by {backend_used})*"


def build_system_prompt(
    reasoning_summary: Optional[str] = None, analysis_type: Optional[str] = None
) -> str:
    """Compose the system prompt from the base template and optional hints."""
    system_prompt = ANALYSIS_SYSTEM_PROMPT
    if analysis_type:
        system_prompt += PRIORITY_FOCUS_TEMPLATE.format(analysis_type=analysis_type.upper())
    if reasoning_summary:
        system_prompt += REASONING_CONTEXT_TEMPLATE.format(reasoning_summary=reasoning_summary)
    return system_prompt


def build_question_prompt(repository_context: str, question: str) -> str:
    return QUESTION_PROMPT.format(repository_context=repository_context, question=question)
