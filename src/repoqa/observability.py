"""LangSmith tracing configuration."""

import logging
import os
from typing import Optional
from functools import wraps
from langsmith import traceable

logger = logging.getLogger(__name__)


def configure_tracing(
    project_name: str = "repoqa",
    api_key: Optional[str] = None,
    enabled: Optional[bool] = None,
) -> None:
    """Configure LangSmith tracing for the application.

    Call once at startup. Reasoning runs and fallback generation calls are
    then traced when tracing is enabled.

    Args:
        project_name: LangSmith project name (default: "repoqa")
        api_key: LangSmith API key (if not in environment)
        enabled: Explicitly enable/disable tracing (if not in environment)

    Environment Variables:
        LANGSMITH_API_KEY: API key for LangSmith (required for tracing)
        LANGSMITH_TRACING: Set to "true" to enable tracing
        LANGSMITH_PROJECT: Project name for organizing traces

    Note:
        If LANGSMITH_API_KEY is not set, tracing is disabled and the
        application runs without LangSmith.
    """
    if api_key:
        os.environ["LANGSMITH_API_KEY"] = api_key

    if not os.getenv("LANGSMITH_API_KEY"):
        logger.info("LangSmith API key not found. Tracing disabled.")
        os.environ["LANGSMITH_TRACING"] = "false"
        return

    os.environ["LANGSMITH_PROJECT"] = project_name

    if enabled is not None:
        os.environ["LANGSMITH_TRACING"] = "true" if enabled else "false"
    elif "LANGSMITH_TRACING" not in os.environ:
        os.environ["LANGSMITH_TRACING"] = "true"

    if is_tracing_enabled():
        logger.info("LangSmith tracing enabled (project: %s)", project_name)


def disable_tracing() -> None:
    """Disable LangSmith tracing without touching other settings."""
    os.environ["LANGSMITH_TRACING"] = "false"
    logger.info("LangSmith tracing disabled")


def is_tracing_enabled() -> bool:
    """Check if LangSmith tracing is currently enabled."""
    return os.getenv("LANGSMITH_TRACING", "").lower() == "true"


def trace_function(name: Optional[str] = None, **trace_kwargs):
    """Decorator to trace a function with LangSmith.

    Thin wrapper around langsmith.traceable. The check happens per call, so
    untraced runs go straight to the wrapped function.

    Args:
        name: Custom name for the trace (default: function name)
        **trace_kwargs: Additional arguments passed to @traceable

    Example:
        ```python
        @trace_function(name="combined_reasoning")
        def analyze(context, question):
            ...
        ```
    """

    def decorator(func):
        trace_name = name or func.__name__
        traced_func = traceable(name=trace_name, **trace_kwargs)(func)

        @wraps(func)
        def wrapper(*args, **kwargs):
            if is_tracing_enabled():
                return traced_func(*args, **kwargs)
            return func(*args, **kwargs)

        return wrapper

    return decorator
