"""Main CLI entry point for repoqa."""

import logging
import click
from pathlib import Path
from rich.console import Console

from .assistant import RepositoryAssistant
from .config import Config
from .context import format_repository_context, load_repository
from .display import render_answer, render_reasoning, render_registry
from .llm.manager import GenerationError
from .llm.registry import default_registry
from .observability import configure_tracing
from .reasoning.orchestrator import ReasoningTimeoutError


def _configure_logging(config: Config, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@click.group()
def cli():
    """repoqa - Ask questions about a code repository."""
    pass


@cli.command()
@click.argument("repo_path", type=click.Path(exists=True, file_okay=False))
@click.option("--question", "-q", required=True, help="Question about the repository")
@click.option(
    "--analysis-type",
    "-t",
    default="general",
    show_default=True,
    help="Priority focus passed to the model (e.g. security, architecture)",
)
@click.option("--reasoning-only", is_flag=True, help="Only run the heuristic pre-analysis")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def ask(repo_path: str, question: str, analysis_type: str, reasoning_only: bool, verbose: bool):
    """Answer a question about a local repository.

    Examples:
        repoqa ask ./my-project -q "Are there hardcoded secrets?"

        repoqa ask ./my-project -q "Explain the architecture" -t architecture
    """
    config = Config.from_env()
    _configure_logging(config, verbose)
    configure_tracing()
    console = Console()

    repo = Path(repo_path).resolve()
    context = load_repository(repo, config)
    console.print(
        f"🔍 Loaded {repo}: {context.total_files} files, {context.total_size / 1024:.2f} KB"
    )

    try:
        assistant = RepositoryAssistant(config)
    except KeyError as e:
        click.echo(f"Error: invalid BACKEND_ORDER: {e}", err=True)
        raise SystemExit(1)

    try:
        reasoning = assistant.analyze(context, question)
    except ReasoningTimeoutError as e:
        click.echo(f"❌ Reasoning timed out: {e}", err=True)
        raise SystemExit(1)
    render_reasoning(reasoning, console)

    if reasoning_only:
        return

    try:
        with console.status("[bold green]Generating answer...", spinner="dots"):
            answer = assistant.generate_answer(
                format_repository_context(context),
                question,
                reasoning_summary=reasoning.summary,
                analysis_type=analysis_type,
            )
    except GenerationError as e:
        click.echo(f"❌ {e}", err=True)
        raise SystemExit(1)
    finally:
        assistant.manager.close()

    render_answer(answer, console)


@cli.command()
def models():
    """List generation backends in fallback order."""
    config = Config.from_env()
    try:
        registry = default_registry(config)
    except KeyError as e:
        click.echo(f"Error: invalid BACKEND_ORDER: {e}", err=True)
        raise SystemExit(1)
    render_registry(registry, Console())


if __name__ == "__main__":
    cli()
