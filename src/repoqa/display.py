"""Rich rendering for reasoning reports, answers and the backend catalogue."""

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from .llm.registry import BackendRegistry
from .models import CombinedReasoning


def render_reasoning(reasoning: CombinedReasoning, console: Console) -> None:
    """Print the combined reasoning report."""
    lines = [reasoning.summary, f"Confidence: {reasoning.aggregated_confidence:.3f}"]
    for title, items in (
        ("Security", reasoning.security_concerns),
        ("Architecture", reasoning.architecture_insights),
        ("Code quality", reasoning.code_quality_issues),
    ):
        if items:
            lines.append(f"\n[bold]{title}[/bold]")
            lines.extend(f"  • {item}" for item in items)

    console.print(Panel("\n".join(lines), title="Reasoning", border_style="cyan"))


def render_answer(answer: str, console: Console) -> None:
    console.print(Panel(Markdown(answer), title="Answer", border_style="green"))


def render_registry(registry: BackendRegistry, console: Console) -> None:
    """Print backends in fallback order."""
    table = Table(title="Generation backends (fallback order)")
    table.add_column("#", justify="right")
    table.add_column("ID")
    table.add_column("Name")
    table.add_column("Uncensored")
    table.add_column("Library")
    table.add_column("VRAM (MB)", justify="right")

    for position, definition in enumerate(registry, start=1):
        table.add_row(
            str(position),
            definition.id,
            definition.display_name,
            "yes" if definition.is_uncensored else "no",
            definition.backend_library_id or "litellm",
            str(definition.vram_required_mb),
        )

    console.print(table)
