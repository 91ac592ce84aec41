"""Local repository loading and prompt formatting for the CLI."""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Set
from pathspec import PathSpec
from pathspec.patterns.gitwildmatch import GitWildMatchPattern
from .config import Config
from .models import RepositoryContext, RepositoryFile

logger = logging.getLogger(__name__)


def load_repository(repo_path: Path, config: Config) -> RepositoryContext:
    """Walk a local checkout and build a RepositoryContext.

    Args:
        repo_path: Path to repository root
        config: Application configuration with ignored_dirs, max_file_size

    Returns:
        RepositoryContext with directories and full text content of every file
    """
    repo_path = Path(repo_path)
    ignored_dirs: Set[str] = set(config.ignored_dirs)
    gitignore_spec = _load_gitignore(repo_path)
    entries: List[RepositoryFile] = []

    for root, dirs, filenames in os.walk(repo_path):
        root_path = Path(root)

        # Prune directories before descending further
        dirs[:] = sorted(
            d
            for d in dirs
            if not _should_ignore(root_path / d, repo_path, ignored_dirs, gitignore_spec)
        )
        for directory in dirs:
            rel = (root_path / directory).relative_to(repo_path).as_posix()
            entries.append(RepositoryFile(path=rel, type="directory"))

        for filename in sorted(filenames):
            file_path = root_path / filename
            if _should_ignore(file_path, repo_path, ignored_dirs, gitignore_spec):
                continue
            try:
                size = file_path.stat().st_size
                if size > config.max_file_size:
                    logger.debug("Skipping oversized file %s (%d bytes)", file_path, size)
                    continue
                content = file_path.read_text(encoding="utf-8", errors="ignore")
            except OSError as e:
                logger.warning("Could not read %s: %s", file_path, e)
                continue
            rel = file_path.relative_to(repo_path).as_posix()
            entries.append(RepositoryFile(path=rel, content=content, type="file", size=size))

    entries.sort(key=lambda entry: entry.path)
    files = [entry for entry in entries if entry.type == "file"]

    return RepositoryContext(
        files=tuple(entries),
        structure=build_structure(entries),
        total_files=len(files),
        total_size=sum(entry.size for entry in files),
    )


def build_structure(entries: Iterable[RepositoryFile]) -> str:
    """Render entries as a two-space indented tree, directories suffixed with '/'."""
    tree: dict = {}
    for entry in entries:
        parts = [part for part in entry.path.split("/") if part]
        current = tree
        for part in parts[:-1]:
            current = current.setdefault(part, {})
        if parts:
            leaf = parts[-1]
            if entry.type == "directory":
                current.setdefault(leaf, {})
            else:
                current.setdefault(leaf, None)

    lines: List[str] = []

    def _format(node: dict, indent: int) -> None:
        prefix = "  " * indent
        for name, child in node.items():
            if child is None:
                lines.append(f"{prefix}{name}")
            else:
                lines.append(f"{prefix}{name}/")
                _format(child, indent + 1)

    _format(tree, 0)
    return "\n".join(lines)


def format_repository_context(context: RepositoryContext) -> str:
    """Render the full repository as a markdown document for the prompt."""
    parts = [
        "# Repository Analysis Context\n",
        f"## Repository Structure\n```\n{context.structure}\n```\n",
        "## Statistics",
        f"- Total Files: {context.total_files}",
        f"- Total Size: {context.total_size / 1024:.2f} KB\n",
        "## Files and Content\n",
    ]
    for entry in context.files:
        if entry.type == "file":
            parts.append(f"### {entry.path}\n```\n{entry.content}\n```\n")
    return "\n".join(parts)


def _should_ignore(
    path: Path, repo_root: Path, ignored_dirs: Set[str], gitignore_spec: PathSpec | None
) -> bool:
    rel_path = path.relative_to(repo_root)
    for part in rel_path.parts:
        if part in ignored_dirs:
            return True

    if gitignore_spec is None:
        return False
    candidate = rel_path.as_posix()
    if path.is_dir():
        candidate += "/"
    return gitignore_spec.match_file(candidate)


def _load_gitignore(repo_root: Path) -> PathSpec | None:
    """Load .gitignore patterns if present."""
    gitignore_path = repo_root / ".gitignore"
    if not gitignore_path.exists():
        return None

    try:
        patterns = gitignore_path.read_text().splitlines()
    except OSError:
        return None

    if not patterns:
        return None

    return PathSpec.from_lines(GitWildMatchPattern, patterns)
