"""Structural and keyword-based repository reasoning."""

import posixpath
from ..models import RepositoryContext, ReasoningResult
from .base import HeuristicAnalyzer, matches_any


KEY_FILES = frozenset(
    {
        "README.md",
        "package.json",
        "requirements.txt",
        "pyproject.toml",
        "Cargo.toml",
        "go.mod",
        "Dockerfile",
        "docker-compose.yml",
        "main.py",
        "index.js",
        "App.ts",
        "main.go",
        "main.rs",
        # dependency locks
        "package-lock.json",
        "yarn.lock",
        "poetry.lock",
        "Cargo.lock",
        "go.sum",
    }
)

SECURITY_KEYWORDS = ("password", "secret", "api_key", "token")
TODO_KEYWORDS = ("todo", "fixme")

BASE_CONFIDENCE = 0.85
KEY_FILE_BONUS = 0.02

# (keywords, focus areas, insight) in priority order; first match wins.
INTENT_RULES = (
    (
        ("security", "vulnerability", "exploit"),
        ("Vulnerability Assessment", "Exploit Analysis", "Dependency Check"),
        "User intent is focused on SECURITY. Prioritizing vulnerability scanning.",
    ),
    (
        ("architecture", "design", "structure"),
        ("System Design", "Data Flow", "Component Interaction"),
        "User intent is focused on ARCHITECTURE. Prioritizing structural analysis.",
    ),
    (
        ("bug", "fix", "error"),
        ("Error Handling", "Logic Flaws", "Debugging"),
        "User intent is focused on BUG FIXING. Prioritizing logic analysis.",
    ),
)


class StructuralReasoner(HeuristicAnalyzer):
    """Analyzes tree depth, key files, keyword hits and question intent."""

    name = "OpenReason"

    def analyze(self, context: RepositoryContext, question: str) -> ReasoningResult:
        insights: list[str] = []
        focus_areas: list[str] = []

        depth = self._max_depth(context.structure)
        insights.append(f"Repository structure has a maximum depth of {depth}.")

        found_key_files = self._find_key_files(context)
        if found_key_files:
            insights.append(
                f"Identified key configuration/entry files: {', '.join(found_key_files)}."
            )

        security_hits, todo_hits = self._scan_keywords(context)
        if security_hits > 0:
            insights.append(
                f"Found {security_hits} potential security-sensitive keywords "
                "(password, secret, token)."
            )
            focus_areas.extend(["Hardcoded Secrets", "Configuration Files"])
        if todo_hits > 0:
            insights.append(
                f"Found {todo_hits} TODO/FIXME comments, indicating technical debt."
            )
            focus_areas.extend(["Code Quality", "Technical Debt"])

        for keywords, intent_focus, intent_insight in INTENT_RULES:
            if matches_any(question, keywords):
                focus_areas.extend(intent_focus)
                insights.append(intent_insight)
                break

        # Recognizing more of the layout raises confidence, capped at 1.0.
        confidence = min(1.0, BASE_CONFIDENCE + KEY_FILE_BONUS * len(found_key_files))

        return ReasoningResult(
            source=self.name,
            insights=tuple(insights),
            confidence=confidence,
            focus_areas=tuple(focus_areas),
            suggested_prompts=(
                f"Detailed security audit of {found_key_files[0] if found_key_files else 'codebase'}",
                "Explain the architectural patterns used",
                "List all found TODOs and their implications",
            ),
        )

    def pre_process(self, context: RepositoryContext) -> str:
        """Render a short structured summary of the repository for the model."""
        total_size_kb = context.total_size / 1024
        names = [posixpath.basename(entry.path) for entry in context.files]
        file_types = sorted({name.rsplit(".", 1)[-1] for name in names if "." in name})

        return (
            "OPENREASON PRE-ANALYSIS:\n"
            f"- Repository Size: {total_size_kb:.2f} KB\n"
            f"- File Count: {context.total_files}\n"
            f"- Detected Languages/Types: {', '.join(file_types)}\n"
            "- Context: The user has provided a full repository dump.\n"
            "- Recommendation: Cross-reference files to understand dependencies."
        )

    @staticmethod
    def _max_depth(structure: str) -> int:
        """Depth is leading spaces / 2, maximised over all lines."""
        depth = 0
        for line in structure.split("\n"):
            indent = len(line) - len(line.lstrip(" "))
            depth = max(depth, indent // 2)
        return depth

    @staticmethod
    def _find_key_files(context: RepositoryContext) -> list[str]:
        names = [posixpath.basename(entry.path) for entry in context.files]
        return [name for name in names if name in KEY_FILES]

    @staticmethod
    def _scan_keywords(context: RepositoryContext) -> tuple[int, int]:
        """Count files (not occurrences) hitting each keyword group."""
        security_hits = 0
        todo_hits = 0
        for entry in context.files:
            if entry.type != "file":
                continue
            if matches_any(entry.content, SECURITY_KEYWORDS):
                security_hits += 1
            if matches_any(entry.content, TODO_KEYWORDS):
                todo_hits += 1
        return security_hits, todo_hits
