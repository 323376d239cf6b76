"""search_files tool - Find files by glob and optionally grep their lines."""

import re
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath
from typing import Any

from .base import BaseTool, ToolResult, option_int
from .registry import register_tool

DEFAULT_MAX_RESULTS = 50

# Build and VCS directories skipped by search_files and list_directory
EXCLUDED_DIRS = frozenset({"node_modules", ".git", "dist", ".next", "__pycache__", ".venv"})


def is_excluded(relative_path: str, pattern: str = "") -> bool:
    """True for paths inside an excluded directory or a dot-path.

    Wildcards never match dot-paths, but a dot-path named by a segment of
    ``pattern`` that itself starts with a dot (".env*", ".github") is kept.
    """
    named = [seg for seg in PurePosixPath(pattern).parts if seg.startswith(".") and seg not in (".", "..")]
    for part in PurePosixPath(relative_path).parts:
        if part in EXCLUDED_DIRS:
            return True
        if part.startswith(".") and not any(fnmatchcase(part, seg) for seg in named):
            return True
    return False


@register_tool
class SearchFilesTool(BaseTool):
    """Glob search with an optional line-level regex filter."""

    name = "search_files"
    description = (
        "Search for files matching a pattern and optionally search their content with a regex. "
        "Use this to find relevant code, understand project structure, or locate specific patterns."
    )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "pattern": {
                "type": "string",
                "description": "Glob pattern to match files (e.g., 'src/**/*.ts', '*.json')",
                "required": True,
            },
            "content_regex": {
                "type": "string",
                "description": "Optional regex to search within matched files. Returns matching lines.",
                "required": False,
            },
            "max_results": {
                "type": "number",
                "description": "Maximum number of results to return. Default: 50.",
                "required": False,
            },
        }

    def _find(self, pattern: str) -> list[str]:
        base = Path(self.context.cwd)
        found = []
        for match in base.glob(pattern):
            if not match.is_file():
                continue
            relative = match.relative_to(base).as_posix()
            if not is_excluded(relative, pattern):
                found.append(relative)
        return sorted(found)

    async def execute(
        self,
        pattern: str = "",
        content_regex: str | None = None,
        max_results: int | None = None,
        **kwargs: Any,
    ) -> ToolResult:
        limit = option_int(max_results, DEFAULT_MAX_RESULTS)
        files = self._find(str(pattern) or "**/*")

        if not content_regex:
            if not files:
                return ToolResult(content="No files matched the pattern.")
            output = "\n".join(files[:limit])
            if len(files) > limit:
                output += f"\n\n... ({len(files) - limit} more files)"
            return ToolResult(content=output)

        regex = re.compile(str(content_regex), re.MULTILINE)
        results: list[str] = []
        for relative in files:
            if len(results) >= limit:
                break
            try:
                text = (Path(self.context.cwd) / relative).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError):
                continue  # unreadable or binary

            for number, line in enumerate(text.splitlines(), start=1):
                if len(results) >= limit:
                    break
                if regex.search(line):
                    results.append(f"{relative}:{number}: {line}")

        return ToolResult(content="\n".join(results) if results else "No matches found.")
