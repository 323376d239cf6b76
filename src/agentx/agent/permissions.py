"""
Permission System - mode-based authorization for file writes and commands.

Modes:
- yolo:        everything is allowed. Deny patterns are NOT consulted.
- plan:        file writes are skipped (preview only), commands are denied.
- acceptEdits: file writes and commands are allowed.
- default:     deny patterns win, allow patterns auto-allow, anything else is
               confirmed interactively (yes / no / all / skip). "all" allows
               every remaining write of the session.

In every mode except yolo a path matching a deny pattern is denied. yolo is
the one mode that ignores deny patterns.

Commands are authorized per mode only: yolo allows, plan denies, every other
mode allows.
"""

import asyncio
import re
from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING, Callable

from rich.prompt import Prompt

from agentx.core.console import debug, get_console

if TYPE_CHECKING:
    from agentx.config import Config


class PermissionMode(str, Enum):
    """Process-wide permission mode."""

    DEFAULT = "default"
    ACCEPT_EDITS = "acceptEdits"
    PLAN = "plan"
    YOLO = "yolo"


PERMISSION_MODES = tuple(m.value for m in PermissionMode)


class Permission(str, Enum):
    """Authorization decision."""

    ALLOW = "allow"
    DENY = "deny"
    SKIP = "skip"   # no mutation, not an error


# Prompt answers (returned by the prompt callable)
PROMPT_CHOICES = ("allow", "deny", "all", "skip")

PromptCallback = Callable[[str], str]


@lru_cache(maxsize=256)
def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if pattern.startswith("**", i):
            parts.append(".*")
            i += 2
            continue
        if ch == "*":
            parts.append("[^/]*")
        elif ch == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(ch))
        i += 1
    return re.compile("".join(parts))


def match_glob(path: str, pattern: str) -> bool:
    """Match a whole path against a glob.

    ``*`` matches within one path segment, ``**`` matches across segments,
    ``?`` matches one non-separator character.
    """
    return _glob_to_regex(pattern).fullmatch(path.replace("\\", "/")) is not None


class PermissionManager:
    """Decides whether file writes and commands may proceed."""

    def __init__(
        self,
        mode: PermissionMode | str = PermissionMode.DEFAULT,
        allow: list[str] | None = None,
        deny: list[str] | None = None,
        prompt: PromptCallback | None = None,
    ) -> None:
        """
        Args:
            mode: One of default, acceptEdits, plan, yolo
            allow: Glob patterns auto-allowed in default mode
            deny: Glob patterns always denied (except in yolo mode)
            prompt: Callable asked in default mode; receives the path and
                returns one of allow/deny/all/skip. Defaults to a terminal prompt.
        """
        self._mode = self._parse_mode(mode)
        self.allow_patterns: list[str] = list(allow or [])
        self.deny_patterns: list[str] = list(deny or [])
        self._prompt = prompt or self._ask_user
        self._allow_all_remaining = False

        # History of (target, decision)
        self.history: list[tuple[str, Permission]] = []

    @staticmethod
    def _parse_mode(mode: PermissionMode | str) -> PermissionMode:
        try:
            return PermissionMode(mode)
        except ValueError:
            raise ValueError(
                f"Unknown permission mode: {mode}. Available: {list(PERMISSION_MODES)}"
            ) from None

    @property
    def mode(self) -> PermissionMode:
        return self._mode

    def set_mode(self, mode: PermissionMode | str) -> None:
        """Change the mode. Resets a previous "allow all remaining" answer."""
        self._mode = self._parse_mode(mode)
        self._allow_all_remaining = False
        debug("permissions", f"mode set to {self._mode.value}")

    @property
    def allow_all_remaining(self) -> bool:
        return self._allow_all_remaining

    async def check_file_write(self, file_path: str) -> Permission:
        """Decide whether a write to ``file_path`` may proceed."""
        decision = await self._decide_file_write(file_path)
        debug("permissions", f"write {file_path} (mode: {self._mode.value}) -> {decision.value}")
        self.history.append((file_path, decision))
        return decision

    async def _decide_file_write(self, file_path: str) -> Permission:
        if self._mode is PermissionMode.YOLO:
            return Permission.ALLOW

        if self._matches_any(file_path, self.deny_patterns):
            return Permission.DENY

        if self._mode is PermissionMode.PLAN:
            return Permission.SKIP
        if self._mode is PermissionMode.ACCEPT_EDITS:
            return Permission.ALLOW

        # default mode
        if self._allow_all_remaining:
            return Permission.ALLOW
        if self._matches_any(file_path, self.allow_patterns):
            return Permission.ALLOW

        answer = await asyncio.to_thread(self._prompt, file_path)
        if answer == "all":
            self._allow_all_remaining = True
            return Permission.ALLOW
        if answer in ("allow", "skip"):
            return Permission(answer)
        return Permission.DENY

    async def check_command(self, command: str) -> Permission:
        """Decide whether a shell command may run (allow or deny only)."""
        if self._mode is PermissionMode.PLAN:
            decision = Permission.DENY
        else:
            decision = Permission.ALLOW
        self.history.append((command, decision))
        return decision

    def _matches_any(self, file_path: str, patterns: list[str]) -> bool:
        return any(match_glob(file_path, p) for p in patterns)

    def _ask_user(self, file_path: str) -> str:
        """Terminal prompt used in default mode."""
        console = get_console()
        try:
            answer = Prompt.ask(
                f"Write file [cyan]{file_path}[/cyan]?",
                choices=["yes", "no", "all", "skip"],
                default="yes",
                console=console,
            )
        except (EOFError, KeyboardInterrupt):
            console.print("\n   Cancelled. Denying permission.")
            return "deny"
        return {"yes": "allow", "no": "deny"}.get(answer, answer)

    def get_history(self) -> list[tuple[str, Permission]]:
        return self.history.copy()

    def clear_history(self) -> None:
        self.history.clear()

    @classmethod
    def from_config(cls, config: "Config") -> "PermissionManager":
        return cls(
            mode=config.get("permission_mode", PermissionMode.DEFAULT.value),
            allow=config.get("permission_allow", []),
            deny=config.get("permission_deny", []),
        )


_default_manager: PermissionManager | None = None


def get_permission_manager() -> PermissionManager:
    """Get the process-wide permission manager (created on first call)."""
    global _default_manager
    if _default_manager is None:
        _default_manager = PermissionManager()
    return _default_manager


def set_permission_manager(manager: PermissionManager) -> None:
    """Replace the process-wide permission manager."""
    global _default_manager
    _default_manager = manager
