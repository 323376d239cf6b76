"""Agent core module."""

# Data types first: provider and tool modules import them back
from .message import (
    MessagePart,
    TextPart,
    ToolUsePart,
    ToolResultPart,
    part_from_dict,
    part_from_anthropic,
    parts_from_content,
)
from .session import Conversation, Message
from .states import LoopState, TerminationReason, LoopContext
from .signals import HeuristicTextSignals, TextSignals
from .permissions import (
    PERMISSION_MODES,
    Permission,
    PermissionManager,
    PermissionMode,
    get_permission_manager,
    match_glob,
    set_permission_manager,
)
from .executor import ToolExecutor
from .stream import AgenticStream
from .loop import AgenticResult, Orchestrator, run_agentic_loop

__all__ = [
    # Orchestrator
    "Orchestrator",
    "AgenticResult",
    "AgenticStream",
    "run_agentic_loop",
    "ToolExecutor",
    # Conversation
    "Conversation",
    "Message",
    "LoopState",
    "TerminationReason",
    "LoopContext",
    # Message parts
    "MessagePart",
    "TextPart",
    "ToolUsePart",
    "ToolResultPart",
    "part_from_dict",
    "part_from_anthropic",
    "parts_from_content",
    # Text signals
    "TextSignals",
    "HeuristicTextSignals",
    # Permissions
    "PERMISSION_MODES",
    "Permission",
    "PermissionMode",
    "PermissionManager",
    "get_permission_manager",
    "set_permission_manager",
    "match_glob",
]
