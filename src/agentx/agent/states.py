"""Orchestrator states and run context."""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class LoopState(Enum):
    """Current phase of an orchestrator run."""

    IDLE = auto()               # before run()
    CALLING_PROVIDER = auto()   # provider call in flight
    EXECUTING_TOOLS = auto()    # dispatching the tool calls of one turn
    COMPLETED = auto()          # finished normally
    ERROR = auto()              # provider error propagated


class TerminationReason(Enum):
    """Why a run ended."""

    END_TURN = auto()           # stop_reason end_turn
    MAX_TOKENS = auto()         # stop_reason max_tokens
    FOLLOW_UP = auto()          # ask_user surfaced a question
    MAX_ITERATIONS = auto()     # iteration cap reached
    NO_TOOL_CALLS = auto()      # tool_use stop reason without tool_use blocks
    UNKNOWN_STOP = auto()       # any other stop reason
    NO_CONTINUATION = auto()    # legacy loop: no continuation signal
    CANCELLED = auto()          # caller asked to stop
    ERROR = auto()


@dataclass
class LoopContext:
    """Run statistics and state, reset at the start of every run."""

    state: LoopState = LoopState.IDLE
    termination_reason: TerminationReason | None = None
    legacy: bool = False

    iteration: int = 0
    max_iterations: int = 20

    last_error: Exception | None = None

    total_tokens: int = 0
    total_tool_calls: int = 0
    total_provider_calls: int = 0
    start_time: float | None = None
    end_time: float | None = None

    # State history (debugging)
    _state_history: list[tuple[float, LoopState]] = field(default_factory=list)

    def is_running(self) -> bool:
        return self.state in (LoopState.CALLING_PROVIDER, LoopState.EXECUTING_TOOLS)

    def is_finished(self) -> bool:
        return self.state in (LoopState.COMPLETED, LoopState.ERROR)

    def duration_ms(self) -> float | None:
        """Run duration in milliseconds."""
        if self.start_time is not None:
            end = self.end_time or time.time()
            return (end - self.start_time) * 1000
        return None

    def record_state(self, state: LoopState) -> None:
        self._state_history.append((time.time(), state))
        self.state = state

    def finish(self, reason: TerminationReason) -> None:
        """Record a normal termination."""
        self.termination_reason = reason
        self.record_state(LoopState.COMPLETED)

    def reset(self, max_iterations: int, legacy: bool = False) -> None:
        self.state = LoopState.IDLE
        self.termination_reason = None
        self.legacy = legacy
        self.iteration = 0
        self.max_iterations = max_iterations
        self.last_error = None
        self.total_tokens = 0
        self.total_tool_calls = 0
        self.total_provider_calls = 0
        self.start_time = time.time()
        self.end_time = None
        self._state_history.clear()

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.name,
            "termination_reason": self.termination_reason.name if self.termination_reason else None,
            "legacy": self.legacy,
            "iteration": self.iteration,
            "max_iterations": self.max_iterations,
            "total_tokens": self.total_tokens,
            "total_tool_calls": self.total_tool_calls,
            "total_provider_calls": self.total_provider_calls,
            "duration_ms": self.duration_ms(),
            "has_error": self.last_error is not None,
        }
