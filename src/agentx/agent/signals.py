"""Text signals for the legacy loop.

Providers without structured tool calls only return text, so the legacy loop
has to guess from that text whether the model wants to keep going and whether
it is asking the user something. The guesses live behind ``TextSignals`` so a
more structured signal can replace them without touching the loop.
"""

import re
from typing import Protocol

CONTINUE_MARKER = "[CONTINUE]"

CONTINUATION_PHRASES = (
    CONTINUE_MARKER,
    "Next, I'll",
    "Now let me",
    "I'll also generate",
)

PLAN_APPROVAL_FOLLOW_UP = (
    "The provider is requesting plan approval.\n"
    "Reply with:\n"
    "- approve\n"
    "- revise: <what to change>\n"
    "- cancel"
)

_PLAN_WORD = re.compile(r"\b(plan|proposal)\b", re.IGNORECASE)
_APPROVAL_REQUEST = re.compile(
    r"(ready for your review|review (the )?plan|requesting plan approval|awaiting approval"
    r"|waiting for (your )?approval|approve (the )?plan|approval to proceed)",
    re.IGNORECASE,
)
_QUESTION_INTRO = re.compile(
    r"^(question|clarification|clarify|i need|need more|before i proceed|to proceed"
    r"|please (confirm|clarify)|which|what|where|when|how|do you)",
    re.IGNORECASE,
)
_OPTION_LINE = re.compile(r"^(options?:|[-*]\s|\d+[\).]\s)", re.IGNORECASE)

TAIL_LINES = 20
MAX_FOLLOW_UP_LINES = 8
MIN_FOLLOW_UP_CHARS = 5
MAX_FOLLOW_UP_CHARS = 800


class TextSignals(Protocol):
    """Continuation and follow-up detection for text-only responses."""

    def infer_continuation(self, text: str) -> bool:
        ...

    def infer_follow_up(self, text: str) -> str | None:
        ...


class HeuristicTextSignals:
    """Marker and phrase matching on the response text."""

    def __init__(self, phrases: tuple[str, ...] = CONTINUATION_PHRASES) -> None:
        self.phrases = phrases

    def infer_continuation(self, text: str) -> bool:
        return any(phrase in text for phrase in self.phrases)

    def infer_follow_up(self, text: str) -> str | None:
        """Pull a clarifying question out of the tail of ``text``.

        Text with code fences is treated as file output, never a question.
        A plan-approval request yields a fixed approve/revise/cancel prompt.
        Otherwise the last line that asks something is returned together with
        the option list right after it.
        """
        cleaned = (text or "").strip()
        if not cleaned or "```" in cleaned:
            return None

        tail = cleaned.replace("\r\n", "\n").split("\n")[-TAIL_LINES:]
        tail_text = "\n".join(tail)

        if _PLAN_WORD.search(tail_text) and _APPROVAL_REQUEST.search(tail_text):
            return PLAN_APPROVAL_FOLLOW_UP

        start = None
        for i in range(len(tail) - 1, -1, -1):
            line = tail[i].strip()
            if line and (_QUESTION_INTRO.match(line) or "?" in line):
                start = i
                break
        if start is None:
            return None

        collected: list[str] = []
        for line in tail[start:]:
            if len(collected) >= MAX_FOLLOW_UP_LINES:
                break
            stripped = line.strip()
            if collected and not stripped:
                break
            if collected and not _OPTION_LINE.match(stripped) and "?" not in stripped:
                break
            collected.append(line.rstrip())

        candidate = "\n".join(collected).strip()
        if len(candidate) < MIN_FOLLOW_UP_CHARS:
            return None
        return candidate[:MAX_FOLLOW_UP_CHARS].rstrip()
