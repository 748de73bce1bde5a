"""Rule-based fallback classifier used when the model is unavailable or fails."""

from __future__ import annotations

import re

# Action verbs, errands and reminder phrasing
TASK_KEYWORDS = (
    "get", "buy", "pick up", "grab", "purchase",
    "call", "email", "text", "message", "schedule", "finish", "complete", "submit",
    "pay", "review", "update", "fix", "create", "send", "meet", "attend", "do",
    "make", "prepare", "write", "read", "watch", "listen",
    "remember to", "don't forget", "need to", "should", "must", "have to", "todo", "task",
)  # fmt: skip

IDEA_KEYWORDS = (
    "what if", "could we", "maybe we", "i wonder", "imagine", "consider",
    "app idea", "project concept", "feature idea", "brainstorm", "should build",
    "could", "idea:", "concept:",
)  # fmt: skip

# Weaker signal: imaginative or whimsical concepts
CREATIVE_WORDS = (
    "powered", "robot", "ai", "automatic", "smart", "flying", "magic", "invisible",
    "time travel", "teleport", "clone", "invention", "design", "concept", "prototype",
)  # fmt: skip


def _whole_word(phrase: str) -> re.Pattern[str]:
    return re.compile(rf"(?<!\w){re.escape(phrase)}(?!\w)")


def _word_start(phrase: str) -> re.Pattern[str]:
    return re.compile(rf"(?<!\w){re.escape(phrase)}")


_TASK_PATTERNS = tuple(_whole_word(k) for k in TASK_KEYWORDS)
_CREATIVE_PATTERNS = tuple(_word_start(w) for w in CREATIVE_WORDS)


def has_task_keyword(text: str) -> bool:
    """True if any task keyword appears as a whole word in lower-cased ``text``."""
    return any(p.search(text) for p in _TASK_PATTERNS)


def classify_by_keyword(text: str) -> str:
    """Return ``tasks``, ``ideas`` or ``unsorted`` for ``text``. Never fails.

    Task language wins over everything else, so "fix the robot" is a task
    while "robot butler" is an idea. Anything unmatched is ``unsorted``.
    """
    lower = text.lower().strip()
    if not lower:
        return "unsorted"

    if has_task_keyword(lower):
        return "tasks"

    if any(k in lower for k in IDEA_KEYWORDS):
        return "ideas"

    if any(p.search(lower) for p in _CREATIVE_PATTERNS):
        # Plain containment: an embedded task keyword blocks the weaker signal
        if not any(k in lower for k in TASK_KEYWORDS):
            return "ideas"

    return "unsorted"
