# util/functions.py
from typing import Callable, Optional


def clip_chars(text: str, max_chars: int) -> str:
    """
    - Trim `text` to at most `max_chars` characters.
    - Adds "..." when trimming occurs.
    """
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."


def preview(text: str, max_chars: int = 100) -> str:
    """Single-line preview for log output (newlines and tabs flattened)."""
    flat = text.replace("\n", " ").replace("\t", " ")
    return clip_chars(flat, max_chars)


def first_matching_line(
    text: str, accept: Callable[[str], bool]
) -> Optional[str]:
    for line in text.split("\n"):
        line = line.strip()
        if line and accept(line):
            return line
    return None


def mean(values: list[float]) -> float:
    # callers guarantee a non-empty list
    return sum(values) / len(values)


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))
