"""Word counts, reading time and length comparisons used by every tool."""

from __future__ import annotations

import math


def word_count(text: str | None) -> int:
    if not text:
        return 0
    return len(text.split())


def reading_time(text: str | None, words_per_minute: int = 200) -> str:
    minutes = math.ceil(word_count(text) / words_per_minute)
    if minutes < 1:
        return "Less than 1 minute"
    if minutes == 1:
        return "1 minute"
    return f"{minutes} minutes"


def ratio(part: float, whole: float, digits: int = 2) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole, digits)


def length_change(original: str, revised: str) -> str:
    """Describe how much longer or shorter ``revised`` is, by characters."""
    if not original:
        return "N/A"
    change = (len(revised) - len(original)) / len(original) * 100.0
    if abs(change) < 5:
        return "Similar length"
    if change > 0:
        return f"{change:.1f}% longer"
    return f"{abs(change):.1f}% shorter"
