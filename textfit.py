"""Fit text into a box with an average-character-width estimate.

There are no glyph metrics here: a line holds roughly
box_width / (font_size * avg_char_width) characters. Good enough for
decorative cards.
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

ELLIPSIS = "…"
MIN_CHARS_PER_LINE = 8


@dataclass
class FitResult:
    lines: List[str] = field(default_factory=list)
    font_size: int = 0
    line_height: int = 0
    truncated: bool = False


def wrap_words(words: Sequence[str], chars_per_line: int, max_lines: int) -> Tuple[List[str], int]:
    """Greedy word wrap. Returns (lines, number of words placed).

    Stops once `max_lines` lines are full; a word longer than the budget
    gets a line of its own.
    """
    lines: List[str] = []
    cur = ""
    placed = 0
    for w in words:
        cand = f"{cur} {w}" if cur else w
        if len(cand) <= chars_per_line or not cur:
            cur = cand
            placed += 1
            continue
        lines.append(cur)
        if len(lines) == max_lines:
            cur = ""
            break
        cur = w
        placed += 1
    if cur and len(lines) < max_lines:
        lines.append(cur)
    return lines, placed


def ellipsize(line: str, max_chars: int) -> str:
    """Mark `line` as cut short, keeping it within `max_chars`."""
    if max_chars <= 1:
        return ELLIPSIS
    if len(line) + 1 > max_chars:
        line = line[:max_chars - 1].rstrip()
    return line + ELLIPSIS


def _metrics(font_size: int, box_width: float, box_height: float, line_spacing: int,
             avg_char_width: float) -> Tuple[int, int, int]:
    line_height = font_size + line_spacing
    max_lines = max(1, int(box_height // line_height))
    chars_per_line = max(MIN_CHARS_PER_LINE, int(box_width // (font_size * avg_char_width)))
    return line_height, max_lines, chars_per_line


def fit(text: str, box_width: float, box_height: float, start_font_size: int = 13,
        min_font_size: int = 9, line_spacing: int = 2, avg_char_width: float = 0.58) -> FitResult:
    """Largest font size in [min_font_size, start_font_size] at which `text` wraps into the box.

    When even `min_font_size` overflows, the overflow words are dropped and the
    last line ends with an ellipsis.
    """
    if box_width < 0 or box_height < 0:
        raise ValueError(f"box must be non-negative, got {box_width}x{box_height}")
    if min_font_size < 1 or min_font_size > start_font_size:
        raise ValueError(f"bad font range {min_font_size}..{start_font_size}")

    words = (text or "").split()
    for size in range(start_font_size, min_font_size - 1, -1):
        line_height, max_lines, chars_per_line = _metrics(
            size, box_width, box_height, line_spacing, avg_char_width)
        lines, placed = wrap_words(words, chars_per_line, max_lines)
        if placed >= len(words):
            return FitResult(lines=lines, font_size=size, line_height=line_height)

    # floor size still overflows: lines/chars_per_line are from min_font_size
    lines[-1] = ellipsize(lines[-1], chars_per_line)
    return FitResult(lines=lines, font_size=min_font_size, line_height=line_height, truncated=True)


def fit_title(text: str, max_chars: int = 40, max_lines: int = 2) -> List[str]:
    """Wrap a short title onto at most `max_lines` lines of `max_chars`.

    Long titles break at whitespace and hyphens. Overflow, including a single
    over-long word, is cut with an ellipsis.
    """
    text = (text or "").strip()
    if len(text) <= max_chars:
        return [text] if text else []
    words = [w for w in re.split(r"[\s-]+", text) if w]
    if not words:
        return [ellipsize(text, max_chars)]
    lines, placed = wrap_words(words, max_chars, max_lines)
    if placed < len(words):
        lines[-1] = ellipsize(lines[-1], max_chars)
    return [ellipsize(line, max_chars) if len(line) > max_chars else line for line in lines]
