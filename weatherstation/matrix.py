"""5x5 WS2812-style LED matrix patterns and colour words."""

from __future__ import annotations

from typing import Callable, Sequence

NUM_PIXELS = 25

# Exclamation mark shown while an alert is active.
ALERT_PATTERN = (
    0.0, 0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 0.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0, 0.0,
)

BLANK_PATTERN = (0.0,) * NUM_PIXELS


def matrix_rgb(b: float, r: float, g: float) -> int:
    """Pack channel intensities in 0..1 into a GRB word for the LED chain."""
    red = int(r * 255) & 0xFF
    green = int(g * 255) & 0xFF
    blue = int(b * 255) & 0xFF
    return (green << 24) | (red << 16) | (blue << 8)


def frame_words(pattern: Sequence[float], r: float, g: float, b: float) -> list[int]:
    """Return the 25 words to shift out, last pattern cell first.

    Lit cells (value above zero) take the given colour; the rest are off.
    """
    if len(pattern) != NUM_PIXELS:
        raise ValueError(f"pattern must have {NUM_PIXELS} cells, got {len(pattern)}")
    on = matrix_rgb(b, r, g)
    off = matrix_rgb(0.0, 0.0, 0.0)
    return [on if cell > 0.0 else off for cell in reversed(pattern)]


class LedMatrix:
    """Sends frames to the matrix through ``sink``, which takes one word at a time."""

    def __init__(self, sink: Callable[[int], object]) -> None:
        self.sink = sink

    def _send(self, words: list[int]) -> None:
        for word in words:
            self.sink(word)

    def draw_alert(self) -> None:
        """Show the alert sign in dim red."""
        self._send(frame_words(ALERT_PATTERN, 0.1, 0.0, 0.0))

    def clear(self) -> None:
        """Switch every LED off."""
        self._send(frame_words(BLANK_PATTERN, 0.0, 0.0, 0.0))