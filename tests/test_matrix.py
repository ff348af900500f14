import pytest

from weatherstation.matrix import (
    ALERT_PATTERN,
    BLANK_PATTERN,
    LedMatrix,
    frame_words,
    matrix_rgb,
)


def test_rgb_channel_positions():
    assert matrix_rgb(0.0, 1.0, 0.0) == 255 << 16
    assert matrix_rgb(0.0, 0.0, 1.0) == 255 << 24
    assert matrix_rgb(1.0, 0.0, 0.0) == 255 << 8


def test_rgb_off_is_zero():
    assert matrix_rgb(0.0, 0.0, 0.0) == 0


def test_rgb_low_byte_is_always_clear():
    for value in (0.1, 0.5, 1.0):
        assert matrix_rgb(value, value, value) & 0xFF == 0


def test_frame_is_reversed_pattern():
    pattern = [0.0] * 25
    pattern[0] = 1.0
    words = frame_words(pattern, 1.0, 0.0, 0.0)
    assert words[-1] == matrix_rgb(0.0, 1.0, 0.0)
    assert words[:-1] == [0] * 24


def test_alert_frame_lights_pattern_cells():
    words = frame_words(ALERT_PATTERN, 0.1, 0.0, 0.0)
    lit = {i for i, word in enumerate(words) if word}
    assert len(words) == 25
    assert lit == {24 - i for i, cell in enumerate(ALERT_PATTERN) if cell > 0.0}


def test_frame_rejects_wrong_size():
    with pytest.raises(ValueError):
        frame_words([1.0] * 24, 1.0, 1.0, 1.0)


def test_draw_alert_sends_colour_words():
    sent = []
    LedMatrix(sent.append).draw_alert()
    assert sent == frame_words(ALERT_PATTERN, 0.1, 0.0, 0.0)
    assert set(sent) == {0, matrix_rgb(0.0, 0.1, 0.0)}


def test_clear_sends_25_off_words():
    sent = []
    LedMatrix(sent.append).clear()
    assert sent == [0] * 25
    assert sent == frame_words(BLANK_PATTERN, 1.0, 1.0, 1.0)