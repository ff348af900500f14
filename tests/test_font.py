import pytest

from weatherstation.font import FONT, glyph


def test_space_is_blank():
    assert glyph(" ") == bytes(8)


def test_letter_a_columns():
    assert glyph("A") == bytes([0x7C, 0x7E, 0x13, 0x11, 0x13, 0x7E, 0x7C, 0x00])


def test_tilde_is_last_glyph():
    assert glyph("~") == bytes([0x02, 0x03, 0x01, 0x03, 0x02, 0x03, 0x01, 0x00])


def test_table_covers_printable_ascii():
    assert len(FONT) == (ord("~") - ord(" ") + 1) * 8
    assert bytes(FONT[-8:]) == glyph("~")
    assert bytes(FONT[:8]) == glyph(" ")


@pytest.mark.parametrize("char", ["\n", "\x7f", "é", "°"])
def test_unprintable_characters_draw_as_space(char):
    assert glyph(char) == glyph(" ")


def test_every_printable_glyph_has_eight_columns():
    for code in range(ord(" "), ord("~") + 1):
        assert len(glyph(chr(code))) == 8


def test_distinct_letters_have_distinct_glyphs():
    assert glyph("O") != glyph("0")
    assert glyph("a") != glyph("A")


@pytest.mark.parametrize("bad", ["", "ab"])
def test_rejects_non_single_character(bad):
    with pytest.raises(ValueError):
        glyph(bad)