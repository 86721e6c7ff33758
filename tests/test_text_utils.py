"""텍스트 유틸 테스트"""
import pytest

from rankcard.core.text_utils import abbreviate, shorten, strip_accents


def test_shorten_keeps_short_text():
    assert shorten("short", 10) == "short"
    assert shorten("exactly10!", 10) == "exactly10!"


def test_shorten_adds_ellipsis_within_limit():
    result = shorten("abcdefghijklmnopqrstuvwxyz", 10)
    assert result == "abcdefg..."
    assert len(result) == 10


def test_shorten_strips_trailing_space_before_ellipsis():
    assert shorten("abcdef    ghijkl", 10) == "abcdef..."


@pytest.mark.parametrize("text", ["", "Test", "abcdefghijklmnopqrstuvwxyz", "x   y   z   w   v", "하묘하묘하묘하묘하묘하묘"])
@pytest.mark.parametrize("max_length", [0, 2, 3, 5, 10, 15])
def test_shorten_is_idempotent(text, max_length):
    once = shorten(text, max_length)
    assert shorten(once, max_length) == once


def test_shorten_disabled_for_non_positive_length():
    assert shorten("a" * 40, 0) == "a" * 40
    assert shorten("a" * 40, -1) == "a" * 40


def test_shorten_tiny_limit_hard_cuts():
    assert shorten("abcdef", 2) == "ab"


def test_strip_accents():
    assert strip_accents("Zoë Ångström") == "Zoe Angstrom"
    assert strip_accents("café") == "cafe"


def test_strip_accents_keeps_hangul():
    assert strip_accents("하묘") == "하묘"


@pytest.mark.parametrize("number, expected", [
    (0, "0"),
    (5, "5"),
    (999, "999"),
    (1000, "1k"),
    (1500, "1.5k"),
    (1234, "1.23k"),
    (999999, "1m"),
    (2500000, "2.5m"),
    (3000000000, "3b"),
    (-1500, "-1.5k"),
    (500.0, "500"),
])
def test_abbreviate(number, expected):
    assert abbreviate(number) == expected
