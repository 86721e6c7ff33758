"""XP / 진행 폭 계산 테스트"""
import math

import pytest

from rankcard.card.XPFormulas import calculate_progress, mee6_xp_for_level, resolve_level
from rankcard.core.errors import InputError

BAR_WIDTH = 580


def test_progress_partial():
    assert calculate_progress(500, 600, BAR_WIDTH) == pytest.approx(500 / 600 * BAR_WIDTH)


def test_progress_empty():
    assert calculate_progress(0, 100, BAR_WIDTH) == 0


@pytest.mark.parametrize("current, required", [(600, 600), (700, 600), (0, 0), (5, 0), (0, -10)])
def test_progress_full_bar(current, required):
    assert calculate_progress(current, required, BAR_WIDTH) == BAR_WIDTH


@pytest.mark.parametrize("xp_for_level", [
    lambda n: 100 * n,
    mee6_xp_for_level,
    lambda n: 50,
    lambda n: 1000 - 10 * n,
])
def test_progress_always_within_bar(xp_for_level):
    for level in range(0, 60):
        current, required = xp_for_level(level), xp_for_level(level + 1)
        width = calculate_progress(current, required, BAR_WIDTH)
        assert 0 <= width <= BAR_WIDTH
        if current >= required:
            assert width == BAR_WIDTH


def test_resolve_level():
    info = resolve_level(5, lambda n: 100 * n)
    assert info.level == 5
    assert info.current_xp == 500
    assert info.required_xp == 600


@pytest.mark.parametrize("level", [-1, 1.5, "3", True])
def test_resolve_level_rejects_bad_level(level):
    with pytest.raises(InputError):
        resolve_level(level, lambda n: 100 * n)


@pytest.mark.parametrize("value", [-5, math.nan, math.inf, "100", None])
def test_resolve_level_rejects_bad_xp(value):
    with pytest.raises(InputError):
        resolve_level(1, lambda n: value)


def test_mee6_formula():
    assert mee6_xp_for_level(0) == 0
    assert mee6_xp_for_level(1) == 100
    assert mee6_xp_for_level(10) > mee6_xp_for_level(9)
