"""
경험치/진행 바 계산 모듈입니다.

레벨별 누적 XP 함수(xp_for_level)로 현재/다음 레벨 XP를 구하고,
진행 바에 채울 폭(px)을 계산합니다.

진행 폭 규칙:
  - 필요 XP가 0 이하이면 바 전체를 채움
  - 현재 XP가 필요 XP 이상이면 바 전체를 채움
  - 그 외: (현재 XP / 필요 XP) * 바 폭
"""

import math
from dataclasses import dataclass
from typing import Callable

from rankcard.core.errors import InputError

XPForLevel = Callable[[int], float]


@dataclass
class LevelInfo:
    """레벨 계산 결과를 담는 데이터 클래스"""
    level: int            # 현재 레벨
    current_xp: float     # 현재 레벨까지의 누적 XP
    required_xp: float    # 다음 레벨까지 필요한 누적 XP


def _check_xp(value, what: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InputError(f"{what}는 숫자여야 합니다: {value!r}")
    if not math.isfinite(value) or value < 0:
        raise InputError(f"{what}는 0 이상의 유한한 값이어야 합니다: {value!r}")
    return value


def resolve_level(level: int, xp_for_level: XPForLevel) -> LevelInfo:
    """레벨과 XP 함수로 현재/다음 레벨 XP를 계산합니다."""
    if isinstance(level, bool) or not isinstance(level, int) or level < 0:
        raise InputError(f"레벨은 0 이상의 정수여야 합니다: {level!r}")

    current_xp = _check_xp(xp_for_level(level), f"xp_for_level({level})")
    required_xp = _check_xp(xp_for_level(level + 1), f"xp_for_level({level + 1})")
    return LevelInfo(level=level, current_xp=current_xp, required_xp=required_xp)


def calculate_progress(current_xp: float, required_xp: float, bar_width: float) -> float:
    """진행 바에 채울 폭(px)을 반환합니다. 결과는 항상 [0, bar_width] 범위입니다."""
    if required_xp <= 0 or current_xp >= required_xp:
        return bar_width
    width = (max(current_xp, 0) / required_xp) * bar_width
    return min(max(width, 0.0), bar_width)


def mee6_xp_for_level(level: int) -> int:
    """MEE6 방식의 레벨별 누적 XP 공식입니다."""
    return math.floor((5 / 6) * level * (2 * level ** 2 + 27 * level + 91))
