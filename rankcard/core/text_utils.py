"""
카드에 그려지는 텍스트를 다듬는 유틸리티입니다.
이름 줄이기, 악센트 제거, 큰 숫자 축약(1k, 2.5m 등)을 담당합니다.
"""

import math
import unicodedata

ELLIPSIS = "..."

# 1000 단위 접미사 (천, 백만, 십억, 조)
ABBREVIATION_UNITS = ("k", "m", "b", "t")


def shorten(text: str, max_length: int) -> str:
    """
    텍스트를 최대 길이에 맞게 줄이고, 잘린 경우 말줄임표를 붙입니다.

    말줄임표까지 포함해 max_length를 넘지 않으므로 여러 번 적용해도 결과가 같습니다.
    max_length가 0 이하이면 줄이지 않습니다.
    """
    if max_length <= 0 or len(text) <= max_length:
        return text
    if max_length <= len(ELLIPSIS):
        return text[:max_length]
    return f"{text[:max_length - len(ELLIPSIS)].rstrip()}{ELLIPSIS}"


def strip_accents(text: str) -> str:
    """결합 문자(악센트 등)를 제거합니다. 예: 'Zoë' -> 'Zoe'"""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return unicodedata.normalize("NFC", stripped)


def _round_half_up(value: float) -> float:
    return math.floor(value + 0.5)


def abbreviate(number: float, decimals: int = 2) -> str:
    """
    큰 숫자를 접미사로 축약합니다.

    >>> abbreviate(999)
    '999'
    >>> abbreviate(1500)
    '1.5k'
    >>> abbreviate(999999)
    '1m'
    """
    negative = number < 0
    value = abs(number)
    scale = 10 ** decimals
    text = None

    for i in range(len(ABBREVIATION_UNITS) - 1, -1, -1):
        size = 10 ** ((i + 1) * 3)
        if size <= value:
            value = _round_half_up(value * scale / size) / scale
            # 반올림으로 1000이 되면 다음 단위로 올림 (999999 -> 1m)
            if value == 1000 and i < len(ABBREVIATION_UNITS) - 1:
                value = 1
                i += 1
            text = f"{value:g}{ABBREVIATION_UNITS[i]}"
            break

    if text is None:
        text = f"{value:g}"
    return f"-{text}" if negative else text
