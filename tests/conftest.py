"""랭크 카드 테스트 공용 픽스처"""
import io

import pytest
from PIL import Image

from rankcard.card.CardLayout import RankInput
from rankcard.core.FontRegistry import FontRegistry

AVATAR_COLOR = (255, 0, 0, 255)


def png_bytes(color=AVATAR_COLOR, size=(64, 64)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def xp_hundreds(level: int) -> int:
    return 100 * level


def fake_measure(text: str, size: int, weight: str) -> float:
    """글자 수 * 크기의 절반으로 폭을 흉내냅니다."""
    return len(text) * size * 0.5


@pytest.fixture
def avatar_bytes():
    return png_bytes()


@pytest.fixture
def registry():
    return FontRegistry()


@pytest.fixture
def rank_input(avatar_bytes):
    return RankInput(
        level=5,
        xp_for_level=xp_hundreds,
        avatar=avatar_bytes,
        username="Test",
        discriminator="0001",
        status="online",
        rank=3,
        fonts=[],
    )
