"""
랭크 카드 빌더입니다.

사용 예:

    card = (
        RankCard(RankInput(level=5, xp_for_level=xp, avatar=avatar_bytes,
                           username="Test", discriminator="0001", status="online", rank=3))
        .set_overlay("#000000", 0.3)
        .set_progress_bar("gradient", ["#ff0000", "#0000ff"])
    )
    buffer = await card.build()
    await channel.send(file=discord.File(buffer, filename="rank_card.png"))

set_* 메서드는 내부의 불변 CardStyle을 새 값으로 바꿔 끼우고 self를 돌려주므로
체이닝할 수 있으며, 카드끼리 스타일 객체를 공유해도 서로 영향을 주지 않습니다.
"""

import io
import logging
from typing import Optional, Sequence, Union

import aiohttp

from rankcard.card.CardLayout import CardLayout, RankInput, build_layout
from rankcard.card.CardStyle import CardStyle, ImageBackground, parse_background, parse_fill
from rankcard.card.ImageLoader import load_image
from rankcard.card.RankCardGenerator import RankCardGenerator
from rankcard.core.FontRegistry import FontRegistry, default_registry

logger = logging.getLogger(__name__)


class RankCard:
    """랭크 카드 한 장"""

    def __init__(
        self,
        data: RankInput,
        style: Optional[CardStyle] = None,
        registry: Optional[FontRegistry] = None,
    ):
        self.data = data
        self.style = style or CardStyle()
        self.registry = registry or default_registry()

    # ── 설정 ──

    def set_background(self, type: str, value: Union[str, bytes]) -> "RankCard":
        """배경을 설정합니다. type은 'image' 또는 'colour'입니다."""
        self.style = self.style.with_background(parse_background(type, value))
        return self

    def set_overlay(self, colour: str, level: float = 0.5, display: bool = True) -> "RankCard":
        """오버레이 색상/투명도/표시 여부를 설정합니다."""
        self.style = self.style.with_overlay(colour, level, display)
        return self

    def set_progress_bar(self, type: str, value: Union[str, Sequence[str]], rounded: bool = True, radial: bool = False) -> "RankCard":
        """진행 바 채우기를 설정합니다. type은 'colour' 또는 'gradient'입니다."""
        self.style = self.style.with_progress_bar(parse_fill(type, value, radial), rounded)
        return self

    def set_progress_bar_track(self, colour: str) -> "RankCard":
        self.style = self.style.with_progress_track(colour)
        return self

    def set_level(self, colour: Optional[str] = None, size: Optional[int] = None, display: Optional[bool] = None, label: Optional[str] = None) -> "RankCard":
        self.style = self.style.with_level(**_changes(color=colour, size=size, display=display, label=label))
        return self

    def set_rank(self, colour: Optional[str] = None, size: Optional[int] = None, display: Optional[bool] = None, label: Optional[str] = None) -> "RankCard":
        self.style = self.style.with_rank(**_changes(color=colour, size=size, display=display, label=label))
        return self

    def set_username(self, colour: Optional[str] = None, size: Optional[int] = None, display: Optional[bool] = None) -> "RankCard":
        self.style = self.style.with_username(**_changes(color=colour, size=size, display=display))
        return self

    def set_discriminator(self, colour: Optional[str] = None, size: Optional[int] = None, display: Optional[bool] = None) -> "RankCard":
        self.style = self.style.with_discriminator(**_changes(color=colour, size=size, display=display))
        return self

    def set_xp(self, colour: Optional[str] = None, size: Optional[int] = None, display: Optional[bool] = None) -> "RankCard":
        self.style = self.style.with_xp(**_changes(color=colour, size=size, display=display))
        return self

    def set_status(self, circle: Optional[bool] = None, width: Optional[int] = None, colour: Optional[str] = None, display: Optional[bool] = None) -> "RankCard":
        """상태 표시 방식을 설정합니다. circle=True면 링 대신 작은 점으로 표시합니다."""
        self.style = self.style.with_status(**_changes(circle=circle, width=width, color=colour, display=display))
        return self

    def set_font(self, family: Optional[str]) -> "RankCard":
        self.style = self.style.with_font(family)
        return self

    # ── 생성 ──

    def layout(self) -> CardLayout:
        """폰트를 등록하고 레이아웃을 계산합니다. 이미지 로드는 하지 않습니다."""
        for font in self.data.fonts:
            self.registry.ensure_registered(font)
        generator = RankCardGenerator(self.registry)
        return build_layout(self.data, self.style, generator.measure_for(self.style.font_family))

    async def build(self, session: Optional[aiohttp.ClientSession] = None) -> io.BytesIO:
        """
        랭크 카드를 PNG로 렌더링합니다.

        1. 폰트 등록 + 레이아웃 계산 (잘못된 입력/설정은 여기서 실패)
        2. 아바타/배경 이미지 로드 (유일한 비동기 단계)
        3. 그리기
        """
        layout = self.layout()

        avatar = None
        if layout.avatar.display:
            avatar = await load_image(layout.avatar_source, session)

        background = None
        if isinstance(layout.background, ImageBackground):
            background = await load_image(layout.background.source, session)

        buffer = RankCardGenerator(self.registry).render(layout, avatar, background)
        logger.debug(f"랭크 카드 생성 완료: {self.data.username} ({buffer.getbuffer().nbytes} bytes)")
        return buffer


def _changes(**values) -> dict:
    return {key: value for key, value in values.items() if value is not None}
