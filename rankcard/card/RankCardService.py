"""
디스코드 멤버 정보를 랭크 카드 입력(RankInput)으로 바꾸는 서비스 모듈입니다.
이름/판별자/아바타 URL/접속 상태를 discord.Member에서 읽어옵니다.
"""

from typing import Optional, Sequence

import discord

from rankcard.card.CardLayout import RankInput
from rankcard.card.XPFormulas import XPForLevel
from rankcard.core.FontRegistry import FontSpec

# 아바타 요청 크기 (px)
AVATAR_SIZE = 256


class RankCardService:
    """디스코드 멤버 → 랭크 카드 입력 변환"""

    @staticmethod
    def resolve_status(member: discord.Member) -> str:
        """멤버의 상태 키를 반환합니다. 방송 중이면 'streaming'입니다."""
        for activity in getattr(member, "activities", None) or ():
            if isinstance(activity, discord.Streaming):
                return "streaming"
        status = str(member.status)
        # 숨김 상태는 다른 사람에게 오프라인으로 보임
        return "offline" if status == "invisible" else status

    @staticmethod
    def avatar_url(member: discord.Member) -> str:
        """아바타 URL (없으면 기본 아바타)"""
        return str(member.display_avatar.replace(size=AVATAR_SIZE, format="png"))

    @classmethod
    def build_input(
        cls,
        member: discord.Member,
        level: int,
        xp_for_level: XPForLevel,
        rank: Optional[int] = None,
        *,
        fonts: Sequence[FontSpec] = (),
        username_length: Optional[int] = None,
        strip_accents: Optional[bool] = None,
        use_display_name: bool = False,
    ) -> RankInput:
        """
        멤버 정보로 RankInput을 만듭니다.

        Args:
            member: 카드를 그릴 멤버
            level: 현재 레벨
            xp_for_level: 레벨별 누적 XP 함수
            rank: 리더보드 순위 (없으면 순위 미표시)
            use_display_name: True면 서버 닉네임을 이름으로 사용
        """
        username = member.display_name if use_display_name else member.name
        return RankInput(
            level=level,
            xp_for_level=xp_for_level,
            avatar=cls.avatar_url(member),
            username=username,
            discriminator=member.discriminator,
            status=cls.resolve_status(member),
            rank=rank,
            fonts=tuple(fonts),
            username_length=username_length,
            strip_accents=strip_accents,
        )
