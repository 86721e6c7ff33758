"""
랭크 카드 렌더링 중 발생하는 예외 모음입니다.

  - ImageLoadError: 아바타/배경 이미지를 불러오거나 디코딩하지 못함
  - ConfigurationError: 알 수 없는 상태 키, 잘못된 색상, 잘못된 그라디언트
  - InputError: 음수 레벨/순위, 음수·비유한 XP 값
"""


class RankCardError(Exception):
    """랭크 카드 관련 모든 예외의 기반 클래스"""


class ImageLoadError(RankCardError):
    """이미지를 가져오거나 디코딩하지 못했을 때 발생합니다."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"이미지 로드 실패 ({source}): {reason}")


class ConfigurationError(RankCardError, ValueError):
    """카드 설정 값이 올바르지 않을 때 발생합니다."""


class InputError(RankCardError, ValueError):
    """렌더링 입력 데이터가 올바르지 않을 때 발생합니다."""
