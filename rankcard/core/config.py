"""
랭크 카드 설정 모듈입니다.

환경 변수(.env 포함)에서 기본 설정을 읽고, JSON 테마 파일을 CardStyle로 불러옵니다.

  RANKCARD_FONT_DIR       시작 시 등록할 폰트 디렉터리
  RANKCARD_FONT_FAMILY    기본 폰트 패밀리
  RANKCARD_TAG_LENGTH     이름 최대 길이 (기본 15)
  RANKCARD_STRIP_ACCENTS  이름 악센트 제거 여부 (true/false)
  RANKCARD_STYLE_PATH     JSON 테마 파일 경로
"""

import json
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from rankcard.card.CardStyle import CardStyle
from rankcard.core.errors import ConfigurationError
from rankcard.core.FontRegistry import FontRegistry

load_dotenv()

logger = logging.getLogger(__name__)

TRUE_VALUES = ("1", "true", "yes", "on")
FALSE_VALUES = ("0", "false", "no", "off", "")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} 값이 올바르지 않습니다: {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} 값은 정수여야 합니다: {raw!r}") from None


@dataclass(frozen=True)
class RankCardConfig:
    """환경 변수 기반 기본 설정"""
    font_dir: Optional[str] = None
    font_family: Optional[str] = None
    tag_length: int = 15
    strip_accents: bool = False
    style_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> "RankCardConfig":
        return cls(
            font_dir=os.environ.get("RANKCARD_FONT_DIR") or None,
            font_family=os.environ.get("RANKCARD_FONT_FAMILY") or None,
            tag_length=_env_int("RANKCARD_TAG_LENGTH", 15),
            strip_accents=_env_bool("RANKCARD_STRIP_ACCENTS", False),
            style_path=os.environ.get("RANKCARD_STYLE_PATH") or None,
        )

    def build_style(self) -> CardStyle:
        """테마 파일 + 환경 변수 값을 반영한 기본 스타일을 만듭니다."""
        style = load_style(self.style_path) if self.style_path else CardStyle()
        if self.font_family:
            style = style.with_font(self.font_family)
        return style.with_text_options(tag_length=self.tag_length, strip_accents=self.strip_accents)

    def apply_fonts(self, registry: FontRegistry) -> int:
        """font_dir의 폰트를 레지스트리에 등록하고 등록한 개수를 반환합니다."""
        if not self.font_dir:
            return 0
        count = registry.register_directory(self.font_dir)
        logger.info(f"폰트 디렉터리에서 {count}개 폰트 등록: {self.font_dir}")
        return count


def load_style(path: str) -> CardStyle:
    """
    JSON 테마 파일을 CardStyle로 불러옵니다.

    파일이 없으면 기본 스타일을 반환하고, JSON이 깨졌거나 값이 잘못되면
    ConfigurationError를 발생시킵니다.
    """
    if not os.path.exists(path):
        logger.info(f"테마 파일이 없어 기본 스타일을 사용합니다: {path}")
        return CardStyle()

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"테마 파일 파싱 실패 ({path}): {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"테마 파일 최상위는 객체여야 합니다: {path}")
    return CardStyle.from_dict(data)


def save_style(style: CardStyle, path: str) -> None:
    """스타일을 JSON 테마 파일로 저장합니다."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(style.to_dict(), f, indent=4, ensure_ascii=False)
