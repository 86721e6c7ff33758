"""
랭크 카드용 폰트 레지스트리 모듈입니다.

폰트 파일을 (패밀리, 굵기, 스타일) 키로 등록해 두고, 렌더링 시 크기별
ImageFont 객체를 캐시해서 돌려줍니다. 같은 파일을 다시 등록해도 아무 일도
일어나지 않습니다(멱등).

렌더러는 레지스트리를 주입받아 사용하며, 주입하지 않으면 프로세스 전역
기본 레지스트리(default_registry)를 씁니다.
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from PIL import ImageFont

from rankcard.core.errors import ConfigurationError

logger = logging.getLogger(__name__)

FONT_EXTENSIONS = (".ttf", ".otf")

WEIGHT_REGULAR = "regular"
WEIGHT_BOLD = "bold"
STYLE_NORMAL = "normal"


@dataclass(frozen=True)
class FontSpec:
    """등록할 폰트 파일 정보"""
    path: str
    family: str
    weight: str = WEIGHT_REGULAR
    style: str = STYLE_NORMAL

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.family.lower(), self.weight.lower(), self.style.lower())


class FontRegistry:
    """폰트 등록 및 로드를 담당하는 서비스"""

    def __init__(self):
        self._fonts: Dict[Tuple[str, str, str], str] = {}
        self._cache: Dict[Tuple[str, int], ImageFont.FreeTypeFont] = {}
        self._lock = threading.Lock()

    # ── 등록 ──

    def ensure_registered(self, spec: FontSpec) -> None:
        """
        폰트를 등록합니다. 이미 같은 파일이 등록되어 있으면 무시합니다.

        파일이 없으면 ConfigurationError를 발생시킵니다.
        """
        if not os.path.isfile(spec.path):
            raise ConfigurationError(f"폰트 파일을 찾을 수 없습니다: {spec.path}")

        path = os.path.abspath(spec.path)
        with self._lock:
            existing = self._fonts.get(spec.key)
            if existing == path:
                return
            if existing is not None:
                logger.warning(f"폰트 {spec.key} 교체: {existing} -> {path}")
            self._fonts[spec.key] = path
        logger.info(f"폰트 등록됨: {spec.family} ({spec.weight}, {spec.style}) <- {path}")

    def register_directory(self, directory: str) -> int:
        """디렉터리의 .ttf/.otf 파일을 모두 등록합니다. 패밀리 이름은 파일명입니다."""
        if not os.path.isdir(directory):
            raise ConfigurationError(f"폰트 디렉터리를 찾을 수 없습니다: {directory}")

        count = 0
        for filename in sorted(os.listdir(directory)):
            stem, ext = os.path.splitext(filename)
            if ext.lower() not in FONT_EXTENSIONS:
                continue
            weight = WEIGHT_BOLD if stem.lower().endswith("-bold") else WEIGHT_REGULAR
            family = stem[: -len("-bold")] if weight == WEIGHT_BOLD else stem
            self.ensure_registered(FontSpec(os.path.join(directory, filename), family, weight))
            count += 1
        return count

    def is_registered(self, family: str, weight: str = WEIGHT_REGULAR, style: str = STYLE_NORMAL) -> bool:
        return (family.lower(), weight.lower(), style.lower()) in self._fonts

    # ── 조회 ──

    def _resolve_path(self, family: Optional[str], weight: str) -> Optional[str]:
        if not family:
            return None
        family = family.lower()
        path = self._fonts.get((family, weight.lower(), STYLE_NORMAL))
        if path:
            return path
        # 요청한 굵기가 없으면 같은 패밀리의 아무 폰트나 사용
        for (fam, _, _), candidate in self._fonts.items():
            if fam == family:
                return candidate
        return None

    def get_font(self, family: Optional[str], size: int, weight: str = WEIGHT_REGULAR):
        """패밀리/크기/굵기에 맞는 폰트를 반환합니다. 실패 시 기본 폰트를 반환합니다."""
        path = self._resolve_path(family, weight)
        cache_key = (path or "<default>", size)

        with self._lock:
            font = self._cache.get(cache_key)
        if font is not None:
            return font

        if path is None:
            if family:
                logger.warning(f"등록되지 않은 폰트 패밀리({family}), 기본 폰트를 사용합니다.")
            font = ImageFont.load_default(size=size)
        else:
            try:
                font = ImageFont.truetype(path, size)
            except (IOError, OSError) as e:
                logger.warning(f"폰트 로드 실패 ({path}): {e}, 기본 폰트를 사용합니다.")
                font = ImageFont.load_default(size=size)

        with self._lock:
            self._cache[cache_key] = font
        return font

    def measure(self, text: str, size: int, weight: str = WEIGHT_REGULAR, family: Optional[str] = None) -> float:
        """텍스트의 가로 폭(px)을 측정합니다."""
        font = self.get_font(family, size, weight)
        bbox = font.getbbox(text, anchor="ls")
        return bbox[2] - bbox[0]


_default_registry: Optional[FontRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> FontRegistry:
    """프로세스 전역 기본 레지스트리를 반환합니다."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = FontRegistry()
        return _default_registry
