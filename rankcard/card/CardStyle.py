"""
랭크 카드의 시각 설정(스타일) 모듈입니다.

CardStyle은 불변 값이며, with_* 메서드는 필드 그룹 하나만 바꾼 새 스타일을
돌려줍니다.

배경과 진행 바 채우기는 태그 변형(tagged variant)으로 표현합니다.
  - 배경: SolidBackground | ImageBackground
  - 채우기: ColorFill | GradientFill
"""

from dataclasses import dataclass, field, fields, is_dataclass, replace
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from rankcard.core.errors import ConfigurationError

# ── 기본 캔버스/색상 ──
CANVAS_WIDTH = 934
CANVAS_HEIGHT = 282

DEFAULT_BACKGROUND = "#23272a"
DEFAULT_OVERLAY = "#333640"
DEFAULT_TRACK = "#484b4e"
TEXT_WHITE = "#ffffff"

# ── 상태별 색상 ──
STATUS_COLOURS: Dict[str, str] = {
    "online": "#43b581",
    "idle": "#faa61a",
    "dnd": "#f04747",
    "offline": "#747f8e",
    "streaming": "#593595",
}


# ────────────────────────────────────────────────
# 태그 변형
# ────────────────────────────────────────────────

@dataclass(frozen=True)
class SolidBackground:
    color: str = DEFAULT_BACKGROUND


@dataclass(frozen=True)
class ImageBackground:
    source: Union[str, bytes]


Background = Union[SolidBackground, ImageBackground]


@dataclass(frozen=True)
class ColorFill:
    color: str = TEXT_WHITE


@dataclass(frozen=True)
class GradientFill:
    """다중 정지점 그라디언트. 정지점은 균등 간격으로 배치됩니다."""
    stops: Tuple[str, ...]
    radial: bool = False


Fill = Union[ColorFill, GradientFill]


# ────────────────────────────────────────────────
# 구성 요소
# ────────────────────────────────────────────────

@dataclass(frozen=True)
class Piece:
    """라벨과 스타일을 가진 텍스트 조각 (레벨, 순위, 이름 등). 값은 RankInput에서 옵니다."""
    color: str = TEXT_WHITE
    size: int = 36
    display: bool = True
    label: str = ""


@dataclass(frozen=True)
class Overlay:
    display: bool = True
    opacity: float = 0.5
    color: str = DEFAULT_OVERLAY


@dataclass(frozen=True)
class ProgressBar:
    rounded: bool = True
    track_color: str = DEFAULT_TRACK
    fill: Fill = ColorFill()
    x: float = 275.5
    y: float = 183.75
    width: float = 580
    height: float = 37.5

    @property
    def radius(self) -> float:
        return self.height / 2


@dataclass(frozen=True)
class Avatar:
    display: bool = True
    x: int = 35
    y: int = 45
    size: int = 200

    @property
    def radius(self) -> float:
        return self.size / 2

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.radius, self.y + self.radius)


@dataclass(frozen=True)
class Status:
    display: bool = True
    circle: bool = False       # True면 작은 점, False면 아바타 링
    width: int = 5
    color: Optional[str] = None  # 지정하면 상태별 색상 대신 사용
    colours: Mapping[str, str] = field(default_factory=lambda: dict(STATUS_COLOURS))

    def __post_init__(self):
        # 스타일 간에 공유되므로 읽기 전용 사본으로 보관
        if isinstance(self.colours, Mapping):
            object.__setattr__(self, "colours", MappingProxyType(dict(self.colours)))


# ────────────────────────────────────────────────
# 카드 스타일
# ────────────────────────────────────────────────

@dataclass(frozen=True)
class CardStyle:
    """카드 한 장의 전체 시각 설정"""
    width: int = CANVAS_WIDTH
    height: int = CANVAS_HEIGHT
    background: Background = SolidBackground()
    overlay: Overlay = Overlay()
    progress_bar: ProgressBar = ProgressBar()
    avatar: Avatar = Avatar()
    status: Status = field(default_factory=Status)
    level: Piece = Piece(size=54, label="Level")
    rank: Piece = Piece(size=54, label="Rank")
    username: Piece = Piece(size=60)
    discriminator: Piece = Piece(size=60, label="#")
    xp: Piece = Piece(size=36)
    font_family: Optional[str] = None
    tag_length: int = 15
    strip_accents: bool = False

    def with_background(self, background: Background) -> "CardStyle":
        return replace(self, background=background)

    def with_overlay(self, color: str, opacity: float = 0.5, display: bool = True) -> "CardStyle":
        return replace(self, overlay=Overlay(display=display, opacity=opacity, color=color))

    def with_progress_bar(self, fill: Fill, rounded: bool = True) -> "CardStyle":
        return replace(self, progress_bar=replace(self.progress_bar, fill=fill, rounded=rounded))

    def with_progress_track(self, color: str) -> "CardStyle":
        return replace(self, progress_bar=replace(self.progress_bar, track_color=color))

    def with_avatar(self, **changes) -> "CardStyle":
        return replace(self, avatar=replace(self.avatar, **changes))

    def with_status(self, **changes) -> "CardStyle":
        return replace(self, status=replace(self.status, **changes))

    def with_level(self, **changes) -> "CardStyle":
        return replace(self, level=replace(self.level, **changes))

    def with_rank(self, **changes) -> "CardStyle":
        return replace(self, rank=replace(self.rank, **changes))

    def with_username(self, **changes) -> "CardStyle":
        return replace(self, username=replace(self.username, **changes))

    def with_discriminator(self, **changes) -> "CardStyle":
        return replace(self, discriminator=replace(self.discriminator, **changes))

    def with_xp(self, **changes) -> "CardStyle":
        return replace(self, xp=replace(self.xp, **changes))

    def with_font(self, family: Optional[str]) -> "CardStyle":
        return replace(self, font_family=family)

    def with_text_options(self, tag_length: Optional[int] = None, strip_accents: Optional[bool] = None) -> "CardStyle":
        changes = {}
        if tag_length is not None:
            changes["tag_length"] = tag_length
        if strip_accents is not None:
            changes["strip_accents"] = strip_accents
        return replace(self, **changes)

    # ── JSON 직렬화 ──

    def to_dict(self) -> Dict[str, Any]:
        """JSON으로 저장할 수 있는 dict로 변환합니다. 이미지 배경은 경로/URL만 지원합니다."""
        data = _fields_dict(self)
        for key, value in data.items():
            if is_dataclass(value):
                data[key] = _fields_dict(value)

        if isinstance(self.background, SolidBackground):
            data["background"] = {"type": "colour", "value": self.background.color}
        else:
            if isinstance(self.background.source, bytes):
                raise ConfigurationError("바이트 배경 이미지는 JSON으로 저장할 수 없습니다.")
            data["background"] = {"type": "image", "value": self.background.source}

        fill = self.progress_bar.fill
        bar = data["progress_bar"]
        if isinstance(fill, GradientFill):
            bar["fill"] = {"type": "gradient", "value": list(fill.stops), "radial": fill.radial}
        else:
            bar["fill"] = {"type": "colour", "value": fill.color}
        data["status"]["colours"] = dict(self.status.colours)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CardStyle":
        """to_dict 형식(일부 키만 있어도 됨)에서 스타일을 만듭니다."""
        style = cls()
        try:
            changes: Dict[str, Any] = {}
            for key in ("width", "height", "font_family", "tag_length", "strip_accents"):
                if key in data:
                    changes[key] = data[key]

            if "background" in data:
                changes["background"] = parse_background(
                    data["background"]["type"], data["background"]["value"]
                )
            if "overlay" in data:
                changes["overlay"] = replace(style.overlay, **data["overlay"])
            if "progress_bar" in data:
                bar = dict(data["progress_bar"])
                fill = bar.pop("fill", None)
                if fill is not None:
                    bar["fill"] = parse_fill(fill["type"], fill["value"], fill.get("radial", False))
                changes["progress_bar"] = replace(style.progress_bar, **bar)
            if "avatar" in data:
                changes["avatar"] = replace(style.avatar, **data["avatar"])
            if "status" in data:
                status = dict(data["status"])
                if "colours" in status:
                    status["colours"] = {**STATUS_COLOURS, **status["colours"]}
                changes["status"] = replace(style.status, **status)
            for piece in PIECES:
                if piece in data:
                    changes[piece] = replace(getattr(style, piece), **data[piece])
        except (KeyError, TypeError) as e:
            raise ConfigurationError(f"잘못된 스타일 설정: {e}") from e

        style = replace(style, **changes)
        validate_style(style)
        return style


def parse_background(kind: str, value: Union[str, bytes]) -> Background:
    """문자열 태그('image' | 'colour')로 배경 변형을 만듭니다."""
    if kind == "image":
        return ImageBackground(source=value)
    if kind in ("colour", "color"):
        return SolidBackground(color=value)
    raise ConfigurationError(f"알 수 없는 배경 타입: {kind}")


def parse_fill(kind: str, value, radial: bool = False) -> Fill:
    """문자열 태그('colour' | 'gradient')로 진행 바 채우기 변형을 만듭니다."""
    if kind in ("colour", "color"):
        return ColorFill(color=value)
    if kind == "gradient":
        if isinstance(value, str):
            raise ConfigurationError("그라디언트 값은 색상 목록이어야 합니다.")
        return GradientFill(stops=tuple(value), radial=radial)
    raise ConfigurationError(f"알 수 없는 진행 바 타입: {kind}")


# ────────────────────────────────────────────────
# 값 검사
# ────────────────────────────────────────────────

NUMBER = (int, float)
PIECES = ("level", "rank", "username", "discriminator", "xp")


def _fields_dict(obj) -> Dict[str, Any]:
    return {f.name: getattr(obj, f.name) for f in fields(obj)}


def _check(value: Any, types: tuple, name: str, optional: bool = False) -> None:
    if optional and value is None:
        return
    # bool은 int의 하위 타입
    if (isinstance(value, bool) and bool not in types) or not isinstance(value, types):
        raise ConfigurationError(f"{name} 값의 타입이 올바르지 않습니다: {value!r}")


def validate_style(style: CardStyle) -> None:
    """
    스타일 필드의 타입을 검사합니다.

    JSON 테마나 setter로 들어온 값이 그리기 단계에서 TypeError로 터지지 않도록
    잘못된 값은 ConfigurationError로 바꿔 알립니다. 색상 문자열 자체의 해석은
    레이아웃 단계에서 합니다.
    """
    _check(style.width, (int,), "width")
    _check(style.height, (int,), "height")
    _check(style.font_family, (str,), "font_family", optional=True)
    _check(style.tag_length, (int,), "tag_length")
    _check(style.strip_accents, (bool,), "strip_accents")

    overlay = style.overlay
    _check(overlay.display, (bool,), "overlay.display")
    _check(overlay.opacity, NUMBER, "overlay.opacity")
    _check(overlay.color, (str,), "overlay.color")

    bar = style.progress_bar
    _check(bar.rounded, (bool,), "progress_bar.rounded")
    _check(bar.track_color, (str,), "progress_bar.track_color")
    for name in ("x", "y", "width", "height"):
        _check(getattr(bar, name), NUMBER, f"progress_bar.{name}")

    avatar = style.avatar
    _check(avatar.display, (bool,), "avatar.display")
    for name in ("x", "y", "size"):
        _check(getattr(avatar, name), (int,), f"avatar.{name}")

    status = style.status
    _check(status.display, (bool,), "status.display")
    _check(status.circle, (bool,), "status.circle")
    _check(status.width, (int,), "status.width")
    _check(status.color, (str,), "status.color", optional=True)
    _check(status.colours, (Mapping,), "status.colours")

    for name in PIECES:
        piece = getattr(style, name)
        _check(piece.color, (str,), f"{name}.color")
        _check(piece.size, (int,), f"{name}.size")
        _check(piece.display, (bool,), f"{name}.display")
        _check(piece.label, (str,), f"{name}.label")
