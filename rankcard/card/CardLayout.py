"""
랭크 카드 레이아웃 모듈입니다.

CardStyle + RankInput을 받아 렌더러가 그대로 그리기만 하면 되는
그리기 명령 묶음(CardLayout)으로 변환합니다.

  - 색상 문자열은 모두 여기서 RGBA로 해석되므로, 잘못된 색상은
    아무것도 그리기 전에 ConfigurationError로 드러납니다.
  - 텍스트 폭이 필요한 배치(판별자 위치, 오른쪽 정렬)는 렌더러가 넘겨주는
    measure 함수로 계산합니다.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional, Sequence, Tuple, Union

from PIL import ImageColor

from rankcard.card.CardStyle import (
    CardStyle, ColorFill, GradientFill, ImageBackground, Piece, SolidBackground, validate_style,
)
from rankcard.card.XPFormulas import LevelInfo, XPForLevel, calculate_progress, resolve_level
from rankcard.core.errors import ConfigurationError, InputError
from rankcard.core.FontRegistry import FontSpec, WEIGHT_BOLD, WEIGHT_REGULAR
from rankcard.core.text_utils import abbreviate, shorten, strip_accents

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]
Measure = Callable[[str, int, str], float]

# ── 레이아웃 상수 ──
OVERLAY_INSET = 20

# 트랙 오른쪽 끝 원호의 중심을 x + 폭 * 이 값에 둡니다. 꽉 찬 바의 끝과
# 트랙 끝이 맞아 보이도록 눈으로 맞춘 값입니다.
TRACK_END_OVERSHOOT = 1.03101424979
END_CAP_BLEED = 0.25
SQUARE_TRACK_OUTLINE = 7

STATUS_DOT_OFFSET = (80, 60)
STATUS_DOT_RADIUS = 20

TEXT_BASELINE_GAP = 20       # 진행 바 위쪽과 이름/XP 텍스트 기준선 사이
HEADER_BASELINE = 85         # 레벨/순위 텍스트 기준선
DISCRIMINATOR_GAP = 8
LABEL_GAP = 24
# 태그가 없는 계정의 판별자
EMPTY_DISCRIMINATORS = ("", "0")


@dataclass
class RankInput:
    """렌더링 요청 한 건의 입력 데이터"""
    level: int
    xp_for_level: XPForLevel
    avatar: Union[str, bytes]
    username: str
    discriminator: Union[str, int] = "0"
    status: str = "offline"
    rank: Optional[int] = None
    fonts: Sequence[FontSpec] = ()
    username_length: Optional[int] = None
    strip_accents: Optional[bool] = None


# ────────────────────────────────────────────────
# 그리기 명령
# ────────────────────────────────────────────────

@dataclass(frozen=True)
class Rect:
    x0: float
    y0: float
    x1: float
    y1: float


@dataclass(frozen=True)
class HalfDisc:
    """반원. side='left'면 왼쪽 반, 'right'면 오른쪽 반"""
    cx: float
    cy: float
    radius: float
    side: str


Shape = Union[Rect, HalfDisc]


@dataclass(frozen=True)
class SolidPaint:
    color: RGBA


@dataclass(frozen=True)
class GradientPaint:
    colors: Tuple[RGBA, ...]
    radial: bool
    box: Rect


Paint = Union[SolidPaint, GradientPaint]


@dataclass(frozen=True)
class TextRun:
    text: str
    x: float
    y: float          # 글자 기준선(baseline)
    color: RGBA
    size: int
    weight: str = WEIGHT_REGULAR


@dataclass(frozen=True)
class BarLayout:
    rounded: bool
    fraction: float
    track_paint: SolidPaint
    track_shapes: Tuple[Shape, ...]
    track_outline: Optional[Rect]
    fill_paint: Paint
    fill_shapes: Tuple[Shape, ...]


@dataclass(frozen=True)
class AvatarLayout:
    display: bool
    x: int
    y: int
    size: int

    @property
    def radius(self) -> float:
        return self.size / 2

    @property
    def center(self) -> Tuple[float, float]:
        return (self.x + self.radius, self.y + self.radius)


@dataclass(frozen=True)
class StatusLayout:
    display: bool
    circle: bool
    center: Tuple[float, float]
    radius: float
    width: int
    color: RGBA


@dataclass(frozen=True)
class CardLayout:
    width: int
    height: int
    background: Union[SolidPaint, ImageBackground]
    overlay: Optional[Tuple[Rect, RGBA]]
    avatar: AvatarLayout
    avatar_source: Union[str, bytes]
    status: StatusLayout
    bar: BarLayout
    level_info: LevelInfo
    username: Optional[TextRun]
    discriminator: Optional[TextRun]
    xp: Optional[TextRun]
    level: Optional[TextRun]
    rank: Optional[TextRun]
    font_family: Optional[str] = None
    fonts: Tuple[FontSpec, ...] = field(default_factory=tuple)


# ────────────────────────────────────────────────
# 해석 유틸
# ────────────────────────────────────────────────

def parse_color(value: str) -> RGBA:
    """색상 문자열('#43b581', 'white', 'rgb(...)')을 RGBA로 해석합니다."""
    if not isinstance(value, str):
        raise ConfigurationError(f"색상은 문자열이어야 합니다: {value!r}")
    try:
        return ImageColor.getcolor(value, "RGBA")
    except ValueError as e:
        raise ConfigurationError(f"잘못된 색상 값: {value!r}") from e


def status_colour(status: str, colours: Mapping[str, str]) -> str:
    """상태 키에 해당하는 색상 문자열을 반환합니다. 'invisible'은 offline으로 표시합니다."""
    key = str(status).lower()
    if key == "invisible":
        key = "offline"
    try:
        return colours[key]
    except KeyError:
        raise ConfigurationError(f"알 수 없는 상태: {status!r}") from None


def format_username(username: str, max_length: int, strip: bool) -> str:
    """악센트 제거를 먼저 한 뒤 길이를 자릅니다."""
    if strip:
        username = strip_accents(username)
    return shorten(username, max_length)


def fit_text(text: str, max_width: float, measure_text: Callable[[str], float]) -> str:
    """측정 폭이 max_width 안에 들어올 때까지 말줄임표를 붙여 줄입니다."""
    if measure_text(text) <= max_width:
        return text
    for length in range(len(text) - 1, 0, -1):
        candidate = shorten(text, length)
        if measure_text(candidate) <= max_width:
            logger.debug(f"이름이 XP 텍스트와 겹쳐 줄입니다: {text!r} -> {candidate!r}")
            return candidate
    return ""


def _resolve_fill(fill, box: Rect) -> Paint:
    if isinstance(fill, ColorFill):
        return SolidPaint(parse_color(fill.color))
    if isinstance(fill, GradientFill):
        if len(fill.stops) < 2:
            raise ConfigurationError("그라디언트에는 색상이 2개 이상 필요합니다.")
        return GradientPaint(tuple(parse_color(c) for c in fill.stops), fill.radial, box)
    raise ConfigurationError(f"알 수 없는 진행 바 채우기: {fill!r}")


def _resolve_bar(style: CardStyle, fraction: float) -> BarLayout:
    bar = style.progress_bar
    x, y, w, h = bar.x, bar.y, bar.width, bar.height
    track_paint = SolidPaint(parse_color(bar.track_color))

    if bar.rounded:
        r = bar.radius
        cy = y + r
        track_end = x + TRACK_END_OVERSHOOT * w
        track_shapes = (
            HalfDisc(x + r, cy, r, "left"),
            Rect(x + r, y, track_end, y + h),
            HalfDisc(track_end, cy, r + END_CAP_BLEED, "right"),
        )
        # 꽉 찬 바의 끝 원호는 트랙 끝 원호와 같은 중심을 넘지 않음
        fill_end = min(x + r + fraction, track_end)
        fill_shapes = (
            HalfDisc(x + r, cy, r, "left"),
            Rect(x + r, y, fill_end, y + h),
            HalfDisc(fill_end, cy, r + END_CAP_BLEED, "right"),
        )
        box = Rect(x, y, track_end + r + END_CAP_BLEED, y + h)
        outline = None
    else:
        track_shapes = ()
        fill_shapes = (Rect(x, y, x + fraction, y + h),) if fraction > 0 else ()
        box = Rect(x, y, x + w, y + h)
        outline = box

    return BarLayout(
        rounded=bar.rounded,
        fraction=fraction,
        track_paint=track_paint,
        track_shapes=track_shapes,
        track_outline=outline,
        fill_paint=_resolve_fill(bar.fill, box),
        fill_shapes=fill_shapes,
    )


def _bar_right(style: CardStyle) -> float:
    bar = style.progress_bar
    if bar.rounded:
        return bar.x + TRACK_END_OVERSHOOT * bar.width + bar.radius
    return bar.x + bar.width


def _piece_run(piece: Piece, text: str, x: float, y: float, weight: str) -> TextRun:
    return TextRun(text=text, x=x, y=y, color=parse_color(piece.color), size=piece.size, weight=weight)


# ────────────────────────────────────────────────
# 레이아웃 생성
# ────────────────────────────────────────────────

def build_layout(data: RankInput, style: CardStyle, measure: Measure) -> CardLayout:
    """
    입력과 스타일로 그리기 명령을 만듭니다.

    잘못된 입력은 InputError, 잘못된 설정은 ConfigurationError로 즉시 실패하며
    이 단계에서는 네트워크/파일 I/O를 하지 않습니다.
    """
    validate_style(style)
    if style.width <= 0 or style.height <= 0:
        raise ConfigurationError(f"캔버스 크기는 양수여야 합니다: {style.width}x{style.height}")
    if data.rank is not None and (isinstance(data.rank, bool) or not isinstance(data.rank, int) or data.rank < 0):
        raise InputError(f"순위는 0 이상의 정수여야 합니다: {data.rank!r}")

    level_info = resolve_level(data.level, data.xp_for_level)
    fraction = calculate_progress(level_info.current_xp, level_info.required_xp, style.progress_bar.width)

    # ── 배경 & 오버레이 ──
    if isinstance(style.background, SolidBackground):
        background = SolidPaint(parse_color(style.background.color))
    elif isinstance(style.background, ImageBackground):
        background = style.background
    else:
        raise ConfigurationError(f"알 수 없는 배경: {style.background!r}")

    overlay = None
    if style.overlay.display:
        r, g, b, a = parse_color(style.overlay.color)
        opacity = min(max(float(style.overlay.opacity), 0.0), 1.0)
        rect = Rect(OVERLAY_INSET, OVERLAY_INSET, style.width - OVERLAY_INSET, style.height - OVERLAY_INSET)
        overlay = (rect, (r, g, b, round(a * opacity)))

    # ── 아바타 & 상태 ──
    avatar = AvatarLayout(style.avatar.display, style.avatar.x, style.avatar.y, style.avatar.size)
    status_style = style.status
    status_rgba = parse_color(status_style.color or status_colour(data.status, status_style.colours))
    if status_style.circle:
        cx, cy = avatar.center
        status = StatusLayout(
            display=status_style.display,
            circle=True,
            center=(cx + STATUS_DOT_OFFSET[0], cy + STATUS_DOT_OFFSET[1]),
            radius=STATUS_DOT_RADIUS,
            width=status_style.width,
            color=status_rgba,
        )
    else:
        status = StatusLayout(status_style.display, False, avatar.center, avatar.radius, status_style.width, status_rgba)

    bar = _resolve_bar(style, fraction)
    bar_right = _bar_right(style)
    text_baseline = style.progress_bar.y - TEXT_BASELINE_GAP

    # ── XP 텍스트 (바 위 오른쪽 정렬) ──
    xp_run = None
    if style.xp.display:
        xp_text = f"{abbreviate(level_info.current_xp)} / {abbreviate(level_info.required_xp)} XP"
        xp_width = measure(xp_text, style.xp.size, WEIGHT_REGULAR)
        xp_run = _piece_run(style.xp, xp_text, bar_right - xp_width, text_baseline, WEIGHT_REGULAR)

    # ── 이름 & 판별자 ──
    username_run = None
    discriminator_run = None
    if style.username.display:
        max_length = data.username_length if data.username_length is not None else style.tag_length
        strip = data.strip_accents if data.strip_accents is not None else style.strip_accents
        name = format_username(data.username, max_length, strip)
        if xp_run is not None:
            limit = xp_run.x - DISCRIMINATOR_GAP - style.progress_bar.x
            name = fit_text(name, limit, lambda text: measure(text, style.username.size, WEIGHT_BOLD))
        username_run = _piece_run(style.username, name, style.progress_bar.x, text_baseline, WEIGHT_BOLD)

        discriminator = str(data.discriminator)
        if style.discriminator.display and discriminator not in EMPTY_DISCRIMINATORS:
            tag = f"{style.discriminator.label}{discriminator}"
            tag_x = username_run.x + measure(name, style.username.size, WEIGHT_BOLD) + DISCRIMINATOR_GAP
            tag_end = tag_x + measure(tag, style.discriminator.size, WEIGHT_REGULAR)
            if xp_run is not None and tag_end > xp_run.x - DISCRIMINATOR_GAP:
                logger.debug(f"판별자가 XP 텍스트와 겹쳐 생략합니다: {tag}")
            else:
                discriminator_run = _piece_run(style.discriminator, tag, tag_x, text_baseline, WEIGHT_REGULAR)

    # ── 레벨 & 순위 (오른쪽 정렬) ──
    right = bar_right
    level_run = None
    if style.level.display:
        text = f"{style.level.label} {abbreviate(level_info.level)}".strip()
        width = measure(text, style.level.size, WEIGHT_BOLD)
        level_run = _piece_run(style.level, text, right - width, HEADER_BASELINE, WEIGHT_BOLD)
        right = level_run.x - LABEL_GAP

    rank_run = None
    rank_display = style.rank.display and bool(data.rank)
    if rank_display:
        text = f"{style.rank.label} {abbreviate(data.rank)}".strip()
        width = measure(text, style.rank.size, WEIGHT_BOLD)
        rank_run = _piece_run(style.rank, text, right - width, HEADER_BASELINE, WEIGHT_BOLD)

    return CardLayout(
        width=style.width,
        height=style.height,
        background=background,
        overlay=overlay,
        avatar=avatar,
        avatar_source=data.avatar,
        status=status,
        bar=bar,
        level_info=level_info,
        username=username_run,
        discriminator=discriminator_run,
        xp=xp_run,
        level=level_run,
        rank=rank_run,
        font_family=style.font_family,
        fonts=tuple(data.fonts),
    )
