"""
랭크 카드 이미지 생성 모듈입니다.
Pillow를 사용하여 CardLayout의 그리기 명령을 캔버스에 순서대로 그립니다.

그리기 순서(고정)
  1. 배경 (단색 또는 캔버스 크기로 늘린 이미지)
  2. 반투명 오버레이 (가장자리에서 20px 안쪽)
  3. 이름 + 판별자
  4. 원형으로 자른 아바타
  5. 상태 표시 (점 또는 링)
  6. 진행 바 (트랙 → 채우기) + XP 텍스트
  7. 레벨 / 순위
"""

import io
import logging
from typing import Optional, Sequence, Tuple

from PIL import Image, ImageChops, ImageDraw

from rankcard.card.CardLayout import (
    RGBA, AvatarLayout, BarLayout, CardLayout, GradientPaint, HalfDisc, Measure,
    Paint, Rect, SQUARE_TRACK_OUTLINE, Shape, SolidPaint, StatusLayout, TextRun,
)
from rankcard.core.errors import ConfigurationError
from rankcard.core.FontRegistry import FontRegistry, default_registry

logger = logging.getLogger(__name__)


# ────────────────────────────────────────────────
# 유틸
# ────────────────────────────────────────────────

def _clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _mix(c1: Tuple[int, ...], c2: Tuple[int, ...], t: float) -> Tuple[int, ...]:
    t = _clamp(t, 0.0, 1.0)
    return tuple(int(round(_lerp(a, b, t))) for a, b in zip(c1, c2))


def _make_circle_mask(diameter: int) -> Image.Image:
    """원형 마스크를 생성합니다."""
    mask = Image.new('L', (diameter, diameter), 0)
    draw = ImageDraw.Draw(mask)
    draw.ellipse([(0, 0), (diameter - 1, diameter - 1)], fill=255)
    return mask


def _gradient_lut(colors: Sequence[RGBA]) -> list:
    """정지점 색상을 0~255 단계의 RGBA 표로 펼칩니다."""
    segments = len(colors) - 1
    lut = []
    for step in range(256):
        u = step / 255 * segments
        i = min(int(u), segments - 1)
        lut.append(_mix(colors[i], colors[i + 1], u - i))
    return lut


def _make_gradient(size: Tuple[int, int], colors: Sequence[RGBA], radial: bool = False) -> Image.Image:
    """
    다중 정지점 그라디언트 이미지를 만듭니다.

    선형: 왼쪽 → 오른쪽
    방사형: 왼쪽 가운데를 중심으로, 오른쪽 끝에서 마지막 색상
    """
    w, h = size
    if radial:
        ramp = Image.radial_gradient('L').resize((w * 2, w * 2))
        top = w - h // 2
        ramp = ramp.crop((w, top, w * 2, top + h))
    else:
        ramp = Image.linear_gradient('L').transpose(Image.Transpose.ROTATE_90).resize((w, h))

    lut = _gradient_lut(colors)
    bands = [ramp.point([c[band] for c in lut]) for band in range(4)]
    return Image.merge('RGBA', bands)


def _shape_mask(size: Tuple[int, int], shapes: Sequence[Shape]) -> Image.Image:
    """도형들을 합친 L 마스크를 만듭니다."""
    mask = Image.new('L', size, 0)
    md = ImageDraw.Draw(mask)
    for shape in shapes:
        if isinstance(shape, Rect):
            md.rectangle([(shape.x0, shape.y0), (max(shape.x0, shape.x1), shape.y1)], fill=255)
        elif isinstance(shape, HalfDisc):
            start, end = (90, 270) if shape.side == "left" else (-90, 90)
            md.pieslice(
                [(shape.cx - shape.radius, shape.cy - shape.radius),
                 (shape.cx + shape.radius, shape.cy + shape.radius)],
                start, end, fill=255,
            )
        else:
            raise ConfigurationError(f"알 수 없는 도형: {shape!r}")
    return mask


# ────────────────────────────────────────────────
# 메인 생성기
# ────────────────────────────────────────────────

class RankCardGenerator:
    """랭크 카드 렌더러"""

    def __init__(self, registry: Optional[FontRegistry] = None):
        self.registry = registry or default_registry()

    def measure_for(self, family: Optional[str]) -> Measure:
        """레이아웃 계산에 쓸 텍스트 폭 측정 함수를 반환합니다."""
        def measure(text: str, size: int, weight: str) -> float:
            return self.registry.measure(text, size, weight, family)
        return measure

    def render(
        self,
        layout: CardLayout,
        avatar: Optional[Image.Image],
        background: Optional[Image.Image] = None,
    ) -> io.BytesIO:
        """레이아웃을 그려 PNG BytesIO로 반환합니다."""
        logger.debug(
            f"랭크 카드 렌더링: {layout.width}x{layout.height}, "
            f"레벨 {layout.level_info.level}, 진행 폭 {layout.bar.fraction:.1f}px"
        )

        # ── 1. 배경 ──
        canvas = self._draw_background(layout, background)

        # ── 2. 오버레이 ──
        if layout.overlay is not None:
            rect, color = layout.overlay
            ov = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
            d = ImageDraw.Draw(ov)
            d.rectangle([(rect.x0, rect.y0), (rect.x1 - 1, rect.y1 - 1)], fill=color)
            canvas.paste(Image.alpha_composite(canvas, ov))

        # ── 3. 이름 + 판별자 ──
        self._draw_texts(canvas, [layout.username, layout.discriminator], layout.font_family)

        # ── 4. 아바타 ──
        if layout.avatar.display and avatar is not None:
            self._draw_avatar(canvas, avatar, layout.avatar)

        # ── 5. 상태 ──
        if layout.status.display:
            self._draw_status(canvas, layout.status)

        # ── 6. 진행 바 + XP ──
        self._draw_progress_bar(canvas, layout.bar)
        self._draw_texts(canvas, [layout.xp], layout.font_family)

        # ── 7. 레벨 / 순위 ──
        self._draw_texts(canvas, [layout.level, layout.rank], layout.font_family)

        buffer = io.BytesIO()
        canvas.save(buffer, format="PNG")
        buffer.seek(0)
        return buffer

    # ────────────────────────────────────────────────
    # 배경
    # ────────────────────────────────────────────────

    def _draw_background(self, layout: CardLayout, background: Optional[Image.Image]) -> Image.Image:
        size = (layout.width, layout.height)
        if isinstance(layout.background, SolidPaint):
            return Image.new('RGBA', size, layout.background.color)

        if background is None:
            raise ConfigurationError("이미지 배경이 설정되었지만 배경 이미지가 로드되지 않았습니다.")
        canvas = Image.new('RGBA', size, (0, 0, 0, 255))
        bg = background.convert('RGBA').resize(size, Image.LANCZOS)
        canvas.paste(Image.alpha_composite(canvas, bg))
        return canvas

    # ────────────────────────────────────────────────
    # 텍스트
    # ────────────────────────────────────────────────

    def _draw_texts(self, canvas: Image.Image, runs: Sequence[Optional[TextRun]], family: Optional[str]):
        runs = [run for run in runs if run is not None and run.text]
        if not runs:
            return

        layer = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
        d = ImageDraw.Draw(layer)
        for run in runs:
            font = self.registry.get_font(family, run.size, run.weight)
            d.text((run.x, run.y), run.text, fill=run.color, font=font, anchor="ls")
        canvas.paste(Image.alpha_composite(canvas, layer))

    # ────────────────────────────────────────────────
    # 아바타 & 상태
    # ────────────────────────────────────────────────

    def _draw_avatar(self, canvas: Image.Image, avatar_img: Image.Image, avatar: AvatarLayout):
        """아바타를 원형으로 잘라 붙입니다. 아바타 자체의 투명도도 유지합니다."""
        size = avatar.size
        avatar_img = avatar_img.convert('RGBA').resize((size, size), Image.LANCZOS)

        mask = ImageChops.multiply(_make_circle_mask(size), avatar_img.getchannel('A'))
        canvas.paste(avatar_img, (avatar.x, avatar.y), mask)

    def _draw_status(self, canvas: Image.Image, status: StatusLayout):
        ov = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
        d = ImageDraw.Draw(ov)
        cx, cy = status.center

        if status.circle:
            r = status.radius
            d.ellipse([(cx - r, cy - r), (cx + r, cy + r)], fill=status.color)
        else:
            # 선 두께의 절반씩 안팎으로 걸치도록 그림
            r = status.radius + status.width / 2
            d.ellipse([(cx - r, cy - r), (cx + r, cy + r)], outline=status.color, width=status.width)

        canvas.paste(Image.alpha_composite(canvas, ov))

    # ────────────────────────────────────────────────
    # 진행 바
    # ────────────────────────────────────────────────

    def _paint_shapes(self, canvas: Image.Image, shapes: Sequence[Shape], paint: Paint):
        if not shapes:
            return
        mask = _shape_mask(canvas.size, shapes)
        ov = Image.new('RGBA', canvas.size, (0, 0, 0, 0))

        if isinstance(paint, SolidPaint):
            source = Image.new('RGBA', canvas.size, paint.color)
        elif isinstance(paint, GradientPaint):
            box = paint.box
            width = max(1, int(round(box.x1 - box.x0)))
            height = max(1, int(round(box.y1 - box.y0)))
            source = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
            source.paste(_make_gradient((width, height), paint.colors, paint.radial), (int(box.x0), int(box.y0)))
        else:
            raise ConfigurationError(f"알 수 없는 채우기: {paint!r}")

        ov.paste(source, (0, 0), mask)
        canvas.paste(Image.alpha_composite(canvas, ov))

    def _draw_progress_bar(self, canvas: Image.Image, bar: BarLayout):
        """트랙을 먼저 그리고 그 위에 채우기를 그립니다."""
        self._paint_shapes(canvas, bar.track_shapes, bar.track_paint)

        if bar.track_outline is not None:
            ov = Image.new('RGBA', canvas.size, (0, 0, 0, 0))
            d = ImageDraw.Draw(ov)
            half = SQUARE_TRACK_OUTLINE / 2
            rect = bar.track_outline
            d.rectangle(
                [(rect.x0 - half, rect.y0 - half), (rect.x1 + half, rect.y1 + half)],
                outline=bar.track_paint.color,
                width=SQUARE_TRACK_OUTLINE,
            )
            canvas.paste(Image.alpha_composite(canvas, ov))

        self._paint_shapes(canvas, bar.fill_shapes, bar.fill_paint)
