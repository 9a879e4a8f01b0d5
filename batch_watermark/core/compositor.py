# -*- coding: utf-8 -*-
"""水印合成器：把文本水印烧录到位图右下角。

绘制顺序（自下而上）：原图 -> 模糊阴影 -> 半透明黑色描边 -> 白色填充。
每一层单独绘制在透明图层上，再依次 alpha 合成。
"""
from __future__ import annotations
import logging
from typing import Dict, Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .models import RGBA, WatermarkStyle

logger = logging.getLogger(__name__)

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]

FONT_CANDIDATES = [
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/Library/Fonts/Arial.ttf",
    "/System/Library/Fonts/Supplemental/Arial.ttf",
    "C:/Windows/Fonts/arial.ttf",
]

_font_cache: Dict[Tuple[Optional[str], int], Font] = {}


def get_font(size: int, font_path: Optional[str] = None) -> Font:
    size = max(1, int(size))
    key = (font_path, size)
    if key in _font_cache:
        return _font_cache[key]
    font: Optional[Font] = None
    for p in ([font_path] if font_path else []) + FONT_CANDIDATES + ["DejaVuSans.ttf", "arial.ttf"]:
        try:
            font = ImageFont.truetype(p, size)
            break
        except OSError:
            continue
    if font is None:
        logger.debug("未找到 TrueType 字体，使用 Pillow 内置字体 (size=%d)", size)
        font = ImageFont.load_default(size=size)
    _font_cache[key] = font
    return font


def anchor_point(width: int, height: int, style: WatermarkStyle) -> Tuple[float, float]:
    """文本右下角所在坐标。"""
    margin = style.margin_px
    return width - margin, height - margin


def _draw_text(
    size: Tuple[int, int],
    xy: Tuple[float, float],
    text: str,
    font: Font,
    fill: RGBA,
    stroke_width: int = 0,
) -> Image.Image:
    """在透明图层上绘制一次文本，xy 为文本右下角。"""
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    d = ImageDraw.Draw(layer)
    if isinstance(font, ImageFont.FreeTypeFont):
        d.text(xy, text, font=font, fill=fill, anchor="rd",
               stroke_width=stroke_width, stroke_fill=fill)
        return layer
    # 位图字体不支持 anchor/stroke：手动换算左上角，描边用八方向偏移
    left, top, right, bottom = d.textbbox((0, 0), text, font=font)
    x, y = xy[0] - right, xy[1] - bottom
    offsets = [(0, 0)]
    if stroke_width:
        offsets += [(ox, oy)
                    for ox in range(-stroke_width, stroke_width + 1)
                    for oy in range(-stroke_width, stroke_width + 1)
                    if ox or oy]
    for ox, oy in offsets:
        d.text((x + ox, y + oy), text, font=font, fill=fill)
    return layer


def composite(bitmap: Image.Image, style: WatermarkStyle) -> Image.Image:
    """在 bitmap 上绘制文本水印，返回新图。

    参数：
    - bitmap: 任意模式的位图，宽高均大于 0；不会被修改
    - style: 水印样式；空白文本替换为默认值，字号至少为 1

    返回的图像与输入尺寸一致，是独立的新对象（RGBA）。
    """
    style = style.normalized()
    size = bitmap.size
    out = Image.new("RGBA", size, (0, 0, 0, 0))
    out.paste(bitmap if bitmap.mode == "RGBA" else bitmap.convert("RGBA"), (0, 0))

    font = get_font(style.font_size_px, style.font_path)
    x, y = anchor_point(size[0], size[1], style)

    if style.shadow is not None:
        sh = style.shadow
        shadow = _draw_text(size, (x + sh.offset_x, y + sh.offset_y), style.text, font,
                            sh.color, stroke_width=_stroke_px(style.stroke_width_px))
        if sh.blur_radius > 0:
            # canvas 的 shadowBlur 约等于两倍高斯 sigma
            shadow = shadow.filter(ImageFilter.GaussianBlur(sh.blur_radius / 2.0))
        out = Image.alpha_composite(out, shadow)

    if style.stroke_width_px > 0:
        stroke = _draw_text(size, (x, y), style.text, font, style.stroke_color,
                            stroke_width=_stroke_px(style.stroke_width_px))
        out = Image.alpha_composite(out, stroke)

    fill = _draw_text(size, (x, y), style.text, font, style.fill_color)
    return Image.alpha_composite(out, fill)


def _stroke_px(line_width: int) -> int:
    # 线宽沿轮廓居中，向外扩张一半
    return max(0, (int(line_width) + 1) // 2)
