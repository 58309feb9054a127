"""
Flattened PNG output: header, prescription image and footer on one canvas.
"""

import io
from typing import Optional, Tuple

from PIL import Image, ImageDraw

from ..domain.entities.template import FooterOverlay, HeaderOverlay
from ..domain.enums.template import Alignment
from .fonts import FontBook
from .layout import RASTER, CompositionLayout, Rule, TextLine, compose_layout

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
RULE_COLOR = (0xCC, 0xCC, 0xCC)

# Pillow anchors: horizontal position + baseline
ANCHORS = {Alignment.LEFT: "ls", Alignment.CENTER: "ms", Alignment.RIGHT: "rs"}


def _flatten(image: Image.Image) -> Image.Image:
    """RGB copy of ``image`` with any transparency composited onto white."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, WHITE)
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    return image.convert("RGB")


def _draw_text(draw: ImageDraw.ImageDraw, line: TextLine, fonts: FontBook) -> None:
    font, stroke = fonts.get(line.size, line.bold, line.italic)
    draw.text(
        (line.x, line.baseline),
        line.text,
        fill=BLACK,
        font=font,
        anchor=ANCHORS[line.anchor],
        stroke_width=stroke,
        stroke_fill=BLACK,
    )


def _draw_rule(draw: ImageDraw.ImageDraw, rule: Rule) -> None:
    draw.line([(rule.x1, rule.y), (rule.x2, rule.y)], fill=RULE_COLOR, width=1)


def draw_layout(
    layout: CompositionLayout,
    source: Image.Image,
    fonts: FontBook,
    logo: Optional[Image.Image] = None,
) -> Image.Image:
    """Paint a computed layout. Order: header, rule, image, rule, footer."""
    canvas = Image.new("RGB", (int(layout.width), int(layout.total_height)), WHITE)
    draw = ImageDraw.Draw(canvas)

    for line in layout.header.lines:
        _draw_text(draw, line, fonts)
    if logo is not None and layout.header.logo is not None:
        box = layout.header.logo
        resized = logo.convert("RGBA").resize((max(1, round(box.width)), max(1, round(box.height))))
        canvas.paste(resized, (round(box.x), round(box.y)), resized)
    _draw_rule(draw, layout.header.rule)

    canvas.paste(_flatten(source), (int(layout.image.x), int(layout.image.y)))

    _draw_rule(draw, layout.footer.rule)
    for line in layout.footer.lines:
        _draw_text(draw, line, fonts)
    return canvas


def render_flattened_image(
    source: Image.Image,
    header: HeaderOverlay,
    footer: FooterOverlay,
    fonts: FontBook,
    logo: Optional[Image.Image] = None,
) -> Tuple[bytes, CompositionLayout]:
    """Compose and PNG-encode. ``logo`` is None when absent or failed to load."""
    layout = compose_layout(
        header,
        footer,
        source.size,
        RASTER,
        logo_size=logo.size if logo is not None else None,
    )
    canvas = draw_layout(layout, source, fonts, logo)
    buf = io.BytesIO()
    canvas.save(buf, format="PNG")
    return buf.getvalue(), layout
