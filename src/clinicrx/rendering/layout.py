"""
Header/footer layout shared by every render target.

One computation produces the geometry; the preview, raster, document and
print renderers only translate it into their own drawing primitives. A
``TargetMetrics`` profile carries the numbers that legitimately differ
between targets (font tiers, spacing, units).

All y values are top-down offsets from the top of the block's surface.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..domain.entities.template import FooterOverlay, HeaderOverlay
from ..domain.enums.template import Alignment, FontSize


@dataclass(frozen=True)
class TargetMetrics:
    """Spacing and font tiers for one render target."""

    name: str
    header_sizes: Dict[FontSize, float]
    footer_sizes: Dict[FontSize, float]
    header_secondary_size: float
    footer_secondary_size: float
    inset: float = 20
    header_baseline: float = 30
    line_step: float = 20
    header_height: float = 60
    logo_header_height: float = 120
    logo_height: float = 40
    logo_top: float = 15
    logo_center_offset: float = 100
    logo_right_offset: float = 140
    logo_gap: float = 15
    rule_offset: float = 10
    footer_text_offset: float = 25
    footer_height: float = 40
    footer_info_height: float = 20


# Canvas pixels; also used for on-screen and print styling
RASTER = TargetMetrics(
    name="raster",
    header_sizes={FontSize.SMALL: 14, FontSize.MEDIUM: 16, FontSize.LARGE: 18},
    footer_sizes={FontSize.SMALL: 12, FontSize.MEDIUM: 14, FontSize.LARGE: 16},
    header_secondary_size=12,
    footer_secondary_size=10,
)

DOM = TargetMetrics(
    name="dom",
    header_sizes=RASTER.header_sizes,
    footer_sizes=RASTER.footer_sizes,
    header_secondary_size=RASTER.header_secondary_size,
    footer_secondary_size=RASTER.footer_secondary_size,
)

# PDF points. Smaller tiers for print density.
DOCUMENT = TargetMetrics(
    name="document",
    header_sizes={FontSize.SMALL: 11, FontSize.MEDIUM: 13, FontSize.LARGE: 15},
    footer_sizes={FontSize.SMALL: 9, FontSize.MEDIUM: 10, FontSize.LARGE: 11},
    header_secondary_size=9,
    footer_secondary_size=8,
    inset=0,
    header_baseline=16,
    line_step=13,
    header_height=40,
    logo_header_height=70,
    logo_height=30,
    logo_top=8,
    logo_center_offset=70,
    logo_right_offset=100,
    logo_gap=10,
    rule_offset=6,
    footer_text_offset=16,
    footer_height=30,
    footer_info_height=12,
)


@dataclass(frozen=True)
class TextLine:
    text: str
    x: float
    baseline: float
    anchor: Alignment
    size: float
    bold: bool = False
    italic: bool = False


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class Rule:
    x1: float
    x2: float
    y: float


@dataclass(frozen=True)
class HeaderBlock:
    height: float
    lines: Tuple[TextLine, ...]
    rule: Rule
    logo: Optional[Box] = None


@dataclass(frozen=True)
class FooterBlock:
    top: float
    height: float
    lines: Tuple[TextLine, ...]
    rule: Rule


@dataclass(frozen=True)
class CompositionLayout:
    """Geometry of a flattened prescription: header, image, footer."""

    width: float
    header: HeaderBlock
    image: Box
    footer: FooterBlock
    total_height: float = 0


def header_font_size(metrics: TargetMetrics, size: FontSize) -> float:
    return metrics.header_sizes[size]


def footer_font_size(metrics: TargetMetrics, size: FontSize) -> float:
    return metrics.footer_sizes[size]


def anchor_x(alignment: Alignment, width: float, metrics: TargetMetrics, x0: float = 0) -> float:
    """Text anchor position for an alignment within ``[x0, x0 + width]``."""
    if alignment == Alignment.CENTER:
        return x0 + width / 2
    if alignment == Alignment.RIGHT:
        return x0 + width - metrics.inset
    return x0 + metrics.inset


def logo_box(
    alignment: Alignment,
    width: float,
    natural_size: Tuple[float, float],
    metrics: TargetMetrics,
    x0: float = 0,
) -> Box:
    """Logo scaled to the fixed logo height, placed per alignment."""
    natural_w, natural_h = natural_size
    height = metrics.logo_height
    logo_w = (natural_w / natural_h) * height if natural_h else height
    if alignment == Alignment.CENTER:
        x = x0 + width / 2 - metrics.logo_center_offset
    elif alignment == Alignment.RIGHT:
        x = x0 + width - metrics.logo_right_offset
    else:
        x = x0 + metrics.inset
    return Box(x=x, y=metrics.logo_top, width=logo_w, height=height)


def header_height(header: HeaderOverlay, metrics: TargetMetrics, has_logo: bool) -> float:
    if has_logo:
        return metrics.logo_header_height
    return metrics.header_height + metrics.line_step * len(header.secondary_lines)


def footer_height(footer: FooterOverlay, metrics: TargetMetrics) -> float:
    extra = metrics.footer_info_height if footer.additional_info else 0
    return metrics.footer_height + extra


def compute_header_block(
    header: HeaderOverlay,
    width: float,
    metrics: TargetMetrics,
    logo_size: Optional[Tuple[float, float]] = None,
    x0: float = 0,
) -> HeaderBlock:
    """Lay out the header.

    ``logo_size`` is the natural size of a successfully loaded logo; pass
    None when there is no logo or it failed to load, which yields exactly
    the no-logo layout.
    """
    has_logo = logo_size is not None
    height = header_height(header, metrics, has_logo)
    logo = logo_box(header.alignment, width, logo_size, metrics, x0) if has_logo else None

    x = anchor_x(header.alignment, width, metrics, x0)
    if logo is not None and header.alignment == Alignment.LEFT:
        # keep left-aligned text clear of the logo
        x = logo.x + logo.width + metrics.logo_gap

    lines = []
    if header.text:
        lines.append(
            TextLine(
                text=header.text,
                x=x,
                baseline=metrics.header_baseline,
                anchor=header.alignment,
                size=header_font_size(metrics, header.font_size),
                bold=header.bold,
                italic=header.italic,
            )
        )
    for index, secondary in enumerate(header.secondary_lines, start=1):
        lines.append(
            TextLine(
                text=secondary,
                x=x,
                baseline=metrics.header_baseline + metrics.line_step * index,
                anchor=header.alignment,
                size=metrics.header_secondary_size,
            )
        )

    rule = Rule(x1=x0 + metrics.inset, x2=x0 + width - metrics.inset, y=height - metrics.rule_offset)
    return HeaderBlock(height=height, lines=tuple(lines), rule=rule, logo=logo)


def compute_footer_block(
    footer: FooterOverlay,
    width: float,
    top: float,
    metrics: TargetMetrics,
    x0: float = 0,
) -> FooterBlock:
    """Lay out the footer starting at ``top``."""
    rule_y = top + metrics.rule_offset
    x = anchor_x(footer.alignment, width, metrics, x0)
    lines = []
    if footer.text:
        lines.append(
            TextLine(
                text=footer.text,
                x=x,
                baseline=rule_y + metrics.footer_text_offset,
                anchor=footer.alignment,
                size=footer_font_size(metrics, footer.font_size),
                bold=footer.bold,
                italic=footer.italic,
            )
        )
    if footer.additional_info:
        lines.append(
            TextLine(
                text=footer.additional_info,
                x=x,
                baseline=rule_y + metrics.footer_text_offset + metrics.line_step,
                anchor=footer.alignment,
                size=metrics.footer_secondary_size,
            )
        )
    return FooterBlock(
        top=top,
        height=footer_height(footer, metrics),
        lines=tuple(lines),
        rule=Rule(x1=x0 + metrics.inset, x2=x0 + width - metrics.inset, y=rule_y),
    )


def compose_layout(
    header: HeaderOverlay,
    footer: FooterOverlay,
    image_size: Tuple[int, int],
    metrics: TargetMetrics = RASTER,
    logo_size: Optional[Tuple[float, float]] = None,
) -> CompositionLayout:
    """Full-page layout for a flattened image: the image keeps its natural size."""
    width, image_h = image_size
    header_block = compute_header_block(header, width, metrics, logo_size)
    image = Box(x=0, y=header_block.height, width=width, height=image_h)
    footer_block = compute_footer_block(footer, width, header_block.height + image_h, metrics)
    return CompositionLayout(
        width=width,
        header=header_block,
        image=image,
        footer=footer_block,
        total_height=header_block.height + image_h + footer_block.height,
    )
