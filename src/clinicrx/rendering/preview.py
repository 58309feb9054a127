"""
On-screen preview: overlays expressed as CSS style maps.

Pure; no image is loaded. The same maps are reused by the print document so
screen and paper agree.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Tuple

from ..domain.entities.template import FooterOverlay, HeaderOverlay
from ..domain.enums.template import Alignment
from .layout import DOM, footer_font_size, header_font_size

JUSTIFY = {
    Alignment.LEFT: "flex-start",
    Alignment.CENTER: "center",
    Alignment.RIGHT: "flex-end",
}

PLAIN = {"font-weight": "normal", "font-style": "normal"}


@dataclass(frozen=True)
class PreviewLine:
    text: str
    style: Dict[str, str]


@dataclass(frozen=True)
class PreviewBlock:
    style: Dict[str, str]
    lines: Tuple[PreviewLine, ...]
    # header only: flex row holding logo and text
    row_style: Optional[Dict[str, str]] = None
    logo: Optional[str] = None


@dataclass(frozen=True)
class PreviewLayout:
    header: PreviewBlock
    # hidden until there is a drawing to frame
    footer: Optional[PreviewBlock]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def emphasis_style(bold: bool, italic: bool, size_px: float, alignment: Alignment) -> Dict[str, str]:
    return {
        "font-weight": "bold" if bold else "normal",
        "font-style": "italic" if italic else "normal",
        "font-size": f"{size_px:g}px",
        "text-align": alignment.value,
    }


def style_string(style: Dict[str, str]) -> str:
    """``{"a": "b"}`` -> ``"a: b;"``."""
    return " ".join(f"{key}: {value};" for key, value in style.items())


def header_block(header: HeaderOverlay) -> PreviewBlock:
    lines = []
    if header.text:
        lines.append(PreviewLine(header.text, {}))
    for secondary in header.secondary_lines:
        lines.append(PreviewLine(secondary, {**PLAIN, "font-size": f"{DOM.header_secondary_size:g}px"}))
    return PreviewBlock(
        style=emphasis_style(
            header.bold, header.italic, header_font_size(DOM, header.font_size), header.alignment
        ),
        lines=tuple(lines),
        row_style={
            "display": "flex",
            "align-items": "center",
            "gap": "15px",
            "justify-content": JUSTIFY[header.alignment],
        },
        logo=header.logo,
    )


def footer_block(footer: FooterOverlay) -> PreviewBlock:
    lines = []
    if footer.text:
        lines.append(PreviewLine(footer.text, {}))
    if footer.additional_info:
        lines.append(
            PreviewLine(
                footer.additional_info,
                {**PLAIN, "font-size": f"{DOM.footer_secondary_size:g}px", "margin-top": "5px"},
            )
        )
    return PreviewBlock(
        style=emphasis_style(
            footer.bold, footer.italic, footer_font_size(DOM, footer.font_size), footer.alignment
        ),
        lines=tuple(lines),
    )


def render_preview(header: HeaderOverlay, footer: FooterOverlay, has_image: bool = True) -> PreviewLayout:
    return PreviewLayout(
        header=header_block(header),
        footer=footer_block(footer) if has_image else None,
    )
