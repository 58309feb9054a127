"""
Font resolution for raster output.

Configured TrueType files are used when readable. Otherwise Pillow's
built-in scalable font stands in; it has no bold or italic face, so bold is
approximated with a one-pixel stroke and italic falls back to upright.
"""

import logging
from typing import Dict, Optional, Tuple

from PIL import ImageFont

logger = logging.getLogger(__name__)


def style_name(bold: bool, italic: bool) -> str:
    if bold and italic:
        return "bold_italic"
    if bold:
        return "bold"
    if italic:
        return "italic"
    return "regular"


class FontBook:
    """Caches fonts by (size, style)."""

    def __init__(self, paths: Optional[Dict[str, Optional[str]]] = None):
        self._paths = paths or {}
        self._cache: Dict[Tuple[int, str], Tuple[ImageFont.FreeTypeFont, bool]] = {}

    def _load(self, size: int, style: str) -> Tuple[ImageFont.FreeTypeFont, bool]:
        path = self._paths.get(style)
        if path:
            try:
                return ImageFont.truetype(path, size), False
            except OSError:
                logger.warning(f"Font file {path} for {style} text could not be loaded")
        regular = self._paths.get("regular")
        if regular and style != "regular":
            try:
                return ImageFont.truetype(regular, size), style in ("bold", "bold_italic")
            except OSError:
                pass
        return ImageFont.load_default(size=size), style in ("bold", "bold_italic")

    def get(self, size: float, bold: bool = False, italic: bool = False) -> Tuple[ImageFont.FreeTypeFont, int]:
        """Return the font and the stroke width needed to fake bold (0 when not needed)."""
        key = (int(round(size)), style_name(bold, italic))
        if key not in self._cache:
            self._cache[key] = self._load(*key)
        font, synthetic_bold = self._cache[key]
        return font, 1 if synthetic_bold else 0
