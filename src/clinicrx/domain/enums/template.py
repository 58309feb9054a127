"""
Header/footer template enums.
"""

from enum import Enum


class Alignment(str, Enum):
    """Horizontal placement of header/footer text (and the header logo)."""
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class FontSize(str, Enum):
    """Size tier; each render target maps it to concrete sizes."""
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
