"""
Composition engine: preview styles, flattened PNG, PDF and print HTML.
"""

from .composer import (
    ComposedDocument,
    ComposedImage,
    CompositionGenerations,
    PrescriptionComposer,
)
from .fonts import FontBook
from .images import ImageLoader
from .models import PatientInfo
from .naming import download_filename

__all__ = [
    "ComposedDocument",
    "ComposedImage",
    "CompositionGenerations",
    "FontBook",
    "ImageLoader",
    "PatientInfo",
    "PrescriptionComposer",
    "download_filename",
]
