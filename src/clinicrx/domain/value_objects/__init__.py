"""
Value objects package for domain layer.
"""

from .image_reference import reference_problem
from .mr_number import MRNumber

__all__ = [
    "MRNumber",
    "reference_problem",
]
