"""
API request/response schemas.
"""

from .common import ApiResponse, ErrorResponse

__all__ = ["ApiResponse", "ErrorResponse"]
