"""
Storage adapters.
"""

from .local_template_store import LocalTemplateStore

__all__ = ["LocalTemplateStore"]
