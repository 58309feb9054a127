"""
Key-value store holding serialized template overlays.
"""

from abc import ABC, abstractmethod
from typing import Optional


class TemplateStore(ABC):
    """String slots keyed by name. Writes are last-write-wins."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value or None."""
        pass

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass
