"""
Image loading capability used by the composition engine.
"""

from abc import ABC, abstractmethod

from PIL import Image


class ImageSource(ABC):
    """Resolves an image reference (data URL or allow-listed http(s) URL) to a decoded image."""

    @abstractmethod
    async def load(self, reference: str) -> Image.Image:
        """Load and fully decode ``reference``.

        Raises:
            ImageLoadError: if the reference is not allowed, or cannot be fetched or decoded.
        """
        pass
