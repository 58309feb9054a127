"""
Image loading for composition: data URLs and allow-listed http(s) URLs.

SVG is rasterized with cairosvg at its intrinsic size so logos render the
same way in the preview, the flattened image and the document.
"""

import asyncio
import base64
import binascii
import io
import logging
from typing import Iterable, Tuple
from urllib.parse import unquote_to_bytes

import aiohttp
from PIL import Image, UnidentifiedImageError

from ..application.ports.services.image_loader import ImageSource
from ..core.utils.concurrency import run_blocking
from ..domain.errors import ImageLoadError
from ..domain.value_objects.image_reference import reference_problem

logger = logging.getLogger(__name__)

SVG_TYPE = "image/svg+xml"


def parse_data_url(reference: str) -> Tuple[str, bytes]:
    """Split ``data:<mime>[;base64],<payload>`` into (mime, bytes)."""
    try:
        meta, payload = reference[len("data:"):].split(",", 1)
    except ValueError:
        raise ImageLoadError(reference, "malformed data URL")
    parts = meta.split(";")
    mime = (parts[0] or "text/plain").lower()
    if "base64" in parts[1:]:
        try:
            return mime, base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as e:
            raise ImageLoadError(reference, f"invalid base64 payload: {e}")
    return mime, unquote_to_bytes(payload)


def _refuse_fetch(url, resource_type=None):
    raise ValueError(f"external SVG resource {url} is not loaded")


def rasterize_svg(reference: str, data: bytes) -> bytes:
    """PNG bytes for an SVG document. External resources it references are refused."""
    import cairosvg

    try:
        png = cairosvg.svg2png(bytestring=data, url_fetcher=_refuse_fetch)
    except (ValueError, SyntaxError, OSError) as e:
        raise ImageLoadError(reference, f"SVG could not be rasterized ({e})")
    if not png:
        raise ImageLoadError(reference, "SVG rendered to an empty image")
    return png


def decode_image(reference: str, data: bytes, mime: str = "") -> Image.Image:
    """Fully decode ``data`` so later drawing never touches the source bytes."""
    if mime == SVG_TYPE:
        data = rasterize_svg(reference, data)
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError(reference, f"not a decodable image ({e})")
    return image


class ImageLoader(ImageSource):
    """Resolves the image references a prescription or header may carry."""

    def __init__(self, timeout_seconds: float = 15.0, allowed_hosts: Iterable[str] = ()):
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._allowed_hosts = tuple(allowed_hosts)

    async def _fetch(self, reference: str) -> Tuple[str, bytes]:
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                # a redirect could leave the allow-list
                async with session.get(reference, allow_redirects=False) as response:
                    if response.status != 200:
                        raise ImageLoadError(reference, f"HTTP {response.status}")
                    return (response.content_type or "").lower(), await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise ImageLoadError(reference, f"{type(e).__name__}: {e}")

    async def load(self, reference: str) -> Image.Image:
        problem = reference_problem(reference, self._allowed_hosts)
        if problem:
            raise ImageLoadError(reference or "", problem)
        if reference.startswith("data:"):
            mime, data = parse_data_url(reference)
        else:
            mime, data = await self._fetch(reference)

        image = await run_blocking(decode_image, reference, data, mime)
        logger.debug(f"Loaded image {image.size[0]}x{image.size[1]} ({image.mode})")
        return image
