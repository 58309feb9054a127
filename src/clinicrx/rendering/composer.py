"""
Prescription composer: loads images and hands them to the renderers.

Each composition loads the prescription image and the header logo
concurrently and waits for both to settle before drawing. A logo that fails
to load is dropped with a warning and the document is laid out as if there
were no logo; a prescription image that fails to load aborts the
composition with ``SourceImageLoadError``.

Compositions are never cancelled. Every call takes a fresh generation number
per prescription so callers can tell whether a finished result has been
superseded by a newer request.
"""

import asyncio
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from PIL import Image

from ..application.ports.services.image_loader import ImageSource
from ..application.services.template_service import TemplateChange, TemplateService
from ..core.structured_logger import get_logger
from ..core.utils.concurrency import run_blocking
from ..domain.entities.prescription import Prescription
from ..domain.entities.template import FooterOverlay, HeaderOverlay
from ..domain.errors import ImageLoadError, LogoLoadError, SourceImageLoadError
from .document import render_document
from .fonts import FontBook
from .layout import CompositionLayout
from .models import PatientInfo
from .naming import download_filename
from .preview import PreviewLayout, render_preview
from .print_html import render_print_document
from .raster import render_flattened_image

logger = logging.getLogger(__name__)
events = get_logger(__name__)

LOGO_CACHE_SIZE = 8


class CompositionGenerations:
    """Monotonic per-key counters identifying the newest composition request."""

    def __init__(self):
        self._current: Dict[str, int] = {}
        self._lock = threading.Lock()

    def next(self, key: str) -> int:
        with self._lock:
            generation = self._current.get(key, 0) + 1
            self._current[key] = generation
            return generation

    def current(self, key: str) -> int:
        with self._lock:
            return self._current.get(key, 0)

    def is_current(self, key: str, generation: int) -> bool:
        return self.current(key) == generation


@dataclass(frozen=True)
class ComposedImage:
    png: bytes
    layout: CompositionLayout
    generation: int
    filename: Optional[str] = None

    @property
    def width(self) -> int:
        return int(self.layout.width)

    @property
    def height(self) -> int:
        return int(self.layout.total_height)


@dataclass(frozen=True)
class ComposedDocument:
    pdf: bytes
    page_count: int
    generation: int
    filename: Optional[str] = None


class PrescriptionComposer:
    """Async facade over the preview, raster, document and print renderers."""

    def __init__(
        self,
        loader: ImageSource,
        fonts: Optional[FontBook] = None,
        print_delay_ms: int = 500,
        generations: Optional[CompositionGenerations] = None,
    ):
        self._loader = loader
        self._fonts = fonts or FontBook()
        self._print_delay_ms = print_delay_ms
        self.generations = generations or CompositionGenerations()
        self._logo_cache: "OrderedDict[str, Image.Image]" = OrderedDict()

    # ------------------------------------------------------------------
    # Template changes
    # ------------------------------------------------------------------

    def attach(self, template_service: TemplateService) -> Callable[[], None]:
        """Follow template changes; returns the unsubscribe function."""
        return template_service.subscribe(self.on_template_change)

    def on_template_change(self, change: TemplateChange) -> None:
        if change.previous_logo and change.previous_logo != change.header.logo:
            self.evict_logo(change.previous_logo)

    def evict_logo(self, reference: str) -> None:
        if self._logo_cache.pop(reference, None) is not None:
            logger.debug("Evicted cached header logo")

    @property
    def cached_logo_count(self) -> int:
        return len(self._logo_cache)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def _load_source(self, reference: str) -> Image.Image:
        try:
            return await self._loader.load(reference)
        except ImageLoadError as e:
            error = SourceImageLoadError(e.reason)
            events.error(
                "Prescription image failed to load",
                error_code=error.error_code,
                reason=e.reason,
                reference=e.details.get("reference"),
            )
            raise error from e

    async def _load_logo(self, reference: Optional[str]) -> Optional[Image.Image]:
        if not reference:
            return None
        cached = self._logo_cache.get(reference)
        if cached is not None:
            self._logo_cache.move_to_end(reference)
            return cached
        try:
            logo = await self._loader.load(reference)
        except ImageLoadError as e:
            error = LogoLoadError(e.reason)
            events.warning(
                f"{error.message}, composing without it",
                error_code=error.error_code,
                reason=e.reason,
                reference=e.details.get("reference"),
            )
            return None
        self._logo_cache[reference] = logo
        while len(self._logo_cache) > LOGO_CACHE_SIZE:
            self._logo_cache.popitem(last=False)
        return logo

    async def _load_images(
        self, image_url: str, header: HeaderOverlay
    ) -> Tuple[Image.Image, Optional[Image.Image]]:
        """Load source and logo together and return once both have settled."""
        source, logo = await asyncio.gather(
            self._load_source(image_url),
            self._load_logo(header.logo),
            return_exceptions=True,
        )
        if isinstance(source, BaseException):
            raise source
        if isinstance(logo, BaseException):
            raise logo
        return source, logo

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    def render_preview(
        self, header: HeaderOverlay, footer: FooterOverlay, has_image: bool = True
    ) -> PreviewLayout:
        return render_preview(header, footer, has_image)

    async def compose_flattened_image(
        self,
        prescription: Prescription,
        header: HeaderOverlay,
        footer: FooterOverlay,
        mr_number: Optional[str] = None,
    ) -> ComposedImage:
        """Single PNG: header, prescription image at natural size, footer."""
        generation = self.generations.next(prescription.prescription_id)
        source, logo = await self._load_images(prescription.image_url, header)
        png, layout = await run_blocking(
            render_flattened_image, source, header, footer, self._fonts, logo
        )
        filename = download_filename(mr_number, prescription.date, "png") if mr_number else None
        return ComposedImage(png=png, layout=layout, generation=generation, filename=filename)

    async def compose_document(
        self,
        prescription: Prescription,
        patient: PatientInfo,
        header: HeaderOverlay,
        footer: FooterOverlay,
    ) -> ComposedDocument:
        """Paginated A4 PDF."""
        generation = self.generations.next(prescription.prescription_id)
        source, logo = await self._load_images(prescription.image_url, header)
        result = await run_blocking(
            render_document,
            source,
            patient,
            prescription.date,
            header,
            footer,
            prescription.notes,
            logo,
        )
        return ComposedDocument(
            pdf=result.pdf,
            page_count=result.page_count,
            generation=generation,
            filename=download_filename(patient.mr_number, prescription.date, "pdf"),
        )

    def render_print_document(
        self,
        prescription: Prescription,
        patient: PatientInfo,
        header: HeaderOverlay,
        footer: FooterOverlay,
    ) -> str:
        return render_print_document(
            image_url=prescription.image_url,
            prescription_date=prescription.date,
            patient=patient,
            header=header,
            footer=footer,
            notes=prescription.notes,
            print_delay_ms=self._print_delay_ms,
        )
