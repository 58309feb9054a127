"""
Template service: loads, saves and broadcasts header/footer overlays.

Overlays live in two string slots of a ``TemplateStore``. Anything that
renders prescriptions can ``subscribe`` to be told when either overlay
changes instead of re-reading the store on a timer.
"""

import base64
import json
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from ...core.config import TemplateSettings, UploadSettings
from ...domain.entities.template import (
    FooterOverlay,
    HeaderOverlay,
    default_footer,
    default_header,
    footer_from_dict,
    footer_to_dict,
    header_from_dict,
    header_to_dict,
    set_alignment,
    set_font_size,
    set_logo,
    toggle_bold,
    toggle_italic,
    validate_logo_upload,
)
from ...domain.enums.template import Alignment, FontSize
from ...domain.errors import InvalidTemplateValueError
from ..ports.services.template_store import TemplateStore

logger = logging.getLogger("clinicrx")

HEADER = "header"
FOOTER = "footer"
LOGO = "logo"


@dataclass(frozen=True)
class TemplateChange:
    """Notification sent to subscribers after an overlay was saved."""

    kind: str
    header: HeaderOverlay
    footer: FooterOverlay
    previous_logo: Optional[str] = None


Listener = Callable[[TemplateChange], None]


class TemplateService:
    """Reads and writes overlays, with last-write-wins semantics."""

    def __init__(
        self,
        store: TemplateStore,
        template_settings: Optional[TemplateSettings] = None,
        upload_settings: Optional[UploadSettings] = None,
    ):
        self._store = store
        self._settings = template_settings or TemplateSettings()
        self._upload = upload_settings or UploadSettings()
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, change: TemplateChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception(f"Template listener failed for {change.kind} change")

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _read_record(self, key: str) -> Optional[dict]:
        raw = self._store.get(key)
        if not raw:
            return None
        try:
            record = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning(f"Stored template under '{key}' is not valid JSON, using defaults")
            return None
        return record if isinstance(record, dict) else None

    def get_header(self) -> HeaderOverlay:
        record = self._read_record(self._settings.header_key)
        if record is None:
            return default_header(self._settings.default_clinic_name)
        try:
            return header_from_dict(record)
        except InvalidTemplateValueError as e:
            logger.warning(f"Stored header has invalid values ({e.message}), using defaults")
            return default_header(self._settings.default_clinic_name)

    def get_footer(self) -> FooterOverlay:
        record = self._read_record(self._settings.footer_key)
        if record is None:
            return default_footer(self._settings.default_clinic_name)
        try:
            return footer_from_dict(record)
        except InvalidTemplateValueError as e:
            logger.warning(f"Stored footer has invalid values ({e.message}), using defaults")
            return default_footer(self._settings.default_clinic_name)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def save_header(self, header: HeaderOverlay, kind: str = HEADER) -> HeaderOverlay:
        previous_logo = self.get_header().logo
        self._store.put(self._settings.header_key, json.dumps(header_to_dict(header)))
        self._notify(TemplateChange(kind, header, self.get_footer(), previous_logo))
        return header

    def save_footer(self, footer: FooterOverlay) -> FooterOverlay:
        self._store.put(self._settings.footer_key, json.dumps(footer_to_dict(footer)))
        header = self.get_header()
        self._notify(TemplateChange(FOOTER, header, footer, header.logo))
        return footer

    def update_header(
        self,
        text: Optional[str] = None,
        address: Optional[str] = None,
        contact: Optional[str] = None,
        bold: Optional[bool] = None,
        italic: Optional[bool] = None,
        font_size: Union[FontSize, str, None] = None,
        alignment: Union[Alignment, str, None] = None,
    ) -> HeaderOverlay:
        """Apply the given fields to the stored header. The logo is left alone."""
        current = self.get_header()
        header = HeaderOverlay(
            text=current.text if text is None else text,
            address=current.address if address is None else address,
            contact=current.contact if contact is None else contact,
            bold=current.bold if bold is None else bold,
            italic=current.italic if italic is None else italic,
            font_size=current.font_size,
            alignment=current.alignment,
            logo=current.logo,
        )
        if font_size is not None:
            header = set_font_size(header, font_size)
        if alignment is not None:
            header = set_alignment(header, alignment)
        return self.save_header(header)

    def update_footer(
        self,
        text: Optional[str] = None,
        additional_info: Optional[str] = None,
        bold: Optional[bool] = None,
        italic: Optional[bool] = None,
        font_size: Union[FontSize, str, None] = None,
        alignment: Union[Alignment, str, None] = None,
    ) -> FooterOverlay:
        current = self.get_footer()
        footer = FooterOverlay(
            text=current.text if text is None else text,
            additional_info=current.additional_info if additional_info is None else additional_info,
            bold=current.bold if bold is None else bold,
            italic=current.italic if italic is None else italic,
            font_size=current.font_size,
            alignment=current.alignment,
        )
        if font_size is not None:
            footer = set_font_size(footer, font_size)
        if alignment is not None:
            footer = set_alignment(footer, alignment)
        return self.save_footer(footer)

    def toggle_bold(self, kind: str) -> Union[HeaderOverlay, FooterOverlay]:
        if kind == HEADER:
            return self.save_header(toggle_bold(self.get_header()))
        return self.save_footer(toggle_bold(self.get_footer()))

    def toggle_italic(self, kind: str) -> Union[HeaderOverlay, FooterOverlay]:
        if kind == HEADER:
            return self.save_header(toggle_italic(self.get_header()))
        return self.save_footer(toggle_italic(self.get_footer()))

    # ------------------------------------------------------------------
    # Logo
    # ------------------------------------------------------------------

    def upload_logo(self, content: bytes, content_type: Optional[str]) -> HeaderOverlay:
        """Validate an uploaded logo and store it inline as a data URL.

        Raises:
            InvalidUpload: when the file is too large or of an unsupported type.
        """
        validate_logo_upload(
            content_type,
            len(content),
            max_bytes=self._upload.logo_max_bytes,
            allowed_types=self._upload.logo_allowed_types,
        )
        encoded = base64.b64encode(content).decode("ascii")
        data_url = f"data:{content_type};base64,{encoded}"
        logger.info(f"Header logo updated ({content_type}, {len(content)} bytes)")
        return self.save_header(set_logo(self.get_header(), data_url), kind=LOGO)

    def set_logo_reference(self, logo: Optional[str]) -> HeaderOverlay:
        """Point the header at an already uploaded logo, or clear it with None."""
        return self.save_header(set_logo(self.get_header(), logo), kind=LOGO)

    def clear_logo(self) -> HeaderOverlay:
        return self.set_logo_reference(None)
