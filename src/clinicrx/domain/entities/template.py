"""
Header/footer template overlays.

Overlays are plain values: every mutation returns a new overlay so a render
in progress never observes a half-applied change. Emphasis is stored as two
independent flags; older stored records that used a single ``fontStyle``
token (``normal``/``bold``/``italic``) are read into that representation.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterable, Optional, TypeVar, Union

from ..enums.template import Alignment, FontSize
from ..errors import InvalidTemplateValueError, InvalidUpload

DEFAULT_LOGO_MAX_BYTES = 2 * 1024 * 1024
DEFAULT_LOGO_TYPES = ("image/jpeg", "image/png", "image/svg+xml")


@dataclass(frozen=True)
class HeaderOverlay:
    """Header block: clinic name, address/contact lines and an optional logo."""

    text: str
    address: str = ""
    contact: str = ""
    bold: bool = False
    italic: bool = False
    font_size: FontSize = FontSize.MEDIUM
    alignment: Alignment = Alignment.CENTER
    # data: URL or fetchable URL
    logo: Optional[str] = None

    @property
    def secondary_lines(self) -> list:
        return [line for line in (self.address, self.contact) if line]


@dataclass(frozen=True)
class FooterOverlay:
    """Footer block: closing text plus an optional smaller info line."""

    text: str
    additional_info: str = ""
    bold: bool = False
    italic: bool = False
    font_size: FontSize = FontSize.SMALL
    alignment: Alignment = Alignment.CENTER

    @property
    def secondary_lines(self) -> list:
        return [self.additional_info] if self.additional_info else []


Overlay = TypeVar("Overlay", HeaderOverlay, FooterOverlay)


def default_header(clinic_name: str = "Clinic") -> HeaderOverlay:
    return HeaderOverlay(
        text=clinic_name,
        address="123 Medical Plaza, Suite 101",
        contact="Phone: (555) 123-4567",
        font_size=FontSize.MEDIUM,
        alignment=Alignment.CENTER,
    )


def default_footer(clinic_name: str = "Clinic") -> FooterOverlay:
    return FooterOverlay(
        text=f"Thank you for visiting {clinic_name}",
        additional_info=f"© {clinic_name}. All rights reserved.",
        font_size=FontSize.SMALL,
        alignment=Alignment.CENTER,
    )


def toggle_bold(overlay: Overlay) -> Overlay:
    """Flip bold, keeping italic as it is."""
    return replace(overlay, bold=not overlay.bold)


def toggle_italic(overlay: Overlay) -> Overlay:
    """Flip italic, keeping bold as it is."""
    return replace(overlay, italic=not overlay.italic)


def _coerce(enum_cls, field: str, value: Union[str, Any]):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        raise InvalidTemplateValueError(field, value, [m.value for m in enum_cls])


def set_alignment(overlay: Overlay, value: Union[Alignment, str]) -> Overlay:
    return replace(overlay, alignment=_coerce(Alignment, "alignment", value))


def set_font_size(overlay: Overlay, value: Union[FontSize, str]) -> Overlay:
    return replace(overlay, font_size=_coerce(FontSize, "font_size", value))


def set_logo(header: HeaderOverlay, logo: Optional[str]) -> HeaderOverlay:
    """Store or clear the header logo. Empty strings clear it."""
    return replace(header, logo=logo or None)


def _megabytes(size: int) -> str:
    return f"{size / (1024 * 1024):g}"


def validate_logo_upload(
    content_type: Optional[str],
    size: int,
    max_bytes: int = DEFAULT_LOGO_MAX_BYTES,
    allowed_types: Iterable[str] = DEFAULT_LOGO_TYPES,
) -> None:
    """Reject a logo file before anything tries to decode it.

    Raises:
        InvalidUpload: with ``constraint`` set to ``"size"`` or ``"type"``.
    """
    if size > max_bytes:
        raise InvalidUpload(
            "size",
            f"Logo file exceeds {_megabytes(max_bytes)}MB.",
            {"max_bytes": max_bytes},
        )
    allowed = list(allowed_types)
    if (content_type or "").lower() not in allowed:
        raise InvalidUpload(
            "type",
            f"Unsupported logo type {content_type!r}. Allowed: {', '.join(allowed)}",
            {"content_type": content_type, "allowed": allowed},
        )


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _emphasis_from_record(record: Dict[str, Any]) -> Dict[str, bool]:
    if "bold" in record or "italic" in record:
        return {"bold": bool(record.get("bold")), "italic": bool(record.get("italic"))}
    token = str(record.get("fontStyle") or "normal").lower()
    return {"bold": "bold" in token, "italic": "italic" in token}


def _size_from_record(record: Dict[str, Any], default: FontSize) -> FontSize:
    value = record.get("font_size", record.get("fontSize"))
    if value is None:
        return default
    return _coerce(FontSize, "font_size", value)


def _alignment_from_record(record: Dict[str, Any]) -> Alignment:
    value = record.get("alignment")
    if value is None:
        return Alignment.CENTER
    return _coerce(Alignment, "alignment", value)


def header_to_dict(header: HeaderOverlay) -> Dict[str, Any]:
    data = asdict(header)
    data["font_size"] = header.font_size.value
    data["alignment"] = header.alignment.value
    return data


def footer_to_dict(footer: FooterOverlay) -> Dict[str, Any]:
    data = asdict(footer)
    data["font_size"] = footer.font_size.value
    data["alignment"] = footer.alignment.value
    return data


def header_from_dict(record: Dict[str, Any]) -> HeaderOverlay:
    return HeaderOverlay(
        text=str(record.get("text") or ""),
        address=str(record.get("address") or ""),
        contact=str(record.get("contact") or ""),
        font_size=_size_from_record(record, FontSize.MEDIUM),
        alignment=_alignment_from_record(record),
        logo=record.get("logo") or None,
        **_emphasis_from_record(record),
    )


def footer_from_dict(record: Dict[str, Any]) -> FooterOverlay:
    return FooterOverlay(
        text=str(record.get("text") or ""),
        additional_info=str(record.get("additional_info", record.get("additionalInfo")) or ""),
        font_size=_size_from_record(record, FontSize.SMALL),
        alignment=_alignment_from_record(record),
        **_emphasis_from_record(record),
    )
