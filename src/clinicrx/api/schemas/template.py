"""
Pydantic schemas for the header/footer template endpoints.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...core.config import get_settings
from ...domain.entities.template import FooterOverlay, HeaderOverlay
from ...domain.enums.template import Alignment, FontSize
from ...domain.value_objects.image_reference import reference_problem


class HeaderSchema(BaseModel):
    text: str
    address: str = ""
    contact: str = ""
    bold: bool = False
    italic: bool = False
    font_size: FontSize = FontSize.MEDIUM
    alignment: Alignment = Alignment.CENTER
    has_logo: bool = False
    logo: Optional[str] = None

    @classmethod
    def from_overlay(cls, header: HeaderOverlay, include_logo: bool = True) -> "HeaderSchema":
        return cls(
            text=header.text,
            address=header.address,
            contact=header.contact,
            bold=header.bold,
            italic=header.italic,
            font_size=header.font_size,
            alignment=header.alignment,
            has_logo=header.logo is not None,
            logo=header.logo if include_logo else None,
        )


class FooterSchema(BaseModel):
    text: str
    additional_info: str = ""
    bold: bool = False
    italic: bool = False
    font_size: FontSize = FontSize.SMALL
    alignment: Alignment = Alignment.CENTER

    @classmethod
    def from_overlay(cls, footer: FooterOverlay) -> "FooterSchema":
        return cls(
            text=footer.text,
            additional_info=footer.additional_info,
            bold=footer.bold,
            italic=footer.italic,
            font_size=footer.font_size,
            alignment=footer.alignment,
        )


class UpdateHeaderRequest(BaseModel):
    """Partial header update; omitted fields keep their stored value."""

    text: Optional[str] = Field(None, max_length=200)
    address: Optional[str] = Field(None, max_length=300)
    contact: Optional[str] = Field(None, max_length=200)
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    font_size: Optional[str] = Field(None, description="small, medium or large")
    alignment: Optional[str] = Field(None, description="left, center or right")


class UpdateFooterRequest(BaseModel):
    text: Optional[str] = Field(None, max_length=300)
    additional_info: Optional[str] = Field(None, max_length=300)
    bold: Optional[bool] = None
    italic: Optional[bool] = None
    font_size: Optional[str] = None
    alignment: Optional[str] = None


class LogoReferenceRequest(BaseModel):
    logo: Optional[str] = Field(
        None, description="data URL, or http(s) URL on an allowed image host; null clears it"
    )

    @field_validator("logo")
    @classmethod
    def validate_logo(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        problem = reference_problem(v, get_settings().render.image_hosts())
        if problem:
            raise ValueError(problem)
        return v
