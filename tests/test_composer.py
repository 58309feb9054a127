"""
Composition engine: concurrent image loading, failure isolation and outputs.
"""

import base64
import io
import json
import logging
from datetime import date

import pytest
from PIL import Image
from reportlab.pdfbase import pdfmetrics

from clinicrx.domain.entities.prescription import Prescription
from clinicrx.domain.entities.template import FooterOverlay, HeaderOverlay
from clinicrx.domain.enums.template import Alignment, FontSize
from clinicrx.domain.errors import SourceImageLoadError
from clinicrx.rendering.composer import CompositionGenerations, PrescriptionComposer
from clinicrx.rendering.document import BODY_FONT, BODY_SIZE, CONTENT_W, _wrap
from clinicrx.rendering.images import ImageLoader
from clinicrx.rendering.models import PatientInfo

from conftest import BROKEN_IMAGE, LOGO_SVG, png_bytes, png_data_url

HEADER = HeaderOverlay(text="Clinic A", alignment=Alignment.CENTER, font_size=FontSize.MEDIUM)
FOOTER = FooterOverlay(text="Thank you", additional_info="", alignment=Alignment.CENTER, font_size=FontSize.SMALL)
PATIENT = PatientInfo(first_name="Ada", last_name="Lovelace", mr_number="MR-42", gender="Female", date_of_birth=date(1990, 1, 2))


def make_prescription(image_url=None, notes=None) -> Prescription:
    return Prescription(
        patient_id="p1",
        doctor_id="d1",
        image_url=image_url or png_data_url(),
        date=date(2024, 3, 5),
        notes=notes,
    )


def decoded_size(png: bytes):
    return Image.open(io.BytesIO(png)).size


@pytest.fixture
def logo_url():
    return png_data_url((80, 40), (200, 30, 30))


@pytest.mark.asyncio
async def test_flattened_image_dimensions(composer):
    result = await composer.compose_flattened_image(make_prescription(), HEADER, FOOTER, mr_number="MR-42")
    assert decoded_size(result.png) == (600, 900)
    assert (result.width, result.height) == (600, 900)
    assert result.filename == "prescription-MR-42-3-5-2024.png"


@pytest.mark.asyncio
async def test_loaded_logo_makes_header_taller(composer, logo_url):
    plain = await composer.compose_flattened_image(make_prescription(), HEADER, FOOTER)
    with_logo = await composer.compose_flattened_image(
        make_prescription(), HeaderOverlay(text="Clinic A", logo=logo_url), FOOTER
    )
    assert with_logo.layout.header.height > plain.layout.header.height
    assert with_logo.layout.header.logo is not None
    assert with_logo.height == plain.height + 60


@pytest.mark.asyncio
async def test_broken_logo_degrades_to_no_logo_layout(composer):
    plain = await composer.compose_flattened_image(make_prescription(), HEADER, FOOTER)
    degraded = await composer.compose_flattened_image(
        make_prescription(), HeaderOverlay(text="Clinic A", logo=BROKEN_IMAGE), FOOTER
    )
    assert degraded.layout.header.height == plain.layout.header.height
    assert degraded.layout.header.logo is None
    assert degraded.layout.header.rule == plain.layout.header.rule
    assert decoded_size(degraded.png) == (600, 900)


@pytest.mark.asyncio
async def test_svg_logo_is_rasterized_like_other_logos(composer, logo_url):
    svg = "data:image/svg+xml;base64," + base64.b64encode(LOGO_SVG.encode()).decode("ascii")
    with_png = await composer.compose_flattened_image(
        make_prescription(), HeaderOverlay(text="A", logo=logo_url), FOOTER
    )
    with_svg = await composer.compose_flattened_image(make_prescription(), HeaderOverlay(text="A", logo=svg), FOOTER)
    assert with_svg.layout.header.logo is not None
    assert with_svg.height == with_png.height

    document = await composer.compose_document(
        make_prescription(), PATIENT, HeaderOverlay(text="A", logo=svg), FOOTER
    )
    assert document.page_count == 1


@pytest.mark.asyncio
async def test_broken_source_is_fatal(composer):
    with pytest.raises(SourceImageLoadError):
        await composer.compose_flattened_image(make_prescription(BROKEN_IMAGE), HEADER, FOOTER)


@pytest.mark.asyncio
async def test_broken_source_is_fatal_for_documents(composer):
    with pytest.raises(SourceImageLoadError):
        await composer.compose_document(make_prescription(BROKEN_IMAGE), PATIENT, HEADER, FOOTER)


def composer_events(caplog):
    return [json.loads(r.getMessage()) for r in caplog.records if r.name == "clinicrx.rendering.composer"]


@pytest.mark.asyncio
async def test_logo_and_source_failures_are_logged_as_structured_events(composer, caplog):
    caplog.set_level(logging.INFO, logger="clinicrx.rendering.composer")
    await composer.compose_flattened_image(
        make_prescription(), HeaderOverlay(text="Clinic A", logo=BROKEN_IMAGE), FOOTER
    )
    with pytest.raises(SourceImageLoadError):
        await composer.compose_flattened_image(make_prescription(BROKEN_IMAGE), HEADER, FOOTER)

    logo_event, source_event = composer_events(caplog)
    assert logo_event["error_code"] == "LOGO_LOAD_FAILED"
    assert "not a decodable image" in logo_event["reason"]
    assert source_event["error_code"] == "SOURCE_IMAGE_LOAD_FAILED"
    assert source_event["message"] == "Prescription image failed to load"
    levels = [r.levelname for r in caplog.records if r.name == "clinicrx.rendering.composer"]
    assert levels == ["WARNING", "ERROR"]


@pytest.mark.asyncio
async def test_right_aligned_text_positions(composer):
    header = HeaderOverlay(text="Clinic A", alignment=Alignment.RIGHT)
    footer = FooterOverlay(text="Thank you", alignment=Alignment.RIGHT)
    result = await composer.compose_flattened_image(make_prescription(), header, footer)
    for line in result.layout.header.lines + result.layout.footer.lines:
        assert line.x == 580
        assert line.anchor == Alignment.RIGHT


@pytest.mark.asyncio
async def test_generations_mark_superseded_results(composer):
    prescription = make_prescription()
    first = await composer.compose_flattened_image(prescription, HEADER, FOOTER)
    second = await composer.compose_flattened_image(prescription, HEADER, FOOTER)
    assert second.generation == first.generation + 1
    assert not composer.generations.is_current(prescription.prescription_id, first.generation)
    assert composer.generations.is_current(prescription.prescription_id, second.generation)


def test_generations_are_per_key():
    generations = CompositionGenerations()
    assert generations.next("a") == 1
    assert generations.next("b") == 1
    assert generations.next("a") == 2
    assert generations.current("b") == 1


@pytest.mark.asyncio
async def test_document_fits_one_page_without_notes(composer):
    result = await composer.compose_document(make_prescription(), PATIENT, HEADER, FOOTER)
    assert result.pdf.startswith(b"%PDF")
    assert result.page_count == 1
    assert result.filename == "prescription-MR-42-3-5-2024.pdf"


@pytest.mark.asyncio
async def test_long_notes_paginate(composer):
    notes = " ".join(["Take one tablet twice daily after meals."] * 400)
    result = await composer.compose_document(make_prescription(notes=notes), PATIENT, HEADER, FOOTER)
    assert result.page_count >= 3


def test_words_wider_than_the_page_are_broken():
    url = "https://example.com/" + "a" * 300
    lines = _wrap(f"See {url} today", BODY_FONT, BODY_SIZE, CONTENT_W)
    assert len(lines) >= 3
    assert lines[0] == "See"
    assert all(pdfmetrics.stringWidth(line, BODY_FONT, BODY_SIZE) <= CONTENT_W for line in lines)
    assert "".join(lines).replace(" ", "") == f"See{url}today"


@pytest.mark.asyncio
async def test_footer_moves_to_new_page_when_clearance_is_short(composer):
    # the image fills the page down to the footer clearance; a note pushes past it
    result = await composer.compose_document(make_prescription(notes="Rest."), PATIENT, HEADER, FOOTER)
    assert result.page_count == 2


@pytest.mark.asyncio
async def test_short_image_keeps_notes_and_footer_on_one_page(composer):
    wide = png_data_url((600, 200))
    result = await composer.compose_document(make_prescription(wide, notes="Rest for two days."), PATIENT, HEADER, FOOTER)
    assert result.page_count == 1


@pytest.mark.asyncio
async def test_logo_cache_evicted_when_logo_changes(template_service, composer):
    template_service.upload_logo(png_bytes((60, 30)), "image/png")
    header = template_service.get_header()
    await composer.compose_flattened_image(make_prescription(), header, FOOTER)
    assert composer.cached_logo_count == 1

    template_service.clear_logo()
    assert composer.cached_logo_count == 0


@pytest.mark.asyncio
async def test_footer_only_changes_keep_logo_cached(template_service, composer):
    template_service.upload_logo(png_bytes((60, 30)), "image/png")
    await composer.compose_flattened_image(make_prescription(), template_service.get_header(), FOOTER)
    template_service.update_footer(text="See you soon")
    assert composer.cached_logo_count == 1


def test_preview_hides_footer_until_there_is_an_image():
    composer = PrescriptionComposer(ImageLoader())
    header = HeaderOverlay(text="Clinic A", bold=True, alignment=Alignment.RIGHT, font_size=FontSize.LARGE)
    before = composer.render_preview(header, FOOTER, has_image=False)
    assert before.footer is None
    after = composer.render_preview(header, FOOTER, has_image=True)
    assert after.header.style == {
        "font-weight": "bold",
        "font-style": "normal",
        "font-size": "18px",
        "text-align": "right",
    }
    assert after.header.row_style["justify-content"] == "flex-end"
    assert after.footer.style["font-size"] == "12px"
    assert after.to_dict()["header"]["lines"][0]["text"] == "Clinic A"


def test_print_document_uses_configured_delay():
    composer = PrescriptionComposer(ImageLoader(), print_delay_ms=1200)
    html = composer.render_print_document(make_prescription("https://example.com/rx.png"), PATIENT, HEADER, FOOTER)
    assert "}, 1200);" in html
    assert 'src="https://example.com/rx.png"' in html
