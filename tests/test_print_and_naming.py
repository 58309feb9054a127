"""
Download filenames and the standalone print page.
"""

from datetime import date, datetime

from clinicrx.domain.entities.template import FooterOverlay, HeaderOverlay
from clinicrx.domain.enums.template import Alignment
from clinicrx.rendering.models import PatientInfo
from clinicrx.rendering.naming import download_filename, locale_date
from clinicrx.rendering.print_html import render_print_document


def test_download_filename():
    assert download_filename("MR-42", date(2024, 3, 5)) == "prescription-MR-42-3-5-2024.pdf"
    assert download_filename("MR-42", date(2024, 3, 5), "png") == "prescription-MR-42-3-5-2024.png"


def test_locale_date_has_no_zero_padding():
    assert locale_date(date(2024, 12, 25)) == "12/25/2024"
    assert locale_date(datetime(2024, 1, 9, 15, 30)) == "1/9/2024"


def render(**overrides):
    kwargs = dict(
        image_url="data:image/png;base64,AAAA",
        prescription_date=date(2024, 3, 5),
        patient=PatientInfo(first_name="Ada", last_name="Lovelace", mr_number="MR-42"),
        header=HeaderOverlay(text="Clinic A", alignment=Alignment.RIGHT, bold=True, italic=True),
        footer=FooterOverlay(text="Thank you", additional_info="Open daily"),
    )
    kwargs.update(overrides)
    return render_print_document(**kwargs)


def test_print_page_contents():
    html = render()
    assert html.startswith("<!DOCTYPE html>")
    assert "<title>Prescription - MR-42</title>" in html
    assert '<span class="label">Patient Name:</span> Ada Lovelace' in html
    assert '<span class="label">Date:</span> 3/5/2024' in html
    assert "Gender" not in html
    assert "font-weight: bold; font-style: italic;" in html
    assert "justify-content: flex-end;" in html
    assert "Open daily" in html
    assert "window.print();" in html
    assert "}, 500);" in html


def test_print_page_optional_rows_and_notes():
    html = render(
        patient=PatientInfo(
            first_name="Ada", last_name="Lovelace", mr_number="MR-42", gender="Female", date_of_birth=date(1990, 1, 2)
        ),
        notes="Take with water",
    )
    assert '<span class="label">Gender:</span> Female' in html
    assert '<span class="label">DOB:</span> 1/2/1990' in html
    assert '<span class="label">Notes:</span> Take with water' in html


def test_print_page_escapes_user_text():
    html = render(
        header=HeaderOverlay(text="<script>alert(1)</script>"),
        notes='"quoted" & <b>bold</b>',
    )
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html
    assert "&quot;quoted&quot; &amp; &lt;b&gt;bold&lt;/b&gt;" in html


def test_print_page_includes_logo_when_present():
    html = render(header=HeaderOverlay(text="Clinic", logo="https://cdn.example.com/logo.png"))
    assert '<img src="https://cdn.example.com/logo.png" alt="Logo"' in html
