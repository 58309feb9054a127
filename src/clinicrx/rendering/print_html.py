"""
Standalone print document.

The page opens the platform print dialog after a fixed delay meant to give
the browser time to decode the prescription image. There is no load-complete
signal; on a slow connection the dialog can open before the image shows.
"""

from datetime import date
from html import escape
from typing import Optional

from ..domain.entities.template import FooterOverlay, HeaderOverlay
from .models import PatientInfo
from .naming import locale_date
from .preview import PreviewBlock, footer_block, header_block, style_string

PRINT_CSS = """
      body { font-family: Arial, sans-serif; padding: 20px; }
      .header { margin-bottom: 20px; }
      .patient-info { margin-bottom: 20px; }
      .label { font-weight: bold; }
      .prescription-image { max-width: 100%; border: 1px solid #ddd; margin: 20px 0; }
      .footer { margin-top: 30px; }
      .header-content { padding-bottom: 15px; border-bottom: 1px solid #ddd; }
      .footer-content { padding-top: 15px; border-top: 1px solid #ddd; }
"""


def _esc(value) -> str:
    return escape("" if value is None else str(value), quote=True)


def _lines_html(block: PreviewBlock) -> str:
    parts = []
    for line in block.lines:
        style = f' style="{_esc(style_string(line.style))}"' if line.style else ""
        parts.append(f"<div{style}>{_esc(line.text)}</div>")
    return "".join(parts)


def _header_html(header: HeaderOverlay) -> str:
    block = header_block(header)
    logo = (
        f'<img src="{_esc(block.logo)}" alt="Logo" style="max-height: 50px;" />' if block.logo else ""
    )
    return (
        f'<div class="header-content" style="{_esc(style_string(block.style))}">'
        f'<div class="header-main" style="{_esc(style_string(block.row_style))}">'
        f"{logo}<div>{_lines_html(block)}</div>"
        f"</div></div>"
    )


def _footer_html(footer: FooterOverlay) -> str:
    block = footer_block(footer)
    return f'<div class="footer-content" style="{_esc(style_string(block.style))}">{_lines_html(block)}</div>'


def _info_row(label: str, value) -> str:
    return f'<div><span class="label">{_esc(label)}:</span> {_esc(value)}</div>'


def render_print_document(
    image_url: str,
    prescription_date: date,
    patient: PatientInfo,
    header: HeaderOverlay,
    footer: FooterOverlay,
    notes: Optional[str] = None,
    print_delay_ms: int = 500,
) -> str:
    """Complete HTML page for printing one prescription."""
    info = [
        _info_row("Patient Name", patient.full_name),
        _info_row("MR#", patient.mr_number),
    ]
    if patient.gender:
        info.append(_info_row("Gender", patient.gender))
    if patient.date_of_birth:
        info.append(_info_row("DOB", locale_date(patient.date_of_birth)))
    info.append(_info_row("Date", locale_date(prescription_date)))

    notes_html = (
        f'<div class="notes"><span class="label">Notes:</span> {_esc(notes)}</div>' if notes else ""
    )

    return f"""<!DOCTYPE html>
<html>
  <head>
    <meta charset="utf-8" />
    <title>Prescription - {_esc(patient.mr_number)}</title>
    <style>{PRINT_CSS}    </style>
  </head>
  <body>
    <div class="header">{_header_html(header)}</div>
    <div class="patient-info">{"".join(info)}</div>
    <img src="{_esc(image_url)}" class="prescription-image" alt="Prescription" />
    {notes_html}
    <div class="footer">{_footer_html(footer)}</div>
    <script>
      setTimeout(function () {{
        window.focus();
        window.print();
        window.close();
      }}, {int(print_delay_ms)});
    </script>
  </body>
</html>
"""
