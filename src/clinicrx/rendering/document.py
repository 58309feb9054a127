"""
Paginated PDF output (reportlab).

The header is drawn with native text and line primitives, not pasted as a
raster, so it stays sharp at any zoom. Geometry comes from the shared layout
with the DOCUMENT metrics; reportlab's origin is bottom-left, so every
top-down y is flipped with ``_y``.
"""

import math
from dataclasses import dataclass
from datetime import date
from io import BytesIO
from typing import List, Optional

from PIL import Image
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from ..domain.entities.template import FooterOverlay, HeaderOverlay
from ..domain.enums.template import Alignment
from .layout import DOCUMENT, Rule, TextLine, compute_footer_block, compute_header_block
from .models import PatientInfo
from .naming import locale_date

PAGE_W, PAGE_H = A4
MARGIN = 40
CONTENT_W = PAGE_W - 2 * MARGIN
# start a new page for the footer when less than this is left
FOOTER_CLEARANCE = 80
FOOTER_BOTTOM = MARGIN
IMAGE_GAP = 10

BODY_FONT = "Helvetica"
BODY_SIZE = 10
BODY_STEP = 14
NOTE_STEP = 13

INK = colors.black
RULE = colors.HexColor("#CCCCCC")


@dataclass(frozen=True)
class DocumentResult:
    pdf: bytes
    page_count: int


def font_name(bold: bool, italic: bool) -> str:
    if bold and italic:
        return "Helvetica-BoldOblique"
    if bold:
        return "Helvetica-Bold"
    if italic:
        return "Helvetica-Oblique"
    return "Helvetica"


def _split_word(word: str, font: str, size: float, max_w: float) -> List[str]:
    """Break a word wider than ``max_w`` into pieces that fit."""
    pieces: List[str] = []
    cur = ""
    for ch in word:
        if cur and pdfmetrics.stringWidth(cur + ch, font, size) > max_w:
            pieces.append(cur)
            cur = ch
        else:
            cur += ch
    pieces.append(cur)
    return pieces


def _wrap(text: str, font: str, size: float, max_w: float) -> List[str]:
    """Greedy word wrap; explicit newlines start new paragraphs."""
    lines: List[str] = []
    for paragraph in (text or "").splitlines() or [""]:
        words = paragraph.split()
        cur = ""
        for w in words:
            cand = (cur + " " + w).strip()
            if pdfmetrics.stringWidth(cand, font, size) <= max_w:
                cur = cand
                continue
            if cur:
                lines.append(cur)
            pieces = _split_word(w, font, size, max_w)
            lines.extend(pieces[:-1])
            cur = pieces[-1]
        lines.append(cur)
    return lines


class _DocumentWriter:
    """Top-down cursor over a reportlab canvas that counts pages."""

    def __init__(self, buf: BytesIO):
        self.c = canvas.Canvas(buf, pagesize=A4)
        self.page_count = 1
        self.cursor = MARGIN

    @staticmethod
    def _y(top_down: float) -> float:
        return PAGE_H - top_down

    @property
    def remaining(self) -> float:
        return PAGE_H - MARGIN - self.cursor

    def new_page(self) -> None:
        self.c.showPage()
        self.page_count += 1
        self.cursor = MARGIN

    def text(self, line: TextLine, offset: float = 0) -> None:
        c = self.c
        c.setFillColor(INK)
        c.setFont(font_name(line.bold, line.italic), line.size)
        y = self._y(offset + line.baseline)
        if line.anchor == Alignment.CENTER:
            c.drawCentredString(line.x, y, line.text)
        elif line.anchor == Alignment.RIGHT:
            c.drawRightString(line.x, y, line.text)
        else:
            c.drawString(line.x, y, line.text)

    def rule(self, rule: Rule, offset: float = 0) -> None:
        self.c.setStrokeColor(RULE)
        self.c.setLineWidth(0.75)
        y = self._y(offset + rule.y)
        self.c.line(rule.x1, y, rule.x2, y)

    def labelled(self, label: str, value: str) -> None:
        c = self.c
        y = self._y(self.cursor + BODY_SIZE)
        c.setFillColor(INK)
        c.setFont("Helvetica-Bold", BODY_SIZE)
        label_text = f"{label}: "
        c.drawString(MARGIN, y, label_text)
        c.setFont(BODY_FONT, BODY_SIZE)
        c.drawString(MARGIN + pdfmetrics.stringWidth(label_text, "Helvetica-Bold", BODY_SIZE), y, value)
        self.cursor += BODY_STEP


def render_document(
    source: Image.Image,
    patient: PatientInfo,
    prescription_date: date,
    header: HeaderOverlay,
    footer: FooterOverlay,
    notes: Optional[str] = None,
    logo: Optional[Image.Image] = None,
) -> DocumentResult:
    """Build the A4 document. ``logo`` is None when absent or failed to load."""
    buf = BytesIO()
    doc = _DocumentWriter(buf)
    c = doc.c
    c.setTitle(f"Prescription - {patient.mr_number}")

    # Header
    block = compute_header_block(
        header, CONTENT_W, DOCUMENT, logo_size=logo.size if logo is not None else None, x0=MARGIN
    )
    top = doc.cursor
    if logo is not None and block.logo is not None:
        box = block.logo
        c.drawImage(
            ImageReader(logo),
            box.x,
            doc._y(top + box.y + box.height),
            width=box.width,
            height=box.height,
            mask="auto",
        )
    for line in block.lines:
        doc.text(line, offset=top)
    doc.rule(block.rule, offset=top)
    doc.cursor = top + block.height + 6

    # Patient summary
    doc.labelled("Patient Name", patient.full_name)
    doc.labelled("MR#", patient.mr_number)
    if patient.gender:
        doc.labelled("Gender", patient.gender)
    if patient.date_of_birth:
        doc.labelled("DOB", locale_date(patient.date_of_birth))
    doc.labelled("Date", locale_date(prescription_date))
    doc.cursor += 8

    # Prescription image at content width, shrunk further if it would push the footer off the page
    src_w, src_h = source.size
    scale = CONTENT_W / src_w
    available = math.floor(doc.remaining - FOOTER_CLEARANCE - IMAGE_GAP)
    if src_h * scale > available:
        scale = max(available, 1) / src_h
    draw_w, draw_h = src_w * scale, src_h * scale
    c.drawImage(
        ImageReader(source),
        MARGIN + (CONTENT_W - draw_w) / 2,
        doc._y(doc.cursor + draw_h),
        width=draw_w,
        height=draw_h,
        mask="auto",
    )
    doc.cursor += draw_h + IMAGE_GAP

    # Notes
    if notes:
        if doc.remaining < BODY_STEP * 2:
            doc.new_page()
        c.setFillColor(INK)
        c.setFont("Helvetica-Bold", BODY_SIZE)
        c.drawString(MARGIN, doc._y(doc.cursor + BODY_SIZE), "Notes:")
        doc.cursor += BODY_STEP
        c.setFont(BODY_FONT, BODY_SIZE)
        for ln in _wrap(notes, BODY_FONT, BODY_SIZE, CONTENT_W):
            if doc.remaining < NOTE_STEP:
                doc.new_page()
                c.setFillColor(INK)
                c.setFont(BODY_FONT, BODY_SIZE)
            c.drawString(MARGIN, doc._y(doc.cursor + BODY_SIZE), ln)
            doc.cursor += NOTE_STEP

    # Footer, pinned to the bottom of whichever page it lands on
    if doc.remaining < FOOTER_CLEARANCE:
        doc.new_page()
    footer_sizing = compute_footer_block(footer, CONTENT_W, 0, DOCUMENT, x0=MARGIN)
    footer_top = PAGE_H - FOOTER_BOTTOM - footer_sizing.height
    footer_block = compute_footer_block(footer, CONTENT_W, footer_top, DOCUMENT, x0=MARGIN)
    doc.rule(footer_block.rule)
    for line in footer_block.lines:
        doc.text(line)

    c.save()
    return DocumentResult(pdf=buf.getvalue(), page_count=doc.page_count)
