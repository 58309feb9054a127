"""
Shared layout arithmetic for every render target.
"""

import pytest

from clinicrx.domain.entities.template import FooterOverlay, HeaderOverlay
from clinicrx.domain.enums.template import Alignment, FontSize
from clinicrx.rendering.layout import (
    DOCUMENT,
    DOM,
    RASTER,
    compose_layout,
    compute_header_block,
)

HEADER = HeaderOverlay(text="Clinic A", alignment=Alignment.CENTER, font_size=FontSize.MEDIUM)
FOOTER = FooterOverlay(text="Thank you", additional_info="", alignment=Alignment.CENTER, font_size=FontSize.SMALL)


def test_plain_layout_is_image_plus_header_and_footer():
    layout = compose_layout(HEADER, FOOTER, (600, 800))
    assert layout.width == 600
    assert layout.header.height == 60
    assert layout.footer.height == 40
    assert layout.total_height == 900
    assert layout.image.y == 60
    assert layout.footer.top == 860


def test_right_alignment_anchors_every_line_at_inset():
    header = HeaderOverlay(text="Clinic A", alignment=Alignment.RIGHT)
    footer = FooterOverlay(text="Thank you", alignment=Alignment.RIGHT)
    layout = compose_layout(header, footer, (600, 800))
    lines = layout.header.lines + layout.footer.lines
    assert lines
    for line in lines:
        assert line.anchor == Alignment.RIGHT
        assert line.x == 580


def test_left_and_center_anchors():
    left = compose_layout(HeaderOverlay(text="A", alignment=Alignment.LEFT), FOOTER, (600, 800))
    assert left.header.lines[0].x == 20
    center = compose_layout(HEADER, FOOTER, (600, 800))
    assert center.header.lines[0].x == 300


def test_secondary_lines_grow_header_and_stay_plain():
    header = HeaderOverlay(text="Clinic", address="1 Main St", contact="555-0100", bold=True, italic=True)
    block = compute_header_block(header, 600, RASTER)
    assert block.height == 100
    assert [line.baseline for line in block.lines] == [30, 50, 70]
    assert block.lines[0].bold and block.lines[0].italic
    assert not any(line.bold or line.italic for line in block.lines[1:])
    assert block.rule.y == 90


def test_contact_without_address_takes_first_secondary_slot():
    header = HeaderOverlay(text="Clinic", contact="555-0100")
    block = compute_header_block(header, 600, RASTER)
    assert block.height == 80
    assert block.lines[1].baseline == 50
    assert block.lines[1].baseline < block.rule.y


def test_logo_header_is_taller_and_logo_placed_per_alignment():
    no_logo = compute_header_block(HEADER, 600, RASTER)
    with_logo = compute_header_block(HEADER, 600, RASTER, logo_size=(80, 40))
    assert with_logo.height == 120
    assert with_logo.height > no_logo.height
    assert with_logo.logo.height == 40
    assert with_logo.logo.width == 80
    assert with_logo.logo.x == 200
    assert with_logo.logo.y == 15

    right = compute_header_block(HeaderOverlay(text="A", alignment=Alignment.RIGHT), 600, RASTER, logo_size=(80, 40))
    assert right.logo.x == 460


def test_left_text_moves_clear_of_logo():
    header = HeaderOverlay(text="Clinic", alignment=Alignment.LEFT)
    block = compute_header_block(header, 600, RASTER, logo_size=(100, 50))
    assert block.logo.x == 20
    assert block.lines[0].x == block.logo.x + block.logo.width + RASTER.logo_gap


def test_footer_additional_info_adds_a_line():
    footer = FooterOverlay(text="Thanks", additional_info="Open daily")
    layout = compose_layout(HEADER, footer, (600, 800))
    assert layout.footer.height == 60
    assert layout.footer.lines[1].size == RASTER.footer_secondary_size
    assert layout.footer.lines[1].baseline - layout.footer.lines[0].baseline == 20


@pytest.mark.parametrize("size", list(FontSize))
def test_document_tiers_are_smaller(size):
    assert DOCUMENT.header_sizes[size] < RASTER.header_sizes[size]
    assert DOCUMENT.footer_sizes[size] < RASTER.footer_sizes[size]
    assert DOM.header_sizes[size] == RASTER.header_sizes[size]


def test_raster_tiers():
    assert [RASTER.header_sizes[s] for s in FontSize] == [14, 16, 18]
    assert [RASTER.footer_sizes[s] for s in FontSize] == [12, 14, 16]
    assert [DOCUMENT.header_sizes[s] for s in FontSize] == [11, 13, 15]
    assert [DOCUMENT.footer_sizes[s] for s in FontSize] == [9, 10, 11]
