"""
PDF writer for the catalogue.

Pages are drawn straight onto a reportlab canvas: header band, up to four
card flowables at their grid positions, footer band with the page number.
Output is built with ``invariant=1`` so identical input yields identical
bytes.
"""

from __future__ import annotations

import io
from typing import Sequence

from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from ..layout import PageGeometry, Palette, build_palette
from ..models import Page
from .cards import CardFlowable

HEADER_TITLE_FONT = ("Helvetica-Bold", 20)
HEADER_SUBTITLE_FONT = ("Helvetica", 16)
FOOTER_FONT = ("Helvetica-Bold", 12)


def draw_header(c: canvas.Canvas, page: Page, geometry: PageGeometry, palette: Palette) -> None:
    title, subtitle = page.header_lines
    top = geometry.page_height
    c.saveState()
    c.setFillColor(palette.accent)
    c.rect(0, top - geometry.header_height, geometry.page_width, geometry.header_height, stroke=0, fill=1)
    c.setFillColor(palette.text)
    c.setFont(*HEADER_TITLE_FONT)
    c.drawCentredString(geometry.page_width / 2, top - 12 * mm, title)
    c.setFont(*HEADER_SUBTITLE_FONT)
    c.drawCentredString(geometry.page_width / 2, top - 20 * mm, subtitle)
    c.restoreState()


def draw_footer(c: canvas.Canvas, page: Page, geometry: PageGeometry, palette: Palette) -> None:
    c.saveState()
    c.setFillColor(palette.accent)
    c.rect(0, 0, geometry.page_width, geometry.footer_height, stroke=0, fill=1)
    c.setFillColor(palette.text)
    c.setFont(*FOOTER_FONT)
    c.drawCentredString(geometry.page_width / 2, 4 * mm, page.footer_text)
    c.restoreState()


def draw_page(c: canvas.Canvas, page: Page, geometry: PageGeometry, palette: Palette) -> None:
    draw_header(c, page, geometry, palette)
    for placed in page.tiles:
        card = CardFlowable(placed.tile, geometry.cell_width, geometry.cell_height, palette)
        card.wrapOn(c, geometry.cell_width, geometry.cell_height)
        card.drawOn(c, placed.x, placed.y)
    draw_footer(c, page, geometry, palette)


def render_pdf(
    pages: Sequence[Page],
    geometry: PageGeometry | None = None,
    palette: Palette | None = None,
    title: str = "",
) -> bytes:
    """
    Serialise pages to PDF bytes, one ``showPage`` per page in order.
    """
    geometry = geometry or PageGeometry()
    palette = palette or build_palette()
    buf = io.BytesIO()
    c = canvas.Canvas(
        buf,
        pagesize=(geometry.page_width, geometry.page_height),
        invariant=1,
        pageCompression=0,
    )
    if title:
        c.setTitle(title)
    for page in pages:
        draw_page(c, page, geometry, palette)
        c.showPage()
    c.save()
    return buf.getvalue()


__all__ = ["render_pdf", "draw_page", "draw_header", "draw_footer"]
