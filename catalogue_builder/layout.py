"""
Layout primitives for the catalogue PDF.

Centralizes geometry and colours so the card renderer, the page composer and
the PDF writer agree on one grid. Card measurements are in logical units
(the 220 x 260 design box); page measurements are in PDF points.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm


@dataclass(frozen=True)
class CardGeometry:
    """Design box for one card, measured top-down in logical units."""

    width: float = 220
    height: float = 260
    padding: float = 10
    image_height: float = 180
    raster_scale: int = 3
    border_width: float = 2
    corner_radius: float = 16
    model_font: str = "Helvetica-Bold"
    model_font_size: float = 35
    model_baseline: float = 218
    weight_font: str = "Helvetica"
    weight_font_size: float = 12
    weight_baseline: float = 242
    weight_gap: float = 8

    @property
    def image_box(self) -> Tuple[float, float, float, float]:
        """(left, top, width, height) of the image region."""
        return (
            self.padding,
            self.padding,
            self.width - 2 * self.padding,
            self.image_height,
        )

    @property
    def raster_size(self) -> Tuple[int, int]:
        """Pixel bounds the embedded image is downsampled into."""
        _, _, w, h = self.image_box
        return int(w * self.raster_scale), int(h * self.raster_scale)


@dataclass(frozen=True)
class PageGeometry:
    """A4 grid: two columns by two rows of fixed cells between header and footer."""

    page_width: float = A4[0]
    page_height: float = A4[1]
    margin: float = 8 * mm
    grid_top: float = 35 * mm
    h_pitch: float = 100 * mm
    v_pitch: float = 120 * mm
    cell_width: float = 85 * mm
    cell_height: float = 115 * mm
    header_height: float = 25 * mm
    footer_height: float = 12 * mm
    columns: int = 2
    rows: int = 2

    @property
    def capacity(self) -> int:
        return self.columns * self.rows

    def cell_origin(self, index: int) -> Tuple[int, int, float, float]:
        """
        Return (column, row, x, y) for slot ``index`` on a page.

        ``y`` is the bottom edge of the cell in PDF coordinates (origin at the
        bottom-left of the page).
        """
        column = index % self.columns
        row = index // self.columns
        x = self.margin + column * self.h_pitch
        y_top = self.grid_top + row * self.v_pitch
        y = self.page_height - y_top - self.cell_height
        return column, row, x, y

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "PageGeometry":
        """
        Build from a config mapping whose lengths are given in millimetres.
        Unknown keys are ignored.
        """
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                continue
            if key in ("columns", "rows"):
                kwargs[key] = int(value)
            else:
                kwargs[key] = float(value) * mm
        return cls(**kwargs)


@dataclass(frozen=True)
class Palette:
    accent: colors.Color
    text: colors.Color
    card_background: colors.Color = colors.white


def build_palette(accent: str = "#c7a332", text: str = "#0b1a3d") -> Palette:
    return Palette(accent=colors.HexColor(accent), text=colors.HexColor(text))


__all__ = ["CardGeometry", "PageGeometry", "Palette", "build_palette"]
