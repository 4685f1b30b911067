"""
Card rendering: one catalogue item -> one fixed-size tile.

A tile is laid out in the 220 x 260 logical design box: image region on top
(contain fit, never cropped), the ``B<n>`` model caption, then a row of weight
labels. The picture is downsampled once to the image box at the raster scale;
captions are drawn as PDF text so they stay sharp at any print size.
"""

from __future__ import annotations

import io
from typing import List, Optional, Tuple

from PIL import Image
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.platypus import Flowable

from ..images import ResolvedImage
from ..layout import CardGeometry, Palette, build_palette
from ..logging_utils import get_logger
from ..models import CardTile, CatalogueItem, RenderFilter, SizeTag

logger = get_logger(__name__)


def format_weight(weight: float) -> str:
    """12.5 -> '12.5', 8.0 -> '8'."""
    weight = float(weight)
    if weight.is_integer():
        return str(int(weight))
    return f"{weight}"


def weight_labels_for(item: CatalogueItem, render_filter: RenderFilter) -> Tuple[str, ...]:
    """
    A label for tag T is shown only when the filter includes T, the item is
    sized for T, and the item has a weight for T.
    """
    labels: List[str] = []
    for tag in (SizeTag.ADULT, SizeTag.KIDS):
        if tag not in render_filter.tags or tag not in item.sizes:
            continue
        weight = item.weight_for(tag)
        if weight is None:
            continue
        labels.append(f"{tag.value} - {format_weight(weight)}g")
    return tuple(labels)


def contain_box(src_w: float, src_h: float, box_w: float, box_h: float) -> Tuple[float, float, float, float]:
    """Scale (src_w, src_h) to fit inside the box; return (w, h, dx, dy) centred in it."""
    if src_w <= 0 or src_h <= 0:
        return 0.0, 0.0, box_w / 2, box_h / 2
    scale = min(box_w / src_w, box_h / src_h)
    w, h = src_w * scale, src_h * scale
    return w, h, (box_w - w) / 2, (box_h - h) / 2


def weight_row_positions(labels: Tuple[str, ...], geometry: CardGeometry) -> List[Tuple[str, float]]:
    """
    Horizontal centres for each weight label, in logical units. Two labels
    sit side by side with a fixed gap, centred as a group; one is centred.
    """
    if not labels:
        return []
    widths = [stringWidth(label, geometry.weight_font, geometry.weight_font_size) for label in labels]
    total = sum(widths) + geometry.weight_gap * (len(labels) - 1)
    cursor = (geometry.width - total) / 2
    positions = []
    for label, width in zip(labels, widths):
        positions.append((label, cursor + width / 2))
        cursor += width + geometry.weight_gap
    return positions


def rasterize_image(image: ResolvedImage, geometry: CardGeometry) -> Tuple[bytes, Tuple[int, int]]:
    """Flatten onto white and downsample into the image box at raster scale; return PNG bytes."""
    with Image.open(io.BytesIO(image.data)) as src:
        rgba = src.convert("RGBA")
    try:
        flat = Image.new("RGB", rgba.size, (255, 255, 255))
        try:
            flat.paste(rgba, mask=rgba.getchannel("A"))
            flat.thumbnail(geometry.raster_size, Image.Resampling.LANCZOS)
            buf = io.BytesIO()
            flat.save(buf, format="PNG")
            return buf.getvalue(), flat.size
        finally:
            flat.close()
    finally:
        rgba.close()


def render_card(
    item: CatalogueItem,
    render_filter: RenderFilter,
    image: Optional[ResolvedImage] = None,
    geometry: CardGeometry | None = None,
) -> CardTile:
    """Build the tile for one item. A missing or unusable image leaves the image area blank."""
    geometry = geometry or CardGeometry()
    image_png: Optional[bytes] = None
    image_size: Tuple[int, int] = (0, 0)
    if image is not None:
        try:
            image_png, image_size = rasterize_image(image, geometry)
        except (OSError, ValueError) as exc:
            logger.warning("Could not rasterize image for %s: %s", item.label, exc)
            image_png, image_size = None, (0, 0)

    return CardTile(
        model_number=item.model_number,
        caption=item.label,
        weight_labels=weight_labels_for(item, render_filter),
        image_png=image_png,
        image_size=image_size,
        geometry=geometry,
    )


def blank_card(item: CatalogueItem, render_filter: RenderFilter, geometry: CardGeometry | None = None) -> CardTile:
    return render_card(item, render_filter, None, geometry)


class CardFlowable(Flowable):
    """
    Draws a CardTile at any size. Logical units are scaled uniformly and the
    design box is centred inside the flowable's frame.
    """

    def __init__(self, tile: CardTile, width: float, height: float, palette: Palette | None = None):
        super().__init__()
        self.tile = tile
        self.width = width
        self.height = height
        self.palette = palette or build_palette()

    def wrap(self, availWidth, availHeight):
        return self.width, self.height

    def draw(self):
        c = self.canv
        g = self.tile.geometry
        unit = min(self.width / g.width, self.height / g.height)
        ox = (self.width - g.width * unit) / 2
        oy = (self.height - g.height * unit) / 2

        def x_at(u):
            return ox + u * unit

        def y_at(from_top):
            return oy + (g.height - from_top) * unit

        c.saveState()

        # Card body with a rounded accent border, stroked inside the design box.
        inset = g.border_width * unit / 2
        c.setFillColor(self.palette.card_background)
        c.setStrokeColor(self.palette.accent)
        c.setLineWidth(g.border_width * unit)
        c.roundRect(
            x_at(0) + inset,
            y_at(g.height) + inset,
            g.width * unit - 2 * inset,
            g.height * unit - 2 * inset,
            g.corner_radius * unit,
            stroke=1,
            fill=1,
        )

        if self.tile.image_png:
            left, top, box_w, box_h = g.image_box
            w, h, dx, dy = contain_box(*self.tile.image_size, box_w, box_h)
            c.drawImage(
                ImageReader(io.BytesIO(self.tile.image_png)),
                x_at(left + dx),
                y_at(top + dy + h),
                width=w * unit,
                height=h * unit,
                mask="auto",
            )

        c.setFillColor(self.palette.text)
        c.setFont(g.model_font, g.model_font_size * unit)
        c.drawCentredString(x_at(g.width / 2), y_at(g.model_baseline), self.tile.caption)

        c.setFont(g.weight_font, g.weight_font_size * unit)
        for label, centre in weight_row_positions(self.tile.weight_labels, g):
            c.drawCentredString(x_at(centre), y_at(g.weight_baseline), label)

        c.restoreState()


__all__ = [
    "render_card",
    "blank_card",
    "weight_labels_for",
    "weight_row_positions",
    "format_weight",
    "contain_box",
    "rasterize_image",
    "CardFlowable",
]
