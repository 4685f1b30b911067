"""
Page composition: ordered tiles -> fixed-capacity pages.

Slot ``i`` on a page sits at column ``i % 2`` and row ``i // 2``. A page is
closed once its last slot is filled and is never touched again.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from ..layout import PageGeometry
from ..models import CardTile, Page, PlacedTile


def place_tile(tile: CardTile, index: int, geometry: PageGeometry) -> PlacedTile:
    column, row, x, y = geometry.cell_origin(index)
    return PlacedTile(tile=tile, index=index, column=column, row=row, x=x, y=y)


def compose_pages(
    tiles: Sequence[CardTile] | Iterable[CardTile],
    header_lines: Tuple[str, str],
    geometry: PageGeometry | None = None,
) -> List[Page]:
    """
    Split tiles into pages of ``geometry.capacity`` in input order.

    N tiles give ceil(N / capacity) pages. With no tiles a single page is
    produced that carries only the header and footer, so the PDF is never
    empty.
    """
    geometry = geometry or PageGeometry()
    capacity = geometry.capacity
    pages: List[Page] = []
    current: List[PlacedTile] = []

    for tile in tiles:
        current.append(place_tile(tile, len(current), geometry))
        if len(current) == capacity:
            pages.append(Page(number=len(pages) + 1, tiles=tuple(current), header_lines=header_lines))
            current = []

    if current or not pages:
        pages.append(Page(number=len(pages) + 1, tiles=tuple(current), header_lines=header_lines))
    return pages


__all__ = ["compose_pages", "place_tile"]
