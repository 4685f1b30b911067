import math

import pytest
from reportlab.lib.units import mm

from catalogue_builder.layout import PageGeometry
from catalogue_builder.models import CardTile
from catalogue_builder.renderers.pages import compose_pages

HEADER = ("BLOUDAN JEWELLERY", "BANGLES CATALOGUE")


def _tiles(n):
    return [CardTile(model_number=i + 1, caption=f"B{i + 1}") for i in range(n)]


@pytest.mark.parametrize("count", [1, 3, 4, 5, 8, 9, 17])
def test_page_count_is_ceiling_of_items_over_four(count):
    pages = compose_pages(_tiles(count), HEADER)
    assert len(pages) == math.ceil(count / 4)
    assert [p.number for p in pages] == list(range(1, len(pages) + 1))
    assert all(len(p.tiles) == 4 for p in pages[:-1])
    assert sum(len(p.tiles) for p in pages) == count


def test_tiles_keep_their_order_across_pages():
    pages = compose_pages(_tiles(6), HEADER)
    assert [p.model_numbers for p in pages] == [(1, 2, 3, 4), (5, 6)]
    assert pages[1].footer_text == "Page 2"
    assert pages[0].header_lines == HEADER


def test_slot_positions_follow_the_grid():
    g = PageGeometry()
    page = compose_pages(_tiles(4), HEADER, g)[0]
    cells = [(p.column, p.row) for p in page.tiles]
    assert cells == [(0, 0), (1, 0), (0, 1), (1, 1)]

    first, second, third, _ = page.tiles
    assert first.x == pytest.approx(8 * mm)
    assert second.x == pytest.approx(108 * mm)
    # y is the bottom edge of the cell: page height - (35mm + row * 120mm) - 115mm
    assert first.y == pytest.approx(g.page_height - 150 * mm)
    assert third.y == pytest.approx(g.page_height - 270 * mm)


def test_grid_stays_between_header_and_footer():
    g = PageGeometry()
    for index in range(g.capacity):
        _, _, x, y = g.cell_origin(index)
        assert y >= g.footer_height
        assert y + g.cell_height <= g.page_height - g.header_height
        assert x + g.cell_width <= g.page_width - g.margin


def test_no_tiles_gives_one_empty_page():
    pages = compose_pages([], HEADER)
    assert len(pages) == 1
    assert pages[0].tiles == ()
    assert pages[0].footer_text == "Page 1"
