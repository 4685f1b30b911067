"""
Pipeline entrypoints for building the catalogue PDF.

validate -> filter -> fetch images -> render cards -> compose pages -> serialise.
Item order from the filter step is kept end to end. A bad image or a card
that fails to render only degrades that card; a failure to produce the PDF
itself raises DocumentAssemblyFailed.
"""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from .errors import DocumentAssemblyFailed
from .filters import filter_items, validate_render_request
from .images import ImageResolver, ResolvedImage
from .layout import build_palette
from .logging_utils import get_logger
from .models import CardTile, CatalogueConfig, CatalogueItem, Document, RenderFilter
from .renderers.cards import blank_card, render_card
from .renderers.pages import compose_pages
from .renderers.pdf_renderer import render_pdf

logger = get_logger(__name__)

CATALOGUE_FILENAME = "BLOUDAN_BANGLES_CATALOGUE.pdf"


def catalogue_filename(render_filter: RenderFilter | None = None) -> str:
    """``BLOUDAN_BANGLES_CATALOGUE.pdf`` or ``BLOUDAN_BANGLES_CATALOGUE_<filter>.pdf``."""
    if render_filter is None:
        return CATALOGUE_FILENAME
    return f"BLOUDAN_BANGLES_CATALOGUE_{RenderFilter(render_filter).value}.pdf"


def attachment_filename(render_filter: RenderFilter) -> str:
    return f"BLOUDAN_BANGLES_{RenderFilter(render_filter).value}.pdf"


def render_tiles(
    items: Sequence[CatalogueItem],
    images: Sequence[Optional[ResolvedImage]],
    render_filter: RenderFilter,
    config: CatalogueConfig,
) -> List[CardTile]:
    tiles: List[CardTile] = []
    for item, image in zip(items, images):
        try:
            tiles.append(render_card(item, render_filter, image, config.card))
        except MemoryError:
            raise
        except Exception:
            logger.exception("Rendering failed for %s; using a blank image area", item.label)
            tiles.append(blank_card(item, render_filter, config.card))
    return tiles


def assemble_document(
    raw_items: Any,
    render_filter: Any,
    resolver: ImageResolver | None = None,
    config: CatalogueConfig | None = None,
    filename: str | None = None,
) -> Document:
    """
    Build the whole catalogue document.

    ``raw_items`` may be store records or CatalogueItem objects, already in the
    caller's order. Raises ValidationFailed before any work for bad input and
    DocumentAssemblyFailed if the PDF cannot be produced.
    """
    cfg = config or CatalogueConfig.default()
    items, parsed_filter = validate_render_request(raw_items, render_filter)
    resolver = resolver or ImageResolver.from_config(cfg)

    selected = filter_items(items, parsed_filter)
    logger.info(
        "Building %s catalogue: %d of %d items selected",
        parsed_filter.value,
        len(selected),
        len(items),
    )

    images = resolver.fetch_all(selected)
    missing = sum(1 for image in images if image is None)
    if missing:
        logger.warning("%d of %d items rendered without an image", missing, len(selected))

    try:
        tiles = render_tiles(selected, images, parsed_filter, cfg)
        pages = compose_pages(tiles, (cfg.brand_name, cfg.subtitle), cfg.page)
        content = render_pdf(
            pages,
            cfg.page,
            build_palette(cfg.accent_color, cfg.text_color),
            title=f"{cfg.brand_name} - {cfg.subtitle}",
        )
    except MemoryError as exc:
        raise DocumentAssemblyFailed("out of memory while assembling the catalogue") from exc
    except Exception as exc:
        raise DocumentAssemblyFailed(f"could not serialise the catalogue: {exc}") from exc

    logger.info("Catalogue ready: %d pages, %d bytes", len(pages), len(content))
    return Document(
        pages=tuple(pages),
        content=content,
        filename=filename or catalogue_filename(parsed_filter),
        render_filter=parsed_filter,
    )


__all__ = [
    "assemble_document",
    "render_tiles",
    "catalogue_filename",
    "attachment_filename",
    "CATALOGUE_FILENAME",
]
