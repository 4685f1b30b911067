"""
Item selection for a requested audience.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Sequence

from .errors import ValidationFailed
from .models import CatalogueItem, RenderFilter


def matches_filter(item: CatalogueItem, render_filter: RenderFilter) -> bool:
    """True if the item carries at least one size tag the filter asks for."""
    return bool(item.sizes & render_filter.tags)


def filter_items(items: Iterable[CatalogueItem], render_filter: RenderFilter) -> List[CatalogueItem]:
    """
    Keep the items relevant to ``render_filter``.

    Input order is preserved (the caller decides ascending or descending by
    model number); an empty result is valid.
    """
    return [item for item in items if matches_filter(item, render_filter)]


def coerce_items(raw_items: Any) -> List[CatalogueItem]:
    """Accept store records (dicts) or ready-made CatalogueItem objects."""
    if raw_items is None or isinstance(raw_items, (str, bytes, dict)):
        raise ValidationFailed("items must be a list")
    if not isinstance(raw_items, Sequence):
        raise ValidationFailed("items must be a list")
    return [
        raw if isinstance(raw, CatalogueItem) else CatalogueItem.from_dict(raw)
        for raw in raw_items
    ]


def validate_render_request(raw_items: Any, render_filter: Any) -> tuple[List[CatalogueItem], RenderFilter]:
    """
    Check caller input before any rendering work begins.

    Raises ValidationFailed for a missing or unknown filter and for a missing,
    non-list or empty item list.
    """
    parsed_filter = RenderFilter.parse(render_filter)
    items = coerce_items(raw_items)
    if not items:
        raise ValidationFailed("items list is empty")
    return items, parsed_filter


__all__ = ["matches_filter", "filter_items", "coerce_items", "validate_render_request"]
