from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional, Tuple

from .errors import ValidationFailed
from .layout import CardGeometry, PageGeometry
from .logging_utils import get_logger

logger = get_logger(__name__)


class SizeTag(str, Enum):
    ADULT = "Adult"
    KIDS = "Kids"


class RenderFilter(str, Enum):
    """Audience selector: controls which items are included and which weights are shown."""

    ADULT = "Adult"
    KIDS = "Kids"
    BOTH = "Both"

    @property
    def tags(self) -> FrozenSet[SizeTag]:
        if self is RenderFilter.ADULT:
            return frozenset({SizeTag.ADULT})
        if self is RenderFilter.KIDS:
            return frozenset({SizeTag.KIDS})
        return frozenset({SizeTag.ADULT, SizeTag.KIDS})

    @classmethod
    def parse(cls, value: Any) -> "RenderFilter":
        if isinstance(value, cls):
            return value
        if value is None or value == "":
            raise ValidationFailed("filter is required")
        try:
            return cls(value)
        except ValueError:
            raise ValidationFailed(
                f"invalid filter {value!r}; expected one of {[f.value for f in cls]}"
            ) from None


def _parse_weight(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return None
    # The store writes 0 for "not weighed"; treat it like a missing weight.
    if not math.isfinite(weight) or weight <= 0:
        return None
    return weight


@dataclass(frozen=True)
class CatalogueItem:
    """One bangle as supplied by the catalogue store. Never mutated by the pipeline."""

    id: str
    model_number: int
    image: Any = None
    sizes: FrozenSet[SizeTag] = frozenset()
    weight_adult: Optional[float] = None
    weight_kids: Optional[float] = None

    @property
    def label(self) -> str:
        return f"B{self.model_number}"

    def weight_for(self, tag: SizeTag) -> Optional[float]:
        if tag is SizeTag.ADULT:
            return self.weight_adult
        return self.weight_kids

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CatalogueItem":
        """
        Build from the store's JSON shape (``_id``, ``modelNumber``, ``image``,
        ``sizes``, ``weightAdult``, ``weightKids``). Snake-case keys are accepted too.
        """
        if not isinstance(data, dict):
            raise ValidationFailed(f"catalogue item must be an object, got {type(data).__name__}")

        raw_model = data.get("modelNumber", data.get("model_number"))
        try:
            model_number = int(raw_model)
        except (TypeError, ValueError):
            raise ValidationFailed(f"invalid modelNumber {raw_model!r}") from None
        if model_number <= 0:
            raise ValidationFailed(f"modelNumber must be positive, got {model_number}")

        sizes = set()
        raw_sizes = data.get("sizes") or []
        if isinstance(raw_sizes, str):
            raw_sizes = [raw_sizes]
        for raw in raw_sizes:
            try:
                sizes.add(SizeTag(raw))
            except ValueError:
                logger.warning("B%d: ignoring unknown size tag %r", model_number, raw)
        if not sizes:
            logger.warning("B%d has no size tags; it will not appear under any filter", model_number)

        return cls(
            id=str(data.get("_id") or data.get("id") or model_number),
            model_number=model_number,
            image=data.get("image"),
            sizes=frozenset(sizes),
            weight_adult=_parse_weight(data.get("weightAdult", data.get("weight_adult"))),
            weight_kids=_parse_weight(data.get("weightKids", data.get("weight_kids"))),
        )


@dataclass(frozen=True)
class CardTile:
    """Per-item render unit, consumed by the page composer and then discarded."""

    model_number: int
    caption: str
    weight_labels: Tuple[str, ...] = ()
    image_png: Optional[bytes] = None
    image_size: Tuple[int, int] = (0, 0)
    geometry: CardGeometry = field(default_factory=CardGeometry)

    @property
    def has_image(self) -> bool:
        return self.image_png is not None


@dataclass(frozen=True)
class PlacedTile:
    tile: CardTile
    index: int
    column: int
    row: int
    x: float
    y: float


@dataclass(frozen=True)
class Page:
    number: int
    tiles: Tuple[PlacedTile, ...]
    header_lines: Tuple[str, str]

    @property
    def footer_text(self) -> str:
        return f"Page {self.number}"

    @property
    def model_numbers(self) -> Tuple[int, ...]:
        return tuple(p.tile.model_number for p in self.tiles)


@dataclass(frozen=True)
class Document:
    pages: Tuple[Page, ...]
    content: bytes
    filename: str
    render_filter: RenderFilter

    @property
    def page_count(self) -> int:
        return len(self.pages)


@dataclass
class CatalogueConfig:
    """Rendering, fetch and delivery options for building the catalogue."""

    brand_name: str = "BLOUDAN JEWELLERY"
    subtitle: str = "BANGLES CATALOGUE"
    accent_color: str = "#c7a332"
    text_color: str = "#0b1a3d"
    page: PageGeometry = field(default_factory=PageGeometry)
    card: CardGeometry = field(default_factory=CardGeometry)
    image_width: int = 1200
    proxy_base_url: Optional[str] = None
    proxy_allowed_hosts: Tuple[str, ...] = ("cdn.sanity.io",)
    fetch_workers: int = 6
    fetch_timeout: float = 5.0
    generation_timeout: float = 120.0
    sanity_project_id: str = "lfss7ezq"
    sanity_dataset: str = "production"
    sanity_api_version: str = "2023-01-01"
    items_json: Optional[Path] = None
    output_dir: Path = Path("exports")
    public_dir: Optional[Path] = None
    public_base_url: str = "/"
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    sender_name: str = "Bloudan Catalogue"

    @classmethod
    def default(cls) -> "CatalogueConfig":
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Any], root: Path | None = None) -> "CatalogueConfig":
        root = Path(root) if root else Path.cwd()
        brand = data.get("brand", {}) or {}
        fetch = data.get("fetch", {}) or {}
        sanity = data.get("sanity", {}) or {}
        paths = data.get("paths", {}) or {}
        smtp = data.get("smtp", {}) or {}

        def _path(value):
            return root / value if value else None

        defaults = cls()
        return cls(
            brand_name=brand.get("name", defaults.brand_name),
            subtitle=brand.get("subtitle", defaults.subtitle),
            accent_color=brand.get("accent_color", defaults.accent_color),
            text_color=brand.get("text_color", defaults.text_color),
            page=PageGeometry.from_dict(data.get("page")),
            image_width=int(fetch.get("image_width", defaults.image_width)),
            proxy_base_url=fetch.get("proxy_base_url") or None,
            proxy_allowed_hosts=tuple(fetch.get("proxy_allowed_hosts", defaults.proxy_allowed_hosts) or ()),
            fetch_workers=int(fetch.get("workers", defaults.fetch_workers)),
            fetch_timeout=float(fetch.get("timeout", defaults.fetch_timeout)),
            generation_timeout=float(fetch.get("generation_timeout", defaults.generation_timeout)),
            sanity_project_id=sanity.get("project_id", defaults.sanity_project_id),
            sanity_dataset=sanity.get("dataset", defaults.sanity_dataset),
            sanity_api_version=str(sanity.get("api_version", defaults.sanity_api_version)),
            items_json=_path(paths.get("items_json")),
            output_dir=_path(paths.get("output_dir")) or defaults.output_dir,
            public_dir=_path(paths.get("public_dir")),
            public_base_url=paths.get("public_base_url", defaults.public_base_url),
            smtp_host=smtp.get("host", defaults.smtp_host),
            smtp_port=int(smtp.get("port", defaults.smtp_port)),
            smtp_user=smtp.get("user") or None,
            smtp_password=smtp.get("password") or None,
            sender_name=smtp.get("sender_name", defaults.sender_name),
        )


__all__ = [
    "SizeTag",
    "RenderFilter",
    "CatalogueItem",
    "CardTile",
    "PlacedTile",
    "Page",
    "Document",
    "CatalogueConfig",
]
