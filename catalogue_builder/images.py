"""
Image resolution: opaque image reference -> asset URL -> proxied fetch -> bytes.

Each fetch stands alone. A failure only ever costs the one card its picture;
``fetch_all`` hands back a list aligned with its input so tiles can be
placed in item order no matter which download finished first.
"""

from __future__ import annotations

import io
import re
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple
from urllib.parse import quote, urlencode, urlparse

import requests
from PIL import Image

from .errors import ImageUnavailable
from .logging_utils import get_logger
from .models import CatalogueConfig, CatalogueItem

logger = get_logger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; bloudan-catalogue-builder/1.0)"

SANITY_CDN = "https://cdn.sanity.io/images"
_SANITY_REF = re.compile(r"^image-(?P<id>[A-Za-z0-9]+)-(?P<dims>\d+x\d+)-(?P<ext>[a-z0-9]+)$")


class SanityImageUrlBuilder:
    """Turn Sanity image objects / asset refs into CDN URLs. Plain URLs pass through."""

    def __init__(self, project_id: str, dataset: str = "production"):
        self.project_id = project_id
        self.dataset = dataset

    @classmethod
    def from_config(cls, config: CatalogueConfig) -> "SanityImageUrlBuilder":
        return cls(config.sanity_project_id, config.sanity_dataset)

    def url_for(self, reference: Any, width: int | None = None) -> str:
        if isinstance(reference, dict):
            asset = reference.get("asset") or {}
            if isinstance(asset, dict):
                if asset.get("url"):
                    return asset["url"]
                ref = asset.get("_ref") or asset.get("_id")
            else:
                ref = asset
            return self.url_for(ref, width)

        if not isinstance(reference, str) or not reference:
            raise ValueError(f"unsupported image reference: {reference!r}")

        if reference.startswith(("http://", "https://")):
            return reference

        match = _SANITY_REF.match(reference)
        if not match:
            raise ValueError(f"malformed asset ref: {reference!r}")

        url = (
            f"{SANITY_CDN}/{self.project_id}/{self.dataset}/"
            f"{match['id']}-{match['dims']}.{match['ext']}"
        )
        params = {}
        if width:
            params["w"] = int(width)
        params["auto"] = "format"
        return f"{url}?{urlencode(params)}"


def proxy_url(asset_url: str, proxy_base_url: str) -> str:
    """Same-origin proxy form: ``<base>/proxy?url=<encoded asset url>``."""
    return f"{proxy_base_url.rstrip('/')}/proxy?url={quote(asset_url, safe='')}"


def content_type_for(url: str) -> str:
    """``png`` -> image/png, anything else -> image/jpeg (query string ignored)."""
    path = urlparse(url).path
    extension = path.rsplit(".", 1)[-1].lower() if "." in path else ""
    return "image/png" if extension == "png" else "image/jpeg"


def host_allowed(url: str, allowed_hosts: Sequence[str]) -> bool:
    """http(s) URL whose host is listed; an empty list allows any host."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False
    return not allowed_hosts or parsed.hostname in allowed_hosts


def fetch_asset(url: str, session: requests.Session | None = None, timeout: float = 5.0) -> Tuple[bytes, str]:
    """
    Fetch raw bytes for an asset URL. Used both by the proxy endpoint and by
    in-process resolution, so both paths label content the same way.
    """
    logger.debug("Fetching asset: %s", url)
    getter = session or requests
    resp = getter.get(url, headers={"User-Agent": USER_AGENT}, timeout=timeout)
    resp.raise_for_status()
    return resp.content, content_type_for(url)


@dataclass(frozen=True)
class ResolvedImage:
    data: bytes
    width: int
    height: int
    content_type: str


def decode_image(reference: Any, data: bytes, content_type: str) -> ResolvedImage:
    if not data:
        raise ImageUnavailable(reference, "empty response")
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            width, height = img.size
    except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
        raise ImageUnavailable(reference, f"undecodable image: {exc}") from exc
    return ResolvedImage(data=data, width=width, height=height, content_type=content_type)


class ImageResolver:
    """Resolve and download item images with bounded concurrency."""

    def __init__(
        self,
        url_builder: SanityImageUrlBuilder,
        session: requests.Session | None = None,
        proxy_base_url: str | None = None,
        timeout: float = 5.0,
        max_workers: int = 6,
        total_timeout: float = 120.0,
        image_width: int = 1200,
    ):
        self.url_builder = url_builder
        self.session = session or requests.Session()
        self.proxy_base_url = proxy_base_url
        self.timeout = timeout
        self.max_workers = max(1, int(max_workers))
        self.total_timeout = total_timeout
        self.image_width = image_width

    @classmethod
    def from_config(cls, config: CatalogueConfig, session: requests.Session | None = None) -> "ImageResolver":
        return cls(
            SanityImageUrlBuilder.from_config(config),
            session=session,
            proxy_base_url=config.proxy_base_url,
            timeout=config.fetch_timeout,
            max_workers=config.fetch_workers,
            total_timeout=config.generation_timeout,
            image_width=config.image_width,
        )

    def resolve_url(self, reference: Any) -> str:
        asset_url = self.url_builder.url_for(reference, width=self.image_width)
        if self.proxy_base_url:
            return proxy_url(asset_url, self.proxy_base_url)
        return asset_url

    def fetch(self, reference: Any) -> ResolvedImage:
        """Return the decoded image or raise ImageUnavailable."""
        if not reference:
            raise ImageUnavailable(reference, "no image reference")
        try:
            url = self.resolve_url(reference)
        except ValueError as exc:
            raise ImageUnavailable(reference, str(exc)) from exc
        try:
            data, content_type = fetch_asset(url, self.session, self.timeout)
        except requests.RequestException as exc:
            raise ImageUnavailable(reference, f"request failed: {exc}") from exc
        return decode_image(reference, data, content_type)

    def try_fetch(self, item: CatalogueItem) -> Optional[ResolvedImage]:
        try:
            return self.fetch(item.image)
        except ImageUnavailable as exc:
            logger.warning("Failed to load image for %s: %s", item.label, exc.reason)
            return None

    def fetch_all(self, items: Sequence[CatalogueItem]) -> List[Optional[ResolvedImage]]:
        """
        Fetch every item's image; slot ``i`` of the result belongs to ``items[i]``.
        Downloads still pending when ``total_timeout`` runs out count as unavailable.
        """
        results: List[Optional[ResolvedImage]] = [None] * len(items)
        if not items:
            return results

        pool = ThreadPoolExecutor(max_workers=min(self.max_workers, len(items)))
        try:
            futures = {pool.submit(self.try_fetch, item): idx for idx, item in enumerate(items)}
            done, not_done = wait(futures, timeout=self.total_timeout)
            for future in done:
                results[futures[future]] = future.result()
            for future in not_done:
                future.cancel()
                logger.warning(
                    "Image fetch for %s exceeded the %.0fs generation budget",
                    items[futures[future]].label,
                    self.total_timeout,
                )
        finally:
            pool.shutdown(wait=False, cancel_futures=True)
        return results


__all__ = [
    "SanityImageUrlBuilder",
    "ImageResolver",
    "ResolvedImage",
    "proxy_url",
    "content_type_for",
    "host_allowed",
    "fetch_asset",
    "decode_image",
]
