from __future__ import annotations

import requests
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from catalogue_builder.images import fetch_asset, host_allowed
from catalogue_builder.logging_utils import get_logger
from catalogue_builder.models import CatalogueConfig

from ..dependencies import get_catalogue_config, get_http_session

logger = get_logger(__name__)

router = APIRouter(tags=["proxy"])


@router.get("/proxy", summary="Fetch a catalogue image on behalf of the renderer")
def proxy_image(
    url: str | None = Query(None, description="Absolute asset URL, URL-encoded"),
    config: CatalogueConfig = Depends(get_catalogue_config),
    session: requests.Session = Depends(get_http_session),
):
    if not url:
        return JSONResponse(status_code=400, content={"error": "Missing URL"})
    if not host_allowed(url, config.proxy_allowed_hosts):
        return JSONResponse(status_code=400, content={"error": "URL not allowed"})

    try:
        data, content_type = fetch_asset(url, session, config.fetch_timeout)
    except requests.RequestException as exc:
        logger.warning("Proxy fetch failed for %s: %s", url, exc)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch image"})

    return Response(
        content=data,
        media_type=content_type,
        headers={"Access-Control-Allow-Origin": "*"},
    )
