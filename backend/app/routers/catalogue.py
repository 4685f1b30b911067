from __future__ import annotations

import requests
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from fastapi.responses import JSONResponse, Response

from catalogue_builder.delivery import request_email_delivery
from catalogue_builder.errors import ValidationFailed
from catalogue_builder.filters import filter_items
from catalogue_builder.images import ImageResolver
from catalogue_builder.jobs import run_email_job
from catalogue_builder.logging_utils import get_logger
from catalogue_builder.mailer import Mailer
from catalogue_builder.models import CatalogueConfig, RenderFilter
from catalogue_builder.pipelines import CATALOGUE_FILENAME, assemble_document

from .. import schemas
from ..dependencies import get_catalogue_config, get_mailer, get_resolver, get_store

logger = get_logger(__name__)

router = APIRouter(tags=["catalogue"])

LISTING_IMAGE_WIDTH = 500


@router.post("/generatePDF", summary="Render the posted items into a catalogue PDF")
def generate_pdf(
    payload: schemas.GeneratePdfRequest,
    resolver: ImageResolver = Depends(get_resolver),
    config: CatalogueConfig = Depends(get_catalogue_config),
):
    # ValidationFailed / DocumentAssemblyFailed are mapped to 400 / 500 in main.py
    document = assemble_document(
        payload.items,
        payload.filter or RenderFilter.BOTH.value,
        resolver,
        config,
        filename=CATALOGUE_FILENAME,
    )
    return Response(
        content=document.content,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


@router.post("/requestPDF", response_model=schemas.EmailAck, summary="Email the catalogue in the background")
def request_pdf(
    payload: schemas.EmailRequest,
    background_tasks: BackgroundTasks,
    store=Depends(get_store),
    resolver: ImageResolver = Depends(get_resolver),
    mailer: Mailer = Depends(get_mailer),
    config: CatalogueConfig = Depends(get_catalogue_config),
):
    return request_email_delivery(
        background_tasks.add_task,
        payload.email,
        payload.filter,
        run_email_job,
        store=store,
        resolver=resolver,
        mailer=mailer,
        config=config,
        order=payload.order,
    )


@router.get("/catalogue", response_model=schemas.CatalogueList, summary="List catalogue items")
def list_catalogue(
    filter: RenderFilter = Query(RenderFilter.BOTH, description="Adult, Kids or Both"),
    order: str = Query("asc", pattern="^(asc|desc)$", description="Model number ordering"),
    store=Depends(get_store),
    resolver: ImageResolver = Depends(get_resolver),
):
    try:
        items = store.fetch_items(order)
    except (requests.RequestException, ValidationFailed) as exc:
        # unreachable store or malformed records
        logger.error("Catalogue store failed: %s", exc)
        return JSONResponse(status_code=502, content={"error": "Failed to load catalogue"})

    out = []
    for item in filter_items(items, filter):
        image_url = None
        if item.image:
            try:
                image_url = resolver.url_builder.url_for(item.image, width=LISTING_IMAGE_WIDTH)
            except ValueError:
                logger.warning("No usable image reference for %s", item.label)
        out.append(schemas.CatalogueItemOut.from_item(item, image_url))
    return schemas.CatalogueList(filter=filter, order=order, total=len(out), items=out)
