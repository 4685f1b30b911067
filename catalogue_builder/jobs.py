"""
Deferred catalogue generation for email delivery.

The request that schedules this job has already been answered, so nothing
here is allowed to raise: success and failure both end up in the log sink.
"""

from __future__ import annotations

import asyncio

from .images import ImageResolver
from .logging_utils import get_logger
from .mailer import Mailer
from .models import CatalogueConfig, RenderFilter
from .pipelines import assemble_document, attachment_filename

logger = get_logger(__name__)


async def run_email_job(
    recipient: str,
    render_filter: RenderFilter,
    store,
    resolver: ImageResolver,
    mailer: Mailer,
    config: CatalogueConfig | None = None,
    order: str = "asc",
) -> bool:
    """
    Fetch items, build the catalogue and email it. Returns True on success.
    Blocking work (store query, rendering) runs in a worker thread.
    """
    render_filter = RenderFilter(render_filter)
    try:
        items = await asyncio.to_thread(store.fetch_items, order)
        document = await asyncio.to_thread(
            assemble_document,
            items,
            render_filter,
            resolver,
            config,
            attachment_filename(render_filter),
        )
        await mailer.send_with_attachment(recipient, document.content, document.filename)
    except Exception:
        logger.exception("Failed to generate/send %s catalogue for %s", render_filter.value, recipient)
        return False

    logger.info("PDF sent to %s (%d pages)", recipient, document.page_count)
    return True


__all__ = ["run_email_job"]
