#!/usr/bin/env python3
"""
CLI wrapper for building the bangles catalogue.

Usage:
    python -m catalogue_builder.cli --filter Both                        # Sanity store, save to exports/
    python -m catalogue_builder.cli --filter Adult --items items.json --order desc
    python -m catalogue_builder.cli --filter Kids --output out/kids.pdf
    python -m catalogue_builder.cli --filter Both --stdout > catalogue.pdf
    python -m catalogue_builder.cli --filter Both --email someone@example.com
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path

import requests

from .data_sources import JsonCatalogueStore, build_store, load_config
from .delivery import DownloadLinkTarget, FileSaveTarget, StreamSaveTarget, save_locally
from .errors import CatalogueError, ValidationFailed
from .images import ImageResolver
from .jobs import run_email_job
from .logging_utils import get_logger, setup_logging
from .mailer import Mailer
from .models import RenderFilter
from .pipelines import assemble_document

logger = get_logger(__name__)


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Build the Bloudan bangles catalogue PDF")
    p.add_argument("--filter", dest="render_filter", required=True, choices=[f.value for f in RenderFilter])
    p.add_argument("--order", choices=["asc", "desc"], default="asc", help="Model number ordering")
    p.add_argument("--items", dest="items_json", type=Path, help="Catalogue items JSON (default: Sanity store)")
    p.add_argument("--config", dest="config_path", type=Path, help="catalogue.yml overrides")
    p.add_argument("--output", dest="output_pdf", type=Path)
    p.add_argument("--public-dir", dest="public_dir", type=Path, help="Publish here and print a download link")
    p.add_argument("--stdout", action="store_true", help="Write the PDF to standard output")
    p.add_argument("--proxy", dest="proxy_base_url", help="Fetch images through this proxy base URL")
    p.add_argument("--email", dest="recipient", help="Email the catalogue instead of saving it")
    p.add_argument("--log-file", dest="log_file")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO, log_file=args.log_file)

    cfg = load_config(args.config_path)
    if args.items_json:
        cfg.items_json = args.items_json
    if args.public_dir:
        cfg.public_dir = args.public_dir
    if args.proxy_base_url:
        cfg.proxy_base_url = args.proxy_base_url
    cfg.smtp_user = cfg.smtp_user or os.getenv("EMAIL_USER")
    cfg.smtp_password = cfg.smtp_password or os.getenv("EMAIL_PASS")

    store = JsonCatalogueStore(cfg.items_json) if cfg.items_json else build_store(cfg, token=os.getenv("SANITY_READ_TOKEN"))
    resolver = ImageResolver.from_config(cfg)
    render_filter = RenderFilter(args.render_filter)

    if args.recipient:
        ok = asyncio.run(
            run_email_job(args.recipient, render_filter, store, resolver, Mailer.from_config(cfg), cfg, args.order)
        )
        return 0 if ok else 1

    try:
        items = store.fetch_items(args.order)
        document = assemble_document(items, render_filter, resolver, cfg)

        def choose_path(filename: str):
            return args.output_pdf or cfg.output_dir / filename

        targets = [
            FileSaveTarget(None if args.stdout else choose_path),
            DownloadLinkTarget(cfg.public_dir, cfg.public_base_url),
            StreamSaveTarget(sys.stdout.buffer if args.stdout else None),
        ]
        receipt = save_locally(document, targets)
    except ValidationFailed as exc:
        logger.error("Invalid request: %s", exc)
        return 2
    except CatalogueError as exc:
        logger.error("Catalogue build failed: %s", exc)
        return 1
    except requests.RequestException as exc:
        logger.error("Catalogue store unreachable: %s", exc)
        return 1

    logger.info("%d pages -> %s (%s)", document.page_count, receipt.location, receipt.target)
    return 0


if __name__ == "__main__":
    sys.exit(main())
