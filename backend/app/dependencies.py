from __future__ import annotations

from functools import lru_cache

import requests
from fastapi import Depends

from catalogue_builder.data_sources import build_store, load_config
from catalogue_builder.images import ImageResolver
from catalogue_builder.mailer import Mailer
from catalogue_builder.models import CatalogueConfig

from .config import get_settings


@lru_cache()
def get_catalogue_config() -> CatalogueConfig:
    settings = get_settings()
    cfg = load_config(settings.config_path)
    if settings.items_json:
        cfg.items_json = settings.items_json
    if settings.smtp_host:
        cfg.smtp_host = settings.smtp_host
    if settings.smtp_port:
        cfg.smtp_port = settings.smtp_port
    cfg.smtp_user = settings.email_user or cfg.smtp_user
    cfg.smtp_password = settings.email_pass or cfg.smtp_password
    return cfg


@lru_cache()
def get_http_session() -> requests.Session:
    return requests.Session()


def get_resolver(
    config: CatalogueConfig = Depends(get_catalogue_config),
    session: requests.Session = Depends(get_http_session),
) -> ImageResolver:
    return ImageResolver.from_config(config, session=session)


def get_store(config: CatalogueConfig = Depends(get_catalogue_config)):
    return build_store(config, token=get_settings().sanity_token)


def get_mailer(config: CatalogueConfig = Depends(get_catalogue_config)) -> Mailer:
    return Mailer.from_config(config)
