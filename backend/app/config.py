from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel


def _env_path(name: str) -> Optional[Path]:
    value = os.getenv(name)
    return Path(value) if value else None


class Settings(BaseModel):
    config_path: Optional[Path] = None
    items_json: Optional[Path] = None
    log_file: Optional[str] = None
    email_user: Optional[str] = None
    email_pass: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    sanity_token: Optional[str] = None
    api_title: str = "Bloudan Catalogue API"
    api_description: str = "FastAPI backend that renders the bangles catalogue to PDF and emails it on request."
    api_version: str = "0.1.0"


@lru_cache()
def get_settings() -> Settings:
    port = os.getenv("SMTP_PORT")
    return Settings(
        config_path=_env_path("CATALOGUE_CONFIG"),
        items_json=_env_path("CATALOGUE_ITEMS_JSON"),
        log_file=os.getenv("CATALOGUE_LOG_FILE"),
        email_user=os.getenv("EMAIL_USER"),
        email_pass=os.getenv("EMAIL_PASS"),
        smtp_host=os.getenv("SMTP_HOST"),
        smtp_port=int(port) if port else None,
        sanity_token=os.getenv("SANITY_READ_TOKEN"),
    )
