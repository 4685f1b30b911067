"""
Logging setup shared by the CLI, the HTTP service and the email jobs.

Deferred email jobs answer nobody once the request has been acknowledged, so
their outcome only exists in the file sink named by ``CATALOGUE_LOG_FILE``
(or the ``log_file`` argument).
"""

import logging
import os
from typing import List, Optional

LOG_FILE_ENV = "CATALOGUE_LOG_FILE"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def _catalogue_handlers(log_file: Optional[str]) -> List[logging.Handler]:
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """Install console (and optional file) handlers on the root logger, once per process."""
    global _configured
    if _configured:
        return
    handlers = _catalogue_handlers(log_file or os.getenv(LOG_FILE_ENV))
    logging.basicConfig(level=level, handlers=handlers, force=True)
    _configured = True


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
