"""
Delivery of a finished catalogue.

Local save walks an ordered list of save targets (native save, download link,
legacy blob write) and stops at the first one that delivers. Email mode hands
generation to a scheduler and acknowledges straight away; the outcome is only
visible in the logs.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, Optional, Sequence

from .errors import DeliveryUnsupported, ValidationFailed
from .logging_utils import get_logger
from .models import Document, RenderFilter

logger = get_logger(__name__)

EMAIL_ACK_MESSAGE = "Your catalogue PDF request has been received. It will be emailed to you shortly."


class SaveCancelled(Exception):
    """The user backed out of a save dialog."""


@dataclass(frozen=True)
class DeliveryReceipt:
    target: str
    location: str
    size: int


class SaveTarget:
    """One tier of the local-save chain."""

    name = "save"

    def available(self) -> bool:
        return True

    def save(self, document: Document) -> DeliveryReceipt:
        raise NotImplementedError


class FileSaveTarget(SaveTarget):
    """
    Native save: ``choose_path`` plays the file dialog. It receives the
    suggested file name and returns the destination, or None when the user
    cancels.
    """

    name = "file"

    def __init__(self, choose_path: Callable[[str], Optional[Path]] | None):
        self.choose_path = choose_path

    def available(self) -> bool:
        return self.choose_path is not None

    def save(self, document: Document) -> DeliveryReceipt:
        path = self.choose_path(document.filename)
        if path is None:
            raise SaveCancelled(document.filename)
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(document.content)
        return DeliveryReceipt(self.name, str(path), len(document.content))


class DownloadLinkTarget(SaveTarget):
    """Publish into a served directory and hand back a download link."""

    name = "download-link"

    def __init__(self, public_dir: Path | None, base_url: str = "/"):
        self.public_dir = Path(public_dir) if public_dir else None
        self.base_url = base_url

    def available(self) -> bool:
        return self.public_dir is not None

    def save(self, document: Document) -> DeliveryReceipt:
        self.public_dir.mkdir(parents=True, exist_ok=True)
        (self.public_dir / document.filename).write_bytes(document.content)
        link = f"{self.base_url.rstrip('/')}/{document.filename}"
        return DeliveryReceipt(self.name, link, len(document.content))


class StreamSaveTarget(SaveTarget):
    """Legacy fallback: write the blob to whatever stream the host offers."""

    name = "blob"

    def __init__(self, stream: BinaryIO | None):
        self.stream = stream

    def available(self) -> bool:
        return self.stream is not None and getattr(self.stream, "writable", lambda: True)()

    def save(self, document: Document) -> DeliveryReceipt:
        self.stream.write(document.content)
        self.stream.flush()
        return DeliveryReceipt(self.name, getattr(self.stream, "name", "<stream>"), len(document.content))


def save_locally(document: Document, targets: Sequence[SaveTarget]) -> DeliveryReceipt:
    """
    Try each target in order. A tier is skipped when unavailable, when the
    user cancels, or when it raises DeliveryUnsupported.
    """
    for target in targets:
        if not target.available():
            logger.info("Save target %s unavailable; falling back", target.name)
            continue
        try:
            receipt = target.save(document)
        except SaveCancelled:
            logger.info("Save via %s cancelled; falling back", target.name)
            continue
        except DeliveryUnsupported as exc:
            logger.info("Save via %s unsupported (%s); falling back", target.name, exc)
            continue
        logger.info("Saved %s via %s: %s", document.filename, target.name, receipt.location)
        return receipt
    raise DeliveryUnsupported(f"no save target could deliver {document.filename}")


# ---------------- Email mode ----------------

Scheduler = Callable[..., Any]


def request_email_delivery(
    schedule: Scheduler,
    recipient: str,
    render_filter: Any,
    job: Callable[..., Any],
    **job_kwargs: Any,
) -> Dict[str, Any]:
    """
    Queue ``job(recipient, render_filter, **job_kwargs)`` on ``schedule``
    (FastAPI ``BackgroundTasks.add_task``, ``Executor.submit``...) and
    return the acknowledgement without waiting for it.
    """
    if not recipient:
        raise ValidationFailed("email is required")
    parsed_filter = RenderFilter.parse(render_filter)
    schedule(job, recipient, parsed_filter, **job_kwargs)
    logger.info("Queued %s catalogue for %s", parsed_filter.value, recipient)
    return {"success": True, "message": EMAIL_ACK_MESSAGE}


__all__ = [
    "SaveCancelled",
    "DeliveryReceipt",
    "SaveTarget",
    "FileSaveTarget",
    "DownloadLinkTarget",
    "StreamSaveTarget",
    "save_locally",
    "request_email_delivery",
    "EMAIL_ACK_MESSAGE",
]
