"""
Error taxonomy for the catalogue pipeline.

Per-item problems (``ImageUnavailable``) are absorbed where they happen and
degrade a single card. Everything else reaches the caller.
"""

from __future__ import annotations


class CatalogueError(Exception):
    """Base class for every error raised by the catalogue pipeline."""


class ImageUnavailable(CatalogueError):
    """An item's image could not be fetched or decoded."""

    def __init__(self, reference, reason: str):
        super().__init__(f"image unavailable ({reason}): {reference!r}")
        self.reference = reference
        self.reason = reason


class ValidationFailed(CatalogueError):
    """Caller input was rejected before any rendering work started."""


class DocumentAssemblyFailed(CatalogueError):
    """The whole document could not be produced."""


class DeliveryUnsupported(CatalogueError):
    """No local-save tier could deliver the document."""


__all__ = [
    "CatalogueError",
    "ImageUnavailable",
    "ValidationFailed",
    "DocumentAssemblyFailed",
    "DeliveryUnsupported",
]
