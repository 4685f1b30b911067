# catalogue_builder package
# Renders the bangles catalogue (filtered items -> card grid -> A4 PDF) and delivers it

from .errors import (
    CatalogueError,
    DeliveryUnsupported,
    DocumentAssemblyFailed,
    ImageUnavailable,
    ValidationFailed,
)
from .models import CatalogueConfig, CatalogueItem, Document, RenderFilter, SizeTag
from .filters import filter_items, validate_render_request
from .images import ImageResolver, SanityImageUrlBuilder
from .pipelines import assemble_document, attachment_filename, catalogue_filename
from .delivery import request_email_delivery, save_locally

__all__ = [
    # Errors
    "CatalogueError",
    "DeliveryUnsupported",
    "DocumentAssemblyFailed",
    "ImageUnavailable",
    "ValidationFailed",
    # Models
    "CatalogueConfig",
    "CatalogueItem",
    "Document",
    "RenderFilter",
    "SizeTag",
    # Pipeline
    "filter_items",
    "validate_render_request",
    "ImageResolver",
    "SanityImageUrlBuilder",
    "assemble_document",
    "attachment_filename",
    "catalogue_filename",
    # Delivery
    "request_email_delivery",
    "save_locally",
]
