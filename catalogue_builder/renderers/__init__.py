# renderers package
# Card, page and PDF rendering for the catalogue

from .cards import CardFlowable, render_card, weight_labels_for
from .pages import compose_pages
from .pdf_renderer import render_pdf

__all__ = [
    "CardFlowable",
    "render_card",
    "weight_labels_for",
    "compose_pages",
    "render_pdf",
]
