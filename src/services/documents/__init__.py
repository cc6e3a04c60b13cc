"""Document rendering package."""

from src.services.documents.pdf_renderer import (
    FnaPdfRenderer,
    RenderedDocument,
    RenderError,
    pdf_filename,
)

__all__ = [
    "FnaPdfRenderer",
    "RenderedDocument",
    "RenderError",
    "pdf_filename",
]
