"""
FNA Document Renderer

Produces the PDF served by GET /fna/{id}/pdf and offered as a download
on the session detail page.

CRITICAL: A response either carries a complete document or nothing.
The PDF is written to an in-memory buffer, the buffer is drained in
full, and the result is checked for a PDF header and trailer before
anyone sees it. Any failure along the way raises RenderError.
"""

import re
from io import BytesIO
from typing import Optional

from fpdf import FPDF
from pydantic import BaseModel, Field

from src.audit import AuditLogger
from src.models.client import FnaSession


class RenderError(Exception):
    """Document generation failed; no partial document is returned."""
    pass


_UNSAFE_FILENAME_CHARS = re.compile(r'[^A-Za-z0-9._-]')


def pdf_filename(session_id: str) -> str:
    """Suggested filename for a session's PDF, e.g. fna-abc123.pdf."""
    return f"fna-{_UNSAFE_FILENAME_CHARS.sub('_', session_id)}.pdf"


def _pdf_safe(text) -> str:
    """Core PDF fonts are latin-1 only; map the usual typographic characters first."""
    s = str(text)
    s = s.replace("\u2013", "-").replace("\u2014", "-")
    s = s.replace("\u2018", "'").replace("\u2019", "'")
    s = s.replace("\u201c", '"').replace("\u201d", '"')
    s = s.replace("\u2026", "...")
    return s.encode("latin-1", "replace").decode("latin-1")


def _is_complete_pdf(content: bytes) -> bool:
    return content.startswith(b"%PDF-") and b"%%EOF" in content[-1024:]


class RenderedDocument(BaseModel):
    """A fully generated document, ready to stream to the caller."""

    session_id: str
    content: bytes = Field(..., min_length=1)
    filename: str
    media_type: str = "application/pdf"

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Content-Disposition": f'inline; filename="{self.filename}"',
            "Cache-Control": "no-store",
        }


class FnaPdfRenderer:
    """
    Renders one FNA session to PDF.

    The document always names the session id. When the dashboard row is
    known its creation time, household income and dependents are listed.
    """

    def __init__(
        self,
        font_family: str = "Helvetica",
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._font_family = font_family
        self._audit_logger = audit_logger

    def render(
        self,
        session_id: str,
        session: Optional[FnaSession] = None,
    ) -> RenderedDocument:
        """
        Render a session to a complete PDF.

        Raises:
            RenderError: if the id is blank or generation fails
        """
        session_id = str(session_id).strip()
        if not session_id:
            raise RenderError("A session id is required to render a PDF")

        try:
            content = self._build(session_id, session)
        except Exception as e:
            if self._audit_logger:
                self._audit_logger.log_pdf_render_failed(session_id, str(e))
            raise RenderError(f"Failed to render PDF for {session_id}: {e}") from e

        if not _is_complete_pdf(content):
            if self._audit_logger:
                self._audit_logger.log_pdf_render_failed(session_id, "incomplete output")
            raise RenderError(f"PDF output for {session_id} is incomplete")

        if self._audit_logger:
            self._audit_logger.log_pdf_rendered(session_id, len(content))

        return RenderedDocument(
            session_id=session_id,
            content=content,
            filename=pdf_filename(session_id),
        )

    def _build(self, session_id: str, session: Optional[FnaSession]) -> bytes:
        pdf = FPDF()
        pdf.set_auto_page_break(auto=True, margin=15)
        pdf.set_margins(15, 15, 15)
        pdf.set_title(_pdf_safe(f"FNA {session_id}"))
        pdf.add_page()

        pdf.set_font(self._font_family, "B", 16)
        pdf.cell(0, 10, _pdf_safe(f"FNA PDF for ID: {session_id}"), new_x="LMARGIN", new_y="NEXT")

        if session is not None:
            pdf.ln(4)
            rows = [
                ("Created", session.created_at.strftime("%Y-%m-%d %H:%M")),
                ("Household income", session.income_display),
                ("Dependents", session.dependents_display),
            ]
            for label, value in rows:
                pdf.set_font(self._font_family, "B", 11)
                pdf.cell(50, 7, _pdf_safe(label), new_x="END")
                pdf.set_font(self._font_family, "", 11)
                pdf.cell(0, 7, _pdf_safe(value), new_x="LMARGIN", new_y="NEXT")

        buf = BytesIO()
        pdf.output(buf)
        return buf.getvalue()
