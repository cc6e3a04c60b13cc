"""Tests for FNA document rendering."""

import asyncio

import pytest

from src.audit import AuditLogger
from src.orchestrator import DashboardFlow
from src.services.documents import FnaPdfRenderer, RenderError, pdf_filename
from src.services.storage import FetchError, InMemoryFnaStorage


class BrokenSessionStorage(InMemoryFnaStorage):
    async def get_session(self, session_id):
        raise FetchError("JWT expired")


class TestFnaPdfRenderer:
    """Tests for the PDF renderer."""

    def test_render_by_id(self):
        document = FnaPdfRenderer().render("abc123")

        assert document.filename == "fna-abc123.pdf"
        assert document.media_type == "application/pdf"
        assert len(document.content) > 0
        assert document.content.startswith(b"%PDF-")

    def test_headers(self):
        document = FnaPdfRenderer().render("abc123")

        assert document.headers["Content-Disposition"] == 'inline; filename="fna-abc123.pdf"'
        assert document.headers["Cache-Control"] == "no-store"

    def test_render_with_session_details(self, sessions):
        document = FnaPdfRenderer().render("abc123", sessions[0])
        assert document.content.startswith(b"%PDF-")

    def test_blank_id(self):
        with pytest.raises(RenderError):
            FnaPdfRenderer().render("  ")

    def test_long_id_renders_with_audit_logging(self):
        document = FnaPdfRenderer(audit_logger=AuditLogger()).render("x" * 600)

        assert document.filename.startswith("fna-x")
        assert document.content.startswith(b"%PDF-")

    def test_filename_is_sanitized(self):
        assert pdf_filename("a/b c") == "fna-a_b_c.pdf"


class TestDashboardFlow:
    """Tests for the dashboard flow."""

    def test_sessions_newest_first(self, storage):
        sessions, error = asyncio.run(DashboardFlow(storage).list_sessions())

        assert error is None
        assert [s.id for s in sessions] == ["abc123", "older"]

    def test_unknown_session_still_renders(self, storage):
        document = asyncio.run(DashboardFlow(storage).render_pdf("not-listed"))
        assert document.filename == "fna-not-listed.pdf"

    def test_lookup_failure_is_a_render_error(self):
        flow = DashboardFlow(BrokenSessionStorage())
        with pytest.raises(RenderError):
            asyncio.run(flow.render_pdf("abc123"))
