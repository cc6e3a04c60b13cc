"""
Document API

Serves the FNA PDF:

    GET /fna/{id}/pdf -> 200 application/pdf
                         Content-Disposition: inline; filename="fna-{id}.pdf"
                         Cache-Control: no-store

Run with:
    uvicorn src.api.app:app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from src.api.dependencies import get_dashboard_flow, require_session
from src.audit import AuditLogger, configure_logging
from src.auth import AuthMissingError
from src.config import get_settings, require_backend_settings
from src.orchestrator import DashboardFlow
from src.services.documents import RenderError

logger = logging.getLogger(__name__)


router = APIRouter(dependencies=[Depends(require_session)])


@router.get("/fna/{session_id}/pdf")
async def fna_pdf(
    session_id: str,
    flow: DashboardFlow = Depends(get_dashboard_flow),
) -> Response:
    """Render the session's PDF in full, then send it."""
    document = await flow.render_pdf(session_id)
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers=document.headers,
    )


async def auth_missing_handler(request: Request, exc: AuthMissingError) -> RedirectResponse:
    return RedirectResponse(url=get_settings().app.auth_entry_path, status_code=307)


async def render_error_handler(request: Request, exc: RenderError) -> JSONResponse:
    AuditLogger().log_error("RenderError", str(exc), details={"path": request.url.path})
    return JSONResponse(status_code=500, content={"error": str(exc)})


def create_app(check_settings: bool = True) -> FastAPI:
    """
    Build the API application.

    Args:
        check_settings: Fail at startup when the backend is not configured.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(get_settings().app.debug_mode)
        if check_settings:
            require_backend_settings()
        logger.info("Document API started")
        yield
        logger.info("Document API stopped")

    app = FastAPI(title="FNA Intake API", version="1.0.0", lifespan=lifespan)

    app.add_exception_handler(AuthMissingError, auth_missing_handler)
    app.add_exception_handler(RenderError, render_error_handler)

    app.include_router(router)

    @app.get("/health")
    def health_check() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
