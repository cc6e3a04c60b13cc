"""
Main Orchestrator for FNA Intake

Ties the components together and defines the end-to-end flows:
1. Intake (pick client -> load/create header -> edit tabs -> save)
2. Dashboard (list sessions -> open one -> render PDF)

DESIGN DECISION: The UI and the API only ever talk to these flows.
They never reach into storage directly, so every step is audited the
same way no matter where it was triggered from.
"""

from typing import Any, Optional, Union
from uuid import UUID

from src.audit import AuditLogger, create_correlation_id
from src.config import get_settings, require_backend_settings
from src.intake import ClientSelector, FilterResult, FnaFormController, FnaTab, TabPresenter
from src.models.client import Client, FnaSession
from src.models.fna import FnaHeader, SaveResult
from src.services.documents import FnaPdfRenderer, RenderedDocument, RenderError
from src.services.storage import (
    FnaStorageInterface,
    InMemoryFnaStorage,
    StorageError,
    SupabaseClient,
    SupabaseFnaStorage,
)


class FnaIntakeFlow:
    """
    Orchestrates one user's intake session.

    Flow:
    1. Load clients (once)
    2. Select a client -> header loaded or created
    3. Edit fields on any tab (draft only)
    4. Save -> coerced full-row update

    Nothing is written until the user presses Save.
    """

    def __init__(
        self,
        storage: FnaStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._audit_logger = audit_logger or AuditLogger()
        self.controller = FnaFormController(storage, self._audit_logger)
        self.selector = ClientSelector(storage, self.controller, self._audit_logger)
        self.tabs = TabPresenter()

    @property
    def active_client(self) -> Optional[Client]:
        return self.selector.active_client

    async def load_clients(self, force: bool = False) -> list[Client]:
        return await self.selector.load(force=force, correlation_id=create_correlation_id())

    def search(self, query: str) -> FilterResult:
        return self.selector.filter(query)

    async def select_client(
        self,
        client: Client,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[FnaHeader]:
        """
        Select a client. Load failures are kept on the controller
        (controller.load_error) for inline display.
        """
        correlation_id = correlation_id or create_correlation_id()
        try:
            return await self.selector.select(client, correlation_id)
        except StorageError:
            return None

    def switch_tab(self, tab: Union[FnaTab, str]) -> FnaTab:
        return self.tabs.switch(tab, client_selected=self.active_client is not None)

    def edit(self, name: str, raw_value: Any) -> None:
        self.controller.set_field(name, raw_value)

    async def save(self, correlation_id: Optional[UUID] = None) -> SaveResult:
        return await self.controller.save(correlation_id or create_correlation_id())


class DashboardFlow:
    """
    Orchestrates the dashboard and document rendering.

    Sessions are read-only here.
    """

    def __init__(
        self,
        storage: FnaStorageInterface,
        renderer: Optional[FnaPdfRenderer] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger or AuditLogger()
        self._renderer = renderer or FnaPdfRenderer(
            font_family=get_settings().app.pdf_font_family,
            audit_logger=self._audit_logger,
        )

    async def list_sessions(self) -> tuple[list[FnaSession], Optional[str]]:
        """
        List sessions, newest first.

        Returns:
            (sessions, error_message)
        """
        correlation_id = create_correlation_id()
        try:
            sessions = await self._storage.list_sessions()
        except StorageError as e:
            self._audit_logger.log_sessions_load_failed(e.message, correlation_id)
            return [], e.message

        self._audit_logger.log_sessions_loaded(len(sessions), correlation_id)
        return sessions, None

    async def get_session(self, session_id: str) -> Optional[FnaSession]:
        return await self._storage.get_session(session_id)

    async def render_pdf(self, session_id: str) -> RenderedDocument:
        """
        Render the PDF for a session.

        An unknown session still renders (the document names the id);
        a failed lookup does not.

        Raises:
            RenderError: if the lookup or the generation fails
        """
        try:
            session = await self._storage.get_session(session_id)
        except StorageError as e:
            self._audit_logger.log_pdf_render_failed(session_id, e.message)
            raise RenderError(f"Could not load session {session_id}: {e.message}") from e

        return self._renderer.render(session_id, session)


def create_app_components(
    use_storage: bool = True,
    access_token: Optional[str] = None,
    storage: Optional[FnaStorageInterface] = None,
) -> tuple[FnaIntakeFlow, DashboardFlow, Optional[SupabaseClient]]:
    """
    Factory function to create all application components.

    Args:
        use_storage: Connect to the hosted backend. Set to False for the
                    offline demo (in-memory storage).
        access_token: Signed-in user's token, applied to table queries.
        storage: Explicit storage to use instead (tests).

    Returns:
        (intake_flow, dashboard_flow, supabase_client)

    Raises:
        MisconfigurationError: if use_storage is set and the backend
                               is not configured
    """
    audit_logger = AuditLogger()
    supabase_client = None

    if storage is None:
        if use_storage:
            supabase_client = SupabaseClient(require_backend_settings())
            supabase_client.set_access_token(access_token)
            storage = SupabaseFnaStorage(supabase_client)
        else:
            storage = InMemoryFnaStorage()

    intake_flow = FnaIntakeFlow(storage, audit_logger)
    dashboard_flow = DashboardFlow(storage, audit_logger=audit_logger)

    return intake_flow, dashboard_flow, supabase_client
