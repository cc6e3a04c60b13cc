"""
Streamlit Frontend for FNA Intake

Agents use this to pick a client, walk through the six FNA sections,
and save. The dashboard lists FNA sessions and offers each as a PDF.

DESIGN PRINCIPLES:
1. Edits stay in the draft until the agent presses Save
2. Switching tabs or reruns never lose an edit
3. Backend errors are shown as-is, inline, next to what failed
4. Every page goes through the same session guard

Run with:
    streamlit run app/main.py
"""

import asyncio
import functools
from datetime import date, time

import streamlit as st

from src.audit import AuditLogger, configure_logging
from src.auth import AuthMissingError, SessionVerifier
from src.config import get_settings, require_backend_settings, validate_all_settings
from src.intake import FieldView, FnaTab, active_client_html, save_status_html
from src.models.fna import FieldKind
from src.orchestrator import DashboardFlow, FnaIntakeFlow, create_app_components
from src.services.documents import RenderError
from src.services.storage import SupabaseClient


# Page configuration
st.set_page_config(
    page_title="Financial Needs Analysis",
    page_icon="📋",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .success-box {
        padding: 12px 16px;
        background-color: #d4edda;
        border-radius: 8px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .warning-box {
        padding: 12px 16px;
        background-color: #fff3cd;
        border-radius: 8px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .active-client {
        padding: 8px 16px;
        background-color: #eff6ff;
        border-radius: 8px;
    }
</style>
""", unsafe_allow_html=True)


PAGES = {
    "fna": "📋 FNA",
    "dashboard": "📊 Dashboard",
    "settings": "⚙️ Settings",
}

SESSION_KEYS = ("auth_session", "components", "components_token")


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_components(access_token: str) -> tuple[FnaIntakeFlow, DashboardFlow]:
    """Per-browser-session components, rebuilt when the signed-in user changes."""
    if st.session_state.get("components_token") != access_token:
        intake_flow, dashboard_flow, _ = create_app_components(
            use_storage=True,
            access_token=access_token,
        )
        st.session_state.components = (intake_flow, dashboard_flow)
        st.session_state.components_token = access_token
    return st.session_state.components


# =============================================================================
# SESSION GUARD
# =============================================================================

def guarded_page(render):
    """
    Show the auth entry page when there is no session or its token no
    longer verifies.

    Applied to every page; pages receive the verified AuthSession.
    """
    @functools.wraps(render)
    def wrapper(*args, **kwargs):
        verifier = SessionVerifier(SupabaseClient(require_backend_settings()))
        try:
            auth_session = verifier.check(st.session_state.get("auth_session"))
        except AuthMissingError as e:
            clear_session()
            AuditLogger().log_auth_redirect(
                get_settings().app.auth_entry_path,
                f"{e.reason} (page {render.__name__})",
            )
            render_auth_page()
            return None
        return render(auth_session, *args, **kwargs)
    return wrapper


def clear_session():
    for key in SESSION_KEYS:
        st.session_state.pop(key, None)


def render_auth_page():
    """Sign-in entry point."""
    st.title("🔐 Sign in")
    st.markdown("Sign in to continue.")

    with st.form("sign_in"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary")

    if submitted:
        verifier = SessionVerifier(SupabaseClient(require_backend_settings()))
        try:
            st.session_state.auth_session = verifier.sign_in(email, password)
        except AuthMissingError as e:
            st.error(e.reason)
        else:
            st.rerun()


# =============================================================================
# MAIN
# =============================================================================

def main():
    """Main application entry point."""
    settings = get_settings()
    configure_logging(settings.app.debug_mode)

    # Missing backend configuration is fatal
    require_backend_settings()

    st.sidebar.title("📋 FNA Intake")
    st.sidebar.markdown("---")

    current = st.query_params.get("page", "fna")
    if current not in PAGES:
        current = "fna"
    page = st.sidebar.radio(
        "Navigate to:",
        list(PAGES),
        index=list(PAGES).index(current),
        format_func=lambda key: PAGES[key],
    )
    if page != current:
        st.query_params.clear()
        st.query_params["page"] = page
        st.rerun()

    if st.session_state.get("auth_session") is not None:
        st.sidebar.markdown("---")
        st.sidebar.caption(f"Signed in as {st.session_state.auth_session.email or 'agent'}")
        if st.sidebar.button("Sign out"):
            clear_session()
            st.rerun()

    if page == "fna":
        render_intake_page()
    elif page == "dashboard":
        render_dashboard_page()
    elif page == "settings":
        render_settings_page()


# =============================================================================
# FNA INTAKE
# =============================================================================

@guarded_page
def render_intake_page(auth_session):
    """Client picker plus the six FNA tabs."""
    intake, _ = get_components(auth_session.access_token)

    st.title("Financial Needs Analysis")
    st.markdown("Select a client to complete their FNA across 6 organized tabs.")

    if not intake.selector.loaded:
        run_async(intake.load_clients())

    if intake.selector.load_error:
        st.error(f"Could not load clients: {intake.selector.load_error}")
        if st.button("🔄 Reload clients"):
            run_async(intake.load_clients(force=True))
            st.rerun()
        return

    col1, col2 = st.columns([3, 2])
    with col1:
        query = st.text_input(
            "Search clients",
            placeholder="🔍 Search clients by name or phone...",
            key="client_search",
        )
    with col2:
        client = intake.active_client
        if client:
            st.markdown(active_client_html(client), unsafe_allow_html=True)

    render_client_table(intake, query)

    if intake.active_client:
        st.markdown("---")
        render_fna_form(intake)


def render_client_table(intake: FnaIntakeFlow, query: str):
    result = intake.search(query)
    if result.empty_message:
        st.info(result.empty_message)
        return

    header = st.columns([3, 2, 3, 1])
    for col, title in zip(header, ["Name", "Phone", "Email", ""]):
        col.markdown(f"**{title}**")

    with st.container(height=260):
        for client in result.clients:
            name_col, phone_col, email_col, action_col = st.columns([3, 2, 3, 1])
            name_col.write(client.display_name)
            phone_col.write(client.phone)
            email_col.write(client.email_display)
            if action_col.button("Select", key=f"select:{client.id}"):
                run_async(intake.select_client(client))
                st.rerun()


def render_fna_form(intake: FnaIntakeFlow):
    controller = intake.controller

    if controller.load_error:
        st.error(f"Could not load FNA: {controller.load_error}")
        return
    if not controller.is_loaded:
        st.info("Loading FNA...")
        return

    tab = st.radio(
        "Section",
        intake.tabs.tabs(),
        index=intake.tabs.tabs().index(intake.tabs.active),
        format_func=lambda t: t.label,
        horizontal=True,
        label_visibility="collapsed",
        key=f"tab:{controller.header_id}",
    )
    intake.switch_tab(tab)

    placeholder = intake.tabs.placeholder()
    if placeholder:
        st.write(placeholder)
    else:
        views = intake.tabs.view(controller.draft)
        columns = st.columns(2) if intake.tabs.active != FnaTab.GOALS else [st.container()]
        for idx, view in enumerate(views):
            with columns[idx % len(columns)]:
                render_field(intake, view)

    st.markdown("---")
    status_col, button_col = st.columns([3, 1])
    with button_col:
        if st.button(
            "💾 Saving..." if controller.is_saving else "💾 Save FNA",
            type="primary",
            disabled=controller.is_saving,
        ):
            run_async(intake.save())
    with status_col:
        if controller.status_message:
            st.markdown(
                save_status_html(controller.status_message, controller.last_save_ok),
                unsafe_allow_html=True,
            )


def render_field(intake: FnaIntakeFlow, view: FieldView):
    """Draw one field bound to the draft and push any change back."""
    spec = view.spec
    key = f"{intake.controller.header_id}:{spec.name}"

    if spec.kind == FieldKind.YES_NO:
        st.markdown(f"**{spec.label}**")
        yes_col, no_col = st.columns(2)
        if yes_col.button("Yes", key=f"{key}:yes", type="primary" if view.yes_selected else "secondary"):
            intake.edit(spec.name, True)
            st.rerun()
        if no_col.button("No", key=f"{key}:no", type="primary" if view.no_selected else "secondary"):
            intake.edit(spec.name, False)
            st.rerun()
        return

    if spec.kind == FieldKind.TEXTAREA:
        new_value = st.text_area(spec.label, value=view.display_value, key=key)
    elif spec.kind == FieldKind.DATE:
        new_value = st.date_input(
            spec.label,
            value=view.value if isinstance(view.value, date) else None,
            key=key,
        )
    elif spec.kind == FieldKind.TIME:
        new_value = st.time_input(
            spec.label,
            value=view.value if isinstance(view.value, time) else None,
            key=key,
        )
    else:
        # Numbers are typed as text so an empty box stays empty (None on save)
        new_value = st.text_input(spec.label, value=view.display_value, key=key)

    if spec.kind in (FieldKind.DATE, FieldKind.TIME):
        changed = new_value != view.value
    else:
        changed = new_value != view.display_value
    if changed:
        intake.edit(spec.name, new_value)


# =============================================================================
# DASHBOARD
# =============================================================================

@guarded_page
def render_dashboard_page(auth_session):
    """Session list, or one session when ?id= is set."""
    _, dashboard = get_components(auth_session.access_token)

    session_id = st.query_params.get("id")
    if session_id:
        render_session_detail(dashboard, session_id)
        return

    st.title("📊 Agent Dashboard")

    with st.spinner("Loading…"):
        sessions, error = run_async(dashboard.list_sessions())

    if error:
        st.error(f"Could not load sessions: {error}")
        return
    if not sessions:
        st.info("No FNA sessions yet.")
        return

    header = st.columns([3, 2, 2, 2])
    for col, title in zip(header, ["Date", "Income", "Dependents", "Actions"]):
        col.markdown(f"**{title}**")

    for session in sessions:
        date_col, income_col, dependents_col, action_col = st.columns([3, 2, 2, 2])
        date_col.write(session.created_at.strftime("%d %b %Y %H:%M"))
        income_col.write(session.income_display)
        dependents_col.write(session.dependents_display)
        if action_col.button("View / PDF", key=f"view:{session.id}"):
            st.query_params["page"] = "dashboard"
            st.query_params["id"] = session.id
            st.rerun()


def render_session_detail(dashboard: DashboardFlow, session_id: str):
    st.title(f"FNA {session_id}")

    if st.button("← Back to dashboard"):
        st.query_params.pop("id", None)
        st.rerun()

    session = run_async(dashboard.get_session(session_id))
    if session:
        col1, col2, col3 = st.columns(3)
        col1.metric("Created", session.created_at.strftime("%d %b %Y"))
        col2.metric("Household income", session.income_display)
        col3.metric("Dependents", session.dependents_display)
    else:
        st.info("Session details are not available; the PDF will only show the id.")

    try:
        document = run_async(dashboard.render_pdf(session_id))
    except RenderError as e:
        st.error(f"Could not render PDF: {e}")
        return

    st.download_button(
        "⬇️ Download PDF",
        data=document.content,
        file_name=document.filename,
        mime=document.media_type,
        type="primary",
    )


# =============================================================================
# SETTINGS
# =============================================================================

@guarded_page
def render_settings_page(auth_session):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    status = validate_all_settings()

    services = [
        ("Supabase (Storage & Auth)", "supabase"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("### Document API")
    st.code(f"GET {get_settings().app.api_base_url.rstrip('/')}/fna/{{id}}/pdf")
    st.caption("Requires an Authorization: Bearer header or the session cookie.")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your Supabase project URL "
        "and anonymous key. See `.env.example` for the required variables."
    )


if __name__ == "__main__":
    main()
