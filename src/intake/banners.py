"""
HTML banners shown above the form

Client data and backend messages are escaped before they reach
markdown rendered with unsafe_allow_html.
"""

import html

from src.models.client import Client


def active_client_html(client: Client) -> str:
    return (
        f'<div class="active-client">Active: <strong>{html.escape(client.display_name)}</strong> '
        f'({html.escape(client.phone)})</div>'
    )


def save_status_html(message: str, ok: bool) -> str:
    """Success or error box for the last save."""
    if ok:
        return f'<div class="success-box">✅ {html.escape(message)}</div>'
    return f'<div class="warning-box">Error saving: {html.escape(message)}</div>'
