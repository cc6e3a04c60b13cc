"""FNA intake package: form state, client selection and tab navigation."""

from src.intake.banners import active_client_html, save_status_html
from src.intake.clients import ClientSelector, FilterResult, ListingState
from src.intake.controller import FnaFormController
from src.intake.tabs import (
    TAB_FIELDS,
    FieldView,
    FnaTab,
    TabPresenter,
    yes_no_state,
)

__all__ = [
    "active_client_html",
    "save_status_html",
    "ClientSelector",
    "FilterResult",
    "ListingState",
    "FnaFormController",
    "TAB_FIELDS",
    "FieldView",
    "FnaTab",
    "TabPresenter",
    "yes_no_state",
]
