"""
Tab Presenter

Six fixed sections of the FNA form. The presenter only knows which tab
is active; field values always come from the controller's draft, so
switching tabs can never lose an edit.
"""

from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel

from src.models.fna import FNA_FIELDS, FieldKind, FieldSpec


class FnaTab(str, Enum):
    """Sections of the FNA form, in display order."""
    ABOUT = "about"
    GOALS = "goals"
    ASSETS = "assets"
    LIABILITIES = "liabilities"
    INSURANCE = "insurance"
    INCOME = "income"

    @property
    def label(self) -> str:
        return TAB_LABELS[self]


TAB_LABELS: dict[FnaTab, str] = {
    FnaTab.ABOUT: "Client & Family",
    FnaTab.GOALS: "Goals & Properties",
    FnaTab.ASSETS: "Assets",
    FnaTab.LIABILITIES: "Liabilities",
    FnaTab.INSURANCE: "Insurance",
    FnaTab.INCOME: "Income & Estate",
}

TAB_FIELDS: dict[FnaTab, list[str]] = {
    FnaTab.ABOUT: [
        "spouse_name", "address", "city", "state", "zip_code",
        "more_children_planned", "more_children_count",
    ],
    FnaTab.GOALS: ["goals_text", "own_or_rent", "properties_notes"],
    FnaTab.ASSETS: ["has_old_401k", "expects_lump_sum"],
    # Multi-row grids (liabilities, properties, income sources) are not captured yet.
    FnaTab.LIABILITIES: [],
    FnaTab.INSURANCE: [
        "li_debt", "li_income", "li_mortgage", "li_education", "li_insurance_in_place",
    ],
    FnaTab.INCOME: [
        "retirement_monthly_need", "monthly_commitment",
        "next_appointment_date", "next_appointment_time",
    ],
}

PLACEHOLDERS: dict[FnaTab, str] = {
    FnaTab.LIABILITIES: "Liabilities table coming soon...",
}


def yes_no_state(value: Optional[bool]) -> tuple[bool, bool]:
    """
    (yes_selected, no_selected) for a tri-state flag.

    Unknown selects neither button; never both.
    """
    return value is True, value is False


class FieldView(BaseModel):
    """One field as it should be drawn right now."""

    spec: FieldSpec
    value: Any = None

    @property
    def display_value(self) -> str:
        """Text-box value: unset shows as empty, never as 'None'."""
        return "" if self.value is None else str(self.value)

    @property
    def yes_selected(self) -> bool:
        return self.spec.kind == FieldKind.YES_NO and yes_no_state(self.value)[0]

    @property
    def no_selected(self) -> bool:
        return self.spec.kind == FieldKind.YES_NO and yes_no_state(self.value)[1]


class TabPresenter:
    """Which tab is active. Every tab is reachable from every other tab."""

    def __init__(self):
        self._active = FnaTab.ABOUT

    @property
    def active(self) -> FnaTab:
        return self._active

    @staticmethod
    def tabs() -> list[FnaTab]:
        return list(FnaTab)

    @staticmethod
    def is_enabled(client_selected: bool) -> bool:
        """Tabs are only usable once a client is selected."""
        return client_selected

    def switch(self, tab: Union[FnaTab, str], client_selected: bool = True) -> FnaTab:
        """
        Activate a tab.

        Raises:
            ValueError: unknown tab id
            RuntimeError: no client selected yet
        """
        if not self.is_enabled(client_selected):
            raise RuntimeError("Select a client before opening the FNA tabs")
        self._active = FnaTab(tab)
        return self._active

    def fields(self, tab: Optional[FnaTab] = None) -> list[FieldSpec]:
        tab = tab or self._active
        return [FNA_FIELDS[name] for name in TAB_FIELDS[tab]]

    def placeholder(self, tab: Optional[FnaTab] = None) -> Optional[str]:
        return PLACEHOLDERS.get(tab or self._active)

    def view(self, draft: dict[str, Any], tab: Optional[FnaTab] = None) -> list[FieldView]:
        """Fields of a tab bound to the current draft values."""
        return [FieldView(spec=spec, value=draft.get(spec.name)) for spec in self.fields(tab)]
