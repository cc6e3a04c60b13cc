"""Tests for tab navigation and field views."""

import asyncio

import pytest

from src.intake import FnaTab, TabPresenter, active_client_html, save_status_html, yes_no_state
from src.intake.tabs import TAB_FIELDS
from src.models.client import Client
from src.models.fna import FNA_FIELDS
from src.orchestrator import FnaIntakeFlow


class TestTabPresenter:
    """Tests for switching between tabs."""

    def test_six_tabs_in_order(self):
        labels = [tab.label for tab in TabPresenter.tabs()]
        assert labels == [
            "Client & Family",
            "Goals & Properties",
            "Assets",
            "Liabilities",
            "Insurance",
            "Income & Estate",
        ]

    def test_starts_on_first_tab(self):
        assert TabPresenter().active == FnaTab.ABOUT

    def test_every_tab_reachable_from_every_tab(self):
        presenter = TabPresenter()
        for origin in FnaTab:
            for target in FnaTab:
                presenter.switch(origin)
                assert presenter.switch(target) == target

    def test_switch_by_id(self):
        presenter = TabPresenter()
        assert presenter.switch("insurance") == FnaTab.INSURANCE

    def test_unknown_tab(self):
        with pytest.raises(ValueError):
            TabPresenter().switch("estate")

    def test_disabled_without_client(self):
        presenter = TabPresenter()
        with pytest.raises(RuntimeError):
            presenter.switch(FnaTab.GOALS, client_selected=False)
        assert presenter.active == FnaTab.ABOUT

    def test_every_field_on_exactly_one_tab(self):
        placed = [name for names in TAB_FIELDS.values() for name in names]
        assert sorted(placed) == sorted(FNA_FIELDS)

    def test_liabilities_placeholder(self):
        presenter = TabPresenter()
        assert presenter.fields(FnaTab.LIABILITIES) == []
        assert presenter.placeholder(FnaTab.LIABILITIES) == "Liabilities table coming soon..."
        assert presenter.placeholder(FnaTab.ABOUT) is None


class TestFieldViews:
    """Tests for how field values are drawn."""

    def test_yes_no_state(self):
        assert yes_no_state(None) == (False, False)
        assert yes_no_state(True) == (True, False)
        assert yes_no_state(False) == (False, True)

    def test_tri_state_views(self):
        presenter = TabPresenter()
        views = presenter.view(
            {"has_old_401k": True, "expects_lump_sum": None},
            FnaTab.ASSETS,
        )
        by_name = {view.spec.name: view for view in views}

        assert by_name["has_old_401k"].yes_selected
        assert not by_name["has_old_401k"].no_selected
        assert not by_name["expects_lump_sum"].yes_selected
        assert not by_name["expects_lump_sum"].no_selected

    def test_unset_number_shows_empty(self):
        views = TabPresenter().view({"li_debt": None, "li_income": "0"}, FnaTab.INSURANCE)
        by_name = {view.spec.name: view for view in views}

        assert by_name["li_debt"].display_value == ""
        assert by_name["li_income"].display_value == "0"


class TestTabsWithDraft:
    """Edits survive tab switches."""

    def test_edit_survives_tab_switch(self, storage, clients):
        flow = FnaIntakeFlow(storage)
        asyncio.run(flow.select_client(clients[0]))

        flow.edit("spouse_name", "Jordan")
        flow.switch_tab(FnaTab.INSURANCE)
        flow.switch_tab(FnaTab.ABOUT)

        views = flow.tabs.view(flow.controller.draft)
        spouse = next(view for view in views if view.spec.name == "spouse_name")
        assert spouse.display_value == "Jordan"
        assert storage.update_count == 0

    def test_tabs_disabled_before_selection(self, storage):
        flow = FnaIntakeFlow(storage)
        with pytest.raises(RuntimeError):
            flow.switch_tab(FnaTab.GOALS)


class TestBanners:
    """Client data and backend messages are escaped before rendering as HTML."""

    def test_active_client_is_escaped(self):
        client = Client(id="c1", firstname="<img src=x onerror=alert(1)>", lastname="Lee", phone="<b>555</b>")

        banner = active_client_html(client)

        assert "<img" not in banner
        assert "&lt;img src=x onerror=alert(1)&gt;" in banner
        assert "&lt;b&gt;555&lt;/b&gt;" in banner

    def test_save_error_is_escaped(self):
        banner = save_status_html('invalid input syntax: "<script>"', ok=False)

        assert banner.startswith('<div class="warning-box">Error saving: ')
        assert "<script>" not in banner
        assert "&lt;script&gt;" in banner

    def test_save_success(self):
        assert save_status_html("Saved", ok=True) == '<div class="success-box">✅ Saved</div>'
