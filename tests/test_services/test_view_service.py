"""
Tests for view_service: dashboard state transitions, event rows and
the composed dashboard view.
"""

from datetime import datetime

import pytest

from assettrack.models.asset import Asset, SubAsset
from assettrack.models.event import MAINTENANCE, WARRANTY, DerivedEvent
from assettrack.services.view_service import (
    OVERDUE,
    URGENT,
    WARNING,
    DashboardConfig,
    DashboardState,
    DateRangeChanged,
    EventTypeChanged,
    FilterChanged,
    FiltersCleared,
    PageChanged,
    SearchChanged,
    SortToggled,
    apply_intent,
    build_dashboard_view,
    build_event_rows,
)

NOW = datetime(2025, 1, 1, 12, 0)


def _event(when, **fields) -> DerivedEvent:
    values = {
        "type": WARRANTY,
        "date": when,
        "name": "Boiler",
        "details": "Warranty Expiration",
        "asset_type": "Asset",
        "id": "A1",
        "is_sub_asset": False,
    }
    values.update(fields)
    return DerivedEvent(**values)


class TestApplyIntent:
    """Tests for apply_intent()."""

    def setup_method(self):
        self.state = DashboardState(query="pump", bucket="within30", page=3)

    def test_page_change_keeps_filters(self):
        state = apply_intent(self.state, PageChanged(2))
        assert state.page == 2
        assert state.query == "pump"
        assert apply_intent(self.state, PageChanged(-4)).page == 1

    @pytest.mark.parametrize(
        "intent",
        [
            FilterChanged("expired"),
            SearchChanged("fan"),
            EventTypeChanged("maintenance"),
            SortToggled(),
            DateRangeChanged("3"),
            FiltersCleared(),
        ],
    )
    def test_other_intents_reset_to_first_page(self, intent):
        assert apply_intent(self.state, intent).page == 1

    def test_search_is_trimmed(self):
        assert apply_intent(self.state, SearchChanged("  fan ")).query == "fan"

    def test_sort_toggles(self):
        toggled = apply_intent(self.state, SortToggled())
        assert toggled.sort_direction == "desc"
        assert apply_intent(toggled, SortToggled()).sort_direction == "asc"

    def test_date_range_is_normalized(self):
        assert apply_intent(self.state, DateRangeChanged("bogus")).date_range == "12"
        assert apply_intent(self.state, DateRangeChanged("past")).date_range == "past"

    def test_filters_cleared_keeps_range_type_and_sort(self):
        state = DashboardState(
            query="pump", bucket="expired", event_type="warranty", sort_direction="desc", date_range="past"
        )
        cleared = apply_intent(state, FiltersCleared())
        assert (cleared.query, cleared.bucket) == ("", None)
        assert (cleared.event_type, cleared.sort_direction, cleared.date_range) == ("warranty", "desc", "past")

    def test_input_state_unchanged(self):
        apply_intent(self.state, FiltersCleared())
        assert self.state.query == "pump"

    def test_unknown_intent(self):
        with pytest.raises(ValueError, match="Unknown dashboard intent"):
            apply_intent(self.state, object())


class TestBuildEventRows:
    """Tests for build_event_rows()."""

    def test_days_and_urgency(self):
        events = [
            _event(datetime(2024, 12, 25)),
            _event(datetime(2025, 1, 11)),
            _event(datetime(2025, 2, 15)),
            _event(datetime(2025, 4, 1)),
        ]
        rows = build_event_rows(events, NOW)

        assert [row.days_until for row in rows] == [-7, 10, 45, 90]
        assert [row.days_text for row in rows] == ["7 days past", "10 days", "45 days", "90 days"]
        assert [row.urgency for row in rows] == [OVERDUE, URGENT, WARNING, ""]
        assert rows[1].formatted_date == "01/11/2025"
        assert rows[1].type_label == "Warranty"

    def test_later_today_rounds_up(self):
        rows = build_event_rows([_event(datetime(2025, 1, 1, 18, 0))], NOW)
        assert rows[0].days_until == 1

    def test_parent_label_only_for_components(self):
        events = [
            _event(datetime(2025, 1, 11), parent_asset="Ignored"),
            _event(
                datetime(2025, 1, 12),
                type=MAINTENANCE,
                asset_type="Component",
                parent_asset="Boiler",
                id="S1",
                is_sub_asset=True,
            ),
        ]
        sub_assets = [SubAsset.from_dict({"id": "S1", "name": "Pump", "parentId": "A1"})]

        rows = build_event_rows(events, NOW, sub_assets)

        assert rows[0].parent_label is None
        assert rows[0].parent_id is None
        assert rows[1].parent_label == "Boiler"
        assert rows[1].parent_id == "A1"
        assert rows[1].to_dict()["typeLabel"] == "Maintenance"


class TestBuildDashboardView:
    """Tests for build_dashboard_view()."""

    def setup_method(self):
        self.assets = [
            Asset.from_dict({"id": "A1", "name": "Boiler", "price": 500, "warranty": {"expirationDate": "2025-01-20"}}),
            Asset.from_dict({"id": "A2", "name": "Chiller", "price": 900, "warranty": {"expirationDate": "2025-09-01"}}),
        ]
        self.sub_assets = [
            SubAsset.from_dict(
                {
                    "id": "S1",
                    "name": "Pump",
                    "parentId": "A1",
                    "maintenanceEvents": [
                        {
                            "type": "frequency",
                            "name": "Grease",
                            "frequency": 1,
                            "frequencyUnit": "months",
                            "nextDueDate": "2025-01-05",
                        }
                    ],
                }
            )
        ]

    def _view(self, state=None, config=None):
        return build_dashboard_view(self.assets, self.sub_assets, state or DashboardState(), config, NOW)

    def test_unfiltered(self):
        view = self._view()

        assert view.summary.total_assets == 2
        assert view.page.total_events == 14
        assert view.page.total_pages == 3
        assert len(view.rows) == 5
        assert view.rows[0].name == "Pump"
        assert view.maintenance_chart.counts == [1, 1, 1, 1, 1, 1]
        assert view.warranty_chart.counts == [1, 0, 0, 0, 0, 0]

    def test_cards_events_and_charts_share_one_filter(self):
        view = self._view(DashboardState(bucket="within30"))

        assert view.summary.total_assets == 1
        assert view.summary.warranty_stats.within30 == 1
        assert [(event.id, event.type) for event in view.events] == [
            ("S1", MAINTENANCE),
            ("A1", WARRANTY),
        ]
        assert view.rows[0].parent_label == "Boiler"
        assert view.rows[0].parent_id == "A1"
        assert view.warranty_chart.counts[0] == 1

    def test_type_filter_and_descending(self):
        view = self._view(DashboardState(event_type="maintenance", sort_direction="desc"))
        assert all(event.type == MAINTENANCE for event in view.events)
        assert view.events[0].date == datetime(2025, 12, 5)

    def test_search(self):
        view = self._view(DashboardState(query="chiller"))
        assert [event.id for event in view.events] == ["A2"]

    def test_page_size_and_hidden_cards(self):
        config = DashboardConfig.from_settings({"EVENTS_PER_PAGE": 10}, {"value": False})
        view = self._view(config=config)
        assert len(view.rows) == 10
        assert view.cards["value"] is False
        assert view.cards["assets"] is True

    def test_unknown_bucket(self):
        with pytest.raises(ValueError):
            self._view(DashboardState(bucket="nope"))

    def test_export_rows_use_the_view_clock(self):
        """Rows rebuilt from view.events agree with the paged rows."""
        view = self._view()
        assert view.now == NOW
        rows = build_event_rows(view.events, view.now, self.sub_assets)
        assert rows[: len(view.rows)] == view.rows
        assert rows[0].days_until == 4

    def test_to_dict_shape(self):
        data = self._view().to_dict()
        assert set(data) == {"state", "summary", "cards", "charts", "events", "pagination"}
        assert data["state"]["range"] == "12"
        assert data["summary"]["totalValue"] == "1400.00"
        assert set(data["charts"]) == {"warrantyExpirations", "maintenance"}
