"""
Tests for notification_service reminder selection.
"""

from datetime import datetime

from assettrack.models.asset import Asset, SubAsset
from assettrack.services.notification_service import (
    MAINTENANCE_SCHEDULE,
    WARRANTY_EXPIRING,
    due_notices,
)
from assettrack.services.settings_service import DEFAULT_NOTIFICATION_SETTINGS

NOW = datetime(2025, 1, 1, 9, 0)


def _flags(**overrides):
    return {**DEFAULT_NOTIFICATION_SETTINGS, **overrides}


def _asset(asset_id, **fields) -> Asset:
    return Asset.from_dict({"id": asset_id, "name": f"Asset {asset_id}", **fields})


class TestWarrantyNotices:
    """Tests for warranty expiration reminders."""

    def test_thirty_day_reminder(self):
        assets = [_asset("A1", modelNumber="X1", warranty={"expirationDate": "2025-01-31"})]

        notices = due_notices(assets, [], _flags(), NOW)

        assert len(notices) == 1
        notice = notices[0]
        assert notice.kind == WARRANTY_EXPIRING
        assert notice.days == 30
        assert notice.title == "Warranty"
        assert notice.to_dict()["modelNumber"] == "X1"
        assert notice.to_dict()["dueDate"] == "2025-01-31"

    def test_disabled_flag(self):
        assets = [_asset("A1", warranty={"expirationDate": "2025-01-15"})]
        assert due_notices(assets, [], _flags(), NOW) == []
        assert len(due_notices(assets, [], _flags(notify2Week=True), NOW)) == 1

    def test_other_days_are_quiet(self):
        assets = [_asset("A1", warranty={"expirationDate": "2025-01-20"})]
        assert due_notices(assets, [], _flags(notify2Week=True, notify3Day=True), NOW) == []

    def test_component_secondary_warranty(self):
        assets = [_asset("A1")]
        sub_assets = [
            SubAsset.from_dict(
                {"id": "S1", "name": "Pump", "parentId": "A1", "secondaryWarranty": {"expirationDate": "2025-01-08"}}
            )
        ]

        notices = due_notices(assets, sub_assets, _flags(), NOW)

        assert [(n.item_id, n.title, n.days) for n in notices] == [("S1", "Secondary Warranty", 7)]
        assert notices[0].asset_type == "Component"
        assert notices[0].parent_label == "Asset A1"

    def test_lifetime_never_reminds(self):
        assets = [_asset("A1", warranty={"expirationDate": "2025-01-31", "isLifetime": True})]
        assert due_notices(assets, [], _flags(), NOW) == []


class TestMaintenanceNotices:
    """Tests for maintenance reminders seven days out."""

    def setup_method(self):
        self.assets = [
            _asset(
                "A1",
                maintenanceEvents=[
                    {"type": "specific", "name": "Inspect", "specificDate": "2025-01-08", "notes": "Roof access"},
                    {
                        "type": "frequency",
                        "name": "Filter",
                        "frequency": 1,
                        "frequencyUnit": "months",
                        "nextDueDate": "2024-12-08",
                    },
                    {"type": "specific", "name": "Other day", "specificDate": "2025-01-09"},
                ],
            )
        ]

    def test_specific_and_recurring_occurrences(self):
        notices = due_notices(self.assets, [], _flags(notifyMaintenance=True), NOW)

        assert [(n.kind, n.title) for n in notices] == [
            (MAINTENANCE_SCHEDULE, "Inspect"),
            (MAINTENANCE_SCHEDULE, "Filter (Every 1 months)"),
        ]
        assert notices[0].notes == "Roof access"
        assert all(n.days == 7 for n in notices)

    def test_flag_off(self):
        assert due_notices(self.assets, [], _flags(), NOW) == []
