"""
Tests for filter_service search and dashboard-bucket filtering.
"""

from datetime import datetime

import pytest

from assettrack.models.asset import Asset, SubAsset, Warranty
from assettrack.services.event_service import WindowSpec, collect_events
from assettrack.services.filter_service import (
    ACTIVE,
    EXPIRED,
    WITHIN_30,
    WITHIN_60,
    categorical_filter,
    days_bucket,
    filter_assets,
    matches_query,
    search_filter,
    warranty_bucket,
)

NOW = datetime(2025, 1, 1, 12, 0)


def _asset(asset_id, **fields) -> Asset:
    return Asset.from_dict({"id": asset_id, "name": f"Asset {asset_id}", **fields})


def _sub(sub_id, parent_id, **fields) -> SubAsset:
    return SubAsset.from_dict(
        {"id": sub_id, "name": f"Part {sub_id}", "parentId": parent_id, **fields}
    )


class TestWarrantyBucket:
    """Tests for warranty_bucket() and days_bucket()."""

    def test_thresholds(self):
        assert days_bucket(-0.5) == EXPIRED
        assert days_bucket(0) == WITHIN_30
        assert days_bucket(30) == WITHIN_30
        assert days_bucket(30.5) == WITHIN_60
        assert days_bucket(60) == WITHIN_60
        assert days_bucket(60.5) == ACTIVE

    def test_date_only_expiration_against_noon(self):
        """Midnight on Jan 31 is 29.5 days from noon on Jan 1."""
        assert warranty_bucket(Warranty(expiration_date="2025-01-31"), NOW) == WITHIN_30
        assert warranty_bucket(Warranty(expiration_date="2025-02-01"), NOW) == WITHIN_60

    def test_lifetime_is_always_active(self):
        assert warranty_bucket(Warranty(expiration_date="2000-01-01", is_lifetime=True), NOW) == ACTIVE
        assert warranty_bucket(Warranty(is_lifetime=True), NOW) == ACTIVE

    def test_missing_or_unreadable(self):
        assert warranty_bucket(None, NOW) is None
        assert warranty_bucket(Warranty(expiration_date="soon"), NOW) is None


class TestSearch:
    """Tests for the free-text search stage."""

    def test_text_fields_case_insensitive(self):
        asset = _asset("A1", manufacturer="Carrier", location="Boiler Room")
        assert matches_query(asset, "carrier")
        assert matches_query(asset, "BOILER")
        assert not matches_query(asset, "attic")

    def test_tags(self):
        assert matches_query(_asset("A1", tags=["HVAC", "roof"]), "hvac")

    def test_numeric_query_matches_displayed_price(self):
        asset = _asset("A1", price=1200)
        assert matches_query(asset, "1200")
        assert not matches_query(asset, "999")

    def test_component_purchase_price(self):
        assert matches_query(_sub("S1", "A1", purchasePrice="45.5"), "45.50")

    def test_dates_match_in_display_form(self):
        asset = _asset("A1", warranty={"expirationDate": "2025-01-15"}, purchaseDate="2023-07-04")
        assert matches_query(asset, "01/15/2025")
        assert matches_query(asset, "07/04")
        assert not matches_query(asset, "2025-01-15x")

    def test_component_match_keeps_parent(self):
        assets = [_asset("A1"), _asset("A2")]
        sub_assets = [_sub("S1", "A1", serialNumber="XY-99"), _sub("S2", "A2")]

        result = search_filter(assets, sub_assets, "xy-99")

        assert [asset.id for asset in result.assets] == ["A1"]
        assert [sub.id for sub in result.sub_assets] == ["S1"]

    def test_parent_match_shows_all_its_components(self):
        assets = [_asset("A1", name="Furnace"), _asset("A2")]
        sub_assets = [_sub("S1", "A1"), _sub("S2", "A1"), _sub("S3", "A2")]

        result = search_filter(assets, sub_assets, "furnace")

        assert [sub.id for sub in result.sub_assets] == ["S1", "S2"]

    def test_empty_query_passes_everything(self):
        assets = [_asset("A1")]
        sub_assets = [_sub("S1", "A9")]
        result = search_filter(assets, sub_assets, "")
        assert result.assets == assets
        assert result.sub_assets == sub_assets


class TestBuckets:
    """Tests for dashboard-card filtering."""

    def setup_method(self):
        self.assets = [
            _asset("A1", warranty={"expirationDate": "2024-12-01"}),  # expired
            _asset("A2", warranty={"expirationDate": "2025-01-20"}),  # within30
            _asset("A3", warranty={"expirationDate": "2025-02-20"}),  # within60
            _asset("A4", warranty={"isLifetime": True}),  # active
            _asset("A5"),  # no warranty
        ]
        self.sub_assets = [_sub("S1", "A5", warranty={"expirationDate": "2025-01-10"})]

    def _ids(self, bucket):
        return [asset.id for asset in categorical_filter(self.assets, self.sub_assets, bucket, NOW).assets]

    def test_components(self):
        assert self._ids("components") == ["A5"]

    def test_warranties_needs_an_expiration_date(self):
        assert self._ids("warranties") == ["A1", "A2", "A3"]

    def test_urgency_buckets(self):
        assert self._ids(EXPIRED) == ["A1"]
        assert self._ids(WITHIN_60) == ["A3"]
        assert self._ids(ACTIVE) == ["A4"]

    def test_component_warranty_pulls_in_parent_after_direct_matches(self):
        assert self._ids(WITHIN_30) == ["A2", "A5"]

    def test_no_bucket(self):
        assert self._ids(None) == ["A1", "A2", "A3", "A4", "A5"]

    def test_unknown_bucket_raises(self):
        with pytest.raises(ValueError, match="Unknown dashboard filter"):
            categorical_filter(self.assets, self.sub_assets, "urgent", NOW)


class TestFilterAssets:
    """Tests for the composed filter_assets()."""

    def test_search_then_bucket(self):
        assets = [
            _asset("A1", location="Roof", warranty={"expirationDate": "2025-01-20"}),
            _asset("A2", location="Roof", warranty={"expirationDate": "2026-01-20"}),
            _asset("A3", location="Basement", warranty={"expirationDate": "2025-01-20"}),
        ]
        result = filter_assets(assets, [], "roof", WITHIN_30, NOW)
        assert [asset.id for asset in result.assets] == ["A1"]

    def test_visible_components_follow_kept_parents(self):
        assets = [
            _asset("A1", warranty={"expirationDate": "2025-01-20"}),
            _asset("A2", warranty={"expirationDate": "2026-01-20"}),
        ]
        sub_assets = [_sub("S1", "A1"), _sub("S2", "A2")]

        result = filter_assets(assets, sub_assets, None, WITHIN_30, NOW)

        assert all(sub.parent_id in result.asset_ids for sub in result.sub_assets)
        assert [sub.id for sub in result.sub_assets] == ["S1"]

    def test_events_come_only_from_the_filtered_set(self):
        assets = [
            _asset("A1", warranty={"expirationDate": "2025-01-20"}),
            _asset("A2", warranty={"expirationDate": "2025-09-01"}),
        ]
        sub_assets = [_sub("S1", "A2", warranty={"expirationDate": "2025-03-01"})]

        result = filter_assets(assets, sub_assets, None, WITHIN_30, NOW)
        events = collect_events(result.assets, result.sub_assets, WindowSpec.relative_months(12), NOW)

        visible_ids = result.asset_ids | {sub.id for sub in result.sub_assets}
        assert events
        assert {event.id for event in events} <= visible_ids
        assert "A2" not in visible_ids
