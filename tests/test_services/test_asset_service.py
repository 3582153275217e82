"""
Tests for asset_service CRUD against the JSON data files.
"""

import json

import pytest

from assettrack.services import asset_service
from assettrack.services.asset_service import NotFoundError
from assettrack.store import ASSETS_FILE, SUB_ASSETS_FILE


def _stored(data_dir, filename):
    return json.loads((data_dir / filename).read_text(encoding="utf-8"))


class TestAssets:
    """Tests for asset create/update/delete."""

    def test_create_assigns_id_and_timestamps(self, data_dir):
        record = asset_service.create_asset({"name": "Boiler", "price": 500})

        assert len(record["id"]) == asset_service.ID_DIGITS
        assert record["id"].isdigit()
        assert record["maintenanceEvents"] == []
        assert record["createdAt"] == record["updatedAt"]
        assert _stored(data_dir, ASSETS_FILE) == [record]

    def test_create_keeps_given_id(self, data_dir):
        record = asset_service.create_asset({"id": 42, "name": "Boiler"})
        assert record["id"] == "42"

    def test_create_requires_name(self, data_dir):
        with pytest.raises(ValueError, match="name is required"):
            asset_service.create_asset({"price": 5})

    def test_update_keeps_created_at(self, write_data, data_dir):
        write_data(assets=[{"id": "1", "name": "Old", "createdAt": "2024-01-01T00:00:00+00:00"}])

        record = asset_service.update_asset({"id": "1", "name": "New", "createdAt": "bogus"})

        assert record["createdAt"] == "2024-01-01T00:00:00+00:00"
        assert record["updatedAt"] != record["createdAt"]
        assert _stored(data_dir, ASSETS_FILE)[0]["name"] == "New"

    def test_update_missing_asset(self, data_dir):
        with pytest.raises(NotFoundError):
            asset_service.update_asset({"id": "404", "name": "Ghost"})

    def test_update_requires_id_and_name(self, data_dir):
        with pytest.raises(ValueError, match="ID and name are required"):
            asset_service.update_asset({"name": "No id"})

    def test_delete_removes_components(self, write_data, data_dir):
        write_data(
            assets=[{"id": "1", "name": "Boiler"}, {"id": "2", "name": "Chiller"}],
            sub_assets=[
                {"id": "10", "name": "Pump", "parentId": "1"},
                {"id": "11", "name": "Valve", "parentId": 1},
                {"id": "20", "name": "Fan", "parentId": "2"},
            ],
        )

        result = asset_service.delete_asset("1")

        assert result["removedSubAssets"] == 2
        assert [asset["id"] for asset in _stored(data_dir, ASSETS_FILE)] == ["2"]
        assert [sub["id"] for sub in _stored(data_dir, SUB_ASSETS_FILE)] == ["20"]

    def test_delete_missing_asset(self, data_dir):
        with pytest.raises(NotFoundError):
            asset_service.delete_asset("404")


class TestSubAssets:
    """Tests for component create/update/delete."""

    def test_create_requires_parent(self, data_dir):
        with pytest.raises(ValueError, match="parent ID are required"):
            asset_service.create_sub_asset({"name": "Pump"})

    def test_create_and_update(self, data_dir):
        created = asset_service.create_sub_asset({"name": "Pump", "parentId": "1"})
        updated = asset_service.update_sub_asset({**created, "name": "Big Pump"})

        assert updated["createdAt"] == created["createdAt"]
        assert _stored(data_dir, SUB_ASSETS_FILE)[0]["name"] == "Big Pump"

    def test_update_missing(self, data_dir):
        with pytest.raises(NotFoundError):
            asset_service.update_sub_asset({"id": "9", "name": "Pump", "parentId": "1"})

    def test_delete_cascades_through_sub_components(self, write_data, data_dir):
        write_data(
            sub_assets=[
                {"id": "10", "name": "Pump", "parentId": "1"},
                {"id": "11", "name": "Impeller", "parentId": "1", "parentSubId": "10"},
                {"id": "12", "name": "Blade", "parentId": "1", "parentSubId": "11"},
                {"id": "13", "name": "Valve", "parentId": "1"},
            ]
        )

        result = asset_service.delete_sub_asset("10")

        assert result["subAsset"]["name"] == "Pump"
        assert result["removedChildren"] == 2
        assert [sub["id"] for sub in _stored(data_dir, SUB_ASSETS_FILE)] == ["13"]

    def test_delete_missing(self, data_dir):
        with pytest.raises(NotFoundError):
            asset_service.delete_sub_asset("404")


class TestQueries:
    """Tests for loading records as models."""

    def test_load_all_skips_non_objects(self, write_data):
        write_data(
            assets=[{"id": "1", "name": "Boiler"}, "junk"],
            sub_assets=[{"id": "10", "name": "Pump", "parentId": "1"}],
        )
        assets, sub_assets = asset_service.load_all()
        assert [asset.id for asset in assets] == ["1"]
        assert sub_assets[0].parent_id == "1"

    def test_corrupt_file_reads_as_empty(self, data_dir):
        (data_dir / ASSETS_FILE).write_text("{not json", encoding="utf-8")
        assert asset_service.get_asset_records() == []

    def test_generate_id_avoids_existing(self, monkeypatch):
        candidates = iter([1234567890, 1234567890, 2222222222])
        monkeypatch.setattr(asset_service.random, "randint", lambda low, high: next(candidates))
        assert asset_service.generate_id([{"id": "1234567890"}]) == "2222222222"

    def test_malformed_fields_are_dropped(self, write_data):
        write_data(
            assets=[
                {
                    "id": "1",
                    "name": "Laptop",
                    "warranty": "3 years",
                    "secondaryWarranty": ["x"],
                    "tags": 5,
                    "photoPaths": "a.jpg",
                    "photoInfo": 7,
                },
                {"id": "2", "name": "Boiler", "tags": ["hvac"], "warranty": {"expirationDate": "2025-05-01"}},
            ]
        )
        laptop, boiler = asset_service.load_all()[0]

        assert laptop.warranty is None
        assert laptop.secondary_warranty is None
        assert laptop.tags == ()
        assert laptop.attachments == ()
        assert boiler.tags == ("hvac",)
        assert boiler.warranty.expiration_date == "2025-05-01"
