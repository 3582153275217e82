"""
Asset service — CRUD for assets and components on the JSON store.

Records are stored exactly as the client sends them (camelCase keys);
this service only stamps ids and timestamps and enforces the few
required fields.  Deleting an asset removes its components, and
deleting a component removes every sub-component below it.
"""

import logging
import random
from datetime import datetime, timezone

from assettrack.extensions import store
from assettrack.models.asset import Asset, SubAsset, load_assets, load_sub_assets

logger = logging.getLogger(__name__)

ID_DIGITS = 10


class NotFoundError(ValueError):
    """Raised when an asset or component id does not exist."""


# =========================================================================
# Queries
# =========================================================================


def get_asset_records() -> list[dict]:
    """Return the raw asset dictionaries."""
    return store.read_assets()


def get_sub_asset_records() -> list[dict]:
    """Return the raw component dictionaries."""
    return store.read_sub_assets()


def load_all() -> tuple[list[Asset], list[SubAsset]]:
    """Load every asset and component as model snapshots."""
    return load_assets(store.read_assets()), load_sub_assets(store.read_sub_assets())


# =========================================================================
# Assets
# =========================================================================


def create_asset(data: dict) -> dict:
    """
    Store a new asset.

    A 10-digit id is generated when the payload has none, and
    ``maintenanceEvents`` defaults to an empty list.

    Returns:
        The stored record.

    Raises:
        ValueError: If the asset has no name.
    """
    if not data.get("name"):
        raise ValueError("Asset name is required")

    assets = store.read_assets()
    record = dict(data)
    record["id"] = str(record.get("id") or generate_id(assets))
    record.setdefault("maintenanceEvents", [])
    stamp = _timestamp()
    record["createdAt"] = stamp
    record["updatedAt"] = stamp

    assets.append(record)
    store.write_assets(assets)

    logger.info("Created asset %s (%s)", record["id"], record["name"])
    return record


def update_asset(data: dict) -> dict:
    """
    Replace an existing asset, keeping its original ``createdAt``.

    Returns:
        The stored record.

    Raises:
        ValueError: If id or name is missing, or the asset is not found.
    """
    if not data.get("id") or not data.get("name"):
        raise ValueError("Asset ID and name are required")

    assets = store.read_assets()
    index = _index_of(assets, data["id"])
    if index is None:
        raise NotFoundError(f"Asset {data['id']} not found")

    record = dict(data)
    record["id"] = str(record["id"])
    record["createdAt"] = assets[index].get("createdAt") or record.get("createdAt")
    record["updatedAt"] = _timestamp()
    assets[index] = record
    store.write_assets(assets)

    logger.info("Updated asset %s", record["id"])
    return record


def delete_asset(asset_id: str) -> dict:
    """
    Delete an asset and every component whose ``parentId`` points at it.

    Returns:
        A summary ``{"asset": record, "removedSubAssets": count}``.

    Raises:
        NotFoundError: If the asset is not found.
    """
    assets = store.read_assets()
    index = _index_of(assets, asset_id)
    if index is None:
        raise NotFoundError(f"Asset {asset_id} not found")

    removed = assets.pop(index)
    store.write_assets(assets)

    sub_assets = store.read_sub_assets()
    remaining = [sub for sub in sub_assets if str(sub.get("parentId")) != str(asset_id)]
    removed_count = len(sub_assets) - len(remaining)
    if removed_count:
        store.write_sub_assets(remaining)

    logger.info("Deleted asset %s and %d component(s)", asset_id, removed_count)
    return {"asset": removed, "removedSubAssets": removed_count}


# =========================================================================
# Components
# =========================================================================


def create_sub_asset(data: dict) -> dict:
    """
    Store a new component.

    Raises:
        ValueError: If name or ``parentId`` is missing.
    """
    if not data.get("name") or not data.get("parentId"):
        raise ValueError("Sub-asset name and parent ID are required")

    sub_assets = store.read_sub_assets()
    record = dict(data)
    record["id"] = str(record.get("id") or generate_id(sub_assets))
    record.setdefault("maintenanceEvents", [])
    stamp = _timestamp()
    record["createdAt"] = stamp
    record["updatedAt"] = stamp

    sub_assets.append(record)
    store.write_sub_assets(sub_assets)

    logger.info("Created component %s under %s", record["id"], record["parentId"])
    return record


def update_sub_asset(data: dict) -> dict:
    """
    Replace an existing component, keeping its original ``createdAt``.

    Raises:
        ValueError: If id, name or ``parentId`` is missing, or the
                    component is not found.
    """
    if not data.get("id") or not data.get("name") or not data.get("parentId"):
        raise ValueError("Sub-asset ID, name, and parent ID are required")

    sub_assets = store.read_sub_assets()
    index = _index_of(sub_assets, data["id"])
    if index is None:
        raise NotFoundError(f"Sub-asset {data['id']} not found")

    record = dict(data)
    record["id"] = str(record["id"])
    record["createdAt"] = sub_assets[index].get("createdAt") or record.get("createdAt")
    record["updatedAt"] = _timestamp()
    sub_assets[index] = record
    store.write_sub_assets(sub_assets)

    logger.info("Updated component %s", record["id"])
    return record


def delete_sub_asset(sub_asset_id: str) -> dict:
    """
    Delete a component and, level by level, every component below it.

    Returns:
        A summary ``{"subAsset": record, "removedChildren": count}``.

    Raises:
        NotFoundError: If the component is not found.
    """
    sub_assets = store.read_sub_assets()
    target = _find(sub_assets, sub_asset_id)
    if target is None:
        raise NotFoundError(f"Sub-asset {sub_asset_id} not found")

    doomed = {str(sub_asset_id)}
    frontier = [str(sub_asset_id)]
    while frontier:
        children = [
            str(sub.get("id"))
            for sub in sub_assets
            if str(sub.get("parentSubId") or "") in frontier and str(sub.get("id")) not in doomed
        ]
        doomed.update(children)
        frontier = children

    remaining = [sub for sub in sub_assets if str(sub.get("id")) not in doomed]
    store.write_sub_assets(remaining)

    logger.info("Deleted component %s and %d child component(s)", sub_asset_id, len(doomed) - 1)
    return {"subAsset": target, "removedChildren": len(doomed) - 1}


# =========================================================================
# Internal helpers
# =========================================================================


def generate_id(existing: list[dict]) -> str:
    """Random 10-digit id not already used in ``existing``."""
    taken = {str(record.get("id")) for record in existing}
    while True:
        candidate = str(random.randint(10 ** (ID_DIGITS - 1), 10**ID_DIGITS - 1))
        if candidate not in taken:
            return candidate


def _find(records: list[dict], record_id: str) -> dict | None:
    index = _index_of(records, record_id)
    return None if index is None else records[index]


def _index_of(records: list[dict], record_id: str) -> int | None:
    for index, record in enumerate(records):
        if str(record.get("id")) == str(record_id):
            return index
    return None


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()
