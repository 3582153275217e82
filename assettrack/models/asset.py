"""
Asset and component models.

Records are persisted as flat JSON (``Assets.json`` / ``SubAssets.json``)
with camelCase keys.  These dataclasses are read-only snapshots built
from those dictionaries once per request; the dashboard engine never
mutates them.
"""

import logging
from dataclasses import dataclass
from typing import Any

from assettrack.models.maintenance import MaintenanceRule, parse_maintenance_events

logger = logging.getLogger(__name__)

# Attachment keys in the persisted format: (kind, paths key, info key).
_ATTACHMENT_KEYS = (
    ("photo", "photoPaths", "photoInfo"),
    ("receipt", "receiptPaths", "receiptInfo"),
    ("manual", "manualPaths", "manualInfo"),
)


@dataclass(frozen=True)
class Warranty:
    """
    Primary or secondary warranty coverage.

    ``expiration_date`` is kept as the raw stored value; callers parse it
    with ``date_service.parse_flexible_date`` and must handle ``None``.
    When ``is_lifetime`` is set the expiration date is ignored.
    """

    scope: str | None = None
    expiration_date: Any = None
    is_lifetime: bool = False

    @classmethod
    def from_dict(cls, data: dict | None) -> "Warranty | None":
        if not data:
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed warranty %r", data)
            return None
        return cls(
            scope=data.get("scope"),
            expiration_date=data.get("expirationDate") or None,
            is_lifetime=bool(data.get("isLifetime", False)),
        )


@dataclass(frozen=True)
class FileRef:
    """An uploaded file attached to an asset (photo, receipt or manual)."""

    kind: str
    path: str
    original_name: str | None = None
    size: int | None = None


@dataclass(frozen=True)
class TrackedItem:
    """Fields shared by assets and components."""

    id: str
    name: str | None = None
    manufacturer: str | None = None
    model_number: str | None = None
    serial_number: str | None = None
    location: str | None = None
    notes: str | None = None
    description: str | None = None
    link: str | None = None
    purchase_date: Any = None
    price: Any = None
    quantity: int = 1
    tags: tuple[str, ...] = ()
    warranty: Warranty | None = None
    secondary_warranty: Warranty | None = None
    maintenance_events: tuple[MaintenanceRule, ...] = ()
    attachments: tuple[FileRef, ...] = ()
    created_at: str | None = None
    updated_at: str | None = None

    # Key holding the price in the persisted record.
    PRICE_KEY = "price"

    @classmethod
    def _common_fields(cls, data: dict) -> dict:
        """Map the camelCase record onto constructor keyword arguments."""
        return {
            "id": str(data.get("id", "")),
            "name": data.get("name"),
            "manufacturer": data.get("manufacturer"),
            "model_number": data.get("modelNumber"),
            "serial_number": data.get("serialNumber"),
            "location": data.get("location"),
            "notes": data.get("notes"),
            "description": data.get("description"),
            "link": data.get("link"),
            "purchase_date": data.get("purchaseDate") or None,
            "price": data.get(cls.PRICE_KEY),
            "quantity": _parse_quantity(data.get("quantity")),
            "tags": _parse_tags(data.get("tags")),
            "warranty": Warranty.from_dict(data.get("warranty")),
            "secondary_warranty": Warranty.from_dict(data.get("secondaryWarranty")),
            "maintenance_events": parse_maintenance_events(
                data.get("maintenanceEvents"), owner_id=data.get("id")
            ),
            "attachments": _parse_attachments(data),
            "created_at": data.get("createdAt"),
            "updated_at": data.get("updatedAt"),
        }

    @property
    def warranties(self) -> list[tuple[str, Warranty]]:
        """Return ``(label, warranty)`` pairs for the warranties present."""
        pairs = []
        if self.warranty is not None:
            pairs.append(("Primary", self.warranty))
        if self.secondary_warranty is not None:
            pairs.append(("Secondary", self.secondary_warranty))
        return pairs


@dataclass(frozen=True)
class Asset(TrackedItem):
    """A top-level tracked physical item."""

    @classmethod
    def from_dict(cls, data: dict) -> "Asset":
        return cls(**cls._common_fields(data))

    def __repr__(self) -> str:
        return f"<Asset {self.id} {self.name}>"


@dataclass(frozen=True)
class SubAsset(TrackedItem):
    """
    A component of an asset, or a sub-component of another component.

    ``parent_id`` always points at the top-level asset.  ``parent_sub_id``
    is set only for sub-components (depth 2) and points at the owning
    component.  Deeper nesting is not supported.
    """

    parent_id: str | None = None
    parent_sub_id: str | None = None

    PRICE_KEY = "purchasePrice"

    @classmethod
    def from_dict(cls, data: dict) -> "SubAsset":
        parent_id = data.get("parentId")
        parent_sub_id = data.get("parentSubId")
        return cls(
            **cls._common_fields(data),
            parent_id=str(parent_id) if parent_id else None,
            parent_sub_id=str(parent_sub_id) if parent_sub_id else None,
        )

    @property
    def is_sub_component(self) -> bool:
        return self.parent_sub_id is not None

    def __repr__(self) -> str:
        return f"<SubAsset {self.id} {self.name}>"


def load_assets(records: list[dict] | None) -> list[Asset]:
    """Build Asset snapshots from persisted dictionaries."""
    return [Asset.from_dict(rec) for rec in records or [] if isinstance(rec, dict)]


def load_sub_assets(records: list[dict] | None) -> list[SubAsset]:
    """Build SubAsset snapshots from persisted dictionaries."""
    return [SubAsset.from_dict(rec) for rec in records or [] if isinstance(rec, dict)]


# =========================================================================
# Internal helpers
# =========================================================================


def _parse_quantity(value: Any) -> int:
    """Quantity defaults to 1 when missing, zero or unparseable."""
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        return 1
    return quantity or 1


def _parse_tags(value: Any) -> tuple[str, ...]:
    """Tags must be a list; anything else is dropped."""
    if not isinstance(value, (list, tuple)):
        if value:
            logger.warning("Ignoring malformed tags %r", value)
        return ()
    return tuple(str(tag) for tag in value)


def _parse_attachments(data: dict) -> tuple[FileRef, ...]:
    """
    Collect file references from both the path lists and the legacy
    single-path keys (``photoPath`` etc.).
    """
    refs: list[FileRef] = []
    for kind, paths_key, info_key in _ATTACHMENT_KEYS:
        infos = data.get(info_key)
        infos = infos if isinstance(infos, list) else []
        paths = data.get(paths_key)
        paths = list(paths) if isinstance(paths, list) else []
        legacy = data.get(f"{kind}Path")
        if legacy and legacy not in paths:
            paths.append(legacy)
        for index, path in enumerate(paths):
            if not path or not isinstance(path, str):
                continue
            info = infos[index] if index < len(infos) and isinstance(infos[index], dict) else {}
            refs.append(
                FileRef(
                    kind=kind,
                    path=path,
                    original_name=info.get("originalName"),
                    size=info.get("size"),
                )
            )
    return tuple(refs)
