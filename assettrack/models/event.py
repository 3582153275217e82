"""
Derived dashboard events.

A DerivedEvent is one warranty expiration or one maintenance occurrence.
Events are computed fresh on every dashboard pass and never persisted.
"""

from dataclasses import dataclass
from datetime import datetime

WARRANTY = "warranty"
MAINTENANCE = "maintenance"
EVENT_TYPES = (WARRANTY, MAINTENANCE)


@dataclass(frozen=True)
class DerivedEvent:
    """A single entry in the Events panel."""

    type: str
    date: datetime
    name: str | None
    details: str
    asset_type: str  # "Asset", "Component" or "Sub-Component".
    id: str
    is_sub_asset: bool
    parent_asset: str | None = None
    notes: str | None = None
    warranty_type: str | None = None  # "Primary" / "Secondary" for warranties.

    def to_dict(self) -> dict:
        """Serialize for JSON responses (camelCase, ISO dates)."""
        return {
            "type": self.type,
            "date": self.date.isoformat(),
            "name": self.name,
            "details": self.details,
            "assetType": self.asset_type,
            "parentAsset": self.parent_asset,
            "notes": self.notes,
            "warrantyType": self.warranty_type,
            "id": self.id,
            "isSubAsset": self.is_sub_asset,
        }
