"""
Notification service — decide which reminders are due today.

Reminders are selected, never sent; delivery belongs to whatever calls
this (the ``notify-preview`` CLI prints them).

Rules:
  - **Warranty:** a primary or secondary warranty produces a reminder
    when it expires exactly 30, 14, 7 or 3 calendar days from today and
    the matching ``notify1Month`` / ``notify2Week`` / ``notify7Day`` /
    ``notify3Day`` flag is on.  Lifetime warranties never expire.
  - **Maintenance:** with ``notifyMaintenance`` on, every maintenance
    occurrence (one-off or recurring) falling on the day seven days
    from today produces a reminder.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from assettrack.models.asset import Asset, SubAsset
from assettrack.models.event import MAINTENANCE
from assettrack.services import event_service
from assettrack.services.date_service import parse_flexible_date, start_of_day

logger = logging.getLogger(__name__)

WARRANTY_EXPIRING = "warranty_expiring"
MAINTENANCE_SCHEDULE = "maintenance_schedule"

# Days before expiry -> settings flag that enables the reminder.
WARRANTY_REMINDERS = {
    30: "notify1Month",
    14: "notify2Week",
    7: "notify7Day",
    3: "notify3Day",
}

MAINTENANCE_FLAG = "notifyMaintenance"
MAINTENANCE_LEAD_DAYS = 7


@dataclass
class Notice:
    """One reminder that should go out today."""

    kind: str
    item_id: str
    name: str | None
    model_number: str | None
    asset_type: str
    due_date: datetime
    days: int
    title: str
    parent_label: str | None = None
    notes: str | None = None

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "id": self.item_id,
            "name": self.name,
            "modelNumber": self.model_number,
            "assetType": self.asset_type,
            "dueDate": self.due_date.date().isoformat(),
            "days": self.days,
            "title": self.title,
            "parentAsset": self.parent_label,
            "notes": self.notes,
        }


def due_notices(
    assets: list[Asset],
    sub_assets: list[SubAsset],
    flags: dict,
    now: datetime | None = None,
) -> list[Notice]:
    """
    Select every reminder due on ``now``'s calendar day.

    Args:
        assets:     All assets.
        sub_assets: All components.
        flags:      Notification settings (``notificationSettings``).
        now:        Reference time; defaults to the current time.

    Returns:
        Warranty reminders first, then maintenance reminders.
    """
    now = now or datetime.now()
    notices = warranty_notices(assets, sub_assets, flags, now)
    if flags.get(MAINTENANCE_FLAG):
        notices.extend(maintenance_notices(assets, sub_assets, now))
    logger.info("%d notification(s) due for %s", len(notices), now.date().isoformat())
    return notices


def warranty_notices(
    assets: list[Asset],
    sub_assets: list[SubAsset],
    flags: dict,
    now: datetime,
) -> list[Notice]:
    """Warranty reminders enabled by ``flags`` that fall due today."""
    enabled = {days for days, flag in WARRANTY_REMINDERS.items() if flags.get(flag)}
    if not enabled:
        return []

    asset_index = {asset.id: asset for asset in assets}
    sub_index = {sub.id: sub for sub in sub_assets}
    today = start_of_day(now)

    notices = []
    for item in [*assets, *sub_assets]:
        if isinstance(item, SubAsset):
            asset_type, parent = event_service.describe_parent(item, asset_index, sub_index)
        else:
            asset_type, parent = "Asset", None

        for label, warranty in item.warranties:
            if warranty.is_lifetime or not warranty.expiration_date:
                continue
            expires = parse_flexible_date(warranty.expiration_date)
            if expires is None:
                continue
            days_out = (start_of_day(expires) - today).days
            if days_out not in enabled:
                continue
            notices.append(
                Notice(
                    kind=WARRANTY_EXPIRING,
                    item_id=item.id,
                    name=item.name,
                    model_number=item.model_number,
                    asset_type=asset_type,
                    due_date=expires,
                    days=days_out,
                    title="Warranty" if label == "Primary" else "Secondary Warranty",
                    parent_label=parent,
                )
            )
    return notices


def maintenance_notices(
    assets: list[Asset],
    sub_assets: list[SubAsset],
    now: datetime,
) -> list[Notice]:
    """Maintenance occurrences due exactly seven days from today."""
    target = start_of_day(now) + timedelta(days=MAINTENANCE_LEAD_DAYS)
    events = event_service.collect_events(
        assets,
        sub_assets,
        event_service.WindowSpec.specific_day(target),
        now,
    )
    model_numbers = {(item.id, isinstance(item, SubAsset)): item.model_number for item in [*assets, *sub_assets]}

    return [
        Notice(
            kind=MAINTENANCE_SCHEDULE,
            item_id=event.id,
            name=event.name,
            model_number=model_numbers.get((event.id, event.is_sub_asset)),
            asset_type=event.asset_type,
            due_date=event.date,
            days=MAINTENANCE_LEAD_DAYS,
            title=event.details,
            parent_label=event.parent_asset,
            notes=event.notes,
        )
        for event in events
        if event.type == MAINTENANCE
    ]
