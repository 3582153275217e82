"""
Event service — expand warranties and maintenance schedules into the
dated entries shown in the dashboard's Events panel.

Every pass derives events from scratch; nothing is cached or stored.

Window kinds (see ``WindowSpec``):

  - ``relativeMonths``: from now through now + N months (inclusive,
    month-end clamped).
  - ``all``:           every future event.  Recurring schedules are only
                       expanded five years ahead so generation ends.
  - ``past``:          everything up to and including today.  Recurring
                       schedules replay every missed occurrence since
                       their next-due date, not just the latest one.
  - ``specificDay``:   one local calendar day, midnight to midnight.

Bad dates and malformed schedules only drop the affected entry; they
never abort collection.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable

from assettrack.models.asset import Asset, SubAsset, TrackedItem
from assettrack.models.event import EVENT_TYPES, MAINTENANCE, WARRANTY, DerivedEvent
from assettrack.models.maintenance import FrequencyRule, SpecificRule
from assettrack.services.date_service import (
    add_time_period,
    day_difference,
    end_of_day,
    parse_flexible_date,
    start_of_day,
)
from assettrack.services.filter_service import (
    ACTIVE,
    BUCKETS,
    COMPONENTS,
    EXPIRED,
    WARRANTIES,
    WITHIN_30,
    WITHIN_60,
    days_bucket,
    warranty_bucket,
)

logger = logging.getLogger(__name__)

# -- Window kinds -----------------------------------------------------------
RELATIVE_MONTHS = "relativeMonths"
ALL_FUTURE = "all"
PAST = "past"
SPECIFIC_DAY = "specificDay"

# Persisted range token used when nothing (or garbage) is stored.
DEFAULT_RANGE_TOKEN = "12"
SPECIFIC_TOKEN_PREFIX = "specific:"

# How far ahead "all" expands recurring schedules.
ALL_FUTURE_YEARS = 5

# Recurrence guard: at most this many steps per day of the window span,
# and never more than the hard cap in total.
RECURRENCE_STEPS_PER_DAY = 2
DEFAULT_MAX_RECURRENCE_ITERATIONS = 100 * 365 * ALL_FUTURE_YEARS

UNKNOWN_PARENT = "Unknown Parent"

EVENT_TYPE_ALL = "all"


@dataclass(frozen=True)
class WindowBounds:
    """
    Resolved, absolute bounds of a window.

    ``lower``/``upper`` decide inclusion (None means unbounded);
    ``expand_until`` is where recurrence expansion stops.
    """

    lower: datetime | None
    upper: datetime | None
    expand_until: datetime

    def contains(self, moment: datetime) -> bool:
        if self.lower is not None and moment < self.lower:
            return False
        if self.upper is not None and moment > self.upper:
            return False
        return True


@dataclass(frozen=True)
class WindowSpec:
    """The caller's requested time range for event collection."""

    kind: str
    months: int | None = None
    day: Any = None

    # -- Constructors ------------------------------------------------------

    @classmethod
    def relative_months(cls, months: int) -> "WindowSpec":
        return cls(kind=RELATIVE_MONTHS, months=int(months))

    @classmethod
    def all_future(cls) -> "WindowSpec":
        return cls(kind=ALL_FUTURE)

    @classmethod
    def past(cls) -> "WindowSpec":
        return cls(kind=PAST)

    @classmethod
    def specific_day(cls, day: Any) -> "WindowSpec":
        return cls(kind=SPECIFIC_DAY, day=day)

    @classmethod
    def from_token(cls, token: str | None) -> "WindowSpec":
        """
        Parse a persisted date-range token.

        Tokens are ``"past"``, ``"all"``, a month count such as ``"3"``,
        or ``"specific:YYYY-MM-DD"``.  Anything else falls back to the
        default twelve-month window.
        """
        text = (token or "").strip()
        if text == PAST:
            return cls.past()
        if text == ALL_FUTURE:
            return cls.all_future()
        if text.startswith(SPECIFIC_TOKEN_PREFIX):
            return cls.specific_day(text[len(SPECIFIC_TOKEN_PREFIX):])
        if text.isascii() and text.isdigit():
            return cls.relative_months(int(text))
        if text:
            logger.debug("Unrecognized date range token %r; using default", text)
        return cls.relative_months(int(DEFAULT_RANGE_TOKEN))

    def to_token(self) -> str:
        """Serialize back to the persisted token form."""
        if self.kind == RELATIVE_MONTHS:
            return str(self.months)
        if self.kind == SPECIFIC_DAY:
            day = parse_flexible_date(self.day)
            value = day.strftime("%Y-%m-%d") if day else str(self.day or "")
            return f"{SPECIFIC_TOKEN_PREFIX}{value}"
        return self.kind

    # -- Resolution --------------------------------------------------------

    def bounds(self, now: datetime) -> WindowBounds | None:
        """
        Resolve this window against ``now``.

        Returns:
            The absolute bounds, or None for a degenerate window (for
            example an unparseable specific day) that contains nothing.
        """
        if self.kind == RELATIVE_MONTHS:
            upper = add_time_period(now, self.months, "months")
            if upper is None or upper < now:
                return None
            return WindowBounds(lower=now, upper=upper, expand_until=upper)

        if self.kind == ALL_FUTURE:
            horizon = add_time_period(now, ALL_FUTURE_YEARS, "years")
            if horizon is None:
                return None
            return WindowBounds(lower=now, upper=None, expand_until=horizon)

        if self.kind == PAST:
            today_end = end_of_day(now)
            return WindowBounds(lower=None, upper=today_end, expand_until=today_end)

        if self.kind == SPECIFIC_DAY:
            day = parse_flexible_date(self.day)
            if day is None:
                return None
            day_end = end_of_day(day)
            return WindowBounds(lower=start_of_day(day), upper=day_end, expand_until=day_end)

        logger.warning("Unknown window kind %r", self.kind)
        return None


# =========================================================================
# Collection
# =========================================================================


def collect_events(
    assets: Iterable[Asset],
    sub_assets: Iterable[SubAsset],
    window: WindowSpec,
    now: datetime | None = None,
    *,
    lookup_assets: Iterable[Asset] | None = None,
    lookup_sub_assets: Iterable[SubAsset] | None = None,
    max_iterations: int = DEFAULT_MAX_RECURRENCE_ITERATIONS,
) -> list[DerivedEvent]:
    """
    Derive all warranty and maintenance events inside ``window``.

    Args:
        assets:            Assets to collect from (usually already filtered).
        sub_assets:        Components to collect from.
        window:            Requested time range.
        now:               Reference time; defaults to the current time.
        lookup_assets:     Full asset list used to label component parents.
                           Defaults to ``assets``.
        lookup_sub_assets: Full component list for sub-component parents.
                           Defaults to ``sub_assets``.
        max_iterations:    Hard cap on recurrence steps per schedule.

    Returns:
        Events sorted ascending by date.  Ties keep collection order:
        assets before components, warranties before maintenance.
    """
    now = now or datetime.now()
    assets = list(assets)
    sub_assets = list(sub_assets)

    bounds = window.bounds(now)
    if bounds is None:
        logger.debug("Empty event window %r", window)
        return []

    asset_index = _index_by_id(assets if lookup_assets is None else lookup_assets)
    sub_index = _index_by_id(sub_assets if lookup_sub_assets is None else lookup_sub_assets)

    events: list[DerivedEvent] = []
    for asset in assets:
        events.extend(
            _item_events(asset, bounds, max_iterations, asset_type="Asset", parent=None, is_sub=False)
        )
    for sub in sub_assets:
        asset_type, parent = describe_parent(sub, asset_index, sub_index)
        events.extend(
            _item_events(sub, bounds, max_iterations, asset_type=asset_type, parent=parent, is_sub=True)
        )

    events.sort(key=lambda event: event.date)
    return events


def generate_occurrences(
    rule: FrequencyRule,
    bounds: WindowBounds,
    max_iterations: int = DEFAULT_MAX_RECURRENCE_ITERATIONS,
) -> list[datetime]:
    """
    Expand a recurring schedule into the occurrences inside ``bounds``.

    Starts at the rule's next-due date and steps by its frequency.  Each
    step continues from the previous (possibly month-end clamped) date,
    so a monthly rule from Jan 31 runs Jan 31, Feb 29, Mar 29, ...

    Stops when the date passes ``bounds.expand_until``, when a step
    cannot be computed, or when the iteration cap is reached.
    """
    current = parse_flexible_date(rule.next_due_date)
    if current is None:
        logger.debug("Skipping schedule '%s': bad next due date %r", rule.name, rule.next_due_date)
        return []

    limit = bounds.expand_until
    if current > limit:
        return []

    span_days = (limit - current).days + 1
    cap = min(max_iterations, span_days * RECURRENCE_STEPS_PER_DAY)

    occurrences: list[datetime] = []
    steps = 0
    while current is not None and current <= limit:
        if steps >= cap:
            logger.warning(
                "Schedule '%s' hit the recurrence cap (%d steps); truncating",
                rule.name,
                cap,
            )
            break
        if bounds.contains(current):
            occurrences.append(current)
        current = add_time_period(current, rule.frequency, rule.frequency_unit)
        steps += 1
    return occurrences


def describe_parent(
    sub: SubAsset,
    asset_index: dict[str, Asset],
    sub_index: dict[str, SubAsset],
) -> tuple[str, str]:
    """
    Label a component's position in the hierarchy.

    Returns:
        ``(asset_type, parent_label)`` where asset_type is ``Component``
        or ``Sub-Component`` and the label is ``"Asset > Component"`` for
        sub-components, falling back to whichever link resolves, or
        ``"Unknown Parent"``.
    """
    parent_asset = asset_index.get(sub.parent_id) if sub.parent_id else None

    if not sub.is_sub_component:
        label = parent_asset.name if parent_asset else UNKNOWN_PARENT
        return "Component", label or UNKNOWN_PARENT

    parent_sub = sub_index.get(sub.parent_sub_id)
    if parent_sub and parent_asset:
        label = f"{parent_asset.name} > {parent_sub.name}"
    elif parent_sub:
        label = parent_sub.name
    elif parent_asset:
        label = parent_asset.name
    else:
        label = UNKNOWN_PARENT
    return "Sub-Component", label or UNKNOWN_PARENT


# =========================================================================
# Event-list filters
# =========================================================================


def filter_events_by_type(events: list[DerivedEvent], event_type: str | None) -> list[DerivedEvent]:
    """
    Keep only ``warranty`` or ``maintenance`` events; ``all`` keeps both.

    Raises:
        ValueError: If ``event_type`` is not recognized.
    """
    if not event_type or event_type == EVENT_TYPE_ALL:
        return list(events)
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Unknown event type '{event_type}'.")
    return [event for event in events if event.type == event_type]


def narrow_events_by_bucket(
    events: list[DerivedEvent],
    bucket: str | None,
    assets: Iterable[Asset],
    sub_assets: Iterable[SubAsset],
    now: datetime | None = None,
) -> list[DerivedEvent]:
    """
    Narrow the Events panel to match the selected dashboard card.

    ``components`` keeps component events, ``warranties`` keeps warranty
    events, ``expired``/``within30``/``within60`` keep events by their own
    date, and ``active`` keeps far-off warranty events plus maintenance
    for items whose primary warranty is still active.

    Raises:
        ValueError: If ``bucket`` is not a known bucket name.
    """
    if not bucket:
        return list(events)
    if bucket not in BUCKETS:
        raise ValueError(f"Unknown dashboard filter '{bucket}'.")
    now = now or datetime.now()

    if bucket == COMPONENTS:
        return [event for event in events if event.is_sub_asset]
    if bucket == WARRANTIES:
        return [event for event in events if event.type == WARRANTY]
    if bucket == EXPIRED:
        return [event for event in events if event.date < now]
    if bucket in (WITHIN_30, WITHIN_60):
        return [
            event
            for event in events
            if event.date >= now and days_bucket(day_difference(event.date, now)) == bucket
        ]

    asset_index = _index_by_id(assets)
    sub_index = _index_by_id(sub_assets)
    kept = []
    for event in events:
        if event.type == WARRANTY:
            if days_bucket(day_difference(event.date, now)) == ACTIVE:
                kept.append(event)
            continue
        owner = (sub_index if event.is_sub_asset else asset_index).get(event.id)
        if owner is not None and warranty_bucket(owner.warranty, now) == ACTIVE:
            kept.append(event)
    return kept


# =========================================================================
# Internal helpers
# =========================================================================


def _index_by_id(items: Iterable[TrackedItem]) -> dict:
    """Map id -> item, keeping the first record for duplicate ids."""
    index: dict = {}
    for item in items:
        index.setdefault(item.id, item)
    return index


def _item_events(
    item: TrackedItem,
    bounds: WindowBounds,
    max_iterations: int,
    *,
    asset_type: str,
    parent: str | None,
    is_sub: bool,
) -> list[DerivedEvent]:
    """All in-window events for one asset or component."""

    def make(event_type: str, when: datetime, details: str, **extra) -> DerivedEvent:
        return DerivedEvent(
            type=event_type,
            date=when,
            name=item.name,
            details=details,
            asset_type=asset_type,
            parent_asset=parent,
            id=item.id,
            is_sub_asset=is_sub,
            **extra,
        )

    events = []

    # -- Warranty expirations --------------------------------------------
    for label, warranty in item.warranties:
        if warranty.is_lifetime or not warranty.expiration_date:
            continue
        expires = parse_flexible_date(warranty.expiration_date)
        if expires is None:
            logger.debug(
                "Skipping %s warranty on %s: bad date %r",
                label.lower(),
                item.id,
                warranty.expiration_date,
            )
            continue
        if bounds.contains(expires):
            details = "Warranty Expiration" if label == "Primary" else "Secondary Warranty Expiration"
            events.append(make(WARRANTY, expires, details, warranty_type=label))

    # -- Maintenance -----------------------------------------------------
    for rule in item.maintenance_events:
        if isinstance(rule, FrequencyRule):
            for when in generate_occurrences(rule, bounds, max_iterations):
                events.append(make(MAINTENANCE, when, rule.schedule_label, notes=rule.notes))
        elif isinstance(rule, SpecificRule):
            when = parse_flexible_date(rule.specific_date)
            if when is None:
                logger.debug("Skipping maintenance '%s' on %s: bad date", rule.name, item.id)
                continue
            if bounds.contains(when):
                events.append(make(MAINTENANCE, when, rule.name, notes=rule.notes))

    return events
