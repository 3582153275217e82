"""
View service — turn engine output into what the dashboard renders.

The dashboard's state (search text, selected card, event type, sort
direction, date range and page) lives in an immutable
``DashboardState``.  UI actions are expressed as intents and applied
with ``apply_intent``, which returns a new state; nothing is kept
between requests.  ``build_dashboard_view`` runs the whole pipeline for
one state:

    filter → aggregate / collect → type filter → bucket narrowing
    → sort → paginate → rows

Cards, charts and events are all computed from the same filtered set.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Union

from assettrack.models.asset import Asset, SubAsset
from assettrack.models.event import DerivedEvent
from assettrack.services import (
    dashboard_service,
    event_service,
    filter_service,
    pagination_service,
)
from assettrack.services.date_service import day_difference
from assettrack.services.format_service import DEFAULT_CURRENCY_SYMBOL, format_date
from assettrack.services.settings_service import DEFAULT_CARD_VISIBILITY

logger = logging.getLogger(__name__)

OVERDUE = "overdue"
URGENT = "urgent"
WARNING = "warning"

TYPE_LABELS = {"warranty": "Warranty", "maintenance": "Maintenance"}


# =========================================================================
# Configuration and state
# =========================================================================


@dataclass(frozen=True)
class DashboardConfig:
    """Read-only settings the dashboard pipeline runs with."""

    events_per_page: int = pagination_service.DEFAULT_PAGE_SIZE
    max_visible_pages: int = pagination_service.MAX_VISIBLE_PAGES
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL
    max_recurrence_iterations: int = event_service.DEFAULT_MAX_RECURRENCE_ITERATIONS
    chart_months: int = dashboard_service.CHART_MONTHS
    hidden_cards: frozenset = frozenset()

    @classmethod
    def from_settings(cls, app_config: dict, card_visibility: dict | None = None) -> "DashboardConfig":
        """Build from a Flask config mapping and the stored card visibility."""
        hidden = frozenset(name for name, shown in (card_visibility or {}).items() if not shown)
        return cls(
            events_per_page=int(app_config.get("EVENTS_PER_PAGE", pagination_service.DEFAULT_PAGE_SIZE)),
            currency_symbol=app_config.get("CURRENCY_SYMBOL", DEFAULT_CURRENCY_SYMBOL),
            max_recurrence_iterations=int(
                app_config.get(
                    "MAX_RECURRENCE_ITERATIONS",
                    event_service.DEFAULT_MAX_RECURRENCE_ITERATIONS,
                )
            ),
            hidden_cards=hidden,
        )

    def card_visibility(self) -> dict:
        return {name: name not in self.hidden_cards for name in DEFAULT_CARD_VISIBILITY}


@dataclass(frozen=True)
class DashboardState:
    """Everything the user has selected on the dashboard."""

    query: str = ""
    bucket: str | None = None
    event_type: str = event_service.EVENT_TYPE_ALL
    sort_direction: str = pagination_service.ASCENDING
    date_range: str = event_service.DEFAULT_RANGE_TOKEN
    page: int = 1

    def to_dict(self) -> dict:
        return {
            "query": self.query,
            "filter": self.bucket,
            "type": self.event_type,
            "sort": self.sort_direction,
            "range": self.date_range,
            "page": self.page,
        }


# -- Intents ----------------------------------------------------------------


@dataclass(frozen=True)
class FilterChanged:
    bucket: str | None


@dataclass(frozen=True)
class SearchChanged:
    query: str


@dataclass(frozen=True)
class EventTypeChanged:
    event_type: str


@dataclass(frozen=True)
class SortToggled:
    pass


@dataclass(frozen=True)
class DateRangeChanged:
    date_range: str


@dataclass(frozen=True)
class PageChanged:
    page: int


@dataclass(frozen=True)
class FiltersCleared:
    pass


Intent = Union[
    FilterChanged,
    SearchChanged,
    EventTypeChanged,
    SortToggled,
    DateRangeChanged,
    PageChanged,
    FiltersCleared,
]


def apply_intent(state: DashboardState, intent: Intent) -> DashboardState:
    """
    Return the state that results from ``intent``.

    Every intent except ``PageChanged`` sends the user back to page 1.
    ``FiltersCleared`` drops the search text and selected card but keeps
    the event type, sort direction and date range.

    Raises:
        ValueError: If the intent is not recognized.
    """
    if isinstance(intent, PageChanged):
        return replace(state, page=max(1, int(intent.page)))
    if isinstance(intent, FilterChanged):
        return replace(state, bucket=intent.bucket or None, page=1)
    if isinstance(intent, SearchChanged):
        return replace(state, query=(intent.query or "").strip(), page=1)
    if isinstance(intent, EventTypeChanged):
        return replace(state, event_type=intent.event_type or event_service.EVENT_TYPE_ALL, page=1)
    if isinstance(intent, SortToggled):
        flipped = (
            pagination_service.DESCENDING
            if state.sort_direction == pagination_service.ASCENDING
            else pagination_service.ASCENDING
        )
        return replace(state, sort_direction=flipped, page=1)
    if isinstance(intent, DateRangeChanged):
        token = event_service.WindowSpec.from_token(intent.date_range).to_token()
        return replace(state, date_range=token, page=1)
    if isinstance(intent, FiltersCleared):
        return replace(state, query="", bucket=None, page=1)
    raise ValueError(f"Unknown dashboard intent {intent!r}.")


# =========================================================================
# Event rows
# =========================================================================


@dataclass
class EventRow:
    """One rendered line of the Events panel."""

    type: str
    type_label: str
    name: str | None
    details: str
    date: datetime
    formatted_date: str
    days_until: int
    days_text: str
    urgency: str
    asset_type: str
    parent_label: str | None
    notes: str | None
    id: str
    is_sub_asset: bool
    parent_id: str | None = None

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "typeLabel": self.type_label,
            "name": self.name,
            "details": self.details,
            "date": self.date.isoformat(),
            "formattedDate": self.formatted_date,
            "daysUntil": self.days_until,
            "daysText": self.days_text,
            "urgency": self.urgency,
            "assetType": self.asset_type,
            "parentLabel": self.parent_label,
            "notes": self.notes,
            "id": self.id,
            "isSubAsset": self.is_sub_asset,
            "parentId": self.parent_id,
        }


def urgency_class(days_until: int) -> str:
    """``overdue`` before today, ``urgent`` within 30 days, ``warning`` within 60."""
    if days_until < 0:
        return OVERDUE
    if days_until <= filter_service.URGENT_DAYS:
        return URGENT
    if days_until <= filter_service.WARNING_DAYS:
        return WARNING
    return ""


def build_event_rows(
    events: list[DerivedEvent],
    now: datetime | None = None,
    sub_assets: list[SubAsset] | None = None,
) -> list[EventRow]:
    """
    Render events as rows.

    ``days_until`` rounds the fractional day difference up, so an event
    later today shows as 1 day and one earlier today as 0.  Components
    get a parent label; ``sub_assets`` (when given) supplies the owning
    asset id used to navigate to a component's detail view.
    """
    now = now or datetime.now()
    parents = {sub.id: sub.parent_id for sub in sub_assets or []}

    rows = []
    for event in events:
        days_until = math.ceil(day_difference(event.date, now))
        is_component = event.asset_type in ("Component", "Sub-Component")
        rows.append(
            EventRow(
                type=event.type,
                type_label=TYPE_LABELS.get(event.type, event.type.title()),
                name=event.name,
                details=event.details,
                date=event.date,
                formatted_date=format_date(event.date),
                days_until=days_until,
                days_text=f"{abs(days_until)} days past" if days_until < 0 else f"{days_until} days",
                urgency=urgency_class(days_until),
                asset_type=event.asset_type,
                parent_label=event.parent_asset if is_component and event.parent_asset else None,
                notes=event.notes or None,
                id=event.id,
                is_sub_asset=event.is_sub_asset,
                parent_id=parents.get(event.id) if event.is_sub_asset else None,
            )
        )
    return rows


# =========================================================================
# Composed view model
# =========================================================================


@dataclass
class DashboardView:
    """Everything one dashboard render needs."""

    state: DashboardState
    summary: dashboard_service.DashboardSummary
    cards: dict
    warranty_chart: dashboard_service.ChartSeries
    maintenance_chart: dashboard_service.ChartSeries
    rows: list[EventRow] = field(default_factory=list)
    page: pagination_service.EventPage = field(default_factory=pagination_service.EventPage)
    events: list[DerivedEvent] = field(default_factory=list)
    # Reference time the view was built against.
    now: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.to_dict(),
            "summary": self.summary.to_dict(),
            "cards": self.cards,
            "charts": {
                "warrantyExpirations": self.warranty_chart.to_dict(),
                "maintenance": self.maintenance_chart.to_dict(),
            },
            "events": [row.to_dict() for row in self.rows],
            "pagination": self.page.to_dict(),
        }


def build_dashboard_view(
    assets: list[Asset],
    sub_assets: list[SubAsset],
    state: DashboardState,
    config: DashboardConfig | None = None,
    now: datetime | None = None,
) -> DashboardView:
    """
    Run the dashboard pipeline for one state.

    Args:
        assets:     Every asset (unfiltered).
        sub_assets: Every component (unfiltered).
        state:      The user's current selections.
        config:     Page size, currency symbol and card visibility.
        now:        Reference time; defaults to the current time.

    Returns:
        A DashboardView.

    Raises:
        ValueError: If the state names an unknown bucket, event type or
                    sort direction.
    """
    config = config or DashboardConfig()
    now = now or datetime.now()

    filtered = filter_service.filter_assets(
        assets, sub_assets, state.query, state.bucket, now, config.currency_symbol
    )
    summary = dashboard_service.aggregate(filtered.assets, filtered.sub_assets, now)

    chart_events = event_service.collect_events(
        filtered.assets,
        filtered.sub_assets,
        event_service.WindowSpec.relative_months(config.chart_months),
        now,
        lookup_assets=assets,
        lookup_sub_assets=sub_assets,
        max_iterations=config.max_recurrence_iterations,
    )
    warranty_chart = dashboard_service.warranty_expiration_series(
        filtered.assets, filtered.sub_assets, now, config.chart_months
    )
    maintenance_chart = dashboard_service.maintenance_series(chart_events, now, config.chart_months)

    events = _events_for(filtered, assets, sub_assets, state, config, now)
    page = pagination_service.paginate(
        events, state.page, config.events_per_page, config.max_visible_pages
    )
    rows = build_event_rows(page.items, now, sub_assets)

    logger.debug(
        "Dashboard view: %d assets, %d components, %d events, page %d/%d",
        summary.total_assets,
        summary.total_components,
        page.total_events,
        page.page,
        page.total_pages,
    )
    return DashboardView(
        state=state,
        summary=summary,
        cards=config.card_visibility(),
        warranty_chart=warranty_chart,
        maintenance_chart=maintenance_chart,
        rows=rows,
        page=page,
        events=events,
        now=now,
    )


def _events_for(
    filtered: filter_service.FilterResult,
    assets: list[Asset],
    sub_assets: list[SubAsset],
    state: DashboardState,
    config: DashboardConfig,
    now: datetime,
) -> list[DerivedEvent]:
    events = event_service.collect_events(
        filtered.assets,
        filtered.sub_assets,
        event_service.WindowSpec.from_token(state.date_range),
        now,
        lookup_assets=assets,
        lookup_sub_assets=sub_assets,
        max_iterations=config.max_recurrence_iterations,
    )
    events = event_service.filter_events_by_type(events, state.event_type)
    events = event_service.narrow_events_by_bucket(
        events, state.bucket, filtered.assets, filtered.sub_assets, now
    )
    return pagination_service.sort_events(events, state.sort_direction)

