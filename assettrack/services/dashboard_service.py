"""
Dashboard service — summary statistics for the dashboard cards and
the analytics charts.

Card rules:
  - **Total value:** price × quantity over assets, plus purchase price
    × quantity over components.  Missing quantity counts as 1 and an
    unparseable price counts as zero.
  - **Warranty buckets:** primary warranties of assets and components
    together.  Lifetime warranties are always ``active``.  Warranties
    expiring within 30 or 60 days are counted in their bucket *and* in
    ``active``; the cards have always shown it that way.

Secondary warranties are not part of the card totals.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable

from dateutil.relativedelta import relativedelta

from assettrack.models.asset import Asset, SubAsset, TrackedItem
from assettrack.models.event import MAINTENANCE, DerivedEvent
from assettrack.services.date_service import parse_flexible_date
from assettrack.services.filter_service import (
    ACTIVE,
    EXPIRED,
    WITHIN_30,
    WITHIN_60,
    warranty_bucket,
)
from assettrack.services.format_service import to_decimal

logger = logging.getLogger(__name__)

# Constant for zero-value sums and defaults.
ZERO = Decimal("0.00")

# Months shown on the analytics line charts.
CHART_MONTHS = 6


# =========================================================================
# Data classes for structured results
# =========================================================================


@dataclass
class WarrantyStats:
    """Warranty counts for the warranty cards and the status chart."""

    total: int = 0
    within60: int = 0
    within30: int = 0
    expired: int = 0
    active: int = 0

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "within60": self.within60,
            "within30": self.within30,
            "expired": self.expired,
            "active": self.active,
        }


@dataclass
class DashboardSummary:
    """Everything the summary cards display."""

    total_assets: int
    total_components: int
    total_value: Decimal = ZERO
    warranty_stats: WarrantyStats = field(default_factory=WarrantyStats)

    def to_dict(self) -> dict:
        return {
            "totalAssets": self.total_assets,
            "totalComponents": self.total_components,
            "totalValue": str(self.total_value),
            "warrantyStats": self.warranty_stats.to_dict(),
        }


@dataclass
class ChartSeries:
    """One line-chart series: a label and a count per month."""

    labels: list[str]
    counts: list[int]

    def to_dict(self) -> dict:
        return {"labels": self.labels, "counts": self.counts}


# =========================================================================
# Summary cards
# =========================================================================


def aggregate(
    assets: list[Asset],
    sub_assets: list[SubAsset],
    now: datetime | None = None,
) -> DashboardSummary:
    """
    Compute the summary card values for an (already filtered) asset set.

    Args:
        assets:     Assets to summarize.
        sub_assets: Components to summarize.
        now:        Reference time for warranty buckets.

    Returns:
        A DashboardSummary.
    """
    now = now or datetime.now()

    summary = DashboardSummary(
        total_assets=len(assets),
        total_components=len(sub_assets),
        total_value=_total_value(assets) + _total_value(sub_assets),
    )

    stats = summary.warranty_stats
    for item in [*assets, *sub_assets]:
        warranty = item.warranty
        if warranty is None or not (warranty.expiration_date or warranty.is_lifetime):
            continue
        stats.total += 1

        bucket = warranty_bucket(warranty, now)
        if bucket == EXPIRED:
            stats.expired += 1
        elif bucket == WITHIN_30:
            stats.within30 += 1
            stats.active += 1
        elif bucket == WITHIN_60:
            stats.within60 += 1
            stats.active += 1
        elif bucket == ACTIVE:
            stats.active += 1
        else:
            logger.debug("Warranty on %s has an unreadable expiration date", item.id)

    return summary


# =========================================================================
# Analytics charts
# =========================================================================


def month_labels(now: datetime, months: int = CHART_MONTHS) -> list[str]:
    """Short month names starting with the current month."""
    first = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return [(first + relativedelta(months=offset)).strftime("%b") for offset in range(months)]


def warranty_expiration_series(
    assets: list[Asset],
    sub_assets: list[SubAsset],
    now: datetime | None = None,
    months: int = CHART_MONTHS,
) -> ChartSeries:
    """
    Count primary warranties expiring in each of the coming months.

    Only expirations between now and now + ``months`` months are counted;
    lifetime warranties never expire and are skipped.
    """
    now = now or datetime.now()
    horizon = now + relativedelta(months=months)
    counts = [0] * months

    for item in [*assets, *sub_assets]:
        warranty = item.warranty
        if warranty is None or warranty.is_lifetime:
            continue
        expires = parse_flexible_date(warranty.expiration_date)
        if expires is None or not now <= expires <= horizon:
            continue
        offset = _month_offset(expires, now)
        if 0 <= offset < months:
            counts[offset] += 1

    return ChartSeries(labels=month_labels(now, months), counts=counts)


def maintenance_series(
    events: Iterable[DerivedEvent],
    now: datetime | None = None,
    months: int = CHART_MONTHS,
) -> ChartSeries:
    """
    Count maintenance occurrences per calendar month, starting this month.

    ``events`` is normally the output of ``collect_events`` over a
    ``relative_months(months)`` window; warranty events are ignored.
    """
    now = now or datetime.now()
    counts = [0] * months
    for event in events:
        if event.type != MAINTENANCE:
            continue
        offset = _month_offset(event.date, now)
        if 0 <= offset < months:
            counts[offset] += 1
    return ChartSeries(labels=month_labels(now, months), counts=counts)


# =========================================================================
# Internal helpers
# =========================================================================


def _total_value(items: Iterable[TrackedItem]) -> Decimal:
    """Sum price × quantity, treating unreadable prices as zero."""
    total = ZERO
    for item in items:
        price = to_decimal(item.price)
        if price is None:
            continue
        total += price * Decimal(item.quantity)
    return total


def _month_offset(moment: datetime, now: datetime) -> int:
    """Whole calendar months between ``now``'s month and ``moment``'s."""
    return (moment.year - now.year) * 12 + moment.month - now.month
