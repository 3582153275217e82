"""
Filter service — search and dashboard-bucket filtering.

Two independent stages, composed by ``filter_assets()``:

  - **Search**: case-insensitive substring match over the text fields
    of an asset plus the displayed renderings of its price and dates.
    An asset whose component matches stays visible so the component
    can be shown in context.
  - **Bucket** (dashboard card filter): ``components``, ``warranties``,
    ``expired``, ``within30``, ``within60`` or ``active``.  Warranty
    buckets also include assets that only qualify through a component.

The same composition feeds the asset list, the summary cards and the
Events panel, so all three stay consistent for one filter state.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable

from assettrack.models.asset import Asset, SubAsset, TrackedItem, Warranty
from assettrack.services.date_service import day_difference, parse_flexible_date
from assettrack.services.format_service import (
    DEFAULT_CURRENCY_SYMBOL,
    format_currency,
    format_date,
)

logger = logging.getLogger(__name__)

# -- Dashboard buckets ------------------------------------------------------
COMPONENTS = "components"
WARRANTIES = "warranties"
EXPIRED = "expired"
WITHIN_30 = "within30"
WITHIN_60 = "within60"
ACTIVE = "active"

BUCKETS = (COMPONENTS, WARRANTIES, EXPIRED, WITHIN_30, WITHIN_60, ACTIVE)
WARRANTY_BUCKETS = (EXPIRED, WITHIN_30, WITHIN_60, ACTIVE)

# Day thresholds for the urgency buckets.
URGENT_DAYS = 30
WARNING_DAYS = 60


@dataclass
class FilterResult:
    """Assets and components that survive a filter pass."""

    assets: list[Asset]
    sub_assets: list[SubAsset]

    @property
    def asset_ids(self) -> set[str]:
        return {asset.id for asset in self.assets}


# =========================================================================
# Warranty classification
# =========================================================================


def warranty_bucket(warranty: Warranty | None, now: datetime) -> str | None:
    """
    Classify a warranty by days remaining.

    Returns:
        ``active`` for lifetime warranties or more than 60 days left,
        ``within60`` for 31-60 days, ``within30`` for 0-30 days,
        ``expired`` when past, or None when there is no usable date.
    """
    if warranty is None:
        return None
    if warranty.is_lifetime:
        return ACTIVE
    expires = parse_flexible_date(warranty.expiration_date)
    if expires is None:
        return None
    return days_bucket(day_difference(expires, now))


def days_bucket(diff: float) -> str:
    """Map a fractional day difference onto an urgency bucket."""
    if diff < 0:
        return EXPIRED
    if diff <= URGENT_DAYS:
        return WITHIN_30
    if diff <= WARNING_DAYS:
        return WITHIN_60
    return ACTIVE


# =========================================================================
# Search
# =========================================================================


def matches_query(
    item: TrackedItem,
    query: str,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> bool:
    """Return True if any searchable field of ``item`` contains ``query``."""
    needle = query.lower()

    text_fields = (
        item.name,
        item.manufacturer,
        item.model_number,
        item.serial_number,
        item.location,
        item.notes,
        item.description,
        item.link,
        item.warranty.scope if item.warranty else None,
        item.secondary_warranty.scope if item.secondary_warranty else None,
    )
    for value in text_fields:
        if value is not None and needle in str(value).lower():
            return True

    if any(needle in tag.lower() for tag in item.tags):
        return True

    # Prices only match numeric queries, compared in display form.
    query_amount = _parse_query_amount(query)
    if query_amount is not None:
        formatted_query = format_currency(query_amount, True, currency_symbol).lower()
        formatted_price = format_currency(item.price, True, currency_symbol).lower()
        if formatted_query and formatted_query in formatted_price:
            return True

    date_fields = (
        item.warranty.expiration_date if item.warranty else None,
        item.secondary_warranty.expiration_date if item.secondary_warranty else None,
        item.purchase_date,
    )
    return any(needle in format_date(value, for_search=True) for value in date_fields)


def search_filter(
    assets: list[Asset],
    sub_assets: list[SubAsset],
    query: str | None,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> FilterResult:
    """
    Apply the free-text search on its own.

    An empty query passes everything through.
    """
    if not query:
        return FilterResult(list(assets), list(sub_assets))
    kept = _search_assets(assets, sub_assets, query, currency_symbol)
    return FilterResult(kept, _visible_sub_assets(kept, sub_assets, query, currency_symbol))


# =========================================================================
# Dashboard buckets
# =========================================================================


def categorical_filter(
    assets: list[Asset],
    sub_assets: list[SubAsset],
    bucket: str | None,
    now: datetime | None = None,
) -> FilterResult:
    """
    Apply a dashboard bucket on its own.

    Raises:
        ValueError: If ``bucket`` is not a known bucket name.
    """
    kept = _bucket_assets(assets, sub_assets, bucket, now or datetime.now())
    return FilterResult(kept, _visible_sub_assets(kept, sub_assets, None))


def filter_assets(
    assets: list[Asset],
    sub_assets: list[SubAsset],
    query: str | None = None,
    bucket: str | None = None,
    now: datetime | None = None,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> FilterResult:
    """
    Compose search and bucket filtering.

    Assets are searched first, then narrowed by bucket.  Components are
    kept when their top-level asset survived, or when they match the
    search query themselves.

    Raises:
        ValueError: If ``bucket`` is not a known bucket name.
    """
    now = now or datetime.now()
    kept = assets if not query else _search_assets(assets, sub_assets, query, currency_symbol)
    kept = _bucket_assets(kept, sub_assets, bucket, now)
    visible = _visible_sub_assets(kept, sub_assets, query, currency_symbol)

    logger.debug(
        "Filter q=%r bucket=%r kept %d/%d assets, %d/%d components",
        query,
        bucket,
        len(kept),
        len(assets),
        len(visible),
        len(sub_assets),
    )
    return FilterResult(list(kept), visible)


# =========================================================================
# Internal helpers
# =========================================================================


def _search_assets(
    assets: Iterable[Asset],
    sub_assets: list[SubAsset],
    query: str,
    currency_symbol: str,
) -> list[Asset]:
    """Assets matching directly, or through one of their components."""
    matching_parent_ids = {
        sub.parent_id for sub in sub_assets if matches_query(sub, query, currency_symbol)
    }
    return [
        asset
        for asset in assets
        if matches_query(asset, query, currency_symbol) or asset.id in matching_parent_ids
    ]


def _bucket_assets(
    assets: list[Asset],
    sub_assets: list[SubAsset],
    bucket: str | None,
    now: datetime,
) -> list[Asset]:
    """Narrow ``assets`` to one dashboard bucket."""
    if not bucket:
        return list(assets)
    if bucket not in BUCKETS:
        raise ValueError(f"Unknown dashboard filter '{bucket}'.")

    if bucket == COMPONENTS:
        parent_ids = {sub.parent_id for sub in sub_assets}
        return [asset for asset in assets if asset.id in parent_ids]

    if bucket == WARRANTIES:
        return [
            asset
            for asset in assets
            if asset.warranty is not None and asset.warranty.expiration_date
        ]

    # Warranty urgency buckets: direct matches first, then assets that
    # only qualify through a component.
    direct = [asset for asset in assets if warranty_bucket(asset.warranty, now) == bucket]
    direct_ids = {asset.id for asset in direct}
    qualifying_parent_ids = {
        sub.parent_id for sub in sub_assets if warranty_bucket(sub.warranty, now) == bucket
    }
    via_components = [
        asset
        for asset in assets
        if asset.id not in direct_ids and asset.id in qualifying_parent_ids
    ]
    return direct + via_components


def _visible_sub_assets(
    kept_assets: list[Asset],
    sub_assets: list[SubAsset],
    query: str | None,
    currency_symbol: str = DEFAULT_CURRENCY_SYMBOL,
) -> list[SubAsset]:
    """Components under a kept asset, plus direct search hits."""
    kept_ids = {asset.id for asset in kept_assets}
    return [
        sub
        for sub in sub_assets
        if sub.parent_id in kept_ids
        or (query and matches_query(sub, query, currency_symbol))
    ]


def _parse_query_amount(query: str) -> Decimal | None:
    """A query that is entirely a number, or None."""
    try:
        amount = Decimal(query.strip())
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None
