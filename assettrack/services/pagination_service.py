"""
Pagination service — ordering and paging of the derived event list.

Events arrive sorted ascending by date from the collector.  Descending
order is the same list reversed, never a second sort, so events that
share a timestamp simply swap places as a block.
"""

import math
from dataclasses import dataclass, field

from assettrack.models.event import DerivedEvent

ASCENDING = "asc"
DESCENDING = "desc"
SORT_DIRECTIONS = (ASCENDING, DESCENDING)

DEFAULT_PAGE_SIZE = 5
MAX_VISIBLE_PAGES = 5


@dataclass
class EventPage:
    """One page of events plus what the pagination controls need."""

    items: list[DerivedEvent] = field(default_factory=list)
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    total_events: int = 0
    total_pages: int = 0
    window_start: int = 1  # First page-number button.
    window_end: int = 0  # Last page-number button.

    @property
    def page_numbers(self) -> list[int]:
        return list(range(self.window_start, self.window_end + 1))

    @property
    def show_controls(self) -> bool:
        """Controls are hidden for a single page or no events."""
        return self.total_pages > 1

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def first_index(self) -> int:
        """1-based position of the first item shown ("Showing 6-10 of 12")."""
        return (self.page - 1) * self.page_size + 1 if self.items else 0

    @property
    def last_index(self) -> int:
        return min(self.page * self.page_size, self.total_events) if self.items else 0

    def to_dict(self) -> dict:
        return {
            "page": self.page,
            "pageSize": self.page_size,
            "totalEvents": self.total_events,
            "totalPages": self.total_pages,
            "windowStart": self.window_start,
            "windowEnd": self.window_end,
            "pageNumbers": self.page_numbers,
            "showControls": self.show_controls,
            "hasPrevious": self.has_previous,
            "hasNext": self.has_next,
            "firstIndex": self.first_index,
            "lastIndex": self.last_index,
        }


def sort_events(events: list[DerivedEvent], direction: str = ASCENDING) -> list[DerivedEvent]:
    """
    Order events by date.

    Ascending is a stable sort on date; descending reverses that list.

    Raises:
        ValueError: If ``direction`` is not ``asc`` or ``desc``.
    """
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"Unknown sort direction '{direction}'.")
    ordered = sorted(events, key=lambda event: event.date)
    if direction == DESCENDING:
        ordered.reverse()
    return ordered


def paginate(
    events: list[DerivedEvent],
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    max_visible_pages: int = MAX_VISIBLE_PAGES,
) -> EventPage:
    """
    Slice ``events`` into fixed-size pages.

    ``total_pages`` is 0 when there are no events.  A page past the end
    returns no items; pages below 1 are treated as page 1.

    Raises:
        ValueError: If ``page_size`` or ``max_visible_pages`` is not positive.
    """
    if page_size < 1:
        raise ValueError("page_size must be at least 1.")
    if max_visible_pages < 1:
        raise ValueError("max_visible_pages must be at least 1.")

    page = max(1, int(page))
    total_events = len(events)
    total_pages = math.ceil(total_events / page_size)
    start = (page - 1) * page_size

    window_start, window_end = page_window(page, total_pages, max_visible_pages)
    return EventPage(
        items=list(events[start:start + page_size]),
        page=page,
        page_size=page_size,
        total_events=total_events,
        total_pages=total_pages,
        window_start=window_start,
        window_end=window_end,
    )


def page_window(page: int, total_pages: int, max_visible_pages: int = MAX_VISIBLE_PAGES) -> tuple[int, int]:
    """
    First and last page-number buttons to render.

    The window is centered on ``page`` and shifted to stay inside
    ``[1, total_pages]`` near either end.  With no pages the window is
    empty (``(1, 0)``).
    """
    start = max(1, page - max_visible_pages // 2)
    end = min(total_pages, start + max_visible_pages - 1)
    if end - start + 1 < max_visible_pages:
        start = max(1, end - max_visible_pages + 1)
    return start, end
