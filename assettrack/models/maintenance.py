"""
Maintenance schedule models.

A maintenance entry is stored as a dict tagged by ``type``:

  - ``frequency``: an open-ended recurring obligation
    (``frequency`` every ``frequencyUnit``, starting at ``nextDueDate``).
  - ``specific``:  a single occurrence on ``specificDate``.

Each variant is its own frozen dataclass so required fields are checked
once, at load time, instead of at every use.  Malformed entries are
skipped with a log line and never abort loading the owning record.
"""

import logging
from dataclasses import dataclass
from typing import Any, Union

logger = logging.getLogger(__name__)

# Accepted frequency units, mapped to their canonical plural form.
FREQUENCY_UNITS: dict[str, str] = {
    "day": "days",
    "days": "days",
    "week": "weeks",
    "weeks": "weeks",
    "month": "months",
    "months": "months",
    "year": "years",
    "years": "years",
}


@dataclass(frozen=True)
class FrequencyRule:
    """A recurring maintenance obligation."""

    name: str
    frequency: int
    frequency_unit: str
    next_due_date: Any
    notes: str | None = None

    type = "frequency"

    @property
    def schedule_label(self) -> str:
        """Human-readable cadence, e.g. ``Filter Change (Every 3 months)``."""
        return f"{self.name} (Every {self.frequency} {self.frequency_unit})"


@dataclass(frozen=True)
class SpecificRule:
    """A one-time maintenance occurrence."""

    name: str
    specific_date: Any
    notes: str | None = None

    type = "specific"


MaintenanceRule = Union[FrequencyRule, SpecificRule]


def parse_maintenance_event(data: Any, owner_id: Any = None) -> MaintenanceRule | None:
    """
    Build a maintenance rule from its persisted dictionary.

    Args:
        data:     The stored maintenance entry.
        owner_id: ID of the asset/component that owns the entry (for logs).

    Returns:
        A FrequencyRule or SpecificRule, or None when the entry is malformed.
    """
    if not isinstance(data, dict):
        logger.warning("Skipping non-object maintenance entry on %s", owner_id)
        return None

    event_type = data.get("type")
    name = data.get("name") or ""
    notes = data.get("notes") or None

    if event_type == "frequency":
        if not data.get("nextDueDate"):
            logger.debug("Skipping frequency rule '%s' on %s: no next due date", name, owner_id)
            return None
        frequency = _parse_frequency(data.get("frequency"))
        if frequency is None:
            logger.warning(
                "Skipping frequency rule '%s' on %s: invalid frequency %r",
                name,
                owner_id,
                data.get("frequency"),
            )
            return None
        unit = str(data.get("frequencyUnit") or "").strip().lower()
        if unit not in FREQUENCY_UNITS:
            logger.warning(
                "Skipping frequency rule '%s' on %s: unknown unit %r",
                name,
                owner_id,
                data.get("frequencyUnit"),
            )
            return None
        return FrequencyRule(
            name=name,
            frequency=frequency,
            frequency_unit=unit,
            next_due_date=data["nextDueDate"],
            notes=notes,
        )

    if event_type == "specific":
        if not data.get("specificDate"):
            logger.debug("Skipping specific rule '%s' on %s: no date", name, owner_id)
            return None
        return SpecificRule(name=name, specific_date=data["specificDate"], notes=notes)

    logger.warning("Skipping maintenance entry on %s: unknown type %r", owner_id, event_type)
    return None


def parse_maintenance_events(entries: Any, owner_id: Any = None) -> tuple[MaintenanceRule, ...]:
    """Parse a list of stored entries, dropping the malformed ones."""
    if not entries or not isinstance(entries, list):
        return ()
    rules = (parse_maintenance_event(entry, owner_id=owner_id) for entry in entries)
    return tuple(rule for rule in rules if rule is not None)


def _parse_frequency(value: Any) -> int | None:
    """Return a positive integer frequency, or None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    try:
        frequency = int(str(value).strip())
    except ValueError:
        return None
    return frequency if frequency > 0 else None
