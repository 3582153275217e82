"""
Settings service — the ``config.json`` settings object.

Settings are grouped in sections (``notificationSettings``,
``interfaceSettings`` and anything else the client stores).  Reading
always fills in the dashboard visibility defaults; saving replaces
whole sections, except ``interfaceSettings`` whose order and
visibility keys are replaced one at a time.
"""

import copy
import logging

from assettrack.extensions import store

logger = logging.getLogger(__name__)

NOTIFICATION_SETTINGS = "notificationSettings"
INTERFACE_SETTINGS = "interfaceSettings"

DEFAULT_NOTIFICATION_SETTINGS = {
    "notifyAdd": True,
    "notifyDelete": False,
    "notifyEdit": True,
    "notify1Month": True,
    "notify2Week": False,
    "notify7Day": True,
    "notify3Day": False,
    "notifyMaintenance": False,
}

DEFAULT_DASHBOARD_ORDER = ["totals", "warranties", "analytics"]

DEFAULT_DASHBOARD_VISIBILITY = {"totals": True, "warranties": True, "analytics": True}

DEFAULT_CARD_VISIBILITY = {
    "assets": True,
    "components": True,
    "value": True,
    "warranties": True,
    "within60": True,
    "within30": True,
    "expired": True,
    "active": True,
}

# Interface keys merged individually on save.
INTERFACE_KEYS = ("dashboardOrder", "dashboardVisibility", "cardVisibility")


def default_settings() -> dict:
    """Settings returned before anything has been saved."""
    return {
        NOTIFICATION_SETTINGS: dict(DEFAULT_NOTIFICATION_SETTINGS),
        INTERFACE_SETTINGS: {
            "dashboardOrder": list(DEFAULT_DASHBOARD_ORDER),
            "dashboardVisibility": dict(DEFAULT_DASHBOARD_VISIBILITY),
            "cardVisibility": dict(DEFAULT_CARD_VISIBILITY),
        },
    }


def get_settings() -> dict:
    """Return the stored settings with visibility defaults filled in."""
    stored = store.read_config()
    if stored is None:
        return default_settings()

    settings = copy.deepcopy(stored)
    interface = settings.get(INTERFACE_SETTINGS)
    if not isinstance(interface, dict):
        interface = settings[INTERFACE_SETTINGS] = {}
    if not interface.get("dashboardVisibility"):
        interface["dashboardVisibility"] = dict(DEFAULT_DASHBOARD_VISIBILITY)
    if not interface.get("cardVisibility"):
        interface["cardVisibility"] = dict(DEFAULT_CARD_VISIBILITY)
    return settings


def save_settings(changes: dict) -> dict:
    """
    Merge ``changes`` into the stored settings and persist them.

    Returns:
        The settings as written to disk.

    Raises:
        ValueError: If ``changes`` is not an object.
    """
    if not isinstance(changes, dict):
        raise ValueError("Settings must be a JSON object.")

    settings = store.read_config() or {}
    for section, value in changes.items():
        if section == INTERFACE_SETTINGS:
            interface = settings.get(INTERFACE_SETTINGS)
            if not isinstance(interface, dict):
                interface = settings[INTERFACE_SETTINGS] = {}
            for key in INTERFACE_KEYS:
                if isinstance(value, dict) and value.get(key):
                    interface[key] = value[key]
        else:
            settings[section] = value

    store.write_config(settings)
    logger.info("Saved settings sections: %s", ", ".join(sorted(changes)) or "(none)")
    return settings


def notification_settings() -> dict:
    """Notification flags with defaults for anything not saved."""
    stored = store.read_config() or {}
    flags = dict(DEFAULT_NOTIFICATION_SETTINGS)
    section = stored.get(NOTIFICATION_SETTINGS)
    if isinstance(section, dict):
        flags.update(section)
    return flags


def card_visibility() -> dict:
    """Which summary cards the dashboard shows."""
    interface = get_settings().get(INTERFACE_SETTINGS, {})
    visibility = dict(DEFAULT_CARD_VISIBILITY)
    visibility.update(interface.get("cardVisibility") or {})
    return visibility

