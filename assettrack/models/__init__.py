"""
Model package — read-only snapshots of the persisted JSON records.

  - asset.py       -> Asset, SubAsset, Warranty, FileRef
  - maintenance.py -> FrequencyRule, SpecificRule (tagged union)
  - event.py       -> DerivedEvent (computed, never stored)
"""

from assettrack.models.asset import (  # noqa: F401
    Asset,
    FileRef,
    SubAsset,
    Warranty,
    load_assets,
    load_sub_assets,
)
from assettrack.models.event import DerivedEvent  # noqa: F401
from assettrack.models.maintenance import (  # noqa: F401
    FrequencyRule,
    SpecificRule,
    parse_maintenance_event,
)
