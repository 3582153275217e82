"""
Dashboard blueprint — summary cards, charts, paginated events and
event exports.
"""

from flask import Blueprint

bp = Blueprint("dashboard", __name__)

# Import routes after blueprint creation to avoid circular imports.
from assettrack.blueprints.dashboard import routes  # noqa: E402, F401
