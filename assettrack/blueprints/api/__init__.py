"""
API blueprint — JSON CRUD for assets, components and settings.
"""

from flask import Blueprint

bp = Blueprint("api", __name__)

# Import routes after blueprint creation to avoid circular imports.
from assettrack.blueprints.api import routes  # noqa: E402, F401
