"""
Routes for the main blueprint — health check.
"""

import os

from assettrack.blueprints.main import bp
from assettrack.extensions import store


@bp.route("/health")
def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns 200 if the app is running and the data directory exists and
    is writable.
    """
    data_dir = store.data_dir
    if data_dir.is_dir() and os.access(data_dir, os.W_OK):
        return {"status": "healthy", "dataDir": "writable"}, 200
    return {"status": "unhealthy", "dataDir": f"{data_dir} is not writable"}, 503
