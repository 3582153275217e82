"""
Flask extension instances.

Extensions are created here without binding to an application so that
the application factory can call ``init_app()`` on each one during
``create_app()``.  This avoids circular imports and follows the
standard Flask extension pattern.
"""

from assettrack.store import JsonStore

# -- Flat-file data store --------------------------------------------------
# The ``store`` instance is imported by services throughout the app.
store = JsonStore()
