"""
Service layer package.

Each service module encapsulates one part of the dashboard engine or
the data it runs on.  The engine modules (date, event, filter,
dashboard, pagination, view) are pure: they take model snapshots and an
explicit ``now`` and do no I/O.  Only ``asset_service`` and
``settings_service`` touch the JSON store; routes never read the data
files directly.

Import services in route modules as needed::

    from assettrack.services import asset_service, view_service
"""
