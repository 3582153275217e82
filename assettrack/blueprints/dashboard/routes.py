"""
Routes for the dashboard blueprint — the dashboard view model and
event exports.

Both endpoints read the dashboard state from the query string:

    q       search text
    filter  dashboard card (components, warranties, expired, within30,
            within60, active)
    type    event type (all, warranty, maintenance)
    sort    asc or desc
    range   date-range token (past, all, a month count, specific:YYYY-MM-DD)
    page    1-based page number (ignored by exports)
"""

from flask import abort, current_app, make_response, request

from assettrack.blueprints.dashboard import bp
from assettrack.services import asset_service, export_service, settings_service, view_service
from assettrack.services.event_service import EVENT_TYPE_ALL, WindowSpec
from assettrack.services.pagination_service import ASCENDING


@bp.route("")
def dashboard():
    """
    Return the dashboard view model.

    Includes summary cards, card visibility, six-month chart series,
    one page of event rows and the pagination controls.
    """
    assets, sub_assets = asset_service.load_all()
    view = _build_view(_state_from_request(), assets, sub_assets)
    return view.to_dict()


@bp.route("/events/export/<fmt>")
def export_events(fmt):
    """
    Export every event matching the current state as CSV or Excel.

    Args:
        fmt: Export format, 'csv' or 'xlsx'.
    """
    if fmt not in ("csv", "xlsx"):
        abort(404, description=f"Unknown export format '{fmt}'")

    assets, sub_assets = asset_service.load_all()
    view = _build_view(_state_from_request(), assets, sub_assets)
    rows = view_service.build_event_rows(view.events, view.now, sub_assets)

    if fmt == "xlsx":
        buffer = export_service.export_events_excel(rows, view.summary)
        response = make_response(buffer.read())
        response.headers["Content-Type"] = (
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        response.headers["Content-Disposition"] = "attachment; filename=events.xlsx"
    else:
        buffer = export_service.export_events_csv(rows)
        response = make_response(buffer.read())
        response.headers["Content-Type"] = "text/csv; charset=utf-8"
        response.headers["Content-Disposition"] = "attachment; filename=events.csv"

    return response


def _state_from_request() -> view_service.DashboardState:
    default_range = current_app.config.get("DEFAULT_EVENTS_RANGE")
    return view_service.DashboardState(
        query=request.args.get("q", "").strip(),
        bucket=request.args.get("filter") or None,
        event_type=request.args.get("type") or EVENT_TYPE_ALL,
        sort_direction=request.args.get("sort") or ASCENDING,
        date_range=WindowSpec.from_token(request.args.get("range") or default_range).to_token(),
        page=max(1, request.args.get("page", 1, type=int)),
    )


def _build_view(state, assets, sub_assets) -> view_service.DashboardView:
    """Run the dashboard pipeline; unknown filter names are a 400."""
    config = view_service.DashboardConfig.from_settings(
        current_app.config, settings_service.card_visibility()
    )
    try:
        return view_service.build_dashboard_view(assets, sub_assets, state, config)
    except ValueError as exc:
        abort(400, description=str(exc))
