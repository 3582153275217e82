"""
Routes for the API blueprint — assets, components and settings.

Request and response bodies use the same camelCase records that are
stored in the data files.  Missing required fields return 400 and
unknown ids return 404, both as ``{"error": message}``.
"""

from flask import abort, jsonify, request

from assettrack.blueprints.api import bp
from assettrack.services import asset_service, settings_service


# =========================================================================
# Assets
# =========================================================================


@bp.route("/assets")
def list_assets():
    """Return every asset record."""
    return jsonify(asset_service.get_asset_records())


@bp.route("/asset", methods=["POST"])
def create_asset():
    """Create an asset; responds 201 with the stored record."""
    try:
        record = asset_service.create_asset(_json_body())
    except ValueError as exc:
        abort(400, description=str(exc))
    return record, 201


@bp.route("/asset", methods=["PUT"])
def update_asset():
    """Replace an asset identified by the ``id`` in the body."""
    try:
        return asset_service.update_asset(_json_body())
    except asset_service.NotFoundError:
        abort(404, description="Asset not found")
    except ValueError as exc:
        abort(400, description=str(exc))


@bp.route("/asset/<asset_id>", methods=["DELETE"])
def delete_asset(asset_id):
    """Delete an asset together with its components."""
    try:
        result = asset_service.delete_asset(asset_id)
    except ValueError:
        abort(404, description="Asset not found")
    return {
        "message": "Asset deleted successfully",
        "removedSubAssets": result["removedSubAssets"],
    }


# =========================================================================
# Components
# =========================================================================


@bp.route("/subassets")
def list_sub_assets():
    """Return every component record."""
    return jsonify(asset_service.get_sub_asset_records())


@bp.route("/subasset", methods=["POST"])
def create_sub_asset():
    """Create a component; responds 201 with the stored record."""
    try:
        record = asset_service.create_sub_asset(_json_body())
    except ValueError as exc:
        abort(400, description=str(exc))
    return record, 201


@bp.route("/subasset", methods=["PUT"])
def update_sub_asset():
    """Replace a component identified by the ``id`` in the body."""
    try:
        return asset_service.update_sub_asset(_json_body())
    except asset_service.NotFoundError:
        abort(404, description="Sub-asset not found")
    except ValueError as exc:
        abort(400, description=str(exc))


@bp.route("/subasset/<sub_asset_id>", methods=["DELETE"])
def delete_sub_asset(sub_asset_id):
    """Delete a component and every sub-component below it."""
    try:
        result = asset_service.delete_sub_asset(sub_asset_id)
    except ValueError:
        abort(404, description="Sub-asset not found")
    return {
        "message": "Sub-asset deleted successfully",
        "removedChildren": result["removedChildren"],
    }


# =========================================================================
# Settings
# =========================================================================


@bp.route("/settings")
def get_settings():
    """Return the saved settings with defaults filled in."""
    return settings_service.get_settings()


@bp.route("/settings", methods=["POST"])
def save_settings():
    """Merge the posted settings sections into ``config.json``."""
    try:
        settings_service.save_settings(_json_body())
    except ValueError as exc:
        abort(400, description=str(exc))
    return {"success": True}


def _json_body() -> dict:
    """Parsed JSON body; anything but an object is a 400."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        abort(400, description="Request body must be a JSON object")
    return data
