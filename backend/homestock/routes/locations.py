# Overview: Flask API routes for locations; parses input and returns JSON responses.

"""
Location routes, scoped to one household:

    /api/households/<household_id>/locations

Creation always goes through the rule check and the auto-naming service.
A 409 response means another request took the same auto number; the
creation route already retried AUTO_NUMBER_RETRY_ATTEMPTS times.
"""

from flask import Blueprint, current_app, jsonify, request

from homestock.decorators import handle_hierarchy_errors
from homestock.models import LocationType
from homestock.services import location_service, naming_service


locations_bp = Blueprint("locations", __name__, url_prefix="/api/households/<int:household_id>/locations")


def _optional_int(value):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValueError("parent_id must be an integer")


def _sorted_types(types) -> list[str]:
    return [t.value for t in LocationType if t in types]


@locations_bp.get("")
@handle_hierarchy_errors("Failed to list locations")
def list_locations(household_id: int):
    location_service.require_household(household_id)
    parent_id = _optional_int(request.args.get("parent_id"))
    include_inactive = request.args.get("include_inactive", "").lower() == "true"
    children = location_service.list_children(household_id, parent_id, include_inactive=include_inactive)
    return jsonify([location.to_dict() for location in children]), 200


@locations_bp.post("")
@handle_hierarchy_errors("Failed to create location")
def create_location(household_id: int):
    data = request.get_json() or {}
    if not data.get("type"):
        return jsonify({"error": "type required"}), 400

    location = location_service.create_location_with_retry(
        household_id,
        data.get("type"),
        parent_id=_optional_int(data.get("parent_id")),
        name=data.get("name"),
        description=data.get("description"),
        attempts=current_app.config["AUTO_NUMBER_RETRY_ATTEMPTS"],
    )
    return jsonify(location.to_dict()), 201


@locations_bp.get("/tree")
@handle_hierarchy_errors("Failed to load location tree")
def get_tree(household_id: int):
    return jsonify(location_service.get_location_tree(household_id)), 200


@locations_bp.get("/auto-name")
@handle_hierarchy_errors("Failed to preview auto name")
def preview_auto_name(household_id: int):
    """Preview of what creating a location would produce. Nothing is written."""
    location_type = request.args.get("type")
    if not location_type:
        return jsonify({"error": "type required"}), 400

    location_service.require_household(household_id)
    result = naming_service.generate_name(
        _optional_int(request.args.get("parent_id")),
        location_type,
        household_id,
        name=request.args.get("name"),
    )
    return jsonify(result.to_dict()), 200


@locations_bp.get("/allowed-child-types")
@handle_hierarchy_errors("Failed to load allowed child types")
def allowed_child_types(household_id: int):
    parent_type = request.args.get("parent_type") or None
    return jsonify(_sorted_types(naming_service.get_allowed_child_types(parent_type))), 200


@locations_bp.get("/<int:location_id>")
def get_location(household_id: int, location_id: int):
    location = location_service.get_location(location_id, household_id)
    if not location:
        return jsonify({"error": "Location not found"}), 404
    return jsonify(location.to_dict()), 200


@locations_bp.get("/<int:location_id>/path")
@handle_hierarchy_errors("Failed to load location path")
def get_location_path(household_id: int, location_id: int):
    path = naming_service.get_location_path(location_id, household_id)
    return jsonify({
        "path": [entry.to_dict() for entry in path],
        "display": location_service.PATH_SEPARATOR.join(entry.name for entry in path),
    }), 200


@locations_bp.patch("/<int:location_id>")
@handle_hierarchy_errors("Failed to update location")
def update_location(household_id: int, location_id: int):
    data = request.get_json() or {}
    location = None
    if "auto_number" in data:
        location = location_service.set_auto_number(location_id, data["auto_number"], household_id)
    if "name" in data:
        location = location_service.rename_location(location_id, data["name"], household_id)
    if location is None:
        return jsonify({"error": "name or auto_number required"}), 400
    return jsonify(location.to_dict()), 200


@locations_bp.delete("/<int:location_id>")
@handle_hierarchy_errors("Failed to deactivate location")
def deactivate_location(household_id: int, location_id: int):
    location = location_service.deactivate_location(location_id, household_id)
    return jsonify(location.to_dict()), 200
