# Overview: Flask API routes for households; parses input and returns JSON responses.

from flask import Blueprint, current_app, jsonify, request

from homestock.decorators import handle_hierarchy_errors
from homestock.services import household_service


households_bp = Blueprint("households", __name__, url_prefix="/api/households")


@households_bp.get("")
def list_households():
    households = household_service.list_households()
    return jsonify([household.to_dict() for household in households]), 200


@households_bp.post("")
@handle_hierarchy_errors("Failed to create household")
def create_household():
    data = request.get_json() or {}
    preset = data.get("preset") or current_app.config["DEFAULT_RULE_SET_PRESET"]
    try:
        household = household_service.create_household(name=data.get("name"), preset=preset)
        return jsonify(household.to_dict()), 201
    except household_service.HouseholdError as exc:
        return jsonify({"error": str(exc)}), 400


@households_bp.get("/<int:household_id>")
def get_household(household_id: int):
    household = household_service.get_household(household_id)
    if not household:
        return jsonify({"error": "Household not found"}), 404
    return jsonify(household.to_dict()), 200


@households_bp.put("/<int:household_id>/rule-set")
@handle_hierarchy_errors("Failed to set household rule-set")
def set_rule_set(household_id: int):
    data = request.get_json() or {}
    try:
        household = household_service.set_rule_set(household_id, data.get("rule_set_name"))
        return jsonify(household.to_dict()), 200
    except household_service.HouseholdError as exc:
        return jsonify({"error": str(exc)}), 400
