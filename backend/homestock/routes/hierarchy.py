# Overview: Flask API routes for hierarchy rule-sets; presets, matrix editing and placement checks.

from flask import Blueprint, jsonify, request

from homestock.decorators import handle_hierarchy_errors
from homestock.services.hierarchy_service import default_engine, list_rules


hierarchy_bp = Blueprint("hierarchy", __name__, url_prefix="/api/hierarchy")


@hierarchy_bp.get("/presets")
def list_presets():
    return jsonify(default_engine.list_presets()), 200


@hierarchy_bp.get("/<rule_set_name>/rules")
def get_rules(rule_set_name: str):
    return jsonify([rule.to_dict() for rule in list_rules(rule_set_name)]), 200


@hierarchy_bp.post("/<rule_set_name>/preset")
@handle_hierarchy_errors("Failed to apply rule preset")
def apply_preset(rule_set_name: str):
    data = request.get_json(silent=True) or {}
    rules = default_engine.apply_preset(rule_set_name, data.get("preset"))
    return jsonify({"success": True, "rules_created": len(rules)}), 200


@hierarchy_bp.get("/<rule_set_name>/matrix")
def get_matrix(rule_set_name: str):
    matrix = default_engine.get_matrix(rule_set_name)
    return jsonify({"matrix": matrix, "location_types": list(matrix)}), 200


@hierarchy_bp.put("/<rule_set_name>/matrix")
@handle_hierarchy_errors("Failed to update rule matrix")
def update_matrix(rule_set_name: str):
    data = request.get_json() or {}
    matrix = data.get("matrix")
    if matrix is None:
        return jsonify({"error": "matrix required"}), 400

    rules = default_engine.validate_and_apply_matrix(rule_set_name, matrix)
    return jsonify({"success": True, "rules_updated": len(rules)}), 200


@hierarchy_bp.get("/<rule_set_name>/can-place")
@handle_hierarchy_errors("Failed to check placement")
def can_place(rule_set_name: str):
    parent_type = request.args.get("parent_type")
    child_type = request.args.get("child_type")
    if not parent_type or not child_type:
        return jsonify({"error": "parent_type and child_type required"}), 400

    allowed = default_engine.is_allowed(rule_set_name, parent_type, child_type)
    return jsonify({"allowed": allowed}), 200
