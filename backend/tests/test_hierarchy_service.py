"""
Hierarchy Rule Engine tests

Covers rule lookups, preset replace semantics, and matrix edits with cycle
rejection (no partial apply).
"""

import pytest

from homestock.errors import CycleError, MatrixValidationError, RuleViolation, UnknownPresetError
from homestock.models import HierarchyRule, LocationType
from homestock.services.hierarchy_graph import adjacency_from_rules, find_cycle
from homestock.services.hierarchy_presets import HIERARCHY_PRESETS, RuleRow
from homestock.services.hierarchy_service import HierarchyRuleEngine, default_engine, list_rules


def full_matrix(*allowed_pairs):
    """Complete matrix with every cell False except the given (parent, child) pairs."""
    matrix = {
        parent.value: {child.value: False for child in LocationType if child != parent}
        for parent in LocationType
    }
    for parent, child in allowed_pairs:
        matrix[parent][child] = True
    return matrix


def rule_pairs(rule_set_name):
    return {(r.parent_type, r.child_type) for r in list_rules(rule_set_name) if r.is_allowed}


class TestPresetData:

    @pytest.mark.parametrize("name,count", [("minimal", 8), ("standard", 18), ("extended", 26)])
    def test_preset_sizes(self, name, count):
        assert len(HIERARCHY_PRESETS[name]) == count

    @pytest.mark.parametrize("name", ["minimal", "standard", "extended"])
    def test_presets_are_acyclic(self, name):
        assert find_cycle(adjacency_from_rules(HIERARCHY_PRESETS[name])) is None

    def test_extended_allows_shelf_inside_drawer(self):
        extended = {(r.parent_type, r.child_type) for r in HIERARCHY_PRESETS["extended"]}
        standard = {(r.parent_type, r.child_type) for r in HIERARCHY_PRESETS["standard"]}
        assert ("DRAWER", "SHELF") in extended
        assert ("DRAWER", "SHELF") not in standard

    def test_presets_are_immutable(self):
        with pytest.raises(TypeError):
            HIERARCHY_PRESETS["custom"] = ()


class TestIsAllowed:

    def test_explicit_allowed_row(self, db_session):
        default_engine.apply_preset("standard")
        assert default_engine.is_allowed("standard", LocationType.CABINET, LocationType.SHELF) is True

    def test_missing_row_is_not_allowed(self, db_session):
        default_engine.apply_preset("minimal")
        assert default_engine.is_allowed("minimal", "ROOM", "RACK") is False

    def test_unknown_rule_set_is_not_allowed(self, db_session):
        assert default_engine.is_allowed("nobody", "ROOM", "CABINET") is False

    def test_self_pair_is_not_allowed(self, db_session):
        default_engine.apply_preset("extended")
        assert default_engine.is_allowed("extended", "BOX", "BOX") is False

    def test_explicit_disallowed_row(self, db_session):
        default_engine.validate_and_apply_matrix("custom", full_matrix(("ROOM", "CABINET")))
        assert db_session.query(HierarchyRule).filter_by(
            rule_set_name="custom", parent_type="ROOM", child_type="RACK", is_allowed=False
        ).count() == 1
        assert default_engine.is_allowed("custom", "ROOM", "RACK") is False
        assert default_engine.is_allowed("custom", "ROOM", "CABINET") is True

    def test_accepts_lowercase_type_names(self, db_session):
        default_engine.apply_preset("standard")
        assert default_engine.is_allowed("standard", "cabinet", "shelf") is True

    def test_unknown_type_raises_value_error(self, db_session):
        with pytest.raises(ValueError):
            default_engine.is_allowed("standard", "GARAGE", "BOX")

    def test_require_allowed_raises_rule_violation(self, db_session):
        default_engine.apply_preset("minimal")
        with pytest.raises(RuleViolation) as exc_info:
            default_engine.require_allowed("minimal", "BAG", "BOX")
        assert exc_info.value.details["parent_type"] == "BAG"
        assert exc_info.value.details["child_type"] == "BOX"

    def test_rule_sets_are_independent(self, db_session):
        default_engine.apply_preset("minimal")
        default_engine.apply_preset("extended")
        assert default_engine.is_allowed("extended", "DRAWER", "SHELF") is True
        assert default_engine.is_allowed("minimal", "DRAWER", "SHELF") is False


class TestApplyPreset:

    def test_minimal_after_extended_leaves_no_residue(self, db_session):
        default_engine.apply_preset("household-x", "extended")
        default_engine.apply_preset("household-x", "minimal")

        expected = {(r.parent_type, r.child_type) for r in HIERARCHY_PRESETS["minimal"]}
        assert rule_pairs("household-x") == expected
        assert len(list_rules("household-x")) == 8

    def test_preset_name_defaults_to_rule_set_name(self, db_session):
        rules = default_engine.apply_preset("standard")
        assert len(rules) == 18
        assert {r.rule_set_name for r in rules} == {"standard"}

    def test_descriptions_are_persisted(self, db_session):
        default_engine.apply_preset("minimal")
        rule = db_session.query(HierarchyRule).filter_by(
            rule_set_name="minimal", parent_type="BOX", child_type="BAG"
        ).one()
        assert rule.description == "Bags in boxes"

    def test_unknown_preset_leaves_rules_untouched(self, db_session):
        default_engine.apply_preset("household-x", "minimal")
        with pytest.raises(UnknownPresetError):
            default_engine.apply_preset("household-x", "maximal")
        assert len(list_rules("household-x")) == 8

    def test_injected_presets(self, db_session):
        engine = HierarchyRuleEngine(presets={"tiny": (RuleRow("ROOM", "BOX"),)})
        engine.apply_preset("tiny")
        assert engine.is_allowed("tiny", "ROOM", "BOX") is True
        assert engine.is_allowed("tiny", "ROOM", "CABINET") is False
        with pytest.raises(UnknownPresetError):
            engine.apply_preset("standard")

    def test_cyclic_injected_preset_is_rejected(self, db_session):
        engine = HierarchyRuleEngine(presets={
            "loop": (RuleRow("SHELF", "BOX"), RuleRow("BOX", "SHELF")),
        })
        with pytest.raises(CycleError):
            engine.apply_preset("loop")
        assert list_rules("loop") == []

    def test_list_presets(self):
        presets = {p["name"]: p for p in default_engine.list_presets()}
        assert set(presets) == {"minimal", "standard", "extended"}
        assert presets["standard"]["rule_count"] == 18


class TestValidateAndApplyMatrix:

    def test_cycle_is_rejected_and_named(self, db_session):
        matrix = full_matrix(("ROOM", "CABINET"), ("SHELF", "BOX"), ("BOX", "SHELF"))

        with pytest.raises(CycleError) as exc_info:
            default_engine.validate_and_apply_matrix("custom", matrix)

        cycle = exc_info.value.cycle
        assert set(cycle) == {"SHELF", "BOX"}
        assert cycle[0] == cycle[-1]
        assert "SHELF" in str(exc_info.value) and "BOX" in str(exc_info.value)
        assert "→" in str(exc_info.value)

    def test_rejected_matrix_is_not_partially_applied(self, db_session):
        default_engine.apply_preset("custom", "standard")
        before = rule_pairs("custom")

        with pytest.raises(CycleError):
            default_engine.validate_and_apply_matrix("custom", full_matrix(("SHELF", "BOX"), ("BOX", "SHELF")))

        assert rule_pairs("custom") == before

    def test_flipped_rule_is_accepted(self, db_session):
        matrix = full_matrix(("SHELF", "BOX"))
        matrix["BOX"]["SHELF"] = False

        rules = default_engine.validate_and_apply_matrix("custom", matrix)

        assert len(rules) == len(LocationType) * (len(LocationType) - 1)
        assert default_engine.is_allowed("custom", "SHELF", "BOX") is True
        assert default_engine.is_allowed("custom", "BOX", "SHELF") is False

    def test_longer_cycle_is_reported_in_order(self, db_session):
        matrix = full_matrix(("CABINET", "SHELF"), ("SHELF", "BOX"), ("BOX", "CABINET"))
        with pytest.raises(CycleError) as exc_info:
            default_engine.validate_and_apply_matrix("custom", matrix)
        assert exc_info.value.cycle == ["CABINET", "SHELF", "BOX", "CABINET"]

    def test_self_cells_are_ignored(self, db_session):
        matrix = full_matrix(("ROOM", "BOX"))
        matrix["BOX"]["BOX"] = True
        matrix["ROOM"]["ROOM"] = True

        default_engine.validate_and_apply_matrix("custom", matrix)

        assert rule_pairs("custom") == {("ROOM", "BOX")}
        assert db_session.query(HierarchyRule).filter(
            HierarchyRule.parent_type == HierarchyRule.child_type
        ).count() == 0

    def test_incomplete_matrix_is_rejected(self, db_session):
        matrix = full_matrix()
        del matrix["BAG"]["BOX"]
        del matrix["SECTION"]

        with pytest.raises(MatrixValidationError) as exc_info:
            default_engine.validate_and_apply_matrix("custom", matrix)

        missing = exc_info.value.details["missing"]
        assert "BAG->BOX" in missing
        assert "SECTION->ROOM" in missing
        assert list_rules("custom") == []

    def test_unknown_type_is_rejected(self, db_session):
        matrix = full_matrix()
        matrix["GARAGE"] = {"BOX": True}
        with pytest.raises(MatrixValidationError):
            default_engine.validate_and_apply_matrix("custom", matrix)

    def test_non_boolean_cell_is_rejected(self, db_session):
        matrix = full_matrix()
        matrix["ROOM"]["CABINET"] = "yes"
        with pytest.raises(MatrixValidationError):
            default_engine.validate_and_apply_matrix("custom", matrix)

    def test_enum_keys_are_accepted(self, db_session):
        matrix = {
            parent: {child: (parent, child) == (LocationType.ROOM, LocationType.BOX) for child in LocationType}
            for parent in LocationType
        }
        default_engine.validate_and_apply_matrix("custom", matrix)
        assert rule_pairs("custom") == {("ROOM", "BOX")}

    def test_get_matrix_round_trips_editor_state(self, db_session):
        default_engine.apply_preset("custom", "minimal")
        matrix = default_engine.get_matrix("custom")

        assert matrix["CABINET"]["SHELF"] is True
        assert matrix["SHELF"]["CABINET"] is False
        assert matrix["BOX"]["BOX"] is False

        default_engine.validate_and_apply_matrix("custom", matrix)
        expected = {(r.parent_type, r.child_type) for r in HIERARCHY_PRESETS["minimal"]}
        assert rule_pairs("custom") == expected

    def test_get_allowed_children(self, db_session):
        default_engine.apply_preset("standard")
        children = default_engine.get_allowed_children("standard", "CABINET")
        assert children == [LocationType.SHELF, LocationType.DRAWER, LocationType.BOX]
