# Overview: Service-layer operations for hierarchy rules; rule lookups, presets and matrix edits.

"""
Hierarchy Rule Engine

Answers "can a node of type C be placed directly inside a node of type P?"
for a named rule-set, and guards rule edits against circular containment.

RULE-SETS:
- Presets (minimal, standard, extended) are immutable data injected into the
  engine, not read from mutable globals
- Each household edits its own custom rule-set

REPLACE SEMANTICS: apply_preset and validate_and_apply_matrix both replace
every row of the rule-set in one transaction. Existing locations are not
re-validated; rules govern future placement only.

NO PARTIAL APPLY: a matrix is normalized and cycle-checked fully in memory
before the first write.
"""

from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import HierarchyRule, LocationType
from homestock.errors import CycleError, MatrixValidationError, RuleViolation, UnknownPresetError
from .hierarchy_graph import adjacency_from_rules, build_adjacency, find_cycle
from .hierarchy_presets import HIERARCHY_PRESETS, RuleRow


logger = logging.getLogger(__name__)


def list_rules(rule_set_name: str) -> list[HierarchyRule]:
    return (
        db.session.query(HierarchyRule)
        .filter_by(rule_set_name=rule_set_name)
        .order_by(HierarchyRule.parent_type.asc(), HierarchyRule.child_type.asc())
        .all()
    )


def replace_rules(rule_set_name: str, rows: Iterable[RuleRow]) -> list[HierarchyRule]:
    """
    Atomically replace every rule row of a rule-set.

    Delete and insert share one transaction and one commit; any failure rolls
    the whole replacement back so the previous rule-set stays intact.
    """
    try:
        db.session.query(HierarchyRule).filter_by(rule_set_name=rule_set_name).delete(
            synchronize_session=False
        )
        rules = [
            HierarchyRule(
                rule_set_name=rule_set_name,
                parent_type=row.parent_type,
                child_type=row.child_type,
                is_allowed=row.is_allowed,
                description=row.description,
            )
            for row in rows
            if row.parent_type != row.child_type
        ]
        db.session.add_all(rules)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to replace rules for rule-set %s", rule_set_name)
        raise

    logger.info("Replaced rule-set %s with %d rows", rule_set_name, len(rules))
    return rules


def _normalize_matrix(matrix: Mapping) -> dict[str, dict[str, bool]]:
    """
    Validate a full matrix and return it keyed by type value, in enum order.

    Every ordered pair of distinct types must carry a bool. Self cells are
    accepted and dropped.
    """
    if not isinstance(matrix, Mapping):
        raise MatrixValidationError("Matrix must be a mapping of parent type to child type flags")

    by_parent: dict[LocationType, Mapping] = {}
    for parent_key, row in matrix.items():
        try:
            parent = LocationType.parse(parent_key)
        except ValueError:
            raise MatrixValidationError(f"Unknown parent type in matrix: {parent_key!r}")
        if not isinstance(row, Mapping):
            raise MatrixValidationError(f"Matrix row for {parent.value} must be a mapping")
        by_parent[parent] = row

    normalized: dict[str, dict[str, bool]] = {}
    missing: list[str] = []
    for parent in LocationType:
        row = by_parent.get(parent, {})
        cells: dict[LocationType, object] = {}
        for child_key, value in row.items():
            try:
                cells[LocationType.parse(child_key)] = value
            except ValueError:
                raise MatrixValidationError(f"Unknown child type in matrix: {child_key!r}")

        normalized[parent.value] = {}
        for child in LocationType:
            if child == parent:
                continue
            if child not in cells:
                missing.append(f"{parent.value}->{child.value}")
                continue
            value = cells[child]
            if not isinstance(value, bool):
                raise MatrixValidationError(
                    f"Matrix cell {parent.value}->{child.value} must be a boolean",
                    details={"cell": f"{parent.value}->{child.value}"},
                )
            normalized[parent.value][child.value] = value

    if missing:
        raise MatrixValidationError(
            f"Matrix is incomplete: {len(missing)} cell(s) missing",
            details={"missing": missing},
        )
    return normalized


class HierarchyRuleEngine:
    """Rule lookups and rule-set edits over the hierarchy_rules table."""

    def __init__(self, presets: Mapping[str, Sequence[RuleRow]] = HIERARCHY_PRESETS):
        self.presets = presets

    def is_allowed(self, rule_set_name: str, parent_type, child_type) -> bool:
        """
        True only when an explicit allowed row exists for the exact ordered pair.

        Self pairs and missing rows are "not allowed", never an error.
        """
        parent = LocationType.parse(parent_type)
        child = LocationType.parse(child_type)
        if parent == child:
            return False

        rule = db.session.query(HierarchyRule).filter_by(
            rule_set_name=rule_set_name,
            parent_type=parent.value,
            child_type=child.value,
        ).first()
        return bool(rule and rule.is_allowed)

    def require_allowed(self, rule_set_name: str, parent_type, child_type) -> None:
        if not self.is_allowed(rule_set_name, parent_type, child_type):
            parent = LocationType.parse(parent_type)
            child = LocationType.parse(child_type)
            raise RuleViolation(
                f"{child.value} cannot be placed inside {parent.value} under rule-set '{rule_set_name}'",
                details={
                    "rule_set_name": rule_set_name,
                    "parent_type": parent.value,
                    "child_type": child.value,
                },
            )

    def get_allowed_children(self, rule_set_name: str, parent_type) -> list[LocationType]:
        parent = LocationType.parse(parent_type)
        allowed = {
            rule.child_type
            for rule in db.session.query(HierarchyRule).filter_by(
                rule_set_name=rule_set_name,
                parent_type=parent.value,
                is_allowed=True,
            )
        }
        return [t for t in LocationType if t.value in allowed]

    def preset_rows(self, preset_name: str) -> Sequence[RuleRow]:
        try:
            return self.presets[preset_name]
        except KeyError:
            raise UnknownPresetError(
                f"Unknown rule preset '{preset_name}'",
                details={"available": sorted(self.presets)},
            )

    def list_presets(self) -> list[dict]:
        return [
            {
                "name": name,
                "rule_count": sum(1 for row in rows if row.is_allowed),
                "rules": [
                    {
                        "parent_type": row.parent_type,
                        "child_type": row.child_type,
                        "is_allowed": row.is_allowed,
                        "description": row.description,
                    }
                    for row in rows
                ],
            }
            for name, rows in self.presets.items()
        ]

    def apply_preset(self, rule_set_name: str, preset_name: str | None = None) -> list[HierarchyRule]:
        """
        Replace the rule-set with a preset's rule list.

        DESTRUCTIVE: no residual rows from the previous rule-set survive.
        preset_name defaults to rule_set_name, so apply_preset("minimal")
        (re)seeds the minimal preset under its own name.
        """
        rows = self.preset_rows(preset_name or rule_set_name)

        cycle = find_cycle(adjacency_from_rules(rows))
        if cycle:
            raise CycleError(cycle)

        return replace_rules(rule_set_name, rows)

    def validate_matrix(self, matrix: Mapping) -> dict[str, dict[str, bool]]:
        """Normalize a full matrix and reject it if it contains a cycle. Pure, no writes."""
        normalized = _normalize_matrix(matrix)
        cycle = find_cycle(build_adjacency(normalized))
        if cycle:
            raise CycleError(cycle)
        return normalized

    def validate_and_apply_matrix(self, rule_set_name: str, matrix: Mapping) -> list[HierarchyRule]:
        """
        Validate a complete parent -> child -> bool matrix, then replace the rule-set.

        Raises CycleError (with the offending cycle) or MatrixValidationError
        before any row is written. Every non-self cell is persisted, allowed or not.
        """
        try:
            normalized = self.validate_matrix(matrix)
        except CycleError as exc:
            logger.info("Rejected matrix for rule-set %s: %s", rule_set_name, exc)
            raise

        rows = [
            RuleRow(parent, child, None, allowed)
            for parent, cells in normalized.items()
            for child, allowed in cells.items()
        ]
        return replace_rules(rule_set_name, rows)

    def get_matrix(self, rule_set_name: str) -> dict[str, dict[str, bool]]:
        """Full matrix for the editor; self cells and missing rows are False."""
        allowed = {
            (rule.parent_type, rule.child_type)
            for rule in list_rules(rule_set_name)
            if rule.is_allowed
        }
        return {
            parent.value: {
                child.value: (parent.value, child.value) in allowed
                for child in LocationType
            }
            for parent in LocationType
        }


default_engine = HierarchyRuleEngine()
