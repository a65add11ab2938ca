# Overview: Service-layer operations for households; each household owns a custom rule-set.

from __future__ import annotations

from ..extensions import db
from ..models import Household
from homestock.errors import LocationNotFound
from .hierarchy_service import HierarchyRuleEngine, default_engine


class HouseholdError(Exception):
    """Raised when household operations fail."""
    pass


def household_rule_set_name(household_id: int) -> str:
    return f"household-{household_id}"


def create_household(name: str, preset: str = "standard", engine: HierarchyRuleEngine | None = None) -> Household:
    """
    Create a household and seed its custom rule-set from a preset.

    The preset is resolved before anything is written, so an unknown preset
    leaves no household behind.
    """
    engine = engine or default_engine
    if not name or not name.strip():
        raise HouseholdError("Household name is required")
    engine.preset_rows(preset)

    household = Household(name=name.strip(), is_active=True)
    db.session.add(household)
    db.session.flush()

    household.rule_set_name = household_rule_set_name(household.id)
    engine.apply_preset(household.rule_set_name, preset)
    return household


def get_household(household_id: int) -> Household | None:
    return db.session.query(Household).filter_by(id=household_id).first()


def list_households() -> list[Household]:
    return db.session.query(Household).order_by(Household.name.asc()).all()


def set_rule_set(household_id: int, rule_set_name: str) -> Household:
    """Point a household at another rule-set (e.g. a shared preset)."""
    if not rule_set_name:
        raise HouseholdError("Rule-set name is required")

    household = db.session.query(Household).filter_by(id=household_id, is_active=True).first()
    if not household:
        raise LocationNotFound("Household not found", details={"household_id": household_id})

    household.rule_set_name = rule_set_name
    db.session.commit()
    return household
