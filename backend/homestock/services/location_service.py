# Overview: Service-layer operations for locations; the creation workflow, soft delete and tree reads.

"""
Location Service

CREATION FLOW (cheapest check first):
1. Household and parent must exist and be active         -> LocationNotFound
2. Top level takes rooms only; otherwise the household's
   rule-set must allow (parent.type -> type)               -> RuleViolation
3. naming_service.generate_name computes name/auto_number/level/wizard_order
4. Insert; the partial unique index rejects a raced
   auto number                                             -> AutoNumberConflict

RETRY POLICY: create_location never retries on its own.
create_location_with_retry is the caller-side policy: it re-runs the whole
flow so the new attempt reads the sibling that won the race.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from ..extensions import db
from ..models import Household, Location, LocationType
from homestock.errors import AutoNumberConflict, LocationNotFound, RuleViolation
from homestock.time_utils import utcnow
from .concurrency import lock_for_update, run_with_retry
from .hierarchy_service import HierarchyRuleEngine, default_engine
from .naming_service import build_full_name, generate_name, get_active_location, get_location_path, validate_auto_number


logger = logging.getLogger(__name__)

PATH_SEPARATOR = " › "


def require_household(household_id: int) -> Household:
    household = db.session.query(Household).filter_by(id=household_id, is_active=True).first()
    if not household:
        raise LocationNotFound("Household not found", details={"household_id": household_id})
    return household


def _commit_location(location: Location) -> None:
    # Captured up front: a rollback expires or expunges the instance
    household_id = location.household_id
    details = {
        "parent_id": location.parent_id,
        "type": location.type,
        "auto_number": location.auto_number,
    }
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.info("Auto number conflict in household %s: %s", household_id, details)
        raise AutoNumberConflict(
            f"Auto number '{details['auto_number']}' is already in use by an active sibling",
            details=details,
        ) from exc


def create_location(
    household_id: int,
    location_type,
    parent_id: int | None = None,
    name: str | None = None,
    description: str | None = None,
    engine: HierarchyRuleEngine | None = None,
) -> Location:
    engine = engine or default_engine
    location_type = LocationType.parse(location_type)
    household = require_household(household_id)

    if parent_id is None:
        if location_type != LocationType.ROOM:
            raise RuleViolation(
                "Only rooms can be created at the top level",
                details={"child_type": location_type.value},
            )
    else:
        parent = get_active_location(parent_id, household_id)
        if not household.rule_set_name:
            raise RuleViolation("Household has no hierarchy rule-set", details={"household_id": household_id})
        engine.require_allowed(household.rule_set_name, parent.type, location_type)

    result = generate_name(parent_id, location_type, household_id, name=name)

    location = Location(
        household_id=household_id,
        parent_id=parent_id,
        type=location_type.value,
        name=result.name,
        description=description,
        auto_number=result.auto_number,
        level=result.level,
        wizard_order=result.wizard_order,
        is_active=True,
    )
    db.session.add(location)
    _commit_location(location)

    logger.info("Created %s %r (id=%s) in household %s", location.type, location.name, location.id, household_id)
    return location


def create_location_with_retry(
    household_id: int,
    location_type,
    parent_id: int | None = None,
    name: str | None = None,
    description: str | None = None,
    *,
    attempts: int = 3,
    engine: HierarchyRuleEngine | None = None,
) -> Location:
    def _op():
        return create_location(
            household_id,
            location_type,
            parent_id=parent_id,
            name=name,
            description=description,
            engine=engine,
        )

    return run_with_retry(_op, attempts=attempts, retry_on=(AutoNumberConflict,))


def get_location(location_id: int, household_id: int | None = None) -> Location | None:
    q = db.session.query(Location).filter(Location.id == location_id)
    if household_id is not None:
        q = q.filter(Location.household_id == household_id)
    return q.first()


def _require_location(location_id: int, household_id: int | None, lock: bool = False) -> Location:
    q = db.session.query(Location).filter(Location.id == location_id, Location.is_active == True)
    if household_id is not None:
        q = q.filter(Location.household_id == household_id)
    if lock:
        q = lock_for_update(q)
    location = q.first()
    if not location:
        raise LocationNotFound("Location not found", details={"location_id": location_id})
    return location


def list_children(household_id: int, parent_id: int | None = None, include_inactive: bool = False) -> list[Location]:
    q = db.session.query(Location).filter(Location.household_id == household_id)
    if parent_id is None:
        q = q.filter(Location.parent_id.is_(None))
    else:
        q = q.filter(Location.parent_id == parent_id)
    if not include_inactive:
        q = q.filter(Location.is_active == True)
    return q.order_by(Location.wizard_order.asc(), Location.id.asc()).all()


def deactivate_location(location_id: int, household_id: int | None = None) -> Location:
    """
    Soft delete a location and every active descendant.

    Deactivated auto numbers become free for hole-filling; wizard orders do not.
    """
    location = _require_location(location_id, household_id, lock=True)
    now = utcnow()

    stack = [location]
    deactivated = 0
    while stack:
        node = stack.pop()
        if not node.is_active:
            continue
        node.is_active = False
        node.deactivated_at = now
        deactivated += 1
        stack.extend(child for child in node.children if child.is_active)

    db.session.commit()
    logger.info("Deactivated location %s and %d descendant(s)", location_id, deactivated - 1)
    return location


def rename_location(location_id: int, name: str, household_id: int | None = None) -> Location:
    if not name or not name.strip():
        raise ValueError("Location name is required")

    location = _require_location(location_id, household_id, lock=True)
    location.name = name.strip()
    db.session.commit()
    return location


def set_auto_number(location_id: int, auto_number: str, household_id: int | None = None) -> Location:
    """
    Manually correct a location's auto number.

    The candidate must be free among the active siblings of the same type.
    A generated name ("Hylle A1") follows the new number; a custom name is kept.
    """
    auto_number = (auto_number or "").strip()
    if not auto_number:
        raise ValueError("Auto number is required")

    location = _require_location(location_id, household_id, lock=True)
    if location.type == LocationType.ROOM.value:
        raise ValueError("Rooms do not carry an auto number")

    if not validate_auto_number(
        auto_number,
        location.parent_id,
        location.household_id,
        exclude_id=location.id,
        location_type=location.type,
    ):
        raise AutoNumberConflict(
            f"Auto number '{auto_number}' is already in use by an active sibling",
            details={"parent_id": location.parent_id, "type": location.type, "auto_number": auto_number},
        )

    if location.name == build_full_name(location.type, location.auto_number):
        location.name = build_full_name(location.type, auto_number)
    location.auto_number = auto_number
    _commit_location(location)
    return location


def get_location_tree(household_id: int) -> list[dict]:
    """Active locations of a household as nested dicts, siblings in wizard order."""
    require_household(household_id)
    locations = (
        db.session.query(Location)
        .filter(Location.household_id == household_id, Location.is_active == True)
        .order_by(Location.wizard_order.asc(), Location.id.asc())
        .all()
    )

    children_map: dict[int | None, list[Location]] = {}
    for location in locations:
        children_map.setdefault(location.parent_id, []).append(location)

    def _build(node: Location) -> dict:
        return {
            "location": node.to_dict(),
            "children": [_build(child) for child in children_map.get(node.id, [])],
        }

    return [_build(root) for root in children_map.get(None, [])]


def build_path_string(location_id: int, separator: str = PATH_SEPARATOR, household_id: int | None = None) -> str:
    """Full breadcrumb, e.g. "Kjøkken › Skap A › Hylle A1"."""
    return separator.join(entry.name for entry in get_location_path(location_id, household_id))


def build_compact_path(
    location_id: int,
    max_segments: int = 3,
    separator: str = PATH_SEPARATOR,
    household_id: int | None = None,
) -> str:
    """Shortened breadcrumb: "Kjøkken › ... › Boks A1-1" when the path is long."""
    names = [entry.name for entry in get_location_path(location_id, household_id)]
    if len(names) <= max_segments:
        return separator.join(names)
    if max_segments <= 2:
        return separator.join([names[0], names[-1]])
    return separator.join([names[0], "...", names[-1]])
