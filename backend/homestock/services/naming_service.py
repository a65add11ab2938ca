# Overview: Service-layer operations for auto-naming; computes name/auto_number/level/order for new locations.

"""
Auto-Naming Service

Logical alphanumeric naming for wizard-created locations:
- Room:    user-supplied name, no auto number
- Cabinet: Skap A, Skap B, ... (also racks and wall shelves)
- Shelf:   Hylle A1, A2, ... for cabinet A (also drawers)
- Box:     Boks A1-1, A1-2, ... for shelf A1
- Bag:     Pose A1-1-a, A1-1-b, ... for box A1-1
- Other:   plain number, no composite prefix

SIBLINGS: active locations with the same parent, type and household. Shelves
and drawers of one cabinet are separate sequences.

HOLE-FILLING: the lowest unused letter/number is reused after a soft delete.
wizard_order is never reused.

NOT RE-ENTRANT: two concurrent requests can compute the same auto number. The
partial unique index on locations rejects the second insert and the caller
retries generate_name (see location_service.create_location_with_retry).
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass

from sqlalchemy import func

from ..extensions import db
from ..models import LOCATION_TYPE_LABELS, Location, LocationType
from homestock.errors import LocationNotFound
from .sequences import next_letter, next_number


LETTER_TYPES = frozenset({LocationType.CABINET, LocationType.RACK, LocationType.WALL_SHELF})
APPENDED_NUMBER_TYPES = frozenset({LocationType.SHELF, LocationType.DRAWER})
DASHED_NUMBER_TYPES = frozenset({LocationType.BOX})
DASHED_LETTER_TYPES = frozenset({LocationType.BAG})

_LEADING_LETTERS = re.compile(r"^([A-Za-z]+)")
_TRAILING_LETTERS = re.compile(r"([A-Za-z]+)$")
_LAST_NUMBER = re.compile(r"(\d+)(?!.*\d)")


# Default structural possibilities, used as a client-side hint only.
# The authoritative check for a household is HierarchyRuleEngine.is_allowed.
ALLOWED_CHILD_TYPES: dict[LocationType, frozenset[LocationType]] = {
    LocationType.ROOM: frozenset({
        LocationType.CABINET,
        LocationType.RACK,
        LocationType.WALL_SHELF,
        LocationType.SHELF,
        LocationType.DRAWER,
    }),
    LocationType.CABINET: frozenset({LocationType.SHELF, LocationType.DRAWER, LocationType.BOX}),
    LocationType.RACK: frozenset({LocationType.SHELF, LocationType.BOX}),
    LocationType.WALL_SHELF: frozenset({LocationType.BOX, LocationType.BAG}),
    LocationType.SHELF: frozenset({LocationType.BOX, LocationType.BAG}),
    LocationType.DRAWER: frozenset({LocationType.BOX, LocationType.BAG}),
    LocationType.BOX: frozenset({LocationType.BAG}),
    LocationType.BAG: frozenset(),
    LocationType.CONTAINER: frozenset({LocationType.BOX, LocationType.BAG}),
    LocationType.SHELF_COMPARTMENT: frozenset({LocationType.BOX, LocationType.BAG}),
    LocationType.SECTION: frozenset({LocationType.BOX, LocationType.BAG}),
}

ROOT_CHILD_TYPES = frozenset({LocationType.ROOM})


@dataclass(frozen=True)
class NamingResult:
    name: str
    auto_number: str
    level: int
    wizard_order: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class PathEntry:
    id: int
    name: str
    type: str

    def to_dict(self) -> dict:
        return asdict(self)


def get_active_location(location_id: int, household_id: int | None = None) -> Location:
    """Fetch an active location, optionally scoped to a household. Raises LocationNotFound."""
    q = db.session.query(Location).filter(
        Location.id == location_id,
        Location.is_active == True,
    )
    if household_id is not None:
        q = q.filter(Location.household_id == household_id)

    location = q.first()
    if not location:
        raise LocationNotFound("Parent location not found", details={"location_id": location_id})
    return location


def _sibling_filter(q, parent_id: int | None, location_type: LocationType, household_id: int):
    q = q.filter(
        Location.household_id == household_id,
        Location.type == location_type.value,
    )
    if parent_id is None:
        return q.filter(Location.parent_id.is_(None))
    return q.filter(Location.parent_id == parent_id)


def get_sibling_locations(parent_id: int | None, location_type, household_id: int) -> list[Location]:
    """Active same-type siblings under parent_id, ordered by wizard_order."""
    location_type = LocationType.parse(location_type)
    q = _sibling_filter(db.session.query(Location), parent_id, location_type, household_id)
    return (
        q.filter(Location.is_active == True)
        .order_by(Location.wizard_order.asc(), Location.id.asc())
        .all()
    )


def _segment_prefix(location_type: LocationType, parent_auto_number: str) -> str:
    if location_type in APPENDED_NUMBER_TYPES:
        return parent_auto_number
    if location_type in DASHED_NUMBER_TYPES | DASHED_LETTER_TYPES:
        # Containers directly under a room have no parent number to join
        return f"{parent_auto_number}-" if parent_auto_number else ""
    return ""


def _strip_prefix(auto_number: str, prefix: str) -> str:
    if prefix and auto_number.startswith(prefix):
        return auto_number[len(prefix):]
    return auto_number


def _used_numbers(siblings: list[Location], prefix: str) -> set[int]:
    used = set()
    for sibling in siblings:
        if not sibling.auto_number:
            continue
        match = _LAST_NUMBER.search(_strip_prefix(sibling.auto_number, prefix))
        if match:
            used.add(int(match.group(1)))
    return used


def _used_letters(siblings: list[Location], prefix: str) -> set[str]:
    # Composite codes (A1-1-a) carry their own letter at the end, plain codes (A) at the start
    pattern = _TRAILING_LETTERS if prefix else _LEADING_LETTERS
    used = set()
    for sibling in siblings:
        if not sibling.auto_number:
            continue
        match = pattern.search(_strip_prefix(sibling.auto_number, prefix))
        if match:
            used.add(match.group(1).upper())
    return used


def compute_auto_number(location_type, parent_auto_number: str, siblings: list[Location]) -> str:
    """Next auto number for a new sibling. Pure given the parent number and sibling rows."""
    location_type = LocationType.parse(location_type)
    parent_auto_number = parent_auto_number or ""

    if location_type == LocationType.ROOM:
        return ""

    prefix = _segment_prefix(location_type, parent_auto_number)

    if location_type in LETTER_TYPES:
        return next_letter(_used_letters(siblings, prefix))

    if location_type in DASHED_LETTER_TYPES:
        return f"{prefix}{next_letter(_used_letters(siblings, prefix), lowercase=True)}"

    if location_type in APPENDED_NUMBER_TYPES | DASHED_NUMBER_TYPES:
        return f"{prefix}{next_number(_used_numbers(siblings, prefix))}"

    return str(next_number(_used_numbers(siblings, "")))


def build_full_name(location_type, auto_number: str) -> str:
    location_type = LocationType.parse(location_type)
    label = LOCATION_TYPE_LABELS.get(location_type, "Lokasjon")
    if location_type == LocationType.ROOM or not auto_number:
        return label
    return f"{label} {auto_number}"


def _next_wizard_order(
    parent_id: int | None,
    location_type: LocationType,
    household_id: int,
    active_count: int,
) -> int:
    # Includes inactive siblings so a deleted slot's order is never handed out again
    q = _sibling_filter(db.session.query(func.max(Location.wizard_order)), parent_id, location_type, household_id)
    highest = q.scalar() or 0
    return max(active_count, highest) + 1


def _resolve_parent(parent_id: int | None, household_id: int) -> tuple[int, str]:
    """(level, parent auto number). A missing parent is an error, never a silent root."""
    if parent_id is None:
        return 0, ""
    parent = get_active_location(parent_id, household_id)
    return parent.level + 1, parent.auto_number or ""


def generate_name(
    parent_id: int | None,
    location_type,
    household_id: int,
    name: str | None = None,
) -> NamingResult:
    """
    Compute {name, auto_number, level, wizard_order} for a new location.

    Rooms take the caller's name (falling back to the type label). Every other
    type is named "{label} {auto_number}". Raises LocationNotFound if parent_id
    does not reference an active location in the household.
    """
    location_type = LocationType.parse(location_type)

    level, parent_auto_number = _resolve_parent(parent_id, household_id)
    siblings = get_sibling_locations(parent_id, location_type, household_id)

    auto_number = compute_auto_number(location_type, parent_auto_number, siblings)

    if location_type == LocationType.ROOM and name and name.strip():
        full_name = name.strip()
    else:
        full_name = build_full_name(location_type, auto_number)

    return NamingResult(
        name=full_name,
        auto_number=auto_number,
        level=level,
        wizard_order=_next_wizard_order(parent_id, location_type, household_id, len(siblings)),
    )


def get_next_available_auto_number(parent_id: int | None, location_type, household_id: int) -> str:
    location_type = LocationType.parse(location_type)
    _, parent_auto_number = _resolve_parent(parent_id, household_id)
    siblings = get_sibling_locations(parent_id, location_type, household_id)
    return compute_auto_number(location_type, parent_auto_number, siblings)


def validate_auto_number(
    candidate: str,
    parent_id: int | None,
    household_id: int,
    exclude_id: int | None = None,
    location_type=None,
) -> bool:
    """
    True iff no other active sibling under parent_id already holds candidate.

    exclude_id skips one row (update-in-place checks). location_type narrows
    the check to one sibling sequence; by default every type under the parent
    is considered.
    """
    q = db.session.query(Location).filter(
        Location.household_id == household_id,
        Location.auto_number == candidate,
        Location.is_active == True,
    )
    if parent_id is None:
        q = q.filter(Location.parent_id.is_(None))
    else:
        q = q.filter(Location.parent_id == parent_id)
    if location_type is not None:
        q = q.filter(Location.type == LocationType.parse(location_type).value)
    if exclude_id is not None:
        q = q.filter(Location.id != exclude_id)

    return q.first() is None


def get_location_path(location_id: int, household_id: int | None = None) -> list[PathEntry]:
    """
    Breadcrumb path from the root down to location_id.

    Best effort: the walk stops at the first missing link and returns the
    partial path instead of raising.
    """
    path: list[PathEntry] = []
    seen: set[int] = set()
    current_id = location_id

    while current_id is not None and current_id not in seen:
        seen.add(current_id)
        q = db.session.query(Location).filter(Location.id == current_id)
        if household_id is not None:
            q = q.filter(Location.household_id == household_id)
        location = q.first()
        if not location:
            break

        path.append(PathEntry(id=location.id, name=location.name, type=location.type))
        current_id = location.parent_id

    path.reverse()
    return path


def get_allowed_child_types(parent_type=None) -> frozenset[LocationType]:
    """Static default placements. None means top level, where only rooms are allowed."""
    if parent_type is None:
        return ROOT_CHILD_TYPES
    return ALLOWED_CHILD_TYPES.get(LocationType.parse(parent_type), frozenset())


def is_valid_placement(parent_type, child_type) -> bool:
    return LocationType.parse(child_type) in get_allowed_child_types(parent_type)
