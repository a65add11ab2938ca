# Overview: Static rule presets (minimal, standard, extended) injected into the rule engine.

"""
Hierarchy presets

Immutable configuration data. Each preset lists only ALLOWED placements;
anything absent is disallowed. All three presets are acyclic.

TIERS:
- minimal (8 rules): room -> cabinet/shelf/box, the basic shelf/drawer/box/bag chain
- standard (18 rules): adds racks, wall shelves, and bags on shelves/drawers
- extended (26 rules): adds compartments, sections, free-standing containers,
  and reverse placements such as a shelf inside a drawer
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from homestock.models import LocationType as T


@dataclass(frozen=True)
class RuleRow:
    """One (parent_type, child_type) cell as written to the rule store."""
    parent_type: str
    child_type: str
    description: str | None = None
    is_allowed: bool = True


def _rule(parent: T, child: T, description: str) -> RuleRow:
    return RuleRow(parent.value, child.value, description)


MINIMAL_RULES: tuple[RuleRow, ...] = (
    _rule(T.ROOM, T.CABINET, "Cabinets stand in rooms"),
    _rule(T.ROOM, T.SHELF, "Free-standing shelves in rooms"),
    _rule(T.ROOM, T.BOX, "Boxes placed directly in rooms"),
    _rule(T.CABINET, T.SHELF, "Shelves inside cabinets"),
    _rule(T.CABINET, T.DRAWER, "Drawers inside cabinets"),
    _rule(T.SHELF, T.BOX, "Boxes on shelves"),
    _rule(T.DRAWER, T.BOX, "Boxes in drawers"),
    _rule(T.BOX, T.BAG, "Bags in boxes"),
)

STANDARD_RULES: tuple[RuleRow, ...] = MINIMAL_RULES + (
    _rule(T.ROOM, T.RACK, "Racks stand in rooms"),
    _rule(T.ROOM, T.WALL_SHELF, "Wall shelves hang in rooms"),
    _rule(T.ROOM, T.DRAWER, "Drawer units in rooms"),
    _rule(T.CABINET, T.BOX, "Boxes directly in cabinets"),
    _rule(T.RACK, T.SHELF, "Shelves in racks"),
    _rule(T.RACK, T.BOX, "Boxes in racks"),
    _rule(T.WALL_SHELF, T.BOX, "Boxes on wall shelves"),
    _rule(T.WALL_SHELF, T.BAG, "Bags on wall shelves"),
    _rule(T.SHELF, T.BAG, "Bags on shelves"),
    _rule(T.DRAWER, T.BAG, "Bags in drawers"),
)

EXTENDED_RULES: tuple[RuleRow, ...] = STANDARD_RULES + (
    _rule(T.DRAWER, T.SHELF, "Shelf inserts inside deep drawers"),
    _rule(T.CABINET, T.SHELF_COMPARTMENT, "Compartments inside cabinets"),
    _rule(T.SHELF_COMPARTMENT, T.BOX, "Boxes in shelf compartments"),
    _rule(T.CABINET, T.SECTION, "Sections inside cabinets"),
    _rule(T.SECTION, T.SHELF, "Shelves inside cabinet sections"),
    _rule(T.ROOM, T.CONTAINER, "Containers placed in rooms"),
    _rule(T.CONTAINER, T.BOX, "Boxes inside containers"),
    _rule(T.CONTAINER, T.BAG, "Bags inside containers"),
)

HIERARCHY_PRESETS = MappingProxyType({
    "minimal": MINIMAL_RULES,
    "standard": STANDARD_RULES,
    "extended": EXTENDED_RULES,
})
