from __future__ import annotations

import enum

from ..extensions import db
from homestock.time_utils import to_utc_z


class LocationType(str, enum.Enum):
    """Closed set of container kinds. Containment is governed by HierarchyRule rows."""
    ROOM = "ROOM"
    CABINET = "CABINET"
    RACK = "RACK"
    WALL_SHELF = "WALL_SHELF"
    SHELF = "SHELF"
    DRAWER = "DRAWER"
    BOX = "BOX"
    BAG = "BAG"
    CONTAINER = "CONTAINER"
    SHELF_COMPARTMENT = "SHELF_COMPARTMENT"
    SECTION = "SECTION"

    @classmethod
    def parse(cls, value) -> "LocationType":
        """Accept a LocationType or its string value (case-insensitive)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().upper())
            except ValueError:
                pass
        raise ValueError(f"Unknown location type: {value!r}")


# Labels shown to users; the first word of every generated name
LOCATION_TYPE_LABELS = {
    LocationType.ROOM: "Rom",
    LocationType.CABINET: "Skap",
    LocationType.RACK: "Reol",
    LocationType.WALL_SHELF: "Vegghengt hylle",
    LocationType.SHELF: "Hylle",
    LocationType.DRAWER: "Skuff",
    LocationType.BOX: "Boks",
    LocationType.BAG: "Pose",
    LocationType.CONTAINER: "Beholder",
    LocationType.SHELF_COMPARTMENT: "Hylle",
    LocationType.SECTION: "Avsnitt",
}


class Location(db.Model):
    """
    A room or storage container in a household's location forest.

    NAMING:
    - Rooms carry a user-supplied name and an empty auto_number
    - Every other type gets name/auto_number/level/wizard_order from naming_service

    UNIQUENESS:
    auto_number is unique among ACTIVE siblings of the same type under the same
    parent. Enforced by a partial unique index so that a racing insert fails
    with IntegrityError (surfaced as AutoNumberConflict) instead of silently
    duplicating. Shelves and drawers of one cabinet are numbered independently,
    so type is part of the key.

    SOFT DELETE: is_active=False removes the node from sibling numbering and
    lookups; the row is kept for history.
    """
    __tablename__ = "locations"
    __table_args__ = (
        db.Index(
            "uq_locations_active_sibling_auto_number",
            "household_id", "parent_id", "type", "auto_number",
            unique=True,
            sqlite_where=db.text("is_active = 1"),
            postgresql_where=db.text("is_active"),
        ),
        db.Index("ix_locations_household_parent", "household_id", "parent_id"),
        db.Index("ix_locations_household_active", "household_id", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    household_id = db.Column(db.Integer, db.ForeignKey("households.id"), nullable=False, index=True)
    parent_id = db.Column(db.Integer, db.ForeignKey("locations.id"), nullable=True, index=True)

    type = db.Column(db.String(32), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)

    auto_number = db.Column(db.String(64), nullable=False, default="")
    level = db.Column(db.Integer, nullable=False, default=0)
    wizard_order = db.Column(db.Integer, nullable=False, default=1)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    deactivated_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    household = db.relationship("Household", backref=db.backref("locations", lazy=True))
    parent = db.relationship("Location", remote_side=[id], backref=db.backref("children", lazy=True))

    @property
    def location_type(self) -> LocationType:
        return LocationType(self.type)

    def __repr__(self) -> str:
        return f"<Location id={self.id} type={self.type} name={self.name!r} auto_number={self.auto_number!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "household_id": self.household_id,
            "parent_id": self.parent_id,
            "type": self.type,
            "name": self.name,
            "description": self.description,
            "auto_number": self.auto_number,
            "level": self.level,
            "wizard_order": self.wizard_order,
            "is_active": self.is_active,
            "deactivated_at": to_utc_z(self.deactivated_at),
            "created_at": to_utc_z(self.created_at),
        }
