from __future__ import annotations

from ..extensions import db
from homestock.time_utils import to_utc_z


class Household(db.Model):
    """
    Ownership scope for a location forest.

    WHY: Every location belongs to exactly one household, and every sibling
    query, uniqueness check and rule lookup is scoped by household_id.

    RULES:
    - rule_set_name names the household's active HierarchyRule set
    - New households get a custom rule-set copied from a preset
    """
    __tablename__ = "households"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    rule_set_name = db.Column(db.String(64), nullable=True, index=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Household id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "rule_set_name": self.rule_set_name,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
