from __future__ import annotations

from ..extensions import db
from homestock.time_utils import to_utc_z


class HierarchyRule(db.Model):
    """
    One cell of a rule-set's containment matrix.

    rule_set_name partitions rows into independent sets: the system presets
    (minimal, standard, extended) and each household's custom set.
    A missing row means "not allowed". Self pairs are never stored.
    Rows are only written through an atomic replace of the whole rule-set.
    """
    __tablename__ = "hierarchy_rules"
    __table_args__ = (
        db.UniqueConstraint("rule_set_name", "parent_type", "child_type", name="uq_hierarchy_rules_set_pair"),
        db.CheckConstraint("parent_type <> child_type", name="ck_hierarchy_rules_no_self_pair"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    rule_set_name = db.Column(db.String(64), nullable=False, index=True)
    parent_type = db.Column(db.String(32), nullable=False)
    child_type = db.Column(db.String(32), nullable=False)
    is_allowed = db.Column(db.Boolean, nullable=False, default=True)
    description = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return (
            f"<HierarchyRule {self.rule_set_name}: {self.parent_type} -> {self.child_type} "
            f"allowed={self.is_allowed}>"
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "rule_set_name": self.rule_set_name,
            "parent_type": self.parent_type,
            "child_type": self.child_type,
            "is_allowed": self.is_allowed,
            "description": self.description,
            "created_at": to_utc_z(self.created_at),
        }
