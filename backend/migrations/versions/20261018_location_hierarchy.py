"""Households, locations and hierarchy rule-sets

Revision ID: 20261018_location_hierarchy
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_location_hierarchy"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "households",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("rule_set_name", sa.String(length=64), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_households_rule_set_name", "households", ["rule_set_name"], unique=False)
    op.create_index("ix_households_is_active", "households", ["is_active"], unique=False)

    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("household_id", sa.Integer(), sa.ForeignKey("households.id"), nullable=False),
        sa.Column("parent_id", sa.Integer(), sa.ForeignKey("locations.id"), nullable=True),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("auto_number", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("level", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("wizard_order", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("deactivated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_locations_household_id", "locations", ["household_id"], unique=False)
    op.create_index("ix_locations_parent_id", "locations", ["parent_id"], unique=False)
    op.create_index("ix_locations_household_parent", "locations", ["household_id", "parent_id"], unique=False)
    op.create_index("ix_locations_household_active", "locations", ["household_id", "is_active"], unique=False)

    # Only active siblings compete for an auto number
    op.create_index(
        "uq_locations_active_sibling_auto_number",
        "locations",
        ["household_id", "parent_id", "type", "auto_number"],
        unique=True,
        sqlite_where=sa.text("is_active = 1"),
        postgresql_where=sa.text("is_active"),
    )

    op.create_table(
        "hierarchy_rules",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("rule_set_name", sa.String(length=64), nullable=False),
        sa.Column("parent_type", sa.String(length=32), nullable=False),
        sa.Column("child_type", sa.String(length=32), nullable=False),
        sa.Column("is_allowed", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("rule_set_name", "parent_type", "child_type", name="uq_hierarchy_rules_set_pair"),
        sa.CheckConstraint("parent_type <> child_type", name="ck_hierarchy_rules_no_self_pair"),
        sqlite_autoincrement=True,
    )
    op.create_index("ix_hierarchy_rules_rule_set_name", "hierarchy_rules", ["rule_set_name"], unique=False)


def downgrade():
    op.drop_index("ix_hierarchy_rules_rule_set_name", table_name="hierarchy_rules")
    op.drop_table("hierarchy_rules")

    op.drop_index("uq_locations_active_sibling_auto_number", table_name="locations")
    op.drop_index("ix_locations_household_active", table_name="locations")
    op.drop_index("ix_locations_household_parent", table_name="locations")
    op.drop_index("ix_locations_parent_id", table_name="locations")
    op.drop_index("ix_locations_household_id", table_name="locations")
    op.drop_table("locations")

    op.drop_index("ix_households_is_active", table_name="households")
    op.drop_index("ix_households_rule_set_name", table_name="households")
    op.drop_table("households")
