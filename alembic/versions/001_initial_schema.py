"""Initial schema — cars, operators, assignments, action logs.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Cars (owned by fleet administration; minimal columns)
    op.create_table(
        "cars",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("license_plate", sa.String(20), unique=True, nullable=False),
        sa.Column("brand", sa.String(100), nullable=True),
        sa.Column("model", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.CheckConstraint(
            "status IN ('active', 'maintenance', 'retired')", name="ck_cars_status"
        ),
    )

    # Operators
    op.create_table(
        "car_operators",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("employee_number", sa.String(50), nullable=False),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("department", sa.String(100), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column("created_by", sa.String(36), nullable=True),
    )
    op.create_index(
        "uq_car_operators_employee_number", "car_operators", ["employee_number"], unique=True
    )
    op.create_index("idx_car_operators_department", "car_operators", ["department"])
    op.create_index("idx_car_operators_is_active", "car_operators", ["is_active"])

    # Assignments
    op.create_table(
        "car_operator_assignments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("car_id", sa.String(36), sa.ForeignKey("cars.id"), nullable=False),
        sa.Column(
            "operator_id", sa.String(36), sa.ForeignKey("car_operators.id"), nullable=False
        ),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column("created_by", sa.String(36), nullable=True),
        sa.CheckConstraint(
            "end_date IS NULL OR end_date >= start_date",
            name="ck_assignments_end_after_start",
        ),
    )
    # At most one open assignment per car and per operator
    op.create_index(
        "uq_assignments_active_car",
        "car_operator_assignments",
        ["car_id"],
        unique=True,
        postgresql_where=sa.text("end_date IS NULL"),
    )
    op.create_index(
        "uq_assignments_active_operator",
        "car_operator_assignments",
        ["operator_id"],
        unique=True,
        postgresql_where=sa.text("end_date IS NULL"),
    )
    op.create_index("idx_assignments_car", "car_operator_assignments", ["car_id"])
    op.create_index("idx_assignments_operator", "car_operator_assignments", ["operator_id"])
    op.create_index("idx_assignments_start_date", "car_operator_assignments", ["start_date"])

    # Audit log
    op.create_table(
        "action_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(36), nullable=False),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("performed_by", sa.String(36), nullable=False),
        sa.Column("changes", JSONB, nullable=False, server_default=sa.text("'{}'::jsonb")),
        sa.Column(
            "timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index("idx_action_logs_entity", "action_logs", ["entity_type", "entity_id"])
    op.create_index("idx_action_logs_timestamp", "action_logs", ["timestamp"])


def downgrade() -> None:
    op.drop_table("action_logs")
    op.drop_table("car_operator_assignments")
    op.drop_table("car_operators")
    op.drop_table("cars")
