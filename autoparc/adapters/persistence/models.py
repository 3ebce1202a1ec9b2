"""SQLAlchemy ORM models — maps to PostgreSQL tables."""

import uuid
from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autoparc.adapters.persistence.database import Base

# Names of the partial unique indexes guarding open assignments. The
# repository maps a violation of either back to the conflicting dimension.
ACTIVE_CAR_INDEX = "uq_assignments_active_car"
ACTIVE_OPERATOR_INDEX = "uq_assignments_active_operator"
EMPLOYEE_NUMBER_CONSTRAINT = "uq_car_operators_employee_number"


def _uuid() -> str:
    return str(uuid.uuid4())


class CarModel(Base):
    """Cars are owned by fleet administration; only the columns read here are mapped."""

    __tablename__ = "cars"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    license_plate: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    brand: Mapped[str | None] = mapped_column(String(100), nullable=True)
    model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")

    assignments: Mapped[list["AssignmentModel"]] = relationship(back_populates="car")

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'maintenance', 'retired')", name="ck_cars_status"
        ),
    )


class OperatorModel(Base):
    __tablename__ = "car_operators"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    employee_number: Mapped[str] = mapped_column(String(50), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    assignments: Mapped[list["AssignmentModel"]] = relationship(back_populates="operator")

    __table_args__ = (
        Index(EMPLOYEE_NUMBER_CONSTRAINT, "employee_number", unique=True),
        Index("idx_car_operators_department", "department"),
        Index("idx_car_operators_is_active", "is_active"),
    )


class AssignmentModel(Base):
    __tablename__ = "car_operator_assignments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    car_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("cars.id"), nullable=False
    )
    operator_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("car_operators.id"), nullable=False
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    car: Mapped["CarModel"] = relationship(back_populates="assignments")
    operator: Mapped["OperatorModel"] = relationship(back_populates="assignments")

    __table_args__ = (
        CheckConstraint(
            "end_date IS NULL OR end_date >= start_date",
            name="ck_assignments_end_after_start",
        ),
        Index(
            ACTIVE_CAR_INDEX,
            "car_id",
            unique=True,
            postgresql_where=text("end_date IS NULL"),
            sqlite_where=text("end_date IS NULL"),
        ),
        Index(
            ACTIVE_OPERATOR_INDEX,
            "operator_id",
            unique=True,
            postgresql_where=text("end_date IS NULL"),
            sqlite_where=text("end_date IS NULL"),
        ),
        Index("idx_assignments_car", "car_id"),
        Index("idx_assignments_operator", "operator_id"),
        Index("idx_assignments_start_date", "start_date"),
    )


class ActionLogModel(Base):
    __tablename__ = "action_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[str] = mapped_column(String(36), nullable=False)
    action_type: Mapped[str] = mapped_column(String(50), nullable=False)
    performed_by: Mapped[str] = mapped_column(String(36), nullable=False)
    changes: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        Index("idx_action_logs_entity", "entity_type", "entity_id"),
        Index("idx_action_logs_timestamp", "timestamp"),
    )
