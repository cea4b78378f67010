"""Seed ORM models: HR (designations → leave balances) and transportation.

SQLAlchemy 2.0 async-compatible models with Mapped[] annotations. Only the
columns the fixtures populate are mapped; ids are text UUIDs so the same
tables work on PostgreSQL and SQLite.
"""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_erp.common.constants import (
    DriverStatus,
    EmployeeStatus,
    EmploymentType,
    TripStatus,
    VehicleStatus,
    VehicleType,
)
from school_erp.seeding.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _enum(enum_cls: type[enum.Enum], name: str) -> sa.Enum:
    """VARCHAR-backed enum storing member values (``"ACTIVE"``), not names."""
    return sa.Enum(
        enum_cls,
        name=name,
        native_enum=False,
        values_callable=lambda members: [m.value for m in members],
    )


Money = sa.Numeric(12, 2)


# ═════════════════════════════════════════════════════════════════════
# HR
# ═════════════════════════════════════════════════════════════════════


class Designation(Base):
    __tablename__ = "designations"

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    code: Mapped[str] = mapped_column(sa.String(20), unique=True, nullable=False)
    level: Mapped[int] = mapped_column(sa.Integer, default=1)
    min_salary: Mapped[Decimal] = mapped_column(Money)
    max_salary: Mapped[Decimal] = mapped_column(Money)
    standard_salary: Mapped[Decimal] = mapped_column(Money)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True)

    def __repr__(self) -> str:
        return f"<Designation {self.code!r}>"


class Department(Base):
    __tablename__ = "departments"
    __table_args__ = (
        sa.UniqueConstraint("code", "school_id", name="uq_dept_code_school"),
    )

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=_new_id)
    school_id: Mapped[str] = mapped_column(sa.String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    code: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(sa.Text)

    employees: Mapped[list[Employee]] = relationship(back_populates="department")

    def __repr__(self) -> str:
        return f"<Department {self.code!r}>"


class Employee(Base):
    """Staff member; ``reporting_to_id`` points at the employee's manager."""

    __tablename__ = "employees"

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=_new_id)
    employee_no: Mapped[str] = mapped_column(sa.String(20), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(sa.String(20))
    employment_type: Mapped[EmploymentType] = mapped_column(
        _enum(EmploymentType, "employment_type"), default=EmploymentType.full_time,
    )
    designation_id: Mapped[Optional[str]] = mapped_column(sa.ForeignKey("designations.id"))
    department_id: Mapped[Optional[str]] = mapped_column(sa.ForeignKey("departments.id"))
    reporting_to_id: Mapped[Optional[str]] = mapped_column(sa.ForeignKey("employees.id"))
    joining_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    basic_salary: Mapped[Decimal] = mapped_column(Money)
    status: Mapped[EmployeeStatus] = mapped_column(
        _enum(EmployeeStatus, "employee_status"), default=EmployeeStatus.active,
    )
    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True)

    # ── Relationships ───────────────────────────────────────────────
    designation: Mapped[Optional[Designation]] = relationship()
    department: Mapped[Optional[Department]] = relationship(back_populates="employees")
    reporting_to: Mapped[Optional[Employee]] = relationship(remote_side=[id])

    def __repr__(self) -> str:
        return f"<Employee {self.employee_no!r}>"


class Salary(Base):
    __tablename__ = "salaries"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "month", "year", name="uq_salary_period"),
    )

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=_new_id)
    employee_id: Mapped[str] = mapped_column(sa.ForeignKey("employees.id"), nullable=False)
    basic_salary: Mapped[Decimal] = mapped_column(Money)
    dearness: Mapped[Decimal] = mapped_column(Money, default=0)
    house_rent: Mapped[Decimal] = mapped_column(Money, default=0)
    conveyance: Mapped[Decimal] = mapped_column(Money, default=0)
    medical: Mapped[Decimal] = mapped_column(Money, default=0)
    other_allowances: Mapped[Decimal] = mapped_column(Money, default=0)
    gross_salary: Mapped[Decimal] = mapped_column(Money)
    pf: Mapped[Decimal] = mapped_column(Money, default=0)
    esi: Mapped[Decimal] = mapped_column(Money, default=0)
    professional_tax: Mapped[Decimal] = mapped_column(Money, default=0)
    income_tax: Mapped[Decimal] = mapped_column(Money, default=0)
    other_deductions: Mapped[Decimal] = mapped_column(Money, default=0)
    total_deductions: Mapped[Decimal] = mapped_column(Money)
    net_salary: Mapped[Decimal] = mapped_column(Money)
    month: Mapped[int] = mapped_column(sa.SmallInteger, nullable=False)
    year: Mapped[int] = mapped_column(sa.SmallInteger, nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), default="ACTIVE")
    effective_from: Mapped[date] = mapped_column(sa.Date)

    employee: Mapped[Employee] = relationship()


class LeaveBalance(Base):
    __tablename__ = "leave_balances"
    __table_args__ = (
        sa.UniqueConstraint("employee_id", "academic_year", name="uq_leave_balance_year"),
    )

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=_new_id)
    employee_id: Mapped[str] = mapped_column(sa.ForeignKey("employees.id"), nullable=False)
    academic_year: Mapped[str] = mapped_column(sa.String(9), nullable=False)
    casual_leave: Mapped[int] = mapped_column(sa.Integer, default=0)
    casual_leave_used: Mapped[int] = mapped_column(sa.Integer, default=0)
    earned_leave: Mapped[int] = mapped_column(sa.Integer, default=0)
    earned_leave_used: Mapped[int] = mapped_column(sa.Integer, default=0)
    medical_leave: Mapped[int] = mapped_column(sa.Integer, default=0)
    medical_leave_used: Mapped[int] = mapped_column(sa.Integer, default=0)
    unpaid_leave: Mapped[int] = mapped_column(sa.Integer, default=0)
    study_leave: Mapped[int] = mapped_column(sa.Integer, default=0)
    maternity_leave: Mapped[int] = mapped_column(sa.Integer, default=0)
    paternity_leave: Mapped[int] = mapped_column(sa.Integer, default=0)
    bereavement_leave: Mapped[int] = mapped_column(sa.Integer, default=0)

    employee: Mapped[Employee] = relationship()


# ═════════════════════════════════════════════════════════════════════
# Transportation
# ═════════════════════════════════════════════════════════════════════


class Route(Base):
    __tablename__ = "routes"
    __table_args__ = (
        sa.UniqueConstraint("name", "school_id", name="uq_route_name_school"),
    )

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=_new_id)
    school_id: Mapped[str] = mapped_column(sa.String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(sa.String(150), nullable=False)
    start_time: Mapped[str] = mapped_column(sa.String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(sa.String(5), nullable=False)
    status: Mapped[str] = mapped_column(sa.String(20), default="ACTIVE")
    description: Mapped[Optional[str]] = mapped_column(sa.Text)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), server_default=sa.func.now(),
    )

    def __repr__(self) -> str:
        return f"<Route {self.name!r}>"


class Vehicle(Base):
    __tablename__ = "vehicles"

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=_new_id)
    school_id: Mapped[str] = mapped_column(sa.String(36), nullable=False, index=True)
    registration_number: Mapped[str] = mapped_column(sa.String(20), unique=True, nullable=False)
    type: Mapped[VehicleType] = mapped_column(_enum(VehicleType, "vehicle_type"), nullable=False)
    capacity: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    status: Mapped[VehicleStatus] = mapped_column(
        _enum(VehicleStatus, "vehicle_status"), default=VehicleStatus.active,
    )
    purchase_date: Mapped[Optional[date]] = mapped_column(sa.Date)

    def __repr__(self) -> str:
        return f"<Vehicle {self.registration_number!r}>"


class Driver(Base):
    __tablename__ = "drivers"

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=_new_id)
    school_id: Mapped[str] = mapped_column(sa.String(36), nullable=False, index=True)
    first_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(sa.String(100), nullable=False)
    email: Mapped[str] = mapped_column(sa.String(255), unique=True, nullable=False)
    phone: Mapped[str] = mapped_column(sa.String(20), nullable=False)
    license_number: Mapped[str] = mapped_column(sa.String(30), unique=True, nullable=False)
    license_expiry: Mapped[date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[DriverStatus] = mapped_column(
        _enum(DriverStatus, "driver_status"), default=DriverStatus.active,
    )
    is_active: Mapped[bool] = mapped_column(sa.Boolean, default=True)

    def __repr__(self) -> str:
        return f"<Driver {self.license_number!r}>"


class Trip(Base):
    __tablename__ = "trips"

    id: Mapped[str] = mapped_column(sa.String(36), primary_key=True, default=_new_id)
    school_id: Mapped[str] = mapped_column(sa.String(36), nullable=False, index=True)
    trip_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    route_id: Mapped[str] = mapped_column(sa.ForeignKey("routes.id"), nullable=False)
    vehicle_id: Mapped[str] = mapped_column(sa.ForeignKey("vehicles.id"), nullable=False)
    driver_id: Mapped[str] = mapped_column(sa.ForeignKey("drivers.id"), nullable=False)
    status: Mapped[TripStatus] = mapped_column(
        _enum(TripStatus, "trip_status"), default=TripStatus.scheduled,
    )

    route: Mapped[Route] = relationship()
    vehicle: Mapped[Vehicle] = relationship()
    driver: Mapped[Driver] = relationship()
