"""Seeders for the HR and transportation fixtures.

``seed_hr`` replaces the HR fixture set wholesale; the transportation
seeders are idempotent and skip rows that already exist (routes by name,
vehicles by registration, drivers by email, trips by date + route + driver).
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Awaitable, Callable, Iterable, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_erp.common.constants import TripStatus, VehicleType
from school_erp.config import settings
from school_erp.seeding import fixtures
from school_erp.seeding.database import build_engine, build_session_factory, create_tables, session_scope
from school_erp.seeding.models import (
    Department,
    Designation,
    Driver,
    Employee,
    LeaveBalance,
    Route,
    Salary,
    Trip,
    Vehicle,
)

logger = logging.getLogger(__name__)


class SeedError(RuntimeError):
    """Prerequisite rows are missing."""


# ═════════════════════════════════════════════════════════════════════
# HR
# ═════════════════════════════════════════════════════════════════════


async def seed_hr(session: AsyncSession, school_id: str) -> dict[str, int]:
    """Wipe and recreate designations, departments, employees, salaries, leave."""
    logger.info("Cleaning up existing HR data...")
    employee_emails = [row["email"] for row in fixtures.EMPLOYEES]
    existing = select(Employee.id).where(Employee.email.in_(employee_emails))
    await session.execute(delete(LeaveBalance).where(LeaveBalance.employee_id.in_(existing)))
    await session.execute(delete(Salary).where(Salary.employee_id.in_(existing)))
    await session.execute(
        Employee.__table__.update().where(Employee.email.in_(employee_emails)).values(reporting_to_id=None)
    )
    await session.execute(delete(Employee).where(Employee.email.in_(employee_emails)))
    await session.execute(delete(Department).where(Department.school_id == school_id))
    await session.execute(
        delete(Designation).where(Designation.code.in_([d["code"] for d in fixtures.DESIGNATIONS]))
    )
    await session.flush()

    designations = {}
    for row in fixtures.DESIGNATIONS:
        designation = Designation(
            **{**row, **{k: fixtures.money(row[k]) for k in ("min_salary", "max_salary", "standard_salary")}}
        )
        session.add(designation)
        designations[row["code"]] = designation

    departments = {}
    for row in fixtures.DEPARTMENTS:
        department = Department(school_id=school_id, **row)
        session.add(department)
        departments[row["code"]] = department
    await session.flush()
    logger.info("Created %d designations, %d departments", len(designations), len(departments))

    employees: dict[str, Employee] = {}
    for row in fixtures.EMPLOYEES:
        data = dict(row)
        employee = Employee(
            designation_id=designations[data.pop("designation")].id,
            department_id=departments[data.pop("department")].id,
            basic_salary=fixtures.money(data.pop("basic_salary")),
            **data,
        )
        session.add(employee)
        employees[row["employee_no"]] = employee
    await session.flush()

    for employee_no, manager_no in fixtures.REPORTING_LINES.items():
        employees[employee_no].reporting_to_id = employees[manager_no].id
    logger.info("Created %d employees", len(employees))

    for row in fixtures.SALARIES:
        data = dict(row)
        employee = employees[data.pop("employee_no")]
        session.add(
            Salary(
                employee_id=employee.id,
                **{key: fixtures.money(value) for key, value in data.items()},
                **fixtures.SALARY_PERIOD,
            )
        )

    for employee_no, used in fixtures.LEAVE_USED.items():
        session.add(
            LeaveBalance(
                employee_id=employees[employee_no].id,
                academic_year=fixtures.LEAVE_YEAR,
                **fixtures.LEAVE_ENTITLEMENT,
                **used,
            )
        )
    await session.flush()
    logger.info("Created %d salary records, %d leave balances", len(fixtures.SALARIES), len(fixtures.LEAVE_USED))

    return {
        "designations": len(designations),
        "departments": len(departments),
        "employees": len(employees),
        "salaries": len(fixtures.SALARIES),
        "leave_balances": len(fixtures.LEAVE_USED),
    }


# ═════════════════════════════════════════════════════════════════════
# Transportation
# ═════════════════════════════════════════════════════════════════════


async def seed_transportation(session: AsyncSession, school_id: str) -> dict[str, int]:
    """Insert fixture routes and vehicles that do not exist yet."""
    created_routes = 0
    for row in fixtures.ROUTES:
        found = await session.execute(
            select(Route.id).where(Route.school_id == school_id, Route.name == row["name"])
        )
        if found.scalar() is not None:
            logger.info("Route %s already exists, skipping", row["name"])
            continue
        session.add(Route(school_id=school_id, status="ACTIVE", **row))
        created_routes += 1
        logger.info("Route: %s (%s-%s) - Created", row["name"], row["start_time"], row["end_time"])

    created_vehicles = 0
    for row in fixtures.VEHICLES:
        found = await session.execute(
            select(Vehicle.id).where(Vehicle.registration_number == row["registration_number"])
        )
        if found.scalar() is not None:
            logger.info("Vehicle %s already exists, skipping", row["registration_number"])
            continue
        session.add(Vehicle(school_id=school_id, **{**row, "type": VehicleType(row["type"])}))
        created_vehicles += 1
        logger.info(
            "Vehicle: %s (%s) - Capacity: %d - Created", row["registration_number"], row["type"], row["capacity"]
        )

    await session.flush()
    return {"routes": created_routes, "vehicles": created_vehicles}


async def seed_drivers(session: AsyncSession, school_id: str) -> dict[str, int]:
    created = 0
    for row in fixtures.DRIVERS:
        found = await session.execute(select(Driver.id).where(Driver.email == row["email"]))
        if found.scalar() is not None:
            logger.info("Driver %s already exists, skipping", row["email"])
            continue
        session.add(Driver(school_id=school_id, **row))
        created += 1
        logger.info("Driver: %s %s (%s) - Created", row["first_name"], row["last_name"], row["license_number"])
    await session.flush()
    return {"drivers": created}


async def _lookup(session: AsyncSession, column, keys: Iterable[str]) -> dict[str, str]:
    model = column.class_
    result = await session.execute(select(column, model.id).where(column.in_(list(keys))))
    return {key: record_id for key, record_id in result.all()}


async def seed_trips(session: AsyncSession, school_id: str, today: Optional[date] = None) -> dict[str, int]:
    """Schedule the fixture trips for tomorrow and the day after."""
    today = today or date.today()
    route_names = [r["name"] for r in fixtures.ROUTES]
    registrations = [v["registration_number"] for v in fixtures.VEHICLES]
    emails = [d["email"] for d in fixtures.DRIVERS]

    routes = await _lookup(session, Route.name, route_names)
    vehicles = await _lookup(session, Vehicle.registration_number, registrations)
    drivers = await _lookup(session, Driver.email, emails)
    if not routes or not vehicles or not drivers:
        raise SeedError("Missing required data: routes, vehicles, or drivers")

    created = 0
    for offset, route_idx, vehicle_idx, driver_idx in fixtures.TRIP_PLAN:
        trip_date = today + timedelta(days=offset)
        route_id = routes.get(route_names[route_idx])
        vehicle_id = vehicles.get(registrations[vehicle_idx])
        driver_id = drivers.get(emails[driver_idx])
        if route_id is None or vehicle_id is None or driver_id is None:
            raise SeedError("Missing required data: routes, vehicles, or drivers")

        found = await session.execute(
            select(Trip.id).where(
                Trip.trip_date == trip_date,
                Trip.route_id == route_id,
                Trip.driver_id == driver_id,
            )
        )
        if found.scalar() is not None:
            logger.info("Trip already exists for %s on route %s", trip_date, route_names[route_idx])
            continue

        session.add(
            Trip(
                school_id=school_id,
                trip_date=trip_date,
                route_id=route_id,
                vehicle_id=vehicle_id,
                driver_id=driver_id,
                status=TripStatus.scheduled,
            )
        )
        created += 1
        logger.info("Created trip: %s (SCHEDULED) - Route: %s", trip_date, route_names[route_idx])

    await session.flush()
    return {"trips": created}


# ═════════════════════════════════════════════════════════════════════
# Orchestration
# ═════════════════════════════════════════════════════════════════════

Seeder = Callable[[AsyncSession, str], Awaitable[dict[str, int]]]

SEEDERS: dict[str, Seeder] = {
    "hr": seed_hr,
    "transportation": seed_transportation,
    "drivers": seed_drivers,
    "trips": seed_trips,
}


async def run_seeders(
    names: Optional[Iterable[str]] = None,
    *,
    database_url: Optional[str] = None,
    school_id: Optional[str] = None,
) -> dict[str, dict[str, int]]:
    """Run the named seeders (all, in dependency order, by default)."""
    selected = list(names) if names else list(SEEDERS)
    unknown = [name for name in selected if name not in SEEDERS]
    if unknown:
        raise SeedError(f"Unknown seeders: {', '.join(unknown)}")

    school_id = school_id or settings.SCHOOL_ID
    engine = build_engine(database_url)
    try:
        await create_tables(engine)
        factory = build_session_factory(engine)
        results: dict[str, dict[str, int]] = {}
        for name in selected:
            logger.info("Seeding %s...", name)
            async with session_scope(factory) as session:
                results[name] = await SEEDERS[name](session, school_id)
        return results
    finally:
        await engine.dispose()
