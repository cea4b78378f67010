"""HR router — employees, catalogue, salaries, leave, reviews, promotions, transfers,
payslips and separations, all under ``/hr``.

Routes:
    /hr/employees[/{id}/status]                 — Employee CRUD / status change
    /hr/designations, /hr/departments           — Catalogue CRUD
    /hr/salaries[/{id}/recalculate]             — Salary CRUD (totals computed)
    /hr/leave-balances[/{id}/deduct|restore]    — Leave balances
    /hr/performance-reviews                     — Reviews (overall rating computed)
    /hr/promotions[/{id}/approve]               — Promotions
    /hr/transfers[/{id}/approve|reject]         — Department transfers
    /hr/payslips[/generate|/{id}/finalize|mark-paid|cancel] — Payroll
    /hr/separations[/{id}/calculate-settlement|/employee/{id}] — Exits
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from fastapi import APIRouter, Body, Depends

from school_erp.common.constants import (
    EmployeeStatus,
    PayslipStatus,
    PromotionStatus,
    SettlementStatus,
    TransferStatus,
)
from school_erp.mock_api.crud import bad_request, crud_router, ok, require_fields, transition
from school_erp.mock_api.store import MemoryStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter()

EARNINGS = ("basicSalary", "dearness", "houseRent", "conveyance", "medical", "otherAllowances")
DEDUCTIONS = ("pf", "esi", "professionalTax", "incomeTax", "otherDeductions")
REVIEW_RATINGS = ("technicalSkills", "communication", "teamwork", "initiative", "reliability", "customerService")
SETTLEMENT_CREDITS = (
    "basicSalaryDue", "allowancesDue", "earnedLeavePayout", "gratuity", "bonusAdjustment", "otherAdjustments",
)


# ── Shared helpers ──────────────────────────────────────────────────

def _amount(record: dict, key: str) -> float:
    return float(record.get(key) or 0)


def salary_totals(record: dict) -> dict:
    gross = sum(_amount(record, k) for k in EARNINGS)
    deductions = sum(_amount(record, k) for k in DEDUCTIONS)
    return {
        **record,
        "grossSalary": round(gross, 2),
        "totalDeductions": round(deductions, 2),
        "netSalary": round(gross - deductions, 2),
    }


def employee_brief(store: MemoryStore, employee_id: Any) -> Any:
    employee = store["employees"].first(id=employee_id) if employee_id else None
    if employee is None:
        return None
    return {"id": employee["id"], "firstName": employee.get("firstName", ""), "lastName": employee.get("lastName", "")}


def _named(store: MemoryStore, collection: str, record_id: Any) -> Any:
    record = store[collection].first(id=record_id) if record_id else None
    return {"id": record["id"], "name": record.get("name", "")} if record else None


def with_employee(store: MemoryStore, record: dict) -> dict:
    return {**record, "employee": employee_brief(store, record.get("employeeId"))}


def _require_employee(store: MemoryStore, record: dict) -> dict:
    require_fields(record, "employeeId")
    store["employees"].get(record["employeeId"])
    return record


# ═════════════════════════════════════════════════════════════════════
# Employees / catalogue
# ═════════════════════════════════════════════════════════════════════

employees = APIRouter()


def present_employee(store: MemoryStore, employee: dict) -> dict:
    return {
        **employee,
        "designation": _named(store, "designations", employee.get("designationId")),
        "department": _named(store, "departments", employee.get("departmentId")),
    }


@employees.put("/{employee_id}/status")
async def update_employee_status(
    employee_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "status")
    if body["status"] not in {s.value for s in EmployeeStatus}:
        raise bad_request(f"Unknown employee status {body['status']}", "status")
    employee = store["employees"].update(
        employee_id, {"status": body["status"], "isActive": body["status"] == EmployeeStatus.active.value}
    )
    return ok(present_employee(store, employee), "Employee status updated")


crud_router(
    "employees",
    router=employees,
    defaults=lambda: {"status": EmployeeStatus.active.value, "isActive": True, "employmentType": "FULL_TIME"},
    required=("firstName", "lastName", "email", "employeeNo"),
    present=present_employee,
)

designations = crud_router("designations", defaults=lambda: {"isActive": True}, required=("name", "code"))
departments = crud_router("departments", defaults=lambda: {"isActive": True}, required=("name",))


# ═════════════════════════════════════════════════════════════════════
# Salaries / leave
# ═════════════════════════════════════════════════════════════════════

salaries = APIRouter()


@salaries.post("/{salary_id}/recalculate")
async def recalculate_salary(salary_id: str, store: MemoryStore = Depends(get_store)):
    salary = store["salaries"].get(salary_id)
    salary = store["salaries"].update(salary_id, salary_totals(salary))
    return ok(with_employee(store, salary), "Salary recalculated")


def _new_salary(store: MemoryStore, record: dict) -> dict:
    _require_employee(store, record)
    today = date.today()
    record.setdefault("month", today.month)
    record.setdefault("year", today.year)
    if store["salaries"].first(employeeId=record["employeeId"], month=record["month"], year=record["year"]):
        raise bad_request("Salary for this employee and period already exists", "employeeId")
    return salary_totals(record)


crud_router(
    "salaries",
    router=salaries,
    defaults=lambda: {"status": "ACTIVE"},
    present=with_employee,
    before_create=_new_salary,
    before_update=lambda store, record: salary_totals(record),
)

leave_balances = APIRouter()


def _leave_keys(leave_type: str) -> tuple[str, str]:
    prefix = leave_type.lower()
    return f"{prefix}Leave", f"{prefix}LeaveUsed"


def _leave_days(body: dict) -> tuple[str, float]:
    require_fields(body, "leaveType", "days")
    try:
        days = float(body["days"])
    except (TypeError, ValueError):
        raise bad_request("days must be a number", "days")
    if days <= 0:
        raise bad_request("days must be greater than 0", "days")
    return str(body["leaveType"]), days


@leave_balances.post("/{balance_id}/deduct")
async def deduct_leave(
    balance_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    leave_type, days = _leave_days(body)
    balance = store["leave-balances"].get(balance_id)
    entitled_key, used_key = _leave_keys(leave_type)
    used = _amount(balance, used_key)
    # Leave types without an entitlement on record (e.g. unpaid) are unbounded
    if entitled_key in balance and used + days > _amount(balance, entitled_key):
        raise bad_request(f"Insufficient {leave_type.lower()} leave balance", "days")
    balance = store["leave-balances"].update(balance_id, {used_key: used + days})
    return ok(with_employee(store, balance), f"{days:g} day(s) deducted")


@leave_balances.post("/{balance_id}/restore")
async def restore_leave(
    balance_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    leave_type, days = _leave_days(body)
    balance = store["leave-balances"].get(balance_id)
    _, used_key = _leave_keys(leave_type)
    used = _amount(balance, used_key)
    if days > used:
        raise bad_request("Cannot restore more days than were used", "days")
    balance = store["leave-balances"].update(balance_id, {used_key: used - days})
    return ok(with_employee(store, balance), f"{days:g} day(s) restored")


crud_router("leave-balances", router=leave_balances, present=with_employee, before_create=_require_employee)


# ═════════════════════════════════════════════════════════════════════
# Reviews / promotions / transfers
# ═════════════════════════════════════════════════════════════════════


def review_rating(store: MemoryStore, record: dict) -> dict:
    ratings = [int(record[k]) for k in REVIEW_RATINGS if record.get(k) is not None]
    for value in ratings:
        if not 1 <= value <= 5:
            raise bad_request("Ratings must be between 1 and 5")
    overall = round(sum(ratings) / len(ratings), 2) if ratings else None
    return {**record, "overallRating": overall}


performance_reviews = crud_router(
    "performance-reviews",
    present=with_employee,
    before_create=lambda store, record: review_rating(store, _require_employee(store, record)),
    before_update=review_rating,
)

promotions = APIRouter()


@promotions.post("/{promotion_id}/approve")
async def approve_promotion(
    promotion_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "approvedById")
    promotion = store["promotions"].get(promotion_id)
    changes = transition(promotion, (PromotionStatus.proposed.value,), PromotionStatus.approved.value,
                         "Only proposed promotions can be approved")
    promotion = store["promotions"].update(promotion_id, {**changes, "approvedById": body["approvedById"]})
    store["employees"].update(promotion["employeeId"], {
        "designationId": promotion.get("newDesignationId"),
        "basicSalary": promotion.get("newSalary"),
    })
    logger.info("Promotion %s approved", promotion_id)
    return ok(with_employee(store, promotion), "Promotion approved")


crud_router(
    "promotions",
    router=promotions,
    defaults=lambda: {"status": PromotionStatus.proposed.value},
    present=with_employee,
    before_create=_require_employee,
)

transfers = APIRouter()


@transfers.post("/{transfer_id}/approve")
async def approve_transfer(
    transfer_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "approvedById")
    transfer = store["hr-transfers"].get(transfer_id)
    changes = transition(transfer, (TransferStatus.pending.value,), TransferStatus.approved.value,
                         "Only pending transfers can be approved")
    transfer = store["hr-transfers"].update(transfer_id, {
        **changes, "approvedById": body["approvedById"], "approvalDate": date.today().isoformat(),
    })
    store["employees"].update(transfer["employeeId"], {"departmentId": transfer["toDepartmentId"]})
    return ok(with_employee(store, transfer), "Transfer approved")


@transfers.post("/{transfer_id}/reject")
async def reject_transfer(transfer_id: str, store: MemoryStore = Depends(get_store)):
    transfer = store["hr-transfers"].get(transfer_id)
    changes = transition(transfer, (TransferStatus.pending.value,), TransferStatus.rejected.value,
                         "Only pending transfers can be rejected")
    transfer = store["hr-transfers"].update(transfer_id, changes)
    return ok(with_employee(store, transfer), "Transfer rejected")


def _new_transfer(store: MemoryStore, record: dict) -> dict:
    require_fields(record, "employeeId", "toDepartmentId")
    employee = store["employees"].get(record["employeeId"])
    store["departments"].get(record["toDepartmentId"])
    if not record.get("fromDepartmentId"):
        record["fromDepartmentId"] = employee.get("departmentId")
    return record


crud_router(
    "hr-transfers",
    router=transfers,
    defaults=lambda: {"status": TransferStatus.pending.value},
    present=with_employee,
    before_create=_new_transfer,
)


# ═════════════════════════════════════════════════════════════════════
# Payslips
# ═════════════════════════════════════════════════════════════════════

payslips = APIRouter()


@payslips.post("/generate", status_code=201)
async def generate_payslips(
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    """Draft a payslip per employee from their latest salary; existing ones are skipped."""
    require_fields(body, "month", "year")
    month, year = int(body["month"]), int(body["year"])
    if not 1 <= month <= 12:
        raise bad_request("month must be between 1 and 12", "month")

    wanted = body.get("employeeIds")
    if wanted:
        targets = [store["employees"].get(employee_id) for employee_id in wanted]
    else:
        targets = store["employees"].find(status=EmployeeStatus.active.value)

    created: list[dict] = []
    for employee in targets:
        if store["payslips"].first(employeeId=employee["id"], month=month, year=year):
            continue
        salaries_for = sorted(
            store["salaries"].find(employeeId=employee["id"]),
            key=lambda s: (s.get("year", 0), s.get("month", 0)),
        )
        if not salaries_for:
            continue
        components = {k: salaries_for[-1].get(k) for k in (*EARNINGS, *DEDUCTIONS)}
        payslip = store["payslips"].create(salary_totals({
            **components,
            "employeeId": employee["id"],
            "month": month,
            "year": year,
            "status": PayslipStatus.draft.value,
        }))
        created.append(with_employee(store, payslip))
    logger.info("Generated %d payslips for %02d/%d", len(created), month, year)
    return ok(created, f"{len(created)} payslips generated")


def _payslip_action(store: MemoryStore, payslip_id: str, allowed: tuple, to_status: str, detail: str,
                    extra: Any = None) -> dict:
    payslip = store["payslips"].get(payslip_id)
    changes = transition(payslip, allowed, to_status, detail)
    payslip = store["payslips"].update(payslip_id, {**changes, **(extra or {})})
    return with_employee(store, payslip)


@payslips.post("/{payslip_id}/finalize")
async def finalize_payslip(payslip_id: str, store: MemoryStore = Depends(get_store)):
    payslip = _payslip_action(store, payslip_id, (PayslipStatus.draft.value,), PayslipStatus.finalized.value,
                              "Only draft payslips can be finalized")
    return ok(payslip, "Payslip finalized")


@payslips.post("/{payslip_id}/mark-paid")
async def mark_payslip_paid(
    payslip_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    payslip = _payslip_action(
        store, payslip_id, (PayslipStatus.finalized.value,), PayslipStatus.paid.value,
        "Only finalized payslips can be marked as paid",
        {"paidDate": body.get("paidDate") or date.today().isoformat()},
    )
    return ok(payslip, "Payslip marked as paid")


@payslips.post("/{payslip_id}/cancel")
async def cancel_payslip(payslip_id: str, store: MemoryStore = Depends(get_store)):
    payslip = _payslip_action(
        store, payslip_id, (PayslipStatus.draft.value, PayslipStatus.finalized.value),
        PayslipStatus.cancelled.value, "Paid or cancelled payslips cannot be cancelled",
    )
    return ok(payslip, "Payslip cancelled")


crud_router("payslips", router=payslips, present=with_employee, before_create=_require_employee)


# ═════════════════════════════════════════════════════════════════════
# Separations
# ═════════════════════════════════════════════════════════════════════

separations = APIRouter()


@separations.get("/employee/{employee_id}")
async def employee_separations(employee_id: str, store: MemoryStore = Depends(get_store)):
    store["employees"].get(employee_id)
    return ok([with_employee(store, s) for s in store["separations"].find(employeeId=employee_id)])


@separations.post("/{separation_id}/calculate-settlement")
async def calculate_settlement(
    separation_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    store["separations"].get(separation_id)
    amount = sum(_amount(body, k) for k in SETTLEMENT_CREDITS) - _amount(body, "loanRecovery")
    separation = store["separations"].update(separation_id, {
        **body,
        "finalSettlementAmount": round(amount, 2),
        "settlementStatus": SettlementStatus.initiated.value,
    })
    return ok(with_employee(store, separation), "Settlement calculated")


def _new_separation(store: MemoryStore, record: dict) -> dict:
    _require_employee(store, record)
    store["employees"].update(record["employeeId"], {
        "status": EmployeeStatus.separated.value, "isActive": False,
    })
    return record


crud_router(
    "separations",
    router=separations,
    defaults=lambda: {"settlementStatus": SettlementStatus.pending.value},
    present=with_employee,
    before_create=_new_separation,
)


# ── Mount under /hr ─────────────────────────────────────────────────

router.include_router(employees, prefix="/employees")
router.include_router(designations, prefix="/designations")
router.include_router(departments, prefix="/departments")
router.include_router(salaries, prefix="/salaries")
router.include_router(leave_balances, prefix="/leave-balances")
router.include_router(performance_reviews, prefix="/performance-reviews")
router.include_router(promotions, prefix="/promotions")
router.include_router(transfers, prefix="/transfers")
router.include_router(payslips, prefix="/payslips")
router.include_router(separations, prefix="/separations")
