"""HR admin pages: organisation, payroll, leave and career events."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from school_erp.api.envelope import ApiResponse
from school_erp.common.constants import EmployeeStatus
from school_erp.common.crud import CrudPage, FormT, RecordT
from school_erp.common.exceptions import ValidationException
from school_erp.common.schemas import FormDraft
from school_erp.hr.schemas import (
    DepartmentForm,
    DepartmentRecord,
    DesignationForm,
    DesignationRecord,
    EmployeeForm,
    EmployeeRecord,
    EmployeeTransferForm,
    EmployeeTransferRecord,
    LeaveAdjustment,
    LeaveBalanceRecord,
    PayslipRecord,
    PerformanceReviewForm,
    PerformanceReviewRecord,
    PromotionForm,
    PromotionRecord,
    SalaryForm,
    SalaryRecord,
    SeparationForm,
    SeparationRecord,
    SettlementCalculation,
)
from school_erp.hr.service import (
    EmployeesService,
    EmployeeTransfersService,
    LeaveBalancesService,
    PayslipsService,
    PromotionsService,
    SalariesService,
    SeparationsService,
)

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# Organisation
# ═════════════════════════════════════════════════════════════════════


class DesignationsPage(CrudPage[DesignationRecord, DesignationForm]):
    form_model = DesignationForm
    entity_label = "Designation"
    search_fields = ("name", "code")


class DepartmentsPage(CrudPage[DepartmentRecord, DepartmentForm]):
    form_model = DepartmentForm
    entity_label = "Department"
    search_fields = ("name", "code")


class EmployeesPage(CrudPage[EmployeeRecord, EmployeeForm]):
    """Employee directory with designation / department lookups."""

    form_model = EmployeeForm
    entity_label = "Employee"
    search_fields = ("first_name", "last_name", "email", "employee_no")

    service: EmployeesService

    async def set_status(self, employee_id: str, status: EmployeeStatus) -> bool:
        return await self.perform(
            self.service.update_status(employee_id, status),
            "Employee status updated",
            "Failed to update employee status",
        )


# ═════════════════════════════════════════════════════════════════════
# Payroll (month / year scoped)
# ═════════════════════════════════════════════════════════════════════


class _PeriodPage(CrudPage[RecordT, FormT]):
    """A page whose list is scoped to one payroll month."""

    def __init__(self, service: Any, **kwargs: Any) -> None:
        today = date.today()
        self.month = today.month
        self.year = today.year
        super().__init__(service, **kwargs)

    def query_params(self) -> dict[str, Any]:
        return {**super().query_params(), "month": self.month, "year": self.year}

    async def set_period(self, month: int, year: int) -> bool:
        self.month, self.year = month, year
        return await self.load()


class SalariesPage(_PeriodPage[SalaryRecord, SalaryForm]):
    form_model = SalaryForm
    entity_label = "Salary"
    search_fields = ("employee.first_name", "employee.last_name")

    service: SalariesService

    async def save(self, payload: SalaryForm) -> ApiResponse:
        payload.month, payload.year = self.month, self.year
        return await super().save(payload)

    def delete_prompt(self, record_id: str) -> str:
        return "Are you sure?"

    async def recalculate(self, salary_id: str) -> bool:
        return await self.perform(
            self.service.recalculate(salary_id), "Salary recalculated", "Failed to recalculate salary"
        )


class PayslipsPage(_PeriodPage[PayslipRecord, FormDraft]):
    """Payslips of the selected month; generated in bulk, then paid."""

    entity_label = "Payslip"
    search_fields = ("employee.first_name", "employee.last_name")

    service: PayslipsService

    async def generate(self, employee_ids: Optional[list[str]] = None) -> bool:
        """Generate payslips for the selected month (all employees when none given)."""
        return await self.perform(
            self.service.generate(self.month, self.year, employee_ids),
            "Payslips generated successfully",
            "Failed to generate payslips",
        )

    async def finalize(self, payslip_id: str) -> bool:
        return await self.perform(self.service.finalize(payslip_id), "Payslip finalized", "Failed to finalize payslip")

    async def mark_paid(self, payslip_id: str, paid_date: Optional[date] = None) -> bool:
        return await self.perform(
            self.service.mark_paid(payslip_id, paid_date), "Payslip marked as paid", "Failed to mark as paid"
        )

    async def cancel(self, payslip_id: str) -> bool:
        if not self.confirm("Are you sure you want to cancel this payslip?"):
            return False
        return await self.perform(self.service.cancel(payslip_id), "Payslip cancelled", "Failed to cancel payslip")

    @property
    def totals(self) -> dict[str, float]:
        return {
            "gross": sum(p.gross_salary for p in self.records),
            "deductions": sum(p.total_deductions for p in self.records),
            "net": sum(p.net_salary for p in self.records),
        }


# ═════════════════════════════════════════════════════════════════════
# Leave
# ═════════════════════════════════════════════════════════════════════


class LeaveManagementPage(CrudPage[LeaveBalanceRecord, LeaveAdjustment]):
    """Leave balances; the form is the deduction applied to the selected one."""

    form_model = LeaveAdjustment
    entity_label = "Leave balance"
    search_fields = ("employee.first_name", "employee.last_name", "academic_year")

    service: LeaveBalancesService

    def __init__(self, service: LeaveBalancesService, **kwargs: Any) -> None:
        super().__init__(service, **kwargs)
        self.selected: Optional[LeaveBalanceRecord] = None

    def select(self, balance: Optional[LeaveBalanceRecord]) -> None:
        self.selected = balance
        self.reset_form()

    def check_form(self) -> None:
        if self.selected is None:
            raise ValidationException({"employee_id": ["Please select a leave balance"]})

    async def deduct(self) -> bool:
        if not self.validate():
            return False
        ok = await self.perform(
            self.service.deduct(self.selected.id, self.form.leave_type, self.form.days),
            "Leave deducted successfully",
            "Failed to deduct leave",
        )
        if ok:
            self.select(None)
        return ok

    async def restore(self) -> bool:
        if not self.validate():
            return False
        ok = await self.perform(
            self.service.restore(self.selected.id, self.form.leave_type, self.form.days),
            "Leave restored successfully",
            "Failed to restore leave",
        )
        if ok:
            self.select(None)
        return ok


# ═════════════════════════════════════════════════════════════════════
# Career events
# ═════════════════════════════════════════════════════════════════════


class PerformanceReviewsPage(CrudPage[PerformanceReviewRecord, PerformanceReviewForm]):
    form_model = PerformanceReviewForm
    entity_label = "Performance review"
    search_fields = ("employee.first_name", "employee.last_name", "review_period")

    async def save(self, payload: PerformanceReviewForm) -> ApiResponse:
        if payload.review_date is None:
            payload.review_date = date.today()
        return await super().save(payload)


class PromotionsPage(CrudPage[PromotionRecord, PromotionForm]):
    form_model = PromotionForm
    entity_label = "Promotion"
    search_fields = ("employee.first_name", "employee.last_name", "new_designation.name")

    service: PromotionsService

    async def save(self, payload: PromotionForm) -> ApiResponse:
        if payload.effective_from is None:
            payload.effective_from = date.today()
        return await super().save(payload)

    async def approve(self, promotion_id: str, approved_by_id: str) -> bool:
        return await self.perform(
            self.service.approve(promotion_id, approved_by_id), "Promotion approved", "Failed to approve"
        )


class EmployeeTransfersPage(CrudPage[EmployeeTransferRecord, EmployeeTransferForm]):
    form_model = EmployeeTransferForm
    entity_label = "Transfer"
    search_fields = ("employee.first_name", "employee.last_name", "to_location")

    service: EmployeeTransfersService

    async def approve(self, transfer_id: str, approved_by_id: str) -> bool:
        return await self.perform(
            self.service.approve(transfer_id, approved_by_id), "Transfer approved", "Failed to approve"
        )

    async def reject(self, transfer_id: str) -> bool:
        return await self.perform(self.service.reject(transfer_id), "Transfer rejected", "Failed to reject")


class SeparationsPage(CrudPage[SeparationRecord, SeparationForm]):
    form_model = SeparationForm
    entity_label = "Separation"
    search_fields = ("employee.first_name", "employee.last_name", "reason")

    service: SeparationsService

    async def calculate_settlement(self, separation_id: str, calculation: SettlementCalculation) -> bool:
        return await self.perform(
            self.service.calculate_settlement(separation_id, calculation),
            "Settlement calculated",
            "Failed to calculate settlement",
        )
