"""HR REST resources under ``/hr``."""

from __future__ import annotations

from datetime import date
from typing import Optional

from school_erp.api.envelope import ApiResponse
from school_erp.api.service import ResourceService
from school_erp.common.constants import EmployeeStatus, LeaveType
from school_erp.hr.schemas import (
    ApproveRequest,
    DepartmentRecord,
    DesignationRecord,
    EmployeeRecord,
    EmployeeStatusRequest,
    EmployeeTransferRecord,
    GeneratePayslipsRequest,
    LeaveAdjustment,
    LeaveBalanceRecord,
    MarkPaidRequest,
    PayslipRecord,
    PerformanceReviewRecord,
    PromotionRecord,
    SalaryRecord,
    SeparationRecord,
    SettlementCalculation,
)


class EmployeesService(ResourceService[EmployeeRecord]):
    endpoint = "/hr/employees"
    model = EmployeeRecord

    async def update_status(self, employee_id: str, status: EmployeeStatus) -> ApiResponse:
        return await self.action(employee_id, "status", EmployeeStatusRequest(status=status), method="PUT")


class DesignationsService(ResourceService[DesignationRecord]):
    endpoint = "/hr/designations"
    model = DesignationRecord


class DepartmentsService(ResourceService[DepartmentRecord]):
    endpoint = "/hr/departments"
    model = DepartmentRecord


class SalariesService(ResourceService[SalaryRecord]):
    endpoint = "/hr/salaries"
    model = SalaryRecord

    async def recalculate(self, salary_id: str) -> ApiResponse:
        return await self.action(salary_id, "recalculate")


class LeaveBalancesService(ResourceService[LeaveBalanceRecord]):
    endpoint = "/hr/leave-balances"
    model = LeaveBalanceRecord

    async def deduct(self, balance_id: str, leave_type: LeaveType, days: float) -> ApiResponse:
        return await self.action(balance_id, "deduct", LeaveAdjustment(leave_type=leave_type, days=days))

    async def restore(self, balance_id: str, leave_type: LeaveType, days: float) -> ApiResponse:
        return await self.action(balance_id, "restore", LeaveAdjustment(leave_type=leave_type, days=days))


class PerformanceReviewsService(ResourceService[PerformanceReviewRecord]):
    endpoint = "/hr/performance-reviews"
    model = PerformanceReviewRecord


class PromotionsService(ResourceService[PromotionRecord]):
    endpoint = "/hr/promotions"
    model = PromotionRecord

    async def approve(self, promotion_id: str, approved_by_id: str) -> ApiResponse:
        return await self.action(promotion_id, "approve", ApproveRequest(approved_by_id=approved_by_id))


class EmployeeTransfersService(ResourceService[EmployeeTransferRecord]):
    endpoint = "/hr/transfers"
    model = EmployeeTransferRecord

    async def approve(self, transfer_id: str, approved_by_id: str) -> ApiResponse:
        return await self.action(transfer_id, "approve", ApproveRequest(approved_by_id=approved_by_id))

    async def reject(self, transfer_id: str) -> ApiResponse:
        return await self.action(transfer_id, "reject")


class PayslipsService(ResourceService[PayslipRecord]):
    endpoint = "/hr/payslips"
    model = PayslipRecord

    async def generate(
        self, month: int, year: int, employee_ids: Optional[list[str]] = None
    ) -> ApiResponse:
        body = GeneratePayslipsRequest(month=month, year=year, employee_ids=employee_ids or None)
        response = await self.client.post(self.url("generate"), body.to_payload(), self.token)
        return response.map(self.parse_list)

    async def finalize(self, payslip_id: str) -> ApiResponse:
        return await self.action(payslip_id, "finalize")

    async def mark_paid(self, payslip_id: str, paid_date: Optional[date] = None) -> ApiResponse:
        return await self.action(payslip_id, "mark-paid", MarkPaidRequest(paid_date=paid_date))

    async def cancel(self, payslip_id: str) -> ApiResponse:
        return await self.action(payslip_id, "cancel")


class SeparationsService(ResourceService[SeparationRecord]):
    endpoint = "/hr/separations"
    model = SeparationRecord

    async def calculate_settlement(self, separation_id: str, calculation: SettlementCalculation) -> ApiResponse:
        return await self.action(separation_id, "calculate-settlement", calculation)

    async def get_by_employee(self, employee_id: str) -> ApiResponse:
        response = await self.client.get(self.url("employee", employee_id), self.token)
        return response.map(self.parse_list)
