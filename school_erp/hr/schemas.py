"""HR Pydantic v2 schemas — employees, payroll, leave and career events.

Naming conventions:
  - *Record  → entity as returned by the API
  - *Form    → mutable draft submitted on save
  - *Request → action bodies (approvals, deductions, payslip runs)
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import Field

from school_erp.common.constants import (
    EmployeeStatus,
    EmploymentType,
    LeaveType,
    PayslipStatus,
    PromotionStatus,
    SeparationType,
    SettlementStatus,
    TransferStatus,
)
from school_erp.common.schemas import ApiModel, FormDraft, FormErrors, Record

REQUIRED_FIELDS_MESSAGE = "Please fill all required fields"


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class NamedBrief(ApiModel):
    id: str
    name: str = ""


class EmployeeBrief(ApiModel):
    id: str
    first_name: str = ""
    last_name: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class PayComponents(ApiModel):
    """Earnings and deductions shared by salary structures and payslips."""

    basic_salary: float = 0
    dearness: Optional[float] = None
    house_rent: Optional[float] = None
    conveyance: Optional[float] = None
    medical: Optional[float] = None
    other_allowances: Optional[float] = None
    pf: Optional[float] = None
    esi: Optional[float] = None
    professional_tax: Optional[float] = None
    income_tax: Optional[float] = None
    other_deductions: Optional[float] = None


# ═════════════════════════════════════════════════════════════════════
# Designation / Department
# ═════════════════════════════════════════════════════════════════════


class DesignationRecord(Record):
    name: str = ""
    code: str = ""
    level: int = 1
    min_salary: Optional[float] = None
    max_salary: Optional[float] = None
    standard_salary: Optional[float] = None
    description: Optional[str] = None
    is_active: bool = True


class DesignationForm(FormDraft):
    name: str = ""
    code: str = ""
    level: int = 1
    min_salary: float = 0
    max_salary: float = 0
    standard_salary: float = 0
    description: str = ""

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("name", self.name, "Name and code are required")
        errors.require("code", self.code, "Name and code are required")
        return errors


class DepartmentRecord(Record):
    name: str = ""
    code: Optional[str] = None
    description: Optional[str] = None
    head_id: Optional[str] = None
    is_active: bool = True


class DepartmentForm(FormDraft):
    name: str = ""
    code: str = ""
    description: str = ""

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("name", self.name, "Department name is required")
        return errors


# ═════════════════════════════════════════════════════════════════════
# Employee
# ═════════════════════════════════════════════════════════════════════


class EmployeeRecord(Record):
    user_id: Optional[str] = None
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: Optional[str] = None
    employee_no: str = ""
    employment_type: EmploymentType = EmploymentType.full_time
    designation_id: Optional[str] = None
    designation: Optional[NamedBrief] = None
    department_id: Optional[str] = None
    department: Optional[NamedBrief] = None
    reporting_to_id: Optional[str] = None
    joining_date: Optional[date] = None
    basic_salary: Optional[float] = None
    status: EmployeeStatus = EmployeeStatus.active
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class EmployeeForm(FormDraft):
    user_id: str = ""
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    employee_no: str = ""
    employment_type: EmploymentType = EmploymentType.full_time
    designation_id: str = ""
    department_id: str = ""
    reporting_to_id: Optional[str] = None
    joining_date: Optional[date] = None
    basic_salary: float = 0
    status: EmployeeStatus = EmployeeStatus.active

    def check(self) -> FormErrors:
        errors = FormErrors()
        message = "Please fill in all required fields"
        errors.require("first_name", self.first_name, message)
        errors.require("email", self.email, message)
        errors.require("employee_no", self.employee_no, message)
        return errors


class EmployeeStatusRequest(ApiModel):
    status: EmployeeStatus


# ═════════════════════════════════════════════════════════════════════
# Salary / Payslip
# ═════════════════════════════════════════════════════════════════════


class SalaryRecord(PayComponents, Record):
    employee_id: str = ""
    employee: Optional[EmployeeBrief] = None
    gross_salary: float = 0
    total_deductions: float = 0
    net_salary: float = 0
    month: int = 1
    year: int = 2025
    status: str = "ACTIVE"
    effective_from: Optional[date] = None


class SalaryForm(FormDraft):
    employee_id: str = ""
    basic_salary: float = 0
    dearness: float = 0
    house_rent: float = 0
    conveyance: float = 0
    medical: float = 0
    month: Optional[int] = None
    year: Optional[int] = None

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("employee_id", self.employee_id, REQUIRED_FIELDS_MESSAGE)
        if self.basic_salary is None or self.basic_salary <= 0:
            errors.add("basic_salary", REQUIRED_FIELDS_MESSAGE)
        return errors


class PayslipRecord(PayComponents, Record):
    employee_id: str = ""
    employee: Optional[EmployeeBrief] = None
    month: int = 1
    year: int = 2025
    gross_salary: float = 0
    total_deductions: float = 0
    net_salary: float = 0
    working_days: Optional[int] = None
    days_present: Optional[int] = None
    days_absent: Optional[int] = None
    bonus: Optional[float] = None
    status: PayslipStatus = PayslipStatus.draft
    paid_date: Optional[date] = None


class GeneratePayslipsRequest(ApiModel):
    month: int
    year: int
    # Omitted means "every active employee"
    employee_ids: Optional[list[str]] = None


class MarkPaidRequest(ApiModel):
    paid_date: Optional[date] = None


# ═════════════════════════════════════════════════════════════════════
# Leave
# ═════════════════════════════════════════════════════════════════════


class LeaveBalanceRecord(Record):
    employee_id: str = ""
    employee: Optional[EmployeeBrief] = None
    academic_year: str = ""
    casual_leave: float = 0
    casual_leave_used: float = 0
    earned_leave: float = 0
    earned_leave_used: float = 0
    medical_leave: float = 0
    medical_leave_used: float = 0
    unpaid_leave: Optional[float] = None
    study_leave: Optional[float] = None
    maternity_leave: Optional[float] = None
    paternity_leave: Optional[float] = None
    bereavement_leave: Optional[float] = None

    @property
    def casual_available(self) -> float:
        return self.casual_leave - self.casual_leave_used

    @property
    def earned_available(self) -> float:
        return self.earned_leave - self.earned_leave_used

    @property
    def medical_available(self) -> float:
        return self.medical_leave - self.medical_leave_used


class LeaveAdjustment(FormDraft):
    """Days to deduct from (or restore to) one leave type of a balance."""

    leave_type: LeaveType = LeaveType.casual
    days: float = 0

    def check(self) -> FormErrors:
        errors = FormErrors()
        if self.days is None or self.days <= 0:
            errors.add("days", "Please enter valid number of days")
        return errors


# ═════════════════════════════════════════════════════════════════════
# Performance review
# ═════════════════════════════════════════════════════════════════════


class PerformanceReviewRecord(Record):
    employee_id: str = ""
    employee: Optional[EmployeeBrief] = None
    review_cycle_id: str = ""
    review_period: Optional[str] = None
    year: int = 2025
    technical_skills: int = 3
    communication: Optional[int] = None
    teamwork: Optional[int] = None
    initiative: Optional[int] = None
    reliability: Optional[int] = None
    customer_service: Optional[int] = None
    overall_rating: Optional[float] = None
    reviewed_by_id: str = ""
    review_date: Optional[date] = None
    promotion_eligible: bool = False
    raises_percentage: Optional[float] = None
    remarks: Optional[str] = None


class PerformanceReviewForm(FormDraft):
    employee_id: str = ""
    review_cycle_id: str = "ANNUAL_2024"
    year: int = Field(default_factory=lambda: date.today().year)
    technical_skills: int = 3
    communication: int = 3
    teamwork: int = 3
    initiative: int = 3
    reliability: int = 3
    customer_service: int = 3
    reviewed_by_id: str = ""
    review_date: Optional[date] = None
    promotion_eligible: bool = False
    remarks: str = ""

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("employee_id", self.employee_id, REQUIRED_FIELDS_MESSAGE)
        errors.require("reviewed_by_id", self.reviewed_by_id, REQUIRED_FIELDS_MESSAGE)
        return errors


# ═════════════════════════════════════════════════════════════════════
# Promotion / Transfer / Separation
# ═════════════════════════════════════════════════════════════════════


class PromotionRecord(Record):
    employee_id: str = ""
    employee: Optional[EmployeeBrief] = None
    previous_designation_id: Optional[str] = None
    previous_designation: Optional[NamedBrief] = None
    new_designation_id: str = ""
    new_designation: Optional[NamedBrief] = None
    new_salary: float = 0
    promotion_date: Optional[date] = None
    promotion_reason: Optional[str] = None
    effective_from: Optional[date] = None
    status: PromotionStatus = PromotionStatus.proposed
    approved_by_id: Optional[str] = None


class PromotionForm(FormDraft):
    employee_id: str = ""
    previous_designation_id: str = ""
    new_designation_id: str = ""
    new_salary: float = 0
    promotion_date: date = Field(default_factory=date.today)
    promotion_reason: str = ""
    effective_from: Optional[date] = None

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("employee_id", self.employee_id, REQUIRED_FIELDS_MESSAGE)
        errors.require("new_designation_id", self.new_designation_id, REQUIRED_FIELDS_MESSAGE)
        return errors


class EmployeeTransferRecord(Record):
    employee_id: str = ""
    employee: Optional[EmployeeBrief] = None
    from_department_id: Optional[str] = None
    to_department_id: str = ""
    from_location: Optional[str] = None
    to_location: Optional[str] = None
    transfer_date: Optional[date] = None
    transfer_reason: Optional[str] = None
    status: TransferStatus = TransferStatus.pending
    approved_by_id: Optional[str] = None
    approval_date: Optional[date] = None


class EmployeeTransferForm(FormDraft):
    employee_id: str = ""
    from_department_id: str = ""
    to_department_id: str = ""
    transfer_date: date = Field(default_factory=date.today)
    transfer_reason: str = ""

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("employee_id", self.employee_id, REQUIRED_FIELDS_MESSAGE)
        errors.require("to_department_id", self.to_department_id, REQUIRED_FIELDS_MESSAGE)
        return errors


class ApproveRequest(ApiModel):
    approved_by_id: str


class SettlementCalculation(ApiModel):
    basic_salary_due: float = 0
    allowances_due: float = 0
    earned_leave_payout: float = 0
    gratuity: float = 0
    bonus_adjustment: float = 0
    loan_recovery: float = 0
    other_adjustments: float = 0


class SeparationRecord(Record):
    employee_id: str = ""
    employee: Optional[EmployeeBrief] = None
    separation_date: Optional[date] = None
    separation_type: SeparationType = SeparationType.resignation
    reason: Optional[str] = None
    notice_period: Optional[int] = None
    effective_date: Optional[date] = None
    settlement_status: SettlementStatus = SettlementStatus.pending
    final_settlement_amount: Optional[float] = None


class SeparationForm(FormDraft):
    employee_id: str = ""
    separation_date: date = Field(default_factory=date.today)
    separation_type: SeparationType = SeparationType.resignation
    reason: str = ""
    notice_period: int = 30
    effective_date: date = Field(default_factory=date.today)

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("employee_id", self.employee_id, "Please select an employee")
        return errors
