"""HR test suite — employees, salaries, payslip runs, leave balances,
performance reviews, promotions, department transfers and separations."""

from __future__ import annotations

from datetime import date

import pytest

from school_erp.common.constants import (
    EmployeeStatus,
    LeaveType,
    PayslipStatus,
    PromotionStatus,
    SettlementStatus,
    TransferStatus,
)
from school_erp.hr.pages import (
    DepartmentsPage,
    DesignationsPage,
    EmployeesPage,
    EmployeeTransfersPage,
    LeaveManagementPage,
    PayslipsPage,
    PerformanceReviewsPage,
    PromotionsPage,
    SalariesPage,
    SeparationsPage,
)
from school_erp.hr.schemas import (
    DepartmentForm,
    DesignationForm,
    EmployeeForm,
    EmployeeRecord,
    EmployeeTransferForm,
    LeaveAdjustment,
    PerformanceReviewForm,
    PromotionForm,
    SalaryForm,
    SeparationForm,
    SettlementCalculation,
)
from school_erp.hr.service import (
    DepartmentsService,
    DesignationsService,
    EmployeesService,
    EmployeeTransfersService,
    LeaveBalancesService,
    PayslipsService,
    PerformanceReviewsService,
    PromotionsService,
    SalariesService,
    SeparationsService,
)


def _employee_form(store, **overrides) -> EmployeeForm:
    data = {
        "first_name": "Kavya",
        "last_name": "Menon",
        "email": "kavya.menon@weberacademy.edu",
        "employee_no": "EMP-101",
        "designation_id": store["designations"].first(code="SE")["id"],
        "department_id": store["departments"].first(code="IT")["id"],
        "joining_date": date(2022, 4, 1),
        "basic_salary": 50000,
    }
    return EmployeeForm(**{**data, **overrides})


@pytest.fixture
async def employee(client, auth, store) -> EmployeeRecord:
    response = await EmployeesService(client, auth).create(_employee_form(store))
    assert response.success
    return response.data


@pytest.fixture
async def salaried(client, auth, employee) -> EmployeeRecord:
    page = SalariesPage(SalariesService(client, auth))
    page.form = SalaryForm(employee_id=employee.id, basic_salary=50000, dearness=5000,
                           house_rent=10000, conveyance=1600, medical=1250)
    assert await page.submit()
    return employee


# ═════════════════════════════════════════════════════════════════════
# 0. CATALOGUE
# ═════════════════════════════════════════════════════════════════════


class TestCatalogue:

    async def test_designations_seeded_and_searchable(self, client, auth):
        page = DesignationsPage(DesignationsService(client, auth))
        assert await page.load()
        assert len(page.records) == 5
        page.set_search("manager")
        assert sorted(d.code for d in page.visible) == ["EM", "FM", "HRM"]
        senior = next(d for d in page.records if d.code == "SSE")
        assert (senior.level, senior.min_salary, senior.max_salary) == (2, 70000, 120000)

    async def test_designation_needs_name_and_unique_code(self, client, auth, notifier):
        page = DesignationsPage(DesignationsService(client, auth), notifier=notifier)
        page.form = DesignationForm(name="Principal")
        assert not await page.submit()
        assert page.form_errors == {"code": "Name and code are required"}

        page.form = DesignationForm(name="Lead Engineer", code="SE", level=2)
        assert not await page.submit()
        assert notifier.last.description == "Designation with this code already exists"

    async def test_department_crud(self, client, auth, notifier):
        page = DepartmentsPage(DepartmentsService(client, auth), notifier=notifier)
        page.form = DepartmentForm()
        assert not await page.submit()
        assert page.form_errors == {"name": "Department name is required"}

        page.form = DepartmentForm(name="Academics", code="ACA", description="Teaching staff")
        assert await page.submit()
        assert notifier.last.description == "Department created successfully"
        created = next(d for d in page.records if d.code == "ACA")
        assert created.is_active

        assert await page.delete(created.id)
        assert [d.code for d in page.records] == ["IT", "HR", "FIN"]


# ═════════════════════════════════════════════════════════════════════
# 1. EMPLOYEES
# ═════════════════════════════════════════════════════════════════════


class TestEmployees:

    async def test_create_embeds_designation_and_department(self, client, auth, store, notifier):
        page = EmployeesPage(EmployeesService(client, auth), notifier=notifier)
        page.form = _employee_form(store)
        assert await page.submit()
        [created] = page.records
        assert created.full_name == "Kavya Menon"
        assert created.designation.name == "Software Engineer"
        assert created.department.name == "IT"
        assert created.status is EmployeeStatus.active

    async def test_required_fields(self, client, auth):
        page = EmployeesPage(EmployeesService(client, auth))
        page.form = EmployeeForm(first_name="Only")
        assert not await page.submit()
        assert set(page.form_errors) == {"email", "employee_no"}

    async def test_duplicate_employee_number(self, client, auth, store, notifier, employee):
        page = EmployeesPage(EmployeesService(client, auth), notifier=notifier)
        page.form = _employee_form(store, email="other@weberacademy.edu")
        assert not await page.submit()
        assert notifier.last.description == "Employee with this employeeNo already exists"

    async def test_status_change(self, client, auth, store, employee):
        page = EmployeesPage(EmployeesService(client, auth))
        assert await page.set_status(employee.id, EmployeeStatus.inactive)
        stored = store["employees"].get(employee.id)
        assert stored["status"] == "INACTIVE" and stored["isActive"] is False
        assert page.records[0].status is EmployeeStatus.inactive


# ═════════════════════════════════════════════════════════════════════
# 2. PAYROLL
# ═════════════════════════════════════════════════════════════════════


class TestSalaries:

    async def test_totals_computed_for_current_period(self, client, auth, salaried):
        page = SalariesPage(SalariesService(client, auth))
        await page.load()
        [salary] = page.records
        assert (salary.month, salary.year) == (date.today().month, date.today().year)
        assert salary.gross_salary == 67850
        assert salary.net_salary == 67850
        assert salary.employee.full_name == "Kavya Menon"

    async def test_one_salary_per_employee_and_period(self, client, auth, notifier, salaried):
        page = SalariesPage(SalariesService(client, auth), notifier=notifier)
        page.form = SalaryForm(employee_id=salaried.id, basic_salary=1000)
        assert not await page.submit()
        assert notifier.last.description == "Salary for this employee and period already exists"

    async def test_other_period_is_empty(self, client, auth, salaried):
        page = SalariesPage(SalariesService(client, auth))
        assert await page.set_period(1, 1999)
        assert page.records == []

    async def test_recalculate_after_direct_edit(self, client, auth, store, salaried):
        page = SalariesPage(SalariesService(client, auth))
        await page.load()
        salary_id = page.records[0].id
        store["salaries"].update(salary_id, {"pf": 1800})
        assert await page.recalculate(salary_id)
        assert page.records[0].total_deductions == 1800
        assert page.records[0].net_salary == 66050


class TestPayslips:

    async def test_generate_finalize_and_pay(self, client, auth, notifier, salaried):
        page = PayslipsPage(PayslipsService(client, auth), notifier=notifier)
        assert await page.generate()
        [payslip] = page.records
        assert payslip.status is PayslipStatus.draft
        assert page.totals == {"gross": 67850, "deductions": 0, "net": 67850}

        assert not await page.mark_paid(payslip.id)
        assert notifier.last.description == "Only finalized payslips can be marked as paid"

        assert await page.finalize(payslip.id)
        assert await page.mark_paid(payslip.id, date(2025, 9, 30))
        assert page.records[0].status is PayslipStatus.paid
        assert page.records[0].paid_date == date(2025, 9, 30)

        assert not await page.cancel(payslip.id)
        assert notifier.last.description == "Paid or cancelled payslips cannot be cancelled"

    async def test_regenerating_skips_existing(self, client, auth, salaried):
        service = PayslipsService(client, auth)
        today = date.today()
        first = await service.generate(today.month, today.year)
        again = await service.generate(today.month, today.year)
        assert len(first.data) == 1
        assert again.data == []

    async def test_cancel_draft_needs_confirmation(self, client, auth, salaried):
        page = PayslipsPage(PayslipsService(client, auth), confirm=lambda message: False)
        await page.generate()
        assert not await page.cancel(page.records[0].id)
        page.confirm = lambda message: True
        assert await page.cancel(page.records[0].id)
        assert page.records[0].status is PayslipStatus.cancelled


# ═════════════════════════════════════════════════════════════════════
# 3. LEAVE
# ═════════════════════════════════════════════════════════════════════


class TestLeave:

    @pytest.fixture
    async def page(self, client, auth, notifier, employee) -> LeaveManagementPage:
        service = LeaveBalancesService(client, auth)
        created = await service.create({
            "employeeId": employee.id, "academicYear": "2025-26",
            "casualLeave": 12, "casualLeaveUsed": 0, "earnedLeave": 15, "earnedLeaveUsed": 0,
            "medicalLeave": 10, "medicalLeaveUsed": 0,
        })
        assert created.success
        page = LeaveManagementPage(service, notifier=notifier)
        await page.load()
        return page

    async def test_deduct_and_restore(self, page: LeaveManagementPage):
        page.select(page.records[0])
        page.form = LeaveAdjustment(leave_type=LeaveType.casual, days=3)
        assert await page.deduct()
        assert page.selected is None
        assert page.records[0].casual_available == 9

        page.select(page.records[0])
        page.form = LeaveAdjustment(leave_type=LeaveType.casual, days=1)
        assert await page.restore()
        assert page.records[0].casual_leave_used == 2

    async def test_needs_selection_and_positive_days(self, page: LeaveManagementPage):
        page.form = LeaveAdjustment(days=1)
        assert not await page.deduct()
        assert page.form_errors == {"employee_id": "Please select a leave balance"}

        page.select(page.records[0])
        page.form = LeaveAdjustment(days=0)
        assert not await page.deduct()
        assert page.form_errors == {"days": "Please enter valid number of days"}

    async def test_insufficient_balance(self, page: LeaveManagementPage, notifier):
        page.select(page.records[0])
        page.form = LeaveAdjustment(leave_type=LeaveType.medical, days=11)
        assert not await page.deduct()
        assert notifier.last.description == "Insufficient medical leave balance"

    async def test_cannot_restore_unused_days(self, page: LeaveManagementPage, notifier):
        page.select(page.records[0])
        page.form = LeaveAdjustment(leave_type=LeaveType.earned, days=1)
        assert not await page.restore()
        assert notifier.last.description == "Cannot restore more days than were used"


# ═════════════════════════════════════════════════════════════════════
# 4. CAREER EVENTS
# ═════════════════════════════════════════════════════════════════════


class TestCareerEvents:

    async def test_review_rating_and_default_date(self, client, auth, employee):
        page = PerformanceReviewsPage(PerformanceReviewsService(client, auth))
        page.form = PerformanceReviewForm(employee_id=employee.id, reviewed_by_id="user-admin-001",
                                          technical_skills=5, communication=4, teamwork=4,
                                          initiative=3, reliability=5, customer_service=3)
        assert await page.submit()
        [review] = page.records
        assert review.overall_rating == 4.0
        assert review.review_date == date.today()

    async def test_out_of_range_rating(self, client, auth, notifier, employee):
        page = PerformanceReviewsPage(PerformanceReviewsService(client, auth), notifier=notifier)
        page.form = PerformanceReviewForm(employee_id=employee.id, reviewed_by_id="user-admin-001",
                                          technical_skills=7)
        assert not await page.submit()
        assert notifier.last.description == "Ratings must be between 1 and 5"

    async def test_promotion_approval_updates_employee(self, client, auth, store, notifier, employee):
        senior = store["designations"].first(code="SSE")
        page = PromotionsPage(PromotionsService(client, auth), notifier=notifier)
        page.form = PromotionForm(employee_id=employee.id, previous_designation_id=employee.designation_id,
                                  new_designation_id=senior["id"], new_salary=90000)
        assert await page.submit()
        [promotion] = page.records
        assert promotion.status is PromotionStatus.proposed
        assert promotion.effective_from == date.today()

        assert await page.approve(promotion.id, "user-admin-001")
        stored = store["employees"].get(employee.id)
        assert stored["designationId"] == senior["id"]
        assert stored["basicSalary"] == 90000

        assert not await page.approve(promotion.id, "user-admin-001")
        assert notifier.last.description == "Only proposed promotions can be approved"

    async def test_transfer_approval_moves_department(self, client, auth, store, notifier, employee):
        finance = store["departments"].first(code="FIN")
        page = EmployeeTransfersPage(EmployeeTransfersService(client, auth), notifier=notifier)
        page.form = EmployeeTransferForm(employee_id=employee.id, to_department_id=finance["id"],
                                         transfer_reason="Accounts team")
        assert await page.submit()
        [transfer] = page.records
        assert transfer.from_department_id == employee.department_id

        assert await page.approve(transfer.id, "user-admin-001")
        assert page.records[0].status is TransferStatus.approved
        assert store["employees"].get(employee.id)["departmentId"] == finance["id"]

        assert not await page.reject(transfer.id)
        assert notifier.last.description == "Only pending transfers can be rejected"

    async def test_separation_and_settlement(self, client, auth, store, employee):
        service = SeparationsService(client, auth)
        page = SeparationsPage(service)
        page.form = SeparationForm(employee_id=employee.id, reason="Relocating")
        assert await page.submit()
        assert store["employees"].get(employee.id)["status"] == EmployeeStatus.separated.value

        [separation] = page.records
        assert separation.settlement_status is SettlementStatus.pending
        calculation = SettlementCalculation(basic_salary_due=40000, earned_leave_payout=12000,
                                            gratuity=25000, loan_recovery=7000)
        assert await page.calculate_settlement(separation.id, calculation)
        assert page.records[0].final_settlement_amount == 70000
        assert page.records[0].settlement_status is SettlementStatus.initiated

        by_employee = await service.get_by_employee(employee.id)
        assert [s.id for s in by_employee.data] == [separation.id]

    async def test_separation_requires_employee(self, client, auth):
        page = SeparationsPage(SeparationsService(client, auth))
        assert not await page.submit()
        assert page.form_errors == {"employee_id": "Please select an employee"}
