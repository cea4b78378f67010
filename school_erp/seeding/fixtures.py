"""Literal fixture rows inserted by the seeders.

Rows refer to one another by natural key (designation / department code,
employee number, route name, registration number, driver email); the
seeders resolve those keys to generated ids.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

# ═════════════════════════════════════════════════════════════════════
# HR
# ═════════════════════════════════════════════════════════════════════

DESIGNATIONS = [
    {"name": "Software Engineer", "code": "SE", "level": 1, "min_salary": 40000, "max_salary": 70000,
     "standard_salary": 50000, "description": "Entry-level software development position"},
    {"name": "Senior Software Engineer", "code": "SSE", "level": 2, "min_salary": 70000, "max_salary": 120000,
     "standard_salary": 90000, "description": "Senior-level software development position"},
    {"name": "Engineering Manager", "code": "EM", "level": 3, "min_salary": 100000, "max_salary": 180000,
     "standard_salary": 130000, "description": "Team lead and manager position"},
    {"name": "HR Manager", "code": "HRM", "level": 3, "min_salary": 60000, "max_salary": 120000,
     "standard_salary": 80000, "description": "Human Resources Management"},
    {"name": "Finance Manager", "code": "FM", "level": 3, "min_salary": 70000, "max_salary": 140000,
     "standard_salary": 100000, "description": "Financial Management"},
]

DEPARTMENTS = [
    {"name": "IT", "code": "IT", "description": "Information Technology Department"},
    {"name": "Human Resources", "code": "HR", "description": "Human Resources Department"},
    {"name": "Finance", "code": "FIN", "description": "Finance Department"},
]

EMPLOYEES = [
    {"employee_no": "EMP-001", "first_name": "Rajesh", "last_name": "Kumar",
     "email": "rajesh.kumar@company.com", "phone": "9876543210", "designation": "SE", "department": "IT",
     "joining_date": date(2020, 1, 15), "basic_salary": 50000},
    {"employee_no": "EMP-002", "first_name": "Priya", "last_name": "Sharma",
     "email": "priya.sharma@company.com", "phone": "9876543211", "designation": "EM", "department": "IT",
     "joining_date": date(2018, 6, 10), "basic_salary": 130000},
    {"employee_no": "EMP-003", "first_name": "Arjun", "last_name": "Singh",
     "email": "arjun.singh@company.com", "phone": "9876543212", "designation": "SSE", "department": "IT",
     "joining_date": date(2019, 9, 1), "basic_salary": 90000},
    {"employee_no": "EMP-004", "first_name": "Neha", "last_name": "Patel",
     "email": "neha.patel@company.com", "phone": "9876543213", "designation": "HRM", "department": "HR",
     "joining_date": date(2019, 2, 14), "basic_salary": 80000},
    {"employee_no": "EMP-005", "first_name": "Vikram", "last_name": "Verma",
     "email": "vikram.verma@company.com", "phone": "9876543214", "designation": "FM", "department": "FIN",
     "joining_date": date(2017, 8, 20), "basic_salary": 100000},
]

# employee → manager
REPORTING_LINES = {
    "EMP-001": "EMP-002",
    "EMP-003": "EMP-002",
}

SALARY_PERIOD = {"month": 1, "year": 2025, "status": "ACTIVE", "effective_from": date(2025, 1, 1)}

SALARIES = [
    {"employee_no": "EMP-001", "basic_salary": 50000, "dearness": 5000, "house_rent": 10000,
     "conveyance": 2000, "medical": 1000, "other_allowances": 2000, "gross_salary": 70000,
     "pf": 6250, "esi": 325, "professional_tax": 200, "income_tax": 5000, "other_deductions": 500,
     "total_deductions": 12275, "net_salary": 57725},
    {"employee_no": "EMP-002", "basic_salary": 130000, "dearness": 15000, "house_rent": 30000,
     "conveyance": 5000, "medical": 3000, "other_allowances": 7000, "gross_salary": 190000,
     "pf": 16250, "esi": 0, "professional_tax": 2000, "income_tax": 25000, "other_deductions": 1500,
     "total_deductions": 44750, "net_salary": 145250},
    {"employee_no": "EMP-003", "basic_salary": 90000, "dearness": 9000, "house_rent": 18000,
     "conveyance": 3000, "medical": 2000, "other_allowances": 3000, "gross_salary": 125000,
     "pf": 11250, "esi": 625, "professional_tax": 1000, "income_tax": 12000, "other_deductions": 800,
     "total_deductions": 25675, "net_salary": 99325},
]

LEAVE_YEAR = "2024-2025"

LEAVE_ENTITLEMENT = {
    "casual_leave": 12,
    "earned_leave": 20,
    "medical_leave": 10,
    "unpaid_leave": 0,
    "study_leave": 5,
    "maternity_leave": 0,
    "paternity_leave": 0,
    "bereavement_leave": 3,
}

LEAVE_USED = {
    "EMP-001": {"casual_leave_used": 0, "earned_leave_used": 0, "medical_leave_used": 0},
    "EMP-002": {"casual_leave_used": 2, "earned_leave_used": 5, "medical_leave_used": 0},
    "EMP-003": {"casual_leave_used": 1, "earned_leave_used": 3, "medical_leave_used": 1},
}

# ═════════════════════════════════════════════════════════════════════
# Transportation
# ═════════════════════════════════════════════════════════════════════

ROUTES = [
    {"name": "Morning Route - North", "start_time": "08:00", "end_time": "09:00",
     "description": "Morning pickup from north residential area"},
    {"name": "Morning Route - South", "start_time": "08:00", "end_time": "09:00",
     "description": "Morning pickup from south residential area"},
    {"name": "Morning Route - East", "start_time": "08:15", "end_time": "09:15",
     "description": "Morning pickup from east residential area"},
    {"name": "Evening Route - North", "start_time": "15:00", "end_time": "16:00",
     "description": "Evening dropoff to north residential area"},
    {"name": "Evening Route - South", "start_time": "15:00", "end_time": "16:00",
     "description": "Evening dropoff to south residential area"},
]

VEHICLES = [
    {"registration_number": "KA-01-AB-1001", "type": "BUS", "capacity": 45, "purchase_date": date(2020, 1, 15)},
    {"registration_number": "KA-01-AB-1002", "type": "BUS", "capacity": 45, "purchase_date": date(2020, 6, 20)},
    {"registration_number": "KA-01-AB-2001", "type": "VAN", "capacity": 20, "purchase_date": date(2021, 3, 10)},
    {"registration_number": "KA-01-AB-2002", "type": "VAN", "capacity": 20, "purchase_date": date(2021, 8, 25)},
    {"registration_number": "KA-01-AB-3001", "type": "CAR", "capacity": 8, "purchase_date": date(2022, 5, 12)},
]

DRIVERS = [
    {"first_name": "Rajesh", "last_name": "Kumar", "email": "rajesh.driver@weberacademy.edu",
     "phone": "9876543210", "license_number": "DL01AB1234", "license_expiry": date(2026, 12, 31)},
    {"first_name": "Priya", "last_name": "Sharma", "email": "priya.driver@weberacademy.edu",
     "phone": "9876543211", "license_number": "DL02AB1235", "license_expiry": date(2025, 6, 30)},
    {"first_name": "Vikram", "last_name": "Singh", "email": "vikram.driver@weberacademy.edu",
     "phone": "9876543212", "license_number": "DL03AB1236", "license_expiry": date(2026, 9, 15)},
]

# (days from today, route index, vehicle index, driver index)
TRIP_PLAN = [
    (1, 0, 0, 0),
    (1, 1, 1, 1),
    (1, 3, 2, 2),
    (2, 3, 3, 0),
    (2, 4, 1, 1),
]


def money(value: int | float) -> Decimal:
    return Decimal(str(value))
