"""In-memory collections backing the mock API.

Records are plain camelCase dicts, exactly as they travel on the wire.
Every collection hands out copies so route handlers can decorate a record
(embedded briefs, counts) without touching the stored one.
"""

from __future__ import annotations

import copy
import logging
import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Iterable, Optional

from fastapi import Request

from school_erp.common.exceptions import ConflictError, NotFoundException
from school_erp.config import settings
from school_erp.seeding import fixtures

logger = logging.getLogger(__name__)


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


# ═════════════════════════════════════════════════════════════════════
# Collection
# ═════════════════════════════════════════════════════════════════════


class Collection:
    """One REST collection: id → record dict, in insertion order."""

    def __init__(self, label: str, unique: Iterable[str] = ()) -> None:
        self.label = label
        self.unique = tuple(unique)
        self._items: dict[str, dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._items

    def list(self) -> list[dict[str, Any]]:
        return [copy.deepcopy(item) for item in self._items.values()]

    def find(self, predicate: Optional[Callable[[dict], bool]] = None, **fields: Any) -> list[dict[str, Any]]:
        """Records whose *fields* all equal the given values (and pass *predicate*)."""
        return [
            item for item in self.list()
            if all(item.get(k) == v for k, v in fields.items())
            and (predicate is None or predicate(item))
        ]

    def first(self, **fields: Any) -> Optional[dict[str, Any]]:
        matches = self.find(**fields)
        return matches[0] if matches else None

    def get(self, record_id: str) -> dict[str, Any]:
        item = self._items.get(record_id)
        if item is None:
            raise NotFoundException(self.label, record_id)
        return copy.deepcopy(item)

    def _check_unique(self, record: dict[str, Any], ignore_id: Optional[str] = None) -> None:
        for field in self.unique:
            value = record.get(field)
            if value in (None, ""):
                continue
            for other in self._items.values():
                if other["id"] != ignore_id and other.get(field) == value:
                    raise ConflictError(f"{self.label} with this {field} already exists", field)

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        record = {**data, "id": data.get("id") or new_id()}
        record.setdefault("createdAt", utcnow())
        record.setdefault("updatedAt", record["createdAt"])
        self._check_unique(record)
        self._items[record["id"]] = copy.deepcopy(record)
        return record

    def update(self, record_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        current = self.get(record_id)
        merged = {**current, **{k: v for k, v in changes.items() if k != "id"}, "updatedAt": utcnow()}
        self._check_unique(merged, ignore_id=record_id)
        self._items[record_id] = copy.deepcopy(merged)
        return merged

    def delete(self, record_id: str) -> dict[str, Any]:
        record = self.get(record_id)
        del self._items[record_id]
        return record

    def clear(self) -> None:
        self._items.clear()


# ═════════════════════════════════════════════════════════════════════
# Store
# ═════════════════════════════════════════════════════════════════════

# collection name → (entity label, unique fields)
COLLECTIONS: dict[str, tuple[str, tuple[str, ...]]] = {
    "users": ("User", ("email",)),
    "branches": ("Branch", ("code",)),
    "classes": ("Class", ()),
    "sections": ("Section", ()),
    "students": ("Student", ("admissionNo",)),
    "transfers": ("Transfer", ()),
    "attendance": ("Attendance", ()),
    "drivers": ("Driver", ("email", "licenseNumber")),
    "vehicles": ("Vehicle", ("registrationNumber",)),
    "routes": ("Route", ()),
    "stops": ("Stop", ()),
    "trips": ("Trip", ()),
    "locations": ("Vehicle location", ()),
    "employees": ("Employee", ("employeeNo", "email")),
    "designations": ("Designation", ("code",)),
    "departments": ("Department", ("code",)),
    "salaries": ("Salary", ()),
    "leave-balances": ("Leave balance", ()),
    "performance-reviews": ("Performance review", ()),
    "promotions": ("Promotion", ()),
    "hr-transfers": ("Employee transfer", ()),
    "payslips": ("Payslip", ()),
    "separations": ("Separation", ()),
    "food-items": ("Food item", ()),
    "recipes": ("Recipe", ()),
    "mess-staff": ("Staff member", ()),
    "menus": ("Menu", ()),
    "meals": ("Meal", ()),
    "meal-variants": ("Meal variant", ()),
    "hygiene-checks": ("Hygiene check", ()),
    "allergies": ("Allergy", ()),
    "book-categories": ("Book category", ()),
    "books": ("Book", ()),
    "book-access": ("Book access", ()),
    "tests": ("Test", ()),
    "test-results": ("Test result", ()),
    "fee-structures": ("Fee structure", ()),
    "fee-dues": ("Fee due", ()),
    "payments": ("Payment", ()),
    "invoices": ("Invoice", ()),
}


class MemoryStore:
    """All collections of one mock backend instance."""

    def __init__(self, school_id: Optional[str] = None, *, seed: bool = True) -> None:
        self.school_id = school_id or settings.SCHOOL_ID
        self.collections = {
            name: Collection(label, unique) for name, (label, unique) in COLLECTIONS.items()
        }
        # Refresh tokens revoked by logout
        self.revoked: set[str] = set()
        if seed:
            seed_store(self)

    def __getitem__(self, name: str) -> Collection:
        return self.collections[name]

    def reset(self) -> None:
        for collection in self.collections.values():
            collection.clear()
        self.revoked.clear()
        seed_store(self)


def get_store(request: Request) -> MemoryStore:
    """FastAPI dependency: the store attached to the running app."""
    return request.app.state.store


# ═════════════════════════════════════════════════════════════════════
# Seed data
# ═════════════════════════════════════════════════════════════════════

ADMIN_ID = "user-admin-001"

CLASSES = [
    {"name": "Class 10", "code": "X", "sections": ("A", "B")},
    {"name": "Class 11", "code": "XI", "sections": ("A",)},
    {"name": "Class 12", "code": "XII", "sections": ("A",)},
]

STUDENT_NAMES = [
    ("Aarav", "Mehta"), ("Diya", "Nair"), ("Kabir", "Rao"), ("Ananya", "Iyer"),
    ("Vivaan", "Gupta"), ("Isha", "Reddy"), ("Arjun", "Das"), ("Meera", "Joshi"),
]

FEE_STRUCTURES = [
    {"name": "Tuition Fee - Class 10", "amount": 45000, "frequency": "ANNUAL", "description": "Annual tuition"},
    {"name": "Transport Fee", "amount": 12000, "frequency": "ANNUAL", "description": "School bus service"},
    {"name": "Lab Fee - Class 12", "amount": 5000, "frequency": "ANNUAL", "description": "Science laboratory"},
]

SEED_TESTS = [
    {"title": "Physics Unit Test 1", "subjectId": "subj-physics", "subjectName": "Physics",
     "chapterId": "ch-motion", "chapterName": "Motion", "date": "2025-07-10",
     "percentages": (92, 78, 45, 63)},
    {"title": "Chemistry Unit Test 1", "subjectId": "subj-chemistry", "subjectName": "Chemistry",
     "chapterId": "ch-atoms", "chapterName": "Atoms and Molecules", "date": "2025-08-05",
     "percentages": (85, 71, 38, 59)},
]

# Rough campus coordinates used for parked vehicles
CAMPUS_LAT, CAMPUS_LNG = 12.9716, 77.5946


def _iso(value: Any) -> Any:
    return value.isoformat() if isinstance(value, date) else value


def seed_store(store: MemoryStore) -> None:
    school_id = store.school_id

    store["users"].create({
        "id": ADMIN_ID,
        "email": settings.SMOKE_ADMIN_EMAIL,
        "password": settings.SMOKE_ADMIN_PASSWORD,
        "firstName": "Admin",
        "lastName": "User",
        "role": "ADMIN",
        "schoolId": school_id,
    })

    store["branches"].create({"name": "Main Campus", "code": "MAIN", "city": "Bengaluru", "schoolId": school_id})

    # ── Classes / sections / students ──
    roll = 0
    for klass in CLASSES:
        class_row = store["classes"].create({"name": klass["name"], "code": klass["code"], "schoolId": school_id})
        for section_name in klass["sections"]:
            section = store["sections"].create({
                "name": section_name, "capacity": 40, "classId": class_row["id"],
            })
            for offset in range(2):
                first, last = STUDENT_NAMES[roll % len(STUDENT_NAMES)]
                roll += 1
                store["students"].create({
                    "firstName": first,
                    "lastName": last,
                    "admissionNo": f"ADM-{roll:04d}",
                    "rollNumber": str(offset + 1),
                    "currentClassId": class_row["id"],
                    "currentSectionId": section["id"],
                    "schoolId": school_id,
                })

    # ── Transportation (same literals as the database seeders) ──
    for route in fixtures.ROUTES:
        store["routes"].create({
            "name": route["name"],
            "description": route["description"],
            "departureTime": route["start_time"],
            "arrivalTime": route["end_time"],
            "boardingPoints": [],
            "status": "ACTIVE",
            "schoolId": school_id,
        })
    for vehicle in fixtures.VEHICLES:
        store["vehicles"].create({
            "registrationNumber": vehicle["registration_number"],
            "type": vehicle["type"],
            "capacity": vehicle["capacity"],
            "purchaseDate": _iso(vehicle["purchase_date"]),
            "status": "ACTIVE",
            "schoolId": school_id,
        })
    for driver in fixtures.DRIVERS:
        store["drivers"].create({
            "fullName": f"{driver['first_name']} {driver['last_name']}",
            "email": driver["email"],
            "phone": driver["phone"],
            "licenseNumber": driver["license_number"],
            "licenseExpiry": _iso(driver["license_expiry"]),
            "status": "ACTIVE",
            "schoolId": school_id,
        })

    # ── HR catalogue ──
    for designation in fixtures.DESIGNATIONS:
        store["designations"].create({
            "name": designation["name"],
            "code": designation["code"],
            "level": designation["level"],
            "minSalary": designation["min_salary"],
            "maxSalary": designation["max_salary"],
            "isActive": True,
        })
    for department in fixtures.DEPARTMENTS:
        store["departments"].create({**department, "isActive": True, "schoolId": school_id})

    # ── Finance ──
    for structure in FEE_STRUCTURES:
        store["fee-structures"].create({**structure, "schoolId": school_id, "isActive": True})
    student = store["students"].list()[0]
    store["fee-dues"].create({
        "studentId": student["id"],
        "feeStructureId": store["fee-structures"].list()[0]["id"],
        "amountDue": 15000,
        "dueDate": date.today().isoformat(),
        "status": "PENDING",
    })

    # ── Assessments: two published tests for the first class, with results ──
    first_class = store["classes"].list()[0]
    students = store["students"].find(currentClassId=first_class["id"])
    for test_def in SEED_TESTS:
        test = store["tests"].create({
            "title": test_def["title"],
            "classId": first_class["id"],
            "subjectIds": [test_def["subjectId"]],
            "status": "PUBLISHED",
            "durationMinutes": 60,
            "scheduledAt": test_def["date"],
        })
        for student, percentage in zip(students, test_def["percentages"]):
            store["test-results"].create({
                "testId": test["id"],
                "testName": test["title"],
                "studentId": student["id"],
                "subjectId": test_def["subjectId"],
                "subjectName": test_def["subjectName"],
                "chapterId": test_def["chapterId"],
                "chapterName": test_def["chapterName"],
                "percentage": percentage,
                "submittedAt": test_def["date"],
            })

    logger.info("Mock store seeded for school %s", school_id)
