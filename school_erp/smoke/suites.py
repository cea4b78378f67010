"""The smoke suites: finance, mess safety, transportation and DOCX upload."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from school_erp.common.constants import DOCX_CONTENT_TYPE
from school_erp.smoke.runner import SmokeContext, SmokeFailure, Suite, expect

# ══════════════════════════════════════════════════════════════════════
# Finance
# ══════════════════════════════════════════════════════════════════════


def finance_suite() -> Suite:
    suite = Suite("finance", "Finance API Integration Test Results")

    @suite.check("Login with admin credentials", required=True)
    def login(ctx: SmokeContext) -> str:
        data = ctx.login()
        ctx.state["school_id"] = (data.get("user") or {}).get("schoolId")
        return f"School: {ctx.state['school_id']}"

    @suite.check("Get fee structures (paginated)")
    def list_structures(ctx: SmokeContext) -> str:
        body = expect(ctx.get("/fees/structure", params={"page": 0, "limit": 10}))
        if not body.get("data"):
            raise SmokeFailure("No fee structures returned")
        if body.get("total") == 0:
            raise SmokeFailure("Total count is 0")
        return f"{len(body['data'])} of {body.get('total')}"

    @suite.check("Get single fee structure by ID")
    def get_structure(ctx: SmokeContext) -> str:
        body = expect(ctx.get("/fees/structure", params={"limit": 1}))
        if not body.get("data"):
            raise SmokeFailure("No fee structures returned")
        structure_id = body["data"][0]["id"]
        ctx.state["fee_structure_id"] = structure_id
        single = expect(ctx.get(f"/fees/structure/{structure_id}"))
        if not single.get("data"):
            raise SmokeFailure("No data returned")
        return structure_id

    @suite.check("Update fee structure")
    def update_structure(ctx: SmokeContext) -> None:
        structure_id = ctx.state.get("fee_structure_id")
        if not structure_id:
            raise SmokeFailure("No fee structure ID from previous check")
        expect(ctx.put(f"/fees/structure/{structure_id}", json={"description": "Updated description"}))

    @suite.check("Get pending dues")
    def dues(ctx: SmokeContext) -> None:
        expect(ctx.get("/fees/dues"))

    @suite.check("Get payment report")
    def payment_report(ctx: SmokeContext) -> None:
        params = {
            "dateFrom": datetime(2024, 1, 1, tzinfo=timezone.utc).isoformat(),
            "dateTo": datetime.now(timezone.utc).isoformat(),
        }
        expect(ctx.get("/fees/report", params=params))

    @suite.check("Get invoices")
    def invoices(ctx: SmokeContext) -> None:
        expect(ctx.get("/invoices", params={"page": 0, "limit": 10}))

    return suite


# ══════════════════════════════════════════════════════════════════════
# Mess safety
# ══════════════════════════════════════════════════════════════════════

SMOKE_SCHOOL_ID = "test-school-001"
SMOKE_STUDENT_ENROLLMENT = "test-student-001"

HYGIENE_SCORE_FIELDS = (
    "cleanlinessScore",
    "temperatureControlScore",
    "equipmentMaintenanceScore",
    "storageConditionsScore",
    "waterQualityScore",
    "wasteManagementScore",
    "staffHygieneScore",
    "staffLunchAssistantScore",
)


def hygiene_payload(mess_id: str, inspector: str, scores: tuple[int, ...]) -> dict:
    return {
        "messId": mess_id,
        "checkDate": datetime.now(timezone.utc).isoformat(),
        "inspectorName": inspector,
        **dict(zip(HYGIENE_SCORE_FIELDS, scores)),
    }


def mess_safety_suite() -> Suite:
    suite = Suite("mess", "Mess Safety & Menu Planning Results", school_id=SMOKE_SCHOOL_ID)

    @suite.check("Create kitchen hygiene check")
    def hygiene_create(ctx: SmokeContext) -> str:
        body = expect(ctx.post(
            "/mess/hygiene-checks",
            json=hygiene_payload("test-mess-001", "Inspector John", (40, 35, 45, 38, 42, 40, 43, 41)),
        ), 201)
        check_id = (body.get("data") or {}).get("id")
        if not check_id:
            raise SmokeFailure("No hygiene check ID returned")
        return f"Created hygiene check: {check_id}"

    @suite.check("Kitchen hygiene check - passing score")
    def hygiene_pass(ctx: SmokeContext) -> str:
        body = expect(ctx.post(
            "/mess/hygiene-checks",
            json=hygiene_payload("test-mess-002", "Inspector Jane", (48, 46, 47, 48, 45, 49, 47, 46)),
        ), 201)
        data = body.get("data") or {}
        if data.get("status") != "PASS":
            raise SmokeFailure(f"Expected PASS status, got {data.get('status')}")
        return f"Score {data.get('overallScore')}/50 - service approved"

    @suite.check("Kitchen hygiene check - failing score")
    def hygiene_fail(ctx: SmokeContext) -> str:
        body = expect(ctx.post(
            "/mess/hygiene-checks",
            json=hygiene_payload("test-mess-003", "Inspector Bob", (10, 12, 8, 15, 9, 11, 13, 14)),
        ), 201)
        data = body.get("data") or {}
        if data.get("status") != "FAIL":
            raise SmokeFailure(f"Expected FAIL status, got {data.get('status')}")
        if "FAILED" not in (body.get("message") or ""):
            raise SmokeFailure(f"Expected FAILED message: {body.get('message')}")
        return f"Score {data.get('overallScore')}/50 - service blocked"

    @suite.check("Create student allergy record")
    def allergy_create(ctx: SmokeContext) -> str:
        body = expect(ctx.post(
            f"/mess/enrollments/{SMOKE_STUDENT_ENROLLMENT}/allergies",
            json={
                "allergenId": "allergen-peanut",
                "severity": "ANAPHYLAXIS",
                "description": "Severe peanut allergy",
                "doctorName": "Dr. Smith",
                "doctorContactNumber": "+1-555-0100",
                "verificationDocumentUrl": "https://example.com/doctor-note.pdf",
                "verificationDate": datetime.now(timezone.utc).isoformat(),
            },
        ), 201)
        data = body.get("data") or {}
        if not data.get("id"):
            raise SmokeFailure("No allergy ID returned")
        if data.get("isVerified"):
            raise SmokeFailure("Allergy should not be pre-verified")
        ctx.state["allergy_id"] = data["id"]
        return f"Created allergy record: {data['id']} (awaiting verification)"

    @suite.check("Verify student allergy")
    def allergy_verify(ctx: SmokeContext) -> None:
        allergy_id = ctx.state.get("allergy_id")
        if not allergy_id:
            raise SmokeFailure("No allergy ID from previous check")
        body = expect(ctx.put(f"/mess/allergies/{allergy_id}/verify", json={}))
        if not (body.get("data") or {}).get("isVerified"):
            raise SmokeFailure("Allergy should be verified")

    @suite.check("Get student critical allergies")
    def critical(ctx: SmokeContext) -> str:
        body = expect(ctx.get(f"/mess/enrollments/{SMOKE_STUDENT_ENROLLMENT}/critical-allergies"))
        if not isinstance(body.get("data"), list):
            raise SmokeFailure("Expected array of critical allergies")
        return f"Found {len(body['data'])} critical allergen(s)"

    @suite.check("Create menu")
    def menu(ctx: SmokeContext) -> str:
        body = expect(ctx.post(
            "/mess/menus",
            json={
                "messId": "test-mess-001",
                "date": date.today().isoformat(),
                "dayOfWeek": "MONDAY",
                "season": "Winter",
            },
        ), 201)
        data = body.get("data") or {}
        if not data.get("id"):
            raise SmokeFailure("No menu ID returned")
        if data.get("status") != "DRAFT":
            raise SmokeFailure("Menu should start in DRAFT status")
        ctx.state["menu_id"] = data["id"]
        return f"Created menu: {data['id']} (DRAFT)"

    @suite.check("Add meal to menu")
    def meal(ctx: SmokeContext) -> None:
        menu_id = ctx.state.get("menu_id")
        if not menu_id:
            raise SmokeFailure("No menu ID from previous check")
        body = expect(ctx.post(
            "/mess/meals",
            json={
                "menuId": menu_id,
                "name": "Lunch - Special Curry",
                "mealType": "LUNCH",
                "serveTimeStart": "12:00",
                "serveTimeEnd": "13:30",
            },
        ), 201)
        meal_id = (body.get("data") or {}).get("id")
        if not meal_id:
            raise SmokeFailure("No meal ID returned")
        ctx.state["meal_id"] = meal_id

    @suite.check("Create meal variant")
    def variant(ctx: SmokeContext) -> None:
        meal_id = ctx.state.get("meal_id")
        if not meal_id:
            raise SmokeFailure("No meal ID from previous check")
        body = expect(ctx.post(
            "/mess/meal-variants",
            json={
                "mealId": meal_id,
                "recipeId": "recipe-curry-veg-001",
                "variantType": "VEG",
                "variantCost": 75.50,
                "description": "Vegetarian curry with chickpeas and spinach",
            },
        ), 201)
        data = body.get("data") or {}
        if not data.get("id"):
            raise SmokeFailure("No variant ID returned")
        if data.get("variantType") != "VEG":
            raise SmokeFailure("Variant type mismatch")

    return suite


# ══════════════════════════════════════════════════════════════════════
# Transportation
# ══════════════════════════════════════════════════════════════════════


def transportation_suite() -> Suite:
    suite = Suite("transportation", "Transportation API Results")

    @suite.check("Login with admin credentials", required=True)
    def login(ctx: SmokeContext) -> None:
        ctx.login()

    def first_id(ctx: SmokeContext, path: str, label: str) -> str:
        body = expect(ctx.get(path))
        data = body.get("data")
        if isinstance(data, dict):
            data = next((v for v in data.values() if isinstance(v, list)), [])
        if not data:
            raise SmokeFailure(f"No {label} returned")
        return data[0]["id"]

    @suite.check("List drivers")
    def drivers(ctx: SmokeContext) -> str:
        ctx.state["driver_id"] = first_id(ctx, "/transportation/drivers", "drivers")
        return ctx.state["driver_id"]

    @suite.check("List vehicles")
    def vehicles(ctx: SmokeContext) -> str:
        ctx.state["vehicle_id"] = first_id(ctx, "/transportation/vehicles", "vehicles")
        return ctx.state["vehicle_id"]

    @suite.check("List routes")
    def routes(ctx: SmokeContext) -> str:
        ctx.state["route_id"] = first_id(ctx, "/transportation/routes", "routes")
        return ctx.state["route_id"]

    @suite.check("Create trip")
    def create_trip(ctx: SmokeContext) -> str:
        missing = [k for k in ("driver_id", "vehicle_id", "route_id") if not ctx.state.get(k)]
        if missing:
            raise SmokeFailure(f"Missing {', '.join(missing)} from previous checks")
        body = expect(ctx.post(
            "/transportation/trips",
            json={
                "tripDate": (date.today() + timedelta(days=1)).isoformat(),
                "routeId": ctx.state["route_id"],
                "vehicleId": ctx.state["vehicle_id"],
                "driverId": ctx.state["driver_id"],
                "tripType": "PICKUP",
                "status": "SCHEDULED",
            },
        ), 200, 201)
        trip_id = (body.get("data") or {}).get("id")
        if not trip_id:
            raise SmokeFailure("No trip ID returned")
        ctx.state["trip_id"] = trip_id
        return trip_id

    def transition(action: str, expected: str) -> Callable[[SmokeContext], None]:
        def run(ctx: SmokeContext) -> None:
            trip_id = ctx.state.get("trip_id")
            if not trip_id:
                raise SmokeFailure("No trip ID from previous check")
            body = expect(ctx.post(f"/transportation/trips/{trip_id}/{action}", json={}))
            status = (body.get("data") or {}).get("status")
            if status != expected:
                raise SmokeFailure(f"Expected {expected}, got {status}")
        return run

    suite.check("Start trip")(transition("start", "IN_PROGRESS"))
    suite.check("Complete trip")(transition("complete", "COMPLETED"))
    return suite


# ══════════════════════════════════════════════════════════════════════
# DOCX upload
# ══════════════════════════════════════════════════════════════════════


def docx_suite(docx_path: Optional[Path] = None, pattern_id: str = "") -> Suite:
    suite = Suite("docx", "DOCX Upload Test Results")

    @suite.check("Login with admin credentials", required=True)
    def login(ctx: SmokeContext) -> str:
        ctx.login()
        return f"Token: {ctx.token[:20]}..."

    @suite.check("Verify DOCX file exists", required=True)
    def file_exists(ctx: SmokeContext) -> str:
        if docx_path is None or not Path(docx_path).is_file():
            raise SmokeFailure(f"DOCX file not found: {docx_path}")
        return f"File size: {Path(docx_path).stat().st_size / 1024:.2f} KB"

    @suite.check("Upload and parse DOCX file", required=True)
    def parse(ctx: SmokeContext) -> str:
        path = Path(docx_path)
        resp = ctx.post(
            "/tests/upload/parse",
            files={"file": (path.name, path.read_bytes(), DOCX_CONTENT_TYPE)},
            data={"patternId": pattern_id},
        )
        data = expect(resp, 200, what="Upload").get("data")
        if data is None:
            raise SmokeFailure("Response data is missing")
        if isinstance(data, list):
            questions = data
        elif isinstance(data.get("parseResult"), dict):
            questions = data["parseResult"].get("questions") or []
        else:
            questions = data.get("questions") or []
        ctx.state["questions"] = questions
        return f"{len(questions)} structured questions found"

    @suite.check("Create test from parsed questions")
    def create(ctx: SmokeContext) -> str:
        questions = ctx.state.get("questions", [])
        body = expect(ctx.post(
            "/tests/upload/create",
            json={
                "testName": "Physics Test - Class 12 (Auto Generated)",
                "description": "Test created from uploaded DOCX file",
                "patternId": pattern_id,
                "questions": questions,
            },
        ), 200, 201, what="Create test")
        data = body.get("data") or {}
        test = data.get("test") if isinstance(data.get("test"), dict) else data
        return f"Test ID: {test.get('id', 'N/A')}, questions: {data.get('questionsCreated', len(questions))}"

    return suite


SUITES = {
    "finance": finance_suite,
    "mess": mess_safety_suite,
    "transportation": transportation_suite,
    "docx": docx_suite,
}
