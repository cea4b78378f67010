"""Mess router — catalogue, recipes, staff, menus, meals and kitchen safety, under ``/mess``.

Routes:
    /mess/food-items                          — Food item CRUD
    /mess/recipes[/{id}/ingredients|calculate-cost] — Recipes and costing
    /mess/staff[/{id}/certification|training] — Mess staff
    /mess/menus[/{id}/publish|/clone-from-date] — Menus (DRAFT → PENDING on publish)
    /mess/meals[/{id}/serving-status]         — Meals
    /mess/meal-variants                       — Meal variants
    /mess/hygiene-checks                      — Scored kitchen inspections (PASS / FAIL)
    /mess/allergies[/{id}/verify]             — Student allergy records
    /mess/enrollments/{id}/allergies          — Record an allergy for an enrollment
    /mess/enrollments/{id}/critical-allergies — Severe / anaphylactic allergies
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from school_erp.common.constants import AllergySeverity, HygieneResult, MenuStatus
from school_erp.common.exceptions import NotFoundException
from school_erp.mock_api.crud import bad_request, crud_router, ok, require_fields, transition
from school_erp.mock_api.store import MemoryStore, get_store, utcnow

logger = logging.getLogger(__name__)

router = APIRouter()

HYGIENE_SCORES = (
    "cleanlinessScore",
    "temperatureControlScore",
    "equipmentMaintenanceScore",
    "storageConditionsScore",
    "waterQualityScore",
    "wasteManagementScore",
    "staffHygieneScore",
    "staffLunchAssistantScore",
)
MAX_SCORE = 50
PASS_SCORE = 25
CRITICAL_SEVERITIES = (AllergySeverity.severe.value, AllergySeverity.anaphylaxis.value)


# ═════════════════════════════════════════════════════════════════════
# Catalogue / recipes / staff
# ═════════════════════════════════════════════════════════════════════

food_items = crud_router("food-items", defaults=lambda: {"unit": "kg", "allergenIds": []}, required=("name", "category"))

recipes = APIRouter()


@recipes.post("/{recipe_id}/ingredients", status_code=201)
async def add_ingredient(
    recipe_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "foodItemId", "quantity")
    recipe = store["recipes"].get(recipe_id)
    store["food-items"].get(body["foodItemId"])
    ingredient = {"unit": "grams", "ingredientCost": 0, **body}
    recipe = store["recipes"].update(recipe_id, {"ingredients": [*recipe.get("ingredients", []), ingredient]})
    return ok(recipe, "Ingredient added")


@recipes.post("/{recipe_id}/calculate-cost")
async def calculate_cost(recipe_id: str, store: MemoryStore = Depends(get_store)):
    recipe = store["recipes"].get(recipe_id)
    total = round(sum(float(i.get("ingredientCost") or 0) for i in recipe.get("ingredients", [])), 2)
    servings = recipe.get("servings") or 1
    store["recipes"].update(recipe_id, {"totalCost": total})
    return ok({"recipeId": recipe_id, "totalCost": total, "costPerServing": round(total / servings, 2)})


crud_router(
    "recipes",
    router=recipes,
    defaults=lambda: {"ingredients": [], "servings": 1},
    required=("name", "mealVariantType"),
)

staff = APIRouter()


def _append(store: MemoryStore, staff_id: str, field: str, value: str) -> dict:
    member = store["mess-staff"].get(staff_id)
    return store["mess-staff"].update(staff_id, {field: [*member.get(field, []), value]})


@staff.post("/{staff_id}/certification")
async def add_certification(
    staff_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "certification")
    return ok(_append(store, staff_id, "certifications", body["certification"]), "Certification added")


@staff.post("/{staff_id}/training")
async def record_training(
    staff_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "training")
    return ok(_append(store, staff_id, "trainingsCompleted", body["training"]), "Training recorded")


crud_router(
    "mess-staff",
    router=staff,
    defaults=lambda: {"certifications": [], "trainingsCompleted": [], "isActive": True},
    required=("firstName", "lastName", "position", "messId"),
)


# ═════════════════════════════════════════════════════════════════════
# Menus / meals / variants
# ═════════════════════════════════════════════════════════════════════

menus = APIRouter()


@menus.post("/clone-from-date", status_code=201)
async def clone_from_date(
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "messId", "sourceDate", "targetDate")
    source = store["menus"].first(messId=body["messId"], date=body["sourceDate"])
    if source is None:
        raise NotFoundException("Menu", f"{body['messId']}@{body['sourceDate']}")
    copy = {k: v for k, v in source.items() if k not in ("id", "createdAt", "updatedAt", "approvalNotes")}
    menu = store["menus"].create({**copy, "date": body["targetDate"], "status": MenuStatus.draft.value})
    for meal in store["meals"].find(menuId=source["id"]):
        store["meals"].create({
            **{k: v for k, v in meal.items() if k not in ("id", "createdAt", "updatedAt")},
            "menuId": menu["id"],
            "isServing": False,
        })
    return ok(menu, "Menu cloned successfully")


@menus.post("/{menu_id}/publish")
async def publish_menu(menu_id: str, store: MemoryStore = Depends(get_store)):
    menu = store["menus"].get(menu_id)
    changes = transition(menu, (MenuStatus.draft.value,), MenuStatus.pending.value,
                         "Only draft menus can be published")
    return ok(store["menus"].update(menu_id, changes), "Menu submitted for approval")


crud_router(
    "menus",
    router=menus,
    defaults=lambda: {"status": MenuStatus.draft.value},
    required=("messId", "date", "dayOfWeek"),
    before_create=lambda store, record: {**record, "status": MenuStatus.draft.value},
)

meals = APIRouter()


@meals.put("/{meal_id}/serving-status")
async def serving_status(
    meal_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    if not isinstance(body.get("isServing"), bool):
        raise bad_request("isServing must be true or false", "isServing")
    return ok(store["meals"].update(meal_id, {"isServing": body["isServing"]}))


def _meal_menu(store: MemoryStore, record: dict) -> dict:
    store["menus"].get(record["menuId"])
    return record


crud_router(
    "meals",
    router=meals,
    defaults=lambda: {"isServing": False},
    required=("menuId", "name", "mealType"),
    before_create=_meal_menu,
)

meal_variants = crud_router("meal-variants", required=("mealId", "recipeId", "variantType"))


# ═════════════════════════════════════════════════════════════════════
# Safety: hygiene checks / allergies
# ═════════════════════════════════════════════════════════════════════

hygiene = APIRouter()


def score_hygiene(body: dict[str, Any]) -> tuple[dict[str, Any], str]:
    """Average the eight category scores; below 25/50 blocks meal service."""
    require_fields(body, "messId", "inspectorName", *HYGIENE_SCORES)
    scores = []
    for field in HYGIENE_SCORES:
        try:
            value = int(body[field])
        except (TypeError, ValueError):
            raise bad_request(f"{field} must be a number", field)
        if not 0 <= value <= MAX_SCORE:
            raise bad_request(f"{field} must be between 0 and {MAX_SCORE}", field)
        scores.append(value)

    overall = round(sum(scores) / len(scores))
    passed = overall >= PASS_SCORE
    record = {
        **body,
        "checkDate": body.get("checkDate") or utcnow(),
        "overallScore": overall,
        "status": (HygieneResult.passed if passed else HygieneResult.failed).value,
        "approvedForMealService": passed,
    }
    if passed:
        message = "✓ Check passed - Meal service APPROVED"
    else:
        message = f"⚠️ Check FAILED - Score below {PASS_SCORE}/{MAX_SCORE} - Meal service BLOCKED"
    return record, message


@hygiene.post("", status_code=201)
async def create_hygiene_check(
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    record, message = score_hygiene(body)
    check = store["hygiene-checks"].create(record)
    logger.info("Hygiene check for mess %s: %s (%d/50)", check["messId"], check["status"], check["overallScore"])
    return ok(check, message)


crud_router("hygiene-checks", router=hygiene)

allergies = APIRouter()


@allergies.put("/{allergy_id}/verify")
async def verify_allergy(allergy_id: str, store: MemoryStore = Depends(get_store)):
    allergy = store["allergies"].update(allergy_id, {"isVerified": True, "verifiedAt": utcnow()})
    return ok(allergy, "Allergy verified")


crud_router("allergies", router=allergies, defaults=lambda: {"isVerified": False})

enrollments = APIRouter()


@enrollments.post("/{enrollment_id}/allergies", status_code=201)
async def create_enrollment_allergy(
    enrollment_id: str,
    body: dict[str, Any] = Body(default_factory=dict),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "allergenId", "severity")
    if body["severity"] not in {s.value for s in AllergySeverity}:
        raise bad_request(f"Unknown severity {body['severity']}", "severity")
    # Records are never pre-verified; verification is a separate step
    allergy = store["allergies"].create({**body, "enrollmentId": enrollment_id, "isVerified": False})
    return ok(allergy, "Allergy recorded; awaiting verification")


@enrollments.get("/{enrollment_id}/critical-allergies")
async def critical_allergies(enrollment_id: str, store: MemoryStore = Depends(get_store)):
    records = store["allergies"].find(
        lambda a: a.get("severity") in CRITICAL_SEVERITIES, enrollmentId=enrollment_id
    )
    return ok(records)


# ── Mount under /mess ───────────────────────────────────────────────

router.include_router(food_items, prefix="/food-items")
router.include_router(recipes, prefix="/recipes")
router.include_router(staff, prefix="/staff")
router.include_router(menus, prefix="/menus")
router.include_router(meals, prefix="/meals")
router.include_router(meal_variants, prefix="/meal-variants")
router.include_router(hygiene, prefix="/hygiene-checks")
router.include_router(allergies, prefix="/allergies")
router.include_router(enrollments, prefix="/enrollments")
