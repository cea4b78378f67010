"""Mess REST resources under ``/mess``."""

from __future__ import annotations

from typing import Any

from school_erp.api.envelope import ApiResponse
from school_erp.api.service import ResourceService, to_body
from school_erp.mess.schemas import (
    CertificationRequest,
    CloneMenuRequest,
    FoodItemRecord,
    HygieneCheckRecord,
    MealRecord,
    MealVariantRecord,
    MenuRecord,
    MessStaffRecord,
    RecipeCost,
    RecipeRecord,
    ServingStatusRequest,
    StudentAllergyRecord,
    TrainingRequest,
)


class FoodItemsService(ResourceService[FoodItemRecord]):
    endpoint = "/mess/food-items"
    model = FoodItemRecord


class RecipesService(ResourceService[RecipeRecord]):
    endpoint = "/mess/recipes"
    model = RecipeRecord

    async def add_ingredient(self, recipe_id: str, ingredient: Any) -> ApiResponse:
        return await self.action(recipe_id, "ingredients", ingredient)

    async def calculate_cost(self, recipe_id: str) -> ApiResponse:
        response = await self.client.post(self.url(recipe_id, "calculate-cost"), {}, self.token)
        return response.map(RecipeCost.model_validate)


class MessStaffService(ResourceService[MessStaffRecord]):
    endpoint = "/mess/staff"
    model = MessStaffRecord

    async def add_certification(self, staff_id: str, certification: str) -> ApiResponse:
        return await self.action(staff_id, "certification", CertificationRequest(certification=certification))

    async def record_training(self, staff_id: str, training: str) -> ApiResponse:
        return await self.action(staff_id, "training", TrainingRequest(training=training))


class MenusService(ResourceService[MenuRecord]):
    endpoint = "/mess/menus"
    model = MenuRecord

    async def publish(self, menu_id: str) -> ApiResponse:
        """Submit a draft menu for approval (DRAFT → PENDING)."""
        return await self.action(menu_id, "publish")

    async def clone_from_date(self, request: CloneMenuRequest) -> ApiResponse:
        response = await self.client.post(self.url("clone-from-date"), to_body(request), self.token)
        return response.map(self.parse)


class MealsService(ResourceService[MealRecord]):
    endpoint = "/mess/meals"
    model = MealRecord

    async def update_serving_status(self, meal_id: str, is_serving: bool) -> ApiResponse:
        return await self.action(
            meal_id, "serving-status", ServingStatusRequest(is_serving=is_serving), method="PUT"
        )


class MealVariantsService(ResourceService[MealVariantRecord]):
    endpoint = "/mess/meal-variants"
    model = MealVariantRecord


class HygieneChecksService(ResourceService[HygieneCheckRecord]):
    """Kitchen inspections; the server scores them and decides PASS / FAIL."""

    endpoint = "/mess/hygiene-checks"
    model = HygieneCheckRecord


class AllergiesService(ResourceService[StudentAllergyRecord]):
    endpoint = "/mess/allergies"
    model = StudentAllergyRecord

    async def create_for_enrollment(self, enrollment_id: str, payload: Any) -> ApiResponse:
        response = await self.client.post(
            f"/mess/enrollments/{enrollment_id}/allergies", to_body(payload), self.token
        )
        return response.map(self.parse)

    async def verify(self, allergy_id: str) -> ApiResponse:
        return await self.action(allergy_id, "verify", method="PUT")

    async def get_critical(self, enrollment_id: str) -> ApiResponse:
        response = await self.client.get(f"/mess/enrollments/{enrollment_id}/critical-allergies", self.token)
        return response.map(self.parse_list)
