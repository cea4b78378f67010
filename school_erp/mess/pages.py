"""Mess admin pages: food items, recipes, staff, menus, meals and variants."""

from __future__ import annotations

import logging
from typing import Any, Optional

from school_erp.common.constants import MealVariantType
from school_erp.common.crud import CrudPage
from school_erp.common.exceptions import ValidationException
from school_erp.mess.schemas import (
    CloneMenuRequest,
    FoodItemForm,
    FoodItemRecord,
    IngredientForm,
    MealForm,
    MealRecord,
    MealVariantForm,
    MealVariantRecord,
    MenuForm,
    MenuRecord,
    MessStaffForm,
    MessStaffRecord,
    RecipeCost,
    RecipeForm,
    RecipeRecord,
)
from school_erp.mess.service import MealsService, MenusService, MessStaffService, RecipesService

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# Catalogue
# ═════════════════════════════════════════════════════════════════════


class FoodItemsPage(CrudPage[FoodItemRecord, FoodItemForm]):
    form_model = FoodItemForm
    entity_label = "Food item"
    search_fields = ("name", "category")
    server_search = True

    def query_params(self) -> dict[str, Any]:
        return {**super().query_params(), "category": self.filters.get("category")}


class RecipesPage(CrudPage[RecipeRecord, RecipeForm]):
    """Recipes with their ingredient lists and cost calculation."""

    form_model = RecipeForm
    entity_label = "Recipe"
    search_fields = ("name", "cuisine_type", "description")
    server_search = True

    service: RecipesService

    def __init__(self, service: RecipesService, **kwargs: Any) -> None:
        super().__init__(service, **kwargs)
        self.variant_filter: Optional[MealVariantType] = None
        self.selected_recipe_id: Optional[str] = None
        self.ingredient_form = IngredientForm()
        self.last_cost: Optional[RecipeCost] = None

    def query_params(self) -> dict[str, Any]:
        return {**super().query_params(), "mealVariantType": self.variant_filter}

    async def set_variant_filter(self, variant: Optional[MealVariantType]) -> bool:
        self.variant_filter = variant
        return await self.load()

    def select_recipe(self, recipe_id: Optional[str]) -> None:
        self.selected_recipe_id = recipe_id
        self.ingredient_form = IngredientForm()

    async def add_ingredient(self) -> bool:
        errors = self.ingredient_form.check()
        if not self.selected_recipe_id or errors:
            self.notifier.error("Please fill in all ingredient fields")
            return False
        ok = await self.perform(
            self.service.add_ingredient(self.selected_recipe_id, self.ingredient_form),
            "Ingredient added",
            "Failed to add ingredient",
        )
        if ok:
            self.select_recipe(None)
        return ok

    async def calculate_cost(self, recipe_id: str) -> Optional[RecipeCost]:
        response = await self.service.calculate_cost(recipe_id)
        if not response.success:
            self.notifier.error(response.error or "Failed to calculate cost")
            return None
        self.last_cost = response.data
        self.notifier.success(f"Total Cost: ₹{self.last_cost.total_cost:.2f}")
        return self.last_cost


# ═════════════════════════════════════════════════════════════════════
# Staff
# ═════════════════════════════════════════════════════════════════════


class MessStaffPage(CrudPage[MessStaffRecord, MessStaffForm]):
    form_model = MessStaffForm
    entity_label = "Staff member"
    search_fields = ("first_name", "last_name", "position", "email")
    server_search = True

    service: MessStaffService

    def __init__(self, service: MessStaffService, **kwargs: Any) -> None:
        super().__init__(service, **kwargs)
        self.mess_id: Optional[str] = None
        self.active_only = False

    def query_params(self) -> dict[str, Any]:
        return {
            **super().query_params(),
            "messId": self.mess_id,
            "isActive": True if self.active_only else None,
        }

    async def set_mess(self, mess_id: Optional[str]) -> bool:
        self.mess_id = mess_id
        return await self.load()

    async def set_active_only(self, active_only: bool) -> bool:
        self.active_only = active_only
        return await self.load()

    async def add_certification(self, staff_id: str, certification: str) -> bool:
        if not staff_id or not certification.strip():
            self.notifier.error("Please enter certification name")
            return False
        return await self.perform(
            self.service.add_certification(staff_id, certification.strip()),
            "Certification added",
            "Failed to add certification",
        )

    async def record_training(self, staff_id: str, training: str) -> bool:
        if not staff_id or not training.strip():
            self.notifier.error("Please enter training name")
            return False
        return await self.perform(
            self.service.record_training(staff_id, training.strip()),
            "Training recorded",
            "Failed to record training",
        )


# ═════════════════════════════════════════════════════════════════════
# Menus / Meals / Variants
# ═════════════════════════════════════════════════════════════════════


class MenusPage(CrudPage[MenuRecord, MenuForm]):
    form_model = MenuForm
    entity_label = "Menu"
    search_fields = ("day_of_week", "season", "status")

    service: MenusService

    def __init__(self, service: MenusService, **kwargs: Any) -> None:
        super().__init__(service, **kwargs)
        self.clone_form = CloneMenuRequest()
        self.clone_errors: dict[str, str] = {}

    async def publish(self, menu_id: str) -> bool:
        return await self.perform(
            self.service.publish(menu_id), "Menu submitted for approval", "Failed to publish menu"
        )

    async def clone(self) -> bool:
        """Copy the menu of ``clone_form.source_date`` onto ``target_date``."""
        try:
            self.clone_form.validate_form()
        except ValidationException as exc:
            self.clone_errors = exc.first_errors
            return False
        self.clone_errors = {}
        ok = await self.perform(
            self.service.clone_from_date(self.clone_form), "Menu cloned successfully", "Failed to clone menu"
        )
        if ok:
            self.clone_form = CloneMenuRequest()
        return ok


class MealsPage(CrudPage[MealRecord, MealForm]):
    form_model = MealForm
    entity_label = "Meal"
    search_fields = ("name", "meal_type")

    service: MealsService

    async def toggle_serving(self, meal: MealRecord) -> bool:
        return await self.perform(
            self.service.update_serving_status(meal.id, not meal.is_serving),
            "",
            "Failed to update serving status",
        )

    @property
    def serving_now(self) -> list[MealRecord]:
        return [m for m in self.records if m.is_serving]


class MealVariantsPage(CrudPage[MealVariantRecord, MealVariantForm]):
    form_model = MealVariantForm
    entity_label = "Meal variant"
    search_fields = ("variant_type", "description")
