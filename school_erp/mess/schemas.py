"""Mess Pydantic v2 schemas — kitchen catalogue, staff, menus and safety records."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import Field

from school_erp.common.constants import (
    AllergySeverity,
    HygieneResult,
    MealType,
    MealVariantType,
    MenuStatus,
)
from school_erp.common.schemas import ApiModel, FormDraft, FormErrors, Record

REQUIRED_MESSAGE = "Please fill in required fields"
ALL_REQUIRED_MESSAGE = "Please fill in all required fields"

INGREDIENT_UNITS = ("grams", "kg", "ml", "liters", "pieces", "cups", "tbsp", "tsp")


# ═════════════════════════════════════════════════════════════════════
# Food items / Recipes
# ═════════════════════════════════════════════════════════════════════


class FoodItemRecord(Record):
    name: str = ""
    category: str = ""
    calories_per_100g: float = Field(default=0, alias="caloriesPer100g")
    protein_per_100g: float = Field(default=0, alias="proteinPer100g")
    carbs_per_100g: float = Field(default=0, alias="carbsPer100g")
    fat_per_100g: float = Field(default=0, alias="fatPer100g")
    cost_per_unit: float = 0
    unit: str = "kg"
    allergen_ids: list[str] = Field(default_factory=list)


class FoodItemForm(FormDraft):
    name: str = ""
    category: str = ""
    calories_per_100g: float = Field(default=0, alias="caloriesPer100g")
    protein_per_100g: float = Field(default=0, alias="proteinPer100g")
    carbs_per_100g: float = Field(default=0, alias="carbsPer100g")
    fat_per_100g: float = Field(default=0, alias="fatPer100g")
    cost_per_unit: float = 0
    unit: str = "kg"
    allergen_ids: list[str] = Field(default_factory=list)

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("name", self.name, REQUIRED_MESSAGE)
        errors.require("category", self.category, REQUIRED_MESSAGE)
        return errors


class Ingredient(ApiModel):
    food_item_id: str
    quantity: float
    unit: str = "grams"
    ingredient_cost: float = 0


class RecipeRecord(Record):
    name: str = ""
    meal_variant_type: MealVariantType = MealVariantType.veg
    description: Optional[str] = None
    cuisine_type: Optional[str] = None
    cooking_instructions: Optional[str] = None
    cooking_time_minutes: Optional[int] = None
    servings: int = 1
    ingredients: list[Ingredient] = Field(default_factory=list)
    total_cost: Optional[float] = None


class RecipeForm(FormDraft):
    name: str = ""
    meal_variant_type: Optional[MealVariantType] = MealVariantType.veg
    description: str = ""
    cuisine_type: str = ""
    cooking_instructions: str = ""
    cooking_time_minutes: int = 0
    servings: int = 1

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("name", self.name, REQUIRED_MESSAGE)
        errors.require("meal_variant_type", self.meal_variant_type, REQUIRED_MESSAGE)
        return errors


class IngredientForm(FormDraft):
    food_item_id: str = ""
    quantity: float = 0
    unit: str = "grams"
    ingredient_cost: float = 0

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("food_item_id", self.food_item_id, "Please fill in all ingredient fields")
        if not self.quantity:
            errors.add("quantity", "Please fill in all ingredient fields")
        if self.unit not in INGREDIENT_UNITS:
            errors.add("unit", f"Unit must be one of: {', '.join(INGREDIENT_UNITS)}")
        return errors


class RecipeCost(ApiModel):
    recipe_id: Optional[str] = None
    total_cost: float = 0
    cost_per_serving: Optional[float] = None


# ═════════════════════════════════════════════════════════════════════
# Staff
# ═════════════════════════════════════════════════════════════════════


class MessStaffRecord(Record):
    first_name: str = ""
    last_name: str = ""
    position: str = ""
    mess_id: Optional[str] = None
    date_of_joining: Optional[date] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    certifications: list[str] = Field(default_factory=list)
    trainings_completed: list[str] = Field(default_factory=list)
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class MessStaffForm(FormDraft):
    first_name: str = ""
    last_name: str = ""
    position: str = ""
    mess_id: str = ""
    date_of_joining: date = Field(default_factory=date.today)
    email: str = ""
    phone: str = ""
    department: str = ""
    certifications: list[str] = Field(default_factory=list)
    trainings_completed: list[str] = Field(default_factory=list)

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("first_name", self.first_name, REQUIRED_MESSAGE)
        errors.require("last_name", self.last_name, REQUIRED_MESSAGE)
        errors.require("position", self.position, REQUIRED_MESSAGE)
        errors.require("mess_id", self.mess_id, REQUIRED_MESSAGE)
        return errors


class CertificationRequest(ApiModel):
    certification: str


class TrainingRequest(ApiModel):
    training: str


# ═════════════════════════════════════════════════════════════════════
# Menus / Meals / Variants
# ═════════════════════════════════════════════════════════════════════


class MenuRecord(Record):
    mess_id: str = ""
    menu_date: Optional[date] = Field(default=None, alias="date")
    day_of_week: str = ""
    season: Optional[str] = None
    status: MenuStatus = MenuStatus.draft
    approval_notes: Optional[str] = None


class MenuForm(FormDraft):
    mess_id: str = ""
    menu_date: Optional[date] = Field(default=None, alias="date")
    day_of_week: str = ""
    season: str = ""

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("mess_id", self.mess_id, ALL_REQUIRED_MESSAGE)
        errors.require("date", self.menu_date, ALL_REQUIRED_MESSAGE)
        errors.require("day_of_week", self.day_of_week, ALL_REQUIRED_MESSAGE)
        return errors


class CloneMenuRequest(FormDraft):
    mess_id: str = ""
    source_date: Optional[date] = None
    target_date: Optional[date] = None

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("mess_id", self.mess_id, ALL_REQUIRED_MESSAGE)
        errors.require("source_date", self.source_date, ALL_REQUIRED_MESSAGE)
        errors.require("target_date", self.target_date, ALL_REQUIRED_MESSAGE)
        return errors


class MealRecord(Record):
    menu_id: str = ""
    name: str = ""
    meal_type: MealType = MealType.breakfast
    serve_time_start: Optional[str] = None
    serve_time_end: Optional[str] = None
    is_serving: bool = False


class MealForm(FormDraft):
    menu_id: str = ""
    name: str = ""
    meal_type: Optional[MealType] = MealType.breakfast
    serve_time_start: str = "07:00"
    serve_time_end: str = "09:00"

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("menu_id", self.menu_id, ALL_REQUIRED_MESSAGE)
        errors.require("name", self.name, ALL_REQUIRED_MESSAGE)
        errors.require("meal_type", self.meal_type, ALL_REQUIRED_MESSAGE)
        return errors


class ServingStatusRequest(ApiModel):
    is_serving: bool


class MealVariantRecord(Record):
    meal_id: str = ""
    recipe_id: str = ""
    variant_type: MealVariantType = MealVariantType.veg
    variant_cost: Optional[float] = None
    description: Optional[str] = None


class MealVariantForm(FormDraft):
    meal_id: str = ""
    recipe_id: str = ""
    variant_type: Optional[MealVariantType] = MealVariantType.veg
    variant_cost: float = 0
    description: str = ""

    def check(self) -> FormErrors:
        errors = FormErrors()
        errors.require("meal_id", self.meal_id, ALL_REQUIRED_MESSAGE)
        errors.require("recipe_id", self.recipe_id, ALL_REQUIRED_MESSAGE)
        errors.require("variant_type", self.variant_type, ALL_REQUIRED_MESSAGE)
        return errors


# ═════════════════════════════════════════════════════════════════════
# Safety: hygiene checks and student allergies
# ═════════════════════════════════════════════════════════════════════


class HygieneCheckRequest(ApiModel):
    """Eight category scores, each out of 50."""

    mess_id: str
    check_date: datetime = Field(default_factory=datetime.now)
    inspector_name: str
    cleanliness_score: int
    temperature_control_score: int
    equipment_maintenance_score: int
    storage_conditions_score: int
    water_quality_score: int
    waste_management_score: int
    staff_hygiene_score: int
    staff_lunch_assistant_score: int
    notes: Optional[str] = None


class HygieneCheckRecord(Record):
    mess_id: str = ""
    inspector_name: str = ""
    overall_score: int = 0
    status: HygieneResult = HygieneResult.failed
    approved_for_meal_service: bool = False


class StudentAllergyRequest(ApiModel):
    allergen_id: str
    severity: AllergySeverity
    description: Optional[str] = None
    doctor_name: Optional[str] = None
    doctor_contact_number: Optional[str] = None
    verification_document_url: Optional[str] = None
    verification_date: Optional[datetime] = None


class StudentAllergyRecord(Record):
    enrollment_id: Optional[str] = None
    allergen_id: str = ""
    severity: AllergySeverity = AllergySeverity.mild
    description: Optional[str] = None
    is_verified: bool = False
