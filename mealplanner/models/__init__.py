"""Pydantic models for mealplanner."""

from .recipes import (
    Ingredient,
    Measure,
    Measures,
    Nutrient,
    Recipe,
    RecipeList,
    SearchFilters,
)
from .planning import (
    MealAssignment,
    MealType,
    PlannedMeal,
    Weekday,
    WeeklyPlan,
)
from .grocery import (
    GroceryCategory,
    GroceryItem,
    GroceryList,
    ItemSource,
    MergedIngredient,
)
from .food import (
    FoodProduct,
    FoodSearchResult,
)

__all__ = [
    # Recipes
    "Ingredient",
    "Measure",
    "Measures",
    "Nutrient",
    "Recipe",
    "RecipeList",
    "SearchFilters",
    # Planning
    "MealAssignment",
    "MealType",
    "PlannedMeal",
    "Weekday",
    "WeeklyPlan",
    # Grocery
    "GroceryCategory",
    "GroceryItem",
    "GroceryList",
    "ItemSource",
    "MergedIngredient",
    # Food lookup
    "FoodProduct",
    "FoodSearchResult",
]
