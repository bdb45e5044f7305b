"""
Engine facade.

Wires the store, the throttled catalog client and the planning / grocery
services together and owns their lifecycle. This is the surface a UI or
CLI drives:

    async with MealPlannerEngine() as engine:
        results = await engine.search_recipes("pasta")
        ...
        grocery_list = await engine.generate_grocery_list(engine.current_period_id())
"""

from __future__ import annotations

import logging
from typing import Optional

from mealplanner.config import Settings, get_settings
from mealplanner.models.food import FoodSearchResult
from mealplanner.models.grocery import GroceryList
from mealplanner.models.planning import PlannedMeal, WeeklyPlan
from mealplanner.models.recipes import Recipe, RecipeList, SearchFilters
from mealplanner.services.catalog import RecipeCatalogClient
from mealplanner.services.food_lookup import FoodLookupService
from mealplanner.services.grocery import GroceryAggregator
from mealplanner.services.grocery_lists import GroceryListService
from mealplanner.services.planning import MealPlanManager
from mealplanner.services.recipes import SavedRecipeService
from mealplanner.services.store import KeyValueBackend, PersistentStore, SQLiteBackend

logger = logging.getLogger(__name__)


class MealPlannerEngine:
    """Recipe data & aggregation engine."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        backend: Optional[KeyValueBackend] = None,
        catalog: Optional[RecipeCatalogClient] = None,
        food_lookup: Optional[FoodLookupService] = None,
        plans: Optional[MealPlanManager] = None,
    ):
        self.settings = settings or get_settings()
        self.store = PersistentStore(backend or SQLiteBackend(self.settings.store_db))
        self.catalog = catalog or RecipeCatalogClient.from_settings(self.settings)
        self.food_lookup = food_lookup or FoodLookupService.from_settings(self.settings)

        self.recipes = SavedRecipeService(self.store)
        self.plans = plans or MealPlanManager(self.store)
        self.lists = GroceryListService(self.store)
        self.grocery = GroceryAggregator(self.plans, self.recipes, self.catalog, self.lists)

    async def start(self):
        """Open the store."""
        logger.info("Starting meal planner engine...")
        await self.store.init()

    async def close(self):
        """Close the store and HTTP connections.

        Every close is attempted even when an earlier one fails; the failure
        is re-raised once all of them have run.
        """
        logger.info("Shutting down meal planner engine...")
        try:
            await self.store.close()
        finally:
            try:
                await self.catalog.close()
            finally:
                await self.food_lookup.close()

    async def __aenter__(self) -> "MealPlannerEngine":
        try:
            await self.start()
        except Exception:
            logger.error("Engine failed to start, releasing resources")
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    # =========================================================================
    # Catalog
    # =========================================================================

    async def search_recipes(
        self,
        query: str,
        filters: Optional[SearchFilters] = None,
    ) -> RecipeList:
        return await self.catalog.search_recipes(query, filters)

    async def get_recipe_details(self, recipe_id: int) -> Recipe:
        return await self.catalog.get_recipe_details(recipe_id)

    async def get_random_recipes(self, count: int = 3) -> RecipeList:
        return await self.catalog.get_random_recipes(count)

    async def view_recipe(self, recipe_id: int) -> Recipe:
        """Full recipe for the detail view: saved copy if complete, else fetched."""
        saved = await self.recipes.get_saved_recipe(recipe_id)
        if saved is not None and saved.has_ingredients:
            return saved
        return await self.catalog.get_recipe_details(recipe_id)

    # =========================================================================
    # Saved Recipes
    # =========================================================================

    async def save_recipe(self, recipe: Recipe) -> bool:
        return await self.recipes.save_recipe(recipe)

    async def remove_recipe(self, recipe_id: int) -> bool:
        return await self.recipes.remove_recipe(recipe_id)

    async def is_saved(self, recipe_id: int) -> bool:
        return await self.recipes.is_saved(recipe_id)

    async def get_saved_recipes(self) -> list[Recipe]:
        return await self.recipes.get_saved_recipes()

    async def toggle_saved(self, recipe_id: int, recipe: Optional[Recipe] = None) -> bool:
        """Flip the saved state of a recipe and return the new state.

        When saving without a payload (e.g. from a search card) the full
        details are fetched first so the saved copy carries ingredients.
        """
        if await self.recipes.is_saved(recipe_id):
            await self.recipes.remove_recipe(recipe_id)
            return False

        if recipe is None:
            recipe = await self.catalog.get_recipe_details(recipe_id)
        await self.recipes.save_recipe(recipe)
        return True

    # =========================================================================
    # Meal Plans
    # =========================================================================

    def current_period_id(self) -> str:
        return self.plans.current_period_id()

    async def get_plan(self, period_id: str) -> WeeklyPlan:
        return await self.plans.get_plan(period_id)

    async def describe_plan(self, period_id: str) -> list[PlannedMeal]:
        return await self.plans.describe_plan(period_id, self.recipes)

    async def assign(
        self,
        period_id: str,
        day: str,
        meal_type: str,
        recipe_id: int,
        servings: Optional[int] = None,
    ) -> WeeklyPlan:
        return await self.plans.assign(period_id, day, meal_type, recipe_id, servings)

    async def unassign(self, period_id: str, day: str, meal_type: str) -> WeeklyPlan:
        return await self.plans.unassign(period_id, day, meal_type)

    async def clear_period(self, period_id: str) -> bool:
        return await self.plans.clear_period(period_id)

    # =========================================================================
    # Grocery
    # =========================================================================

    async def generate_grocery_list(
        self,
        period_id: str,
        list_id: Optional[str] = None,
    ) -> GroceryList:
        return await self.grocery.generate_grocery_list(period_id, list_id)

    async def lookup_food(self, name: str) -> FoodSearchResult:
        return await self.food_lookup.search(name)
