"""
Grocery list generation service.

Walks a weekly meal plan, resolves each distinct recipe to its ingredients
(saved copy first, catalog second), merges duplicate ingredients and writes
the result to a grocery list.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from mealplanner.errors import EmptyPlanError, MealPlannerError, ResolutionError
from mealplanner.models.grocery import (
    GroceryCategory,
    GroceryItem,
    GroceryList,
    ItemSource,
    MergedIngredient,
)
from mealplanner.models.recipes import Ingredient, Recipe
from mealplanner.services.catalog import RecipeCatalogClient
from mealplanner.services.grocery_lists import GroceryListService
from mealplanner.services.planning import MealPlanManager, period_start
from mealplanner.services.recipes import SavedRecipeService

logger = logging.getLogger(__name__)


# ============================================================================
# Category Detection
# ============================================================================

# Keywords for auto-categorization
CATEGORY_KEYWORDS: dict[GroceryCategory, list[str]] = {
    GroceryCategory.PRODUCE: [
        "apple", "banana", "orange", "lemon", "lime", "tomato", "onion", "garlic",
        "lettuce", "spinach", "kale", "carrot", "celery", "bell pepper", "cucumber",
        "broccoli", "cauliflower", "potato", "mushroom", "avocado", "cilantro",
        "berry", "grape", "melon", "mango", "pineapple", "parsley", "basil",
        "zucchini", "squash", "eggplant", "cabbage", "asparagus", "green bean",
    ],
    GroceryCategory.MEAT_SEAFOOD: [
        "chicken", "beef", "pork", "turkey", "lamb", "steak", "sausage",
        "bacon", "ham", "salmon", "tuna", "shrimp", "fish", "cod", "tilapia",
        "crab", "lobster", "scallop", "mussels", "oyster",
    ],
    GroceryCategory.DAIRY: [
        "milk", "cheese", "yogurt", "butter", "cream", "egg", "parmesan",
        "sour cream", "half and half", "mozzarella", "cheddar",
    ],
    GroceryCategory.BAKERY: [
        "bread", "bagel", "muffin", "croissant", "bun", "tortilla",
        "pita", "naan", "baguette",
    ],
    GroceryCategory.FROZEN: [
        "frozen", "ice cream",
    ],
    GroceryCategory.CONDIMENTS: [
        "ketchup", "mustard", "mayo", "mayonnaise", "relish", "hot sauce",
        "soy sauce", "teriyaki", "bbq sauce", "salsa", "dressing",
    ],
    GroceryCategory.PANTRY: [
        "rice", "pasta", "spaghetti", "flour", "sugar", "oil", "vinegar", "sauce",
        "bean", "lentil", "oat", "cereal", "seed", "honey", "syrup", "baking",
        "salt", "pepper", "spice", "cinnamon", "cumin", "broth", "stock", "vanilla",
    ],
    GroceryCategory.BEVERAGES: [
        "water", "juice", "soda", "coffee", "tea", "wine", "beer",
    ],
    GroceryCategory.SNACKS: [
        "chip", "cracker", "cookie", "candy", "chocolate", "popcorn", "pretzel",
    ],
}


def detect_category(name: str) -> GroceryCategory:
    """Detect category from ingredient name."""
    name_lower = name.lower()

    for category, keywords in CATEGORY_KEYWORDS.items():
        for keyword in keywords:
            if keyword in name_lower:
                return category

    return GroceryCategory.OTHER


# ============================================================================
# Unit / Amount Resolution
# ============================================================================

# Each extractor returns a value or None; the first non-empty one wins.
# Falsy values (0, "") fall through to the next extractor.
Extractor = Callable[[Ingredient], object]


def _us_measure_unit(ing: Ingredient) -> Optional[str]:
    if ing.measures and ing.measures.us:
        return ing.measures.us.unit_short
    return None


def _plain_unit(ing: Ingredient) -> Optional[str]:
    return ing.unit


def _us_measure_amount(ing: Ingredient) -> Optional[float]:
    if ing.measures and ing.measures.us:
        return ing.measures.us.amount
    return None


def _plain_amount(ing: Ingredient) -> Optional[float]:
    return ing.amount


UNIT_EXTRACTORS: list[Extractor] = [_us_measure_unit, _plain_unit]
AMOUNT_EXTRACTORS: list[Extractor] = [_us_measure_amount, _plain_amount]

DEFAULT_UNIT = ""  # unitless / count
DEFAULT_AMOUNT = 1.0


def _first_value(ing: Ingredient, extractors: list[Extractor]):
    for extract in extractors:
        value = extract(ing)
        if value:
            return value
    return None


def normalize_name(name: str) -> str:
    return name.strip().lower()


def resolve_unit(ing: Ingredient) -> str:
    unit = _first_value(ing, UNIT_EXTRACTORS)
    return unit.strip().lower() if unit else DEFAULT_UNIT


def resolve_amount(ing: Ingredient) -> float:
    amount = _first_value(ing, AMOUNT_EXTRACTORS)
    return float(amount) if amount else DEFAULT_AMOUNT


# ============================================================================
# Merge
# ============================================================================

def merge_ingredients(recipes: list[Recipe]) -> list[MergedIngredient]:
    """Merge ingredients of ``recipes`` by (name, unit), summing amounts.

    "butter/tbsp" and "butter/g" stay separate lines; no unit conversion is
    attempted. Output keeps the order in which each key was first seen.
    """
    merged: dict[tuple[str, str], MergedIngredient] = {}

    for recipe in recipes:
        for ing in recipe.extended_ingredients or []:
            name = normalize_name(ing.name)
            if not name:
                continue

            unit = resolve_unit(ing)
            amount = resolve_amount(ing)
            key = (name, unit)

            entry = merged.get(key)
            if entry is None:
                entry = merged[key] = MergedIngredient(name=name, unit=unit)
            entry.amount += amount
            if recipe.id not in entry.recipe_ids:
                entry.recipe_ids.append(recipe.id)

    return list(merged.values())


def to_grocery_items(merged: list[MergedIngredient]) -> list[GroceryItem]:
    """Fresh, unchecked grocery items for merged ingredient lines."""
    return [
        GroceryItem(
            name=m.name,
            quantity=m.amount,
            unit=m.unit,
            category=detect_category(m.name),
            source=ItemSource.GENERATED,
            recipe_ids=list(m.recipe_ids),
        )
        for m in merged
    ]


# ============================================================================
# Main Generation
# ============================================================================

def _list_name(period_id: str) -> str:
    try:
        return f"Week of {period_start(period_id):%b %d, %Y}"
    except ValueError:
        return f"Meal plan {period_id}"


class GroceryAggregator:
    """Builds grocery lists from meal plans."""

    def __init__(
        self,
        plans: MealPlanManager,
        recipes: SavedRecipeService,
        catalog: RecipeCatalogClient,
        lists: GroceryListService,
    ):
        self.plans = plans
        self.recipes = recipes
        self.catalog = catalog
        self.lists = lists

    async def resolve_recipes(self, recipe_ids: list[int]) -> list[Recipe]:
        """Ingredient-bearing payloads for ``recipe_ids``, in order.

        A saved copy that already carries ingredients is used as is, with no
        network call. Anything else is fetched through the catalog. The first
        failure aborts the whole batch.
        """
        saved = {r.id: r for r in await self.recipes.get_saved_recipes()}
        resolved = []

        for recipe_id in recipe_ids:
            recipe = saved.get(recipe_id)
            if recipe is not None and recipe.has_ingredients:
                resolved.append(recipe)
                continue

            try:
                resolved.append(await self.catalog.get_recipe_details(recipe_id))
            except MealPlannerError as e:
                logger.warning(f"Failed to resolve recipe {recipe_id}: {e}")
                raise ResolutionError(recipe_id, str(e)) from e

        return resolved

    async def generate_grocery_list(
        self,
        period_id: str,
        list_id: Optional[str] = None,
    ) -> GroceryList:
        """Generate (or regenerate) the grocery list for a plan period.

        Process:
        1. Collect distinct recipe ids from the plan
        2. Resolve each to ingredients (saved copy first, catalog second)
        3. Merge by (name, unit)
        4. Replace the target list's items in one write

        Raises EmptyPlanError when nothing is assigned and ResolutionError
        when any recipe cannot be resolved. In both cases nothing is written.
        """
        plan = await self.plans.peek_plan(period_id)
        if plan is None or plan.is_empty:
            raise EmptyPlanError(period_id)

        recipe_ids = plan.recipe_ids()
        logger.info(f"Generating grocery list for {period_id} from {len(recipe_ids)} recipes")

        recipes = await self.resolve_recipes(recipe_ids)
        items = to_grocery_items(merge_ingredients(recipes))

        if list_id is None:
            existing = await self.lists.find_by_period(period_id)
            list_id = existing.id if existing else None

        result = await self.lists.replace_items(
            items,
            list_id=list_id,
            name=_list_name(period_id),
            period_id=period_id,
        )

        logger.info(f"Generated grocery list {result.id}: {len(items)} items")
        return result
