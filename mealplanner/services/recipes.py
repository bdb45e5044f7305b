"""
Saved recipes.

Recipes are stored whole. When the stored copy is only a summary card and a
later save brings the full detail payload, the stored copy is upgraded in
place; a complete copy is never replaced by a thinner one.
"""

import logging
from typing import Optional

from mealplanner.models.recipes import Recipe
from mealplanner.services.store import PersistentStore

logger = logging.getLogger(__name__)


class SavedRecipeService:
    """Favorites backed by the saved recipes collection."""

    def __init__(self, store: PersistentStore):
        self.store = store

    async def get_saved_recipes(self) -> list[Recipe]:
        return await self.store.read_saved_recipes()

    async def get_saved_recipe(self, recipe_id: int) -> Optional[Recipe]:
        saved = await self.store.read_saved_recipes()
        return next((r for r in saved if r.id == recipe_id), None)

    async def is_saved(self, recipe_id: int) -> bool:
        return await self.get_saved_recipe(recipe_id) is not None

    async def saved_ids(self) -> set[int]:
        """All saved ids at once, for marking a page of search results."""
        return {r.id for r in await self.store.read_saved_recipes()}

    async def save_recipe(self, recipe: Recipe) -> bool:
        """
        Save a recipe.

        Returns True only when the recipe was not saved before. Saving an
        already-saved id never adds a second entry.
        """
        saved = await self.store.read_saved_recipes()

        for idx, existing in enumerate(saved):
            if existing.id != recipe.id:
                continue
            if recipe.has_ingredients and not existing.has_ingredients:
                saved[idx] = recipe
                await self.store.write_saved_recipes(saved)
                logger.info(f"Upgraded saved recipe {recipe.id} with full details")
            else:
                logger.info(f"Recipe {recipe.id} already saved")
            return False

        saved.append(recipe)
        await self.store.write_saved_recipes(saved)
        logger.info(f"Saved recipe: {recipe.title}")
        return True

    async def remove_recipe(self, recipe_id: int) -> bool:
        """Remove a recipe. Plans that reference it are left alone."""
        saved = await self.store.read_saved_recipes()
        remaining = [r for r in saved if r.id != recipe_id]
        if len(remaining) == len(saved):
            return False

        await self.store.write_saved_recipes(remaining)
        logger.info(f"Removed recipe: {recipe_id}")
        return True
