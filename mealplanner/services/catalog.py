"""
Spoonacular recipe catalog client.

All three read operations go through the shared ThrottledFetcher and are
normalized into the same RecipeList shape right after the call, so nothing
downstream cares that search wraps its list in ``results`` while random
uses ``recipes``.

API: https://spoonacular.com/food-api/docs
Rate Limits: ~1 req/sec on the free tier
"""

import json
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from mealplanner.config import Settings, get_settings
from mealplanner.errors import ParseError, TransportError
from mealplanner.models.recipes import Recipe, RecipeList, SearchFilters
from mealplanner.services.throttle import ThrottledFetcher

logger = logging.getLogger(__name__)


class RecipeCatalogClient:
    """Read-only client for the Spoonacular recipe API. No retries."""

    def __init__(
        self,
        fetcher: ThrottledFetcher,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.fetcher = fetcher
        self.api_key = settings.spoonacular_api_key
        self.base_url = settings.spoonacular_base_url.rstrip("/")
        self.page_size = settings.spoonacular_page_size

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "RecipeCatalogClient":
        """Build a client with its own HTTP client and throttle."""
        settings = settings or get_settings()
        http = httpx.AsyncClient(timeout=settings.http_timeout)
        fetcher = ThrottledFetcher(http, min_interval=settings.spoonacular_min_interval)
        return cls(fetcher, settings)

    async def close(self):
        await self.fetcher.close()

    # =========================================================================
    # Catalog Operations
    # =========================================================================

    async def search_recipes(
        self,
        query: str,
        filters: Optional[SearchFilters] = None,
    ) -> RecipeList:
        """Complex search with optional diet / cuisine / max time filters."""
        params: dict[str, Any] = {
            "query": query,
            "number": self.page_size,
            "addRecipeInformation": "true",
        }
        if filters:
            params.update(filters.to_params())

        logger.info(f"Searching recipes: {query!r}")
        data = await self._get("/recipes/complexSearch", params)
        return self._to_recipe_list(data, "results")

    async def get_recipe_details(self, recipe_id: int) -> Recipe:
        """Full recipe with ingredients, instructions and nutrition."""
        logger.info(f"Getting recipe details for {recipe_id}")
        data = await self._get(
            f"/recipes/{recipe_id}/information",
            {"includeNutrition": "true"},
        )
        try:
            return Recipe.model_validate(data)
        except ValidationError as e:
            raise ParseError(f"Unexpected recipe payload for {recipe_id}: {e}") from e

    async def get_random_recipes(self, count: int = 3) -> RecipeList:
        """A handful of random recipes (used for the featured section)."""
        data = await self._get("/recipes/random", {"number": count})
        return self._to_recipe_list(data, "recipes")

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        """GET ``path`` with the API key, returning the decoded JSON body."""
        request = self.fetcher.http.build_request(
            "GET",
            f"{self.base_url}{path}",
            params={"apiKey": self.api_key, **params},
        )

        try:
            response = await self.fetcher.fetch(request)
        except httpx.HTTPError as e:
            logger.error(f"Catalog request to {path} failed: {e}")
            raise TransportError(f"Failed to reach recipe catalog: {e}") from e

        if not response.is_success:
            logger.error(f"Catalog request to {path} returned {response.status_code}")
            raise TransportError(
                f"Recipe catalog returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Catalog response from {path} is not JSON: {e}")
            raise ParseError(f"Recipe catalog returned an undecodable body: {e}") from e

    def _to_recipe_list(self, data: Any, list_key: str) -> RecipeList:
        """Normalize an endpoint-specific envelope into a RecipeList."""
        if not isinstance(data, dict) or not isinstance(data.get(list_key), list):
            # e.g. {"status": "failure", "code": 402} when the daily quota is spent
            logger.error(f"Catalog response has no '{list_key}' list: {str(data)[:200]}")
            raise ParseError(f"Expected a JSON object with a '{list_key}' list")

        try:
            recipes = [Recipe.model_validate(r) for r in data[list_key]]
        except ValidationError as e:
            raise ParseError(f"Unexpected recipe in '{list_key}': {e}") from e

        return RecipeList(
            recipes=recipes,
            total_results=data.get("totalResults", len(recipes)),
            offset=data.get("offset", 0),
            number=data.get("number", len(recipes)),
        )
