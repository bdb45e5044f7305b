"""
Open Food Facts product lookup for grocery items.

API: https://world.openfoodfacts.org/cgi/search.pl
Rate Limits: None enforced (be respectful, ~1 req/sec recommended)
"""

import json
import logging
from typing import Any, Optional

import httpx

from mealplanner.config import Settings, get_settings
from mealplanner.errors import ParseError, TransportError
from mealplanner.models.food import FoodProduct, FoodSearchResult
from mealplanner.services.throttle import ThrottledFetcher

logger = logging.getLogger(__name__)


class FoodLookupService:
    """Free-text product search against Open Food Facts."""

    def __init__(
        self,
        fetcher: ThrottledFetcher,
        settings: Optional[Settings] = None,
    ):
        settings = settings or get_settings()
        self.fetcher = fetcher
        self.base_url = settings.open_food_facts_base_url.rstrip("/")
        self.page_size = settings.open_food_facts_page_size

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "FoodLookupService":
        settings = settings or get_settings()
        http = httpx.AsyncClient(
            timeout=settings.http_timeout,
            headers={"User-Agent": settings.open_food_facts_user_agent},
        )
        fetcher = ThrottledFetcher(http, min_interval=settings.open_food_facts_min_interval)
        return cls(fetcher, settings)

    async def close(self):
        await self.fetcher.close()

    async def search(self, query: str) -> FoodSearchResult:
        """Search products by name, best match first."""
        query = query.strip()
        request = self.fetcher.http.build_request(
            "GET",
            f"{self.base_url}/cgi/search.pl",
            params={
                "search_terms": query,
                "search_simple": 1,
                "json": 1,
                "page_size": self.page_size,
                "fields": "code,product_name,brands,nutriments,nutrition_grade_fr",
            },
        )

        try:
            response = await self.fetcher.fetch(request)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Food lookup for {query!r} returned {e.response.status_code}")
            raise TransportError(
                f"Open Food Facts returned HTTP {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Food lookup for {query!r} failed: {e}")
            raise TransportError(f"Failed to reach Open Food Facts: {e}") from e
        except json.JSONDecodeError as e:
            raise ParseError(f"Open Food Facts returned an undecodable body: {e}") from e

        if not isinstance(data, dict):
            raise ParseError("Expected a JSON object from Open Food Facts")

        products = [
            self._parse_product(p, query)
            for p in data.get("products") or []
            if isinstance(p, dict)
        ]
        return FoodSearchResult(
            query=query,
            count=int(data.get("count") or len(products)),
            products=products,
        )

    def _parse_product(self, product: dict[str, Any], fallback_name: str) -> FoodProduct:
        """Parse one Open Food Facts product into FoodProduct."""
        nutriments = product.get("nutriments") or {}
        kcal = nutriments.get("energy-kcal_100g")
        grade = product.get("nutrition_grade_fr")

        return FoodProduct(
            code=product.get("code"),
            name=product.get("product_name") or fallback_name,
            brand=product.get("brands") or None,
            calories_per_100g=self._safe_float(kcal) if kcal is not None else None,
            nutrition_grade=grade.upper() if grade else None,
        )

    def _safe_float(self, value: Any) -> float:
        """Safely convert value to float."""
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0
