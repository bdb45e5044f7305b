"""Open Food Facts lookup models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class FoodProduct(BaseModel):
    """Basic nutrition info for a packaged food product."""

    code: Optional[str] = None
    name: str
    brand: Optional[str] = None
    calories_per_100g: Optional[float] = None
    nutrition_grade: Optional[str] = None  # Nutri-Score letter, upper-cased


class FoodSearchResult(BaseModel):
    """Products matching a free-text query, best match first."""

    query: str
    count: int = 0
    products: list[FoodProduct] = Field(default_factory=list)

    @property
    def best_match(self) -> Optional[FoodProduct]:
        return self.products[0] if self.products else None
