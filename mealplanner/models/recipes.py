"""Recipe catalog Pydantic models.

The Spoonacular API speaks camelCase; fields are declared snake_case and
parsed through a camelCase alias generator. Unknown fields are ignored.
"""

from __future__ import annotations

import html
import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CatalogModel(BaseModel):
    """Base for models parsed from catalog payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Measure(CatalogModel):
    """One regional measurement of an ingredient (us or metric)."""

    amount: Optional[float] = None
    unit_short: Optional[str] = None
    unit_long: Optional[str] = None


class Measures(CatalogModel):
    us: Optional[Measure] = None
    metric: Optional[Measure] = None


class Ingredient(CatalogModel):
    """An ingredient line as returned in ``extendedIngredients``."""

    id: Optional[int] = None
    name: str = ""
    original: Optional[str] = None
    amount: Optional[float] = None
    unit: Optional[str] = None
    aisle: Optional[str] = None
    measures: Optional[Measures] = None


class InstructionStep(CatalogModel):
    number: int = 0
    step: str = ""


class InstructionSet(CatalogModel):
    name: str = ""
    steps: list[InstructionStep] = Field(default_factory=list)


class Nutrient(CatalogModel):
    name: str
    amount: float = 0
    unit: str = ""


class Nutrition(CatalogModel):
    nutrients: list[Nutrient] = Field(default_factory=list)


# Only these are worth showing; the API returns 50+
KEY_NUTRIENTS = ("Calories", "Fat", "Carbohydrates", "Protein")

_TAG_RE = re.compile(r"<[^>]+>")


class Recipe(CatalogModel):
    """A recipe, either a summary card or a full detail payload."""

    id: int
    title: str = ""
    image: Optional[str] = None
    ready_in_minutes: Optional[int] = None
    servings: Optional[int] = None
    summary: Optional[str] = None
    source_url: Optional[str] = None
    diets: list[str] = Field(default_factory=list)
    cuisines: list[str] = Field(default_factory=list)

    # Only present when the payload came from the detail endpoint
    extended_ingredients: Optional[list[Ingredient]] = None
    analyzed_instructions: list[InstructionSet] = Field(default_factory=list)
    nutrition: Optional[Nutrition] = None

    @property
    def has_ingredients(self) -> bool:
        return bool(self.extended_ingredients)

    @property
    def summary_text(self) -> str:
        """Summary with the HTML markup the API embeds stripped out."""
        if not self.summary:
            return ""
        return html.unescape(_TAG_RE.sub("", self.summary)).strip()

    @property
    def steps(self) -> list[InstructionStep]:
        """Steps of the first instruction set (the API nests them in a list)."""
        if not self.analyzed_instructions:
            return []
        return self.analyzed_instructions[0].steps

    @property
    def key_nutrients(self) -> list[Nutrient]:
        if not self.nutrition:
            return []
        return [n for n in self.nutrition.nutrients if n.name in KEY_NUTRIENTS]


class RecipeList(BaseModel):
    """Uniform list envelope for search, random and any other listing."""

    recipes: list[Recipe] = Field(default_factory=list)
    total_results: int = 0
    offset: int = 0
    number: int = 0


class SearchFilters(BaseModel):
    """Optional search constraints. Unset or blank options are not sent."""

    diet: Optional[str] = None
    cuisine: Optional[str] = None
    max_ready_time: Optional[int] = None

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.diet:
            params["diet"] = self.diet
        if self.cuisine:
            params["cuisine"] = self.cuisine
        if self.max_ready_time:
            params["maxReadyTime"] = str(self.max_ready_time)
        return params
