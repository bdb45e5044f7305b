"""Grocery list Pydantic models."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def new_id() -> str:
    return uuid.uuid4().hex


class GroceryCategory(str, Enum):
    """Grocery item categories for organization."""

    PRODUCE = "produce"
    MEAT_SEAFOOD = "meat_seafood"
    DAIRY = "dairy"
    BAKERY = "bakery"
    FROZEN = "frozen"
    PANTRY = "pantry"
    BEVERAGES = "beverages"
    SNACKS = "snacks"
    CONDIMENTS = "condiments"
    HOUSEHOLD = "household"
    OTHER = "other"


class ItemSource(str, Enum):
    GENERATED = "generated"
    MANUAL = "manual"


class GroceryItem(BaseModel):
    """A single item on a grocery list.

    Only ``checked`` changes during shopping; everything else is set when the
    item is created or merged.
    """

    id: str = Field(default_factory=new_id)
    name: str
    quantity: Optional[float] = None  # None = unspecified
    unit: str = ""  # "" = count / unspecified
    checked: bool = False

    category: Optional[GroceryCategory] = None
    notes: Optional[str] = None

    source: ItemSource = ItemSource.MANUAL
    recipe_ids: list[int] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("unit", mode="before")
    @classmethod
    def _normalize_unit(cls, v: Optional[str]) -> str:
        return (v or "").strip().lower()

    @property
    def label(self) -> str:
        """'2.5 cup flour', '2 eggs', or just the name when no quantity."""
        if not self.quantity:
            return self.name
        amount = round(self.quantity, 1)
        if not amount:  # e.g. 0.03 tsp would read "0 tsp"
            return self.name
        if amount == int(amount):
            amount = int(amount)
        if self.unit:
            return f"{amount} {self.unit} {self.name}"
        return f"{amount} {self.name}"


class GroceryList(BaseModel):
    """A named, ordered grocery list."""

    id: str = Field(default_factory=new_id)
    name: str = "Shopping List"
    period_id: Optional[str] = None  # Plan period it was generated from, if any
    items: list[GroceryItem] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def item_count(self) -> int:
        return len(self.items)

    @property
    def checked_count(self) -> int:
        return sum(1 for item in self.items if item.checked)

    def find_item(self, item_id: str) -> Optional[GroceryItem]:
        return next((item for item in self.items if item.id == item_id), None)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()


class MergedIngredient(BaseModel):
    """An aggregated ingredient line before it becomes a GroceryItem."""

    name: str
    unit: str = ""
    amount: float = 0
    recipe_ids: list[int] = Field(default_factory=list)

    @property
    def key(self) -> tuple[str, str]:
        return (self.name, self.unit)
