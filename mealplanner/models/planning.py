"""Meal planning Pydantic models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from .recipes import Recipe


class Weekday(str, Enum):
    """The seven fixed days of a weekly plan, in display order."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class MealType(str, Enum):
    """Meal slots in a day."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class MealAssignment(BaseModel):
    """A recipe placed in one slot. The recipe is referenced, not owned."""

    recipe_id: int
    servings: Optional[int] = None  # Override of the recipe's own serving count


DayMeals = dict[MealType, Optional[MealAssignment]]


def _empty_day() -> DayMeals:
    return {meal: None for meal in MealType}


def _empty_grid() -> dict[Weekday, DayMeals]:
    return {day: _empty_day() for day in Weekday}


class WeeklyPlan(BaseModel):
    """A 7 day x 3 meal grid for one period.

    The validator back-fills any missing day or slot, so a plan loaded from
    storage always carries all 21 slots.
    """

    period_id: str
    meals: dict[Weekday, DayMeals] = Field(default_factory=_empty_grid)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    @model_validator(mode="after")
    def _fill_grid(self) -> "WeeklyPlan":
        grid = _empty_grid()
        for day, day_meals in self.meals.items():
            grid[day].update(day_meals)
        # Rebuild in canonical order (Monday..Sunday, breakfast..dinner)
        self.meals = {day: {meal: grid[day][meal] for meal in MealType} for day in Weekday}
        return self

    @classmethod
    def empty(cls, period_id: str) -> "WeeklyPlan":
        return cls(period_id=period_id)

    def slot(self, day: Weekday, meal_type: MealType) -> Optional[MealAssignment]:
        return self.meals[day][meal_type]

    def assignments(self) -> list[tuple[Weekday, MealType, MealAssignment]]:
        """Filled slots in grid order."""
        filled = []
        for day in Weekday:
            for meal in MealType:
                assignment = self.meals[day][meal]
                if assignment is not None:
                    filled.append((day, meal, assignment))
        return filled

    def recipe_ids(self) -> list[int]:
        """Distinct recipe ids, in order of first appearance."""
        seen: dict[int, None] = {}
        for _, _, assignment in self.assignments():
            seen.setdefault(assignment.recipe_id, None)
        return list(seen)

    @property
    def is_empty(self) -> bool:
        return not self.assignments()


class PlannedMeal(BaseModel):
    """One slot of a plan joined against the saved recipes."""

    day: Weekday
    meal_type: MealType
    assignment: Optional[MealAssignment] = None
    recipe: Optional[Recipe] = None

    @property
    def is_empty(self) -> bool:
        return self.assignment is None

    @property
    def is_missing(self) -> bool:
        """Assigned, but the recipe is no longer saved."""
        return self.assignment is not None and self.recipe is None

    @property
    def title(self) -> str:
        if self.assignment is None:
            return ""
        if self.recipe is None:
            return "recipe not found"
        return self.recipe.title
