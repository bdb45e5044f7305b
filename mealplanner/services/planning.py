"""
Weekly meal plans.

Plans are keyed by ISO week ("2026-W43"). Each plan is a fixed grid of
7 days x 3 meals; a slot is empty or holds one recipe assignment.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Callable, Optional

from mealplanner.models.planning import (
    MealAssignment,
    MealType,
    PlannedMeal,
    Weekday,
    WeeklyPlan,
)
from mealplanner.services.recipes import SavedRecipeService
from mealplanner.services.store import PersistentStore

logger = logging.getLogger(__name__)


# ============================================================================
# Period Keys
# ============================================================================


def period_id_for(day: date) -> str:
    """ISO week key for a date, e.g. 2026-10-19 -> '2026-W43'."""
    year, week, _ = day.isocalendar()
    return f"{year}-W{week:02d}"


def period_start(period_id: str) -> date:
    """Monday of the week named by ``period_id``."""
    try:
        year, week = period_id.split("-W")
        return date.fromisocalendar(int(year), int(week), 1)
    except ValueError as e:
        raise ValueError(f"Invalid period id: {period_id!r}") from e


def _as_day(day: Weekday | str) -> Weekday:
    if isinstance(day, Weekday):
        return day
    try:
        return Weekday(str(day).strip().lower())
    except ValueError:
        raise ValueError(f"Invalid day: {day!r}") from None


def _as_meal_type(meal_type: MealType | str) -> MealType:
    if isinstance(meal_type, MealType):
        return meal_type
    try:
        return MealType(str(meal_type).strip().lower())
    except ValueError:
        raise ValueError(f"Invalid meal type: {meal_type!r}") from None


# ============================================================================
# Manager
# ============================================================================


class MealPlanManager:
    """CRUD over the meal plans collection."""

    def __init__(
        self,
        store: PersistentStore,
        today: Callable[[], date] = date.today,
    ):
        self.store = store
        self.today = today

    def current_period_id(self) -> str:
        return period_id_for(self.today())

    async def list_periods(self) -> list[str]:
        return sorted(await self.store.read_meal_plans())

    async def peek_plan(self, period_id: str) -> Optional[WeeklyPlan]:
        """The stored plan, or None. Never writes."""
        plans = await self.store.read_meal_plans()
        return plans.get(period_id)

    async def get_plan(self, period_id: str) -> WeeklyPlan:
        """The stored plan, creating and persisting an empty grid if absent."""
        plans = await self.store.read_meal_plans()
        plan = plans.get(period_id)
        if plan is None:
            plan = WeeklyPlan.empty(period_id)
            plans[period_id] = plan
            await self.store.write_meal_plans(plans)
            logger.info(f"Created empty meal plan for {period_id}")
        return plan

    async def assign(
        self,
        period_id: str,
        day: Weekday | str,
        meal_type: MealType | str,
        recipe_id: int,
        servings: Optional[int] = None,
    ) -> WeeklyPlan:
        """Put a recipe in a slot, replacing whatever was there."""
        day = _as_day(day)
        meal_type = _as_meal_type(meal_type)

        plans = await self.store.read_meal_plans()
        plan = plans.setdefault(period_id, WeeklyPlan.empty(period_id))
        plan.meals[day][meal_type] = MealAssignment(recipe_id=recipe_id, servings=servings)
        await self.store.write_meal_plans(plans)

        logger.info(f"Assigned recipe {recipe_id} to {period_id} {day.value} {meal_type.value}")
        return plan

    async def unassign(
        self,
        period_id: str,
        day: Weekday | str,
        meal_type: MealType | str,
    ) -> WeeklyPlan:
        """Empty a slot."""
        day = _as_day(day)
        meal_type = _as_meal_type(meal_type)

        plans = await self.store.read_meal_plans()
        plan = plans.setdefault(period_id, WeeklyPlan.empty(period_id))
        plan.meals[day][meal_type] = None
        await self.store.write_meal_plans(plans)
        return plan

    async def clear_period(self, period_id: str) -> bool:
        """Drop the whole period. The next get_plan starts from a fresh grid."""
        plans = await self.store.read_meal_plans()
        if plans.pop(period_id, None) is None:
            return False

        await self.store.write_meal_plans(plans)
        logger.info(f"Cleared meal plan {period_id}")
        return True

    async def describe_plan(
        self,
        period_id: str,
        recipes: SavedRecipeService,
    ) -> list[PlannedMeal]:
        """All 21 slots joined with saved recipes.

        A slot whose recipe has since been removed comes back with
        ``recipe=None`` (``is_missing``) instead of failing.
        """
        plan = await self.get_plan(period_id)
        saved = {r.id: r for r in await recipes.get_saved_recipes()}

        rows = []
        for day in Weekday:
            for meal_type in MealType:
                assignment = plan.slot(day, meal_type)
                rows.append(PlannedMeal(
                    day=day,
                    meal_type=meal_type,
                    assignment=assignment,
                    recipe=saved.get(assignment.recipe_id) if assignment else None,
                ))
        return rows
