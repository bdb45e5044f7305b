"""
Unit tests for grocery list generation.

Tests:
- Full plan -> merged list scenario
- Saved-first resolution (no network for complete saved copies)
- Empty plans and resolution failures write nothing
- Regeneration targets the same list
"""

import pytest

from mealplanner.errors import EmptyPlanError, ResolutionError
from mealplanner.models.grocery import ItemSource
from mealplanner.models.recipes import Recipe
from mealplanner.services.store import GROCERY_LISTS

PERIOD = "2026-W43"


@pytest.fixture
async def week_plan(plan_manager):
    """Monday breakfast and Wednesday dinner: eggs; Friday lunch: pasta."""
    await plan_manager.assign(PERIOD, "monday", "breakfast", 101)
    await plan_manager.assign(PERIOD, "wednesday", "dinner", 101)
    await plan_manager.assign(PERIOD, "friday", "lunch", 202)


def lines(grocery_list):
    return [(i.name, i.quantity, i.unit) for i in grocery_list.items]


class TestGenerateGroceryList:
    """Tests for generate_grocery_list."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_week_scenario(self, aggregator, catalog_api, week_plan):
        """A recipe planned twice is fetched once; shared ingredients are summed."""
        grocery_list = await aggregator.generate_grocery_list(PERIOD)

        assert lines(grocery_list) == [
            ("eggs", 2.0, ""),
            ("milk", 2.0, "cup"),
            ("pasta", 200.0, "g"),
        ]
        assert catalog_api.detail_calls() == [101, 202]
        assert grocery_list.period_id == PERIOD
        assert grocery_list.name == "Week of Oct 19, 2026"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_items_fresh(self, aggregator, week_plan):
        grocery_list = await aggregator.generate_grocery_list(PERIOD)

        assert all(not item.checked for item in grocery_list.items)
        assert all(item.source == ItemSource.GENERATED for item in grocery_list.items)
        milk = next(i for i in grocery_list.items if i.name == "milk")
        assert milk.recipe_ids == [101, 202]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_fetches_are_throttled(self, aggregator, catalog_api, week_plan):
        await aggregator.generate_grocery_list(PERIOD)

        first, second = [t for _, _, t in catalog_api.calls]
        assert second - first >= 1.0

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_persisted(self, aggregator, list_service, week_plan):
        grocery_list = await aggregator.generate_grocery_list(PERIOD)

        stored = await list_service.get_list(grocery_list.id)
        assert lines(stored) == lines(grocery_list)


class TestSavedFirstResolution:
    """Saved copies with ingredients are used without touching the network."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_complete_saved_copies_skip_network(
        self, aggregator, recipe_service, catalog_api, recipe_a, recipe_b, week_plan
    ):
        await recipe_service.save_recipe(Recipe.model_validate(recipe_a))
        await recipe_service.save_recipe(Recipe.model_validate(recipe_b))

        grocery_list = await aggregator.generate_grocery_list(PERIOD)

        assert catalog_api.calls == []
        assert len(grocery_list.items) == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_summary_card_still_fetched(
        self, aggregator, recipe_service, catalog_api, summary_card, recipe_b, week_plan
    ):
        await recipe_service.save_recipe(Recipe.model_validate(summary_card))
        await recipe_service.save_recipe(Recipe.model_validate(recipe_b))

        await aggregator.generate_grocery_list(PERIOD)

        assert catalog_api.detail_calls() == [101]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_removed_recipe_resolved_from_catalog(
        self, aggregator, recipe_service, catalog_api, recipe_a, week_plan
    ):
        """A plan can outlive the saved recipe it points at."""
        await recipe_service.save_recipe(Recipe.model_validate(recipe_a))
        await recipe_service.remove_recipe(101)

        await aggregator.generate_grocery_list(PERIOD)

        assert catalog_api.detail_calls() == [101, 202]


class TestGenerationFailures:
    """Failures leave the store exactly as it was."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_absent_plan(self, aggregator, backend):
        with pytest.raises(EmptyPlanError) as exc_info:
            await aggregator.generate_grocery_list(PERIOD)

        assert exc_info.value.period_id == PERIOD
        assert backend.data == {}

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_empty_plan(self, aggregator, plan_manager, backend, catalog_api):
        await plan_manager.get_plan(PERIOD)
        snapshot = dict(backend.data)

        with pytest.raises(EmptyPlanError):
            await aggregator.generate_grocery_list(PERIOD)

        assert backend.data == snapshot
        assert catalog_api.calls == []

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_resolution_failure_aborts(self, aggregator, catalog_api, backend, week_plan):
        """One failed recipe fails the whole run; no partial list is written."""
        catalog_api.failing_ids.add(202)

        with pytest.raises(ResolutionError) as exc_info:
            await aggregator.generate_grocery_list(PERIOD)

        assert exc_info.value.recipe_id == 202
        assert GROCERY_LISTS not in backend.data

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_resolution_failure_keeps_existing_list(
        self, aggregator, catalog_api, list_service, week_plan
    ):
        first = await aggregator.generate_grocery_list(PERIOD)
        catalog_api.failing_ids.add(101)

        with pytest.raises(ResolutionError):
            await aggregator.generate_grocery_list(PERIOD)

        assert lines(await list_service.get_list(first.id)) == lines(first)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_unknown_recipe(self, aggregator, plan_manager):
        await plan_manager.assign(PERIOD, "sunday", "dinner", 999)

        with pytest.raises(ResolutionError) as exc_info:
            await aggregator.generate_grocery_list(PERIOD)

        assert exc_info.value.recipe_id == 999


class TestRegeneration:
    """Regenerating replaces items on the same list."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_same_list_reused(self, aggregator, list_service, plan_manager, week_plan):
        first = await aggregator.generate_grocery_list(PERIOD)
        await list_service.toggle_checked(first.id, first.items[0].id)
        await plan_manager.unassign(PERIOD, "friday", "lunch")

        second = await aggregator.generate_grocery_list(PERIOD)

        assert second.id == first.id
        assert lines(second) == [("eggs", 2.0, ""), ("milk", 1.0, "cup")]
        assert all(not item.checked for item in second.items)
        assert len(await list_service.get_lists()) == 1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_other_lists_untouched(self, aggregator, list_service, week_plan):
        other = await list_service.create_list("Party")
        await list_service.add_manual_item(other.id, "Chips")

        await aggregator.generate_grocery_list(PERIOD)

        kept = await list_service.get_list(other.id)
        assert [i.name for i in kept.items] == ["chips"]
        assert len(await list_service.get_lists()) == 2

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_explicit_target_list(self, aggregator, list_service, week_plan):
        target = await list_service.create_list("This week")
        await list_service.add_manual_item(target.id, "Paper towels")

        grocery_list = await aggregator.generate_grocery_list(PERIOD, list_id=target.id)

        assert grocery_list.id == target.id
        assert [i.name for i in grocery_list.items] == ["eggs", "milk", "pasta"]
        assert len(await list_service.get_lists()) == 1
