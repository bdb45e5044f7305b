#!/usr/bin/env python3
"""
mealplanner command line.

Usage:
    mealplanner search pasta --diet vegetarian --max-time 30
    mealplanner random --count 6
    mealplanner show 715538
    mealplanner save 715538
    mealplanner saved
    mealplanner assign monday dinner 715538 [--period 2026-W43]
    mealplanner unassign monday dinner [--period 2026-W43]
    mealplanner plan [--period 2026-W43]
    mealplanner clear-plan [--period 2026-W43]
    mealplanner generate [--period 2026-W43]
    mealplanner grocery [LIST_ID]
    mealplanner check LIST_ID ITEM_ID
    mealplanner add-item LIST_ID "paper towels" --quantity 2
    mealplanner lookup "greek yogurt"
"""

import argparse
import asyncio
import logging
import sys
from typing import Optional

from mealplanner.config import get_settings
from mealplanner.engine import MealPlannerEngine
from mealplanner.errors import EmptyPlanError, MealPlannerError
from mealplanner.models.grocery import GroceryList
from mealplanner.models.recipes import RecipeList, SearchFilters

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="mealplanner", description="Recipe search, meal plans and grocery lists")
    sub = parser.add_subparsers(dest="command", required=True)

    # Shared by every command that works on a plan period
    period_parent = argparse.ArgumentParser(add_help=False)
    period_parent.add_argument("--period", help="Plan period (ISO week, e.g. 2026-W43). Defaults to this week.")

    search = sub.add_parser("search", help="Search recipes")
    search.add_argument("query")
    search.add_argument("--diet")
    search.add_argument("--cuisine")
    search.add_argument("--max-time", type=int, dest="max_ready_time")

    random_cmd = sub.add_parser("random", help="Random featured recipes")
    random_cmd.add_argument("--count", type=int, default=3)

    show = sub.add_parser("show", help="Show a recipe")
    show.add_argument("recipe_id", type=int)

    save = sub.add_parser("save", help="Save or unsave a recipe")
    save.add_argument("recipe_id", type=int)

    sub.add_parser("saved", help="List saved recipes")

    assign = sub.add_parser("assign", parents=[period_parent], help="Put a saved recipe in a plan slot")
    assign.add_argument("day")
    assign.add_argument("meal_type")
    assign.add_argument("recipe_id", type=int)
    assign.add_argument("--servings", type=int)

    unassign = sub.add_parser("unassign", parents=[period_parent], help="Empty a plan slot")
    unassign.add_argument("day")
    unassign.add_argument("meal_type")

    sub.add_parser("plan", parents=[period_parent], help="Show the meal plan")
    sub.add_parser("clear-plan", parents=[period_parent], help="Remove the whole plan period")
    sub.add_parser("generate", parents=[period_parent], help="Generate the grocery list from the plan")

    grocery = sub.add_parser("grocery", help="Show grocery lists")
    grocery.add_argument("list_id", nargs="?")

    check = sub.add_parser("check", help="Toggle a grocery item")
    check.add_argument("list_id")
    check.add_argument("item_id")

    add_item = sub.add_parser("add-item", help="Add a grocery item by hand")
    add_item.add_argument("list_id")
    add_item.add_argument("name")
    add_item.add_argument("--quantity", type=float)
    add_item.add_argument("--unit")
    add_item.add_argument("--notes")

    lookup = sub.add_parser("lookup", help="Look up a food product")
    lookup.add_argument("name")

    return parser


def print_recipes(results: RecipeList, saved_ids: set[int]) -> None:
    if not results.recipes:
        print("No recipes found")
        return
    for recipe in results.recipes:
        marker = "*" if recipe.id in saved_ids else " "
        meta = []
        if recipe.ready_in_minutes:
            meta.append(f"{recipe.ready_in_minutes} min")
        if recipe.servings:
            meta.append(f"{recipe.servings} servings")
        print(f" {marker} {recipe.id:<8} {recipe.title}  {', '.join(meta)}")


def print_grocery_list(grocery_list: GroceryList) -> None:
    print(f"{grocery_list.name}  [{grocery_list.id}]  {grocery_list.checked_count}/{grocery_list.item_count} checked")
    if not grocery_list.items:
        print("  No items yet.")
    for item in grocery_list.items:
        box = "[x]" if item.checked else "[ ]"
        print(f"  {box} {item.label}  ({item.id})")


async def run(args: argparse.Namespace, engine: Optional[MealPlannerEngine] = None) -> int:
    """Run one command. ``engine`` defaults to one built from settings."""
    engine = engine or MealPlannerEngine()
    async with engine:
        period_id = getattr(args, "period", None) or engine.current_period_id()

        if args.command == "search":
            filters = SearchFilters(
                diet=args.diet,
                cuisine=args.cuisine,
                max_ready_time=args.max_ready_time,
            )
            results = await engine.search_recipes(args.query, filters)
            print_recipes(results, await engine.recipes.saved_ids())

        elif args.command == "random":
            results = await engine.get_random_recipes(args.count)
            print_recipes(results, await engine.recipes.saved_ids())

        elif args.command == "show":
            recipe = await engine.view_recipe(args.recipe_id)
            print(recipe.title)
            if recipe.summary_text:
                print(f"\n{recipe.summary_text}")
            print("\nIngredients:")
            for ing in recipe.extended_ingredients or []:
                print(f"  - {ing.original or ing.name}")
            if recipe.steps:
                print("\nInstructions:")
                for step in recipe.steps:
                    print(f"  {step.number}. {step.step}")
            for nutrient in recipe.key_nutrients:
                print(f"  {nutrient.name}: {round(nutrient.amount)}{nutrient.unit}")

        elif args.command == "save":
            saved = await engine.toggle_saved(args.recipe_id)
            print("Saved" if saved else "Removed")

        elif args.command == "saved":
            recipes = await engine.get_saved_recipes()
            if not recipes:
                print("No saved recipes yet")
            for recipe in recipes:
                print(f"  {recipe.id:<8} {recipe.title}")

        elif args.command == "assign":
            await engine.assign(period_id, args.day, args.meal_type, args.recipe_id, args.servings)
            print(f"Assigned {args.recipe_id} to {args.day} {args.meal_type} ({period_id})")

        elif args.command == "unassign":
            await engine.unassign(period_id, args.day, args.meal_type)

        elif args.command == "plan":
            print(f"Meal plan {period_id}")
            for row in await engine.describe_plan(period_id):
                print(f"  {row.day.label:<10} {row.meal_type.label:<10} {row.title or '-'}")

        elif args.command == "clear-plan":
            await engine.clear_period(period_id)

        elif args.command == "generate":
            try:
                grocery_list = await engine.generate_grocery_list(period_id)
            except EmptyPlanError:
                print("Add some meals to your plan first!")
                return 1
            print_grocery_list(grocery_list)

        elif args.command == "grocery":
            if args.list_id:
                print_grocery_list(await engine.lists.get_list(args.list_id))
            else:
                for grocery_list in await engine.lists.get_lists():
                    print_grocery_list(grocery_list)

        elif args.command == "check":
            item = await engine.lists.toggle_checked(args.list_id, args.item_id)
            print(f"{'[x]' if item.checked else '[ ]'} {item.label}")

        elif args.command == "add-item":
            item = await engine.lists.add_manual_item(
                args.list_id, args.name, args.quantity, args.unit, notes=args.notes,
            )
            print(f"Added {item.label} ({item.id})")

        elif args.command == "lookup":
            result = await engine.lookup_food(args.name)
            product = result.best_match
            if product is None:
                print("No products found.")
            else:
                line = product.name
                if product.calories_per_100g is not None:
                    line += f"  Calories: {round(product.calories_per_100g)} kcal / 100g"
                if product.nutrition_grade:
                    line += f"  Grade: {product.nutrition_grade}"
                print(line)

    return 0


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)

    args = build_parser().parse_args()
    try:
        sys.exit(asyncio.run(run(args)))
    except (MealPlannerError, ValueError) as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
