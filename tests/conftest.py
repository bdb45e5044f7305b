"""
Pytest configuration and shared fixtures.

Fixtures defined here are available to all tests.
"""

import sys
from datetime import date
from pathlib import Path
from urllib.parse import urlparse

import httpx
import pytest

# Add project root to path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))

from mealplanner.config import Settings
from mealplanner.engine import MealPlannerEngine
from mealplanner.services.catalog import RecipeCatalogClient
from mealplanner.services.food_lookup import FoodLookupService
from mealplanner.services.grocery import GroceryAggregator
from mealplanner.services.grocery_lists import GroceryListService
from mealplanner.services.planning import MealPlanManager
from mealplanner.services.recipes import SavedRecipeService
from mealplanner.services.store import MemoryBackend, PersistentStore
from mealplanner.services.throttle import ThrottledFetcher


# =============================================================================
# Fakes
# =============================================================================


class FakeClock:
    """Controllable monotonic clock whose sleep just advances time."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeCatalogAPI:
    """In-process stand-in for the Spoonacular endpoints.

    Records every dispatched request along with the fake clock time it was
    sent at.
    """

    def __init__(self, clock: FakeClock):
        self.clock = clock
        self.details: dict[int, dict] = {}
        self.search_results: list[dict] = []
        self.random_results: list[dict] = []
        self.failing_ids: set[int] = set()
        self.calls: list[tuple[str, dict, float]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = urlparse(str(request.url)).path
        params = dict(request.url.params)
        self.calls.append((path, params, self.clock()))

        if path == "/recipes/complexSearch":
            return httpx.Response(200, json={
                "results": self.search_results,
                "offset": 0,
                "number": int(params.get("number", 0)),
                "totalResults": len(self.search_results),
            })

        if path == "/recipes/random":
            return httpx.Response(200, json={"recipes": self.random_results})

        if path.startswith("/recipes/") and path.endswith("/information"):
            recipe_id = int(path.split("/")[2])
            if recipe_id in self.failing_ids:
                return httpx.Response(500, json={"message": "boom"})
            if recipe_id not in self.details:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(200, json=self.details[recipe_id])

        return httpx.Response(404)

    def detail_calls(self) -> list[int]:
        return [int(path.split("/")[2]) for path, _, _ in self.calls if path.endswith("/information")]


# =============================================================================
# Settings / Clock
# =============================================================================


@pytest.fixture
def settings():
    """Settings that never read the real environment."""
    return Settings(
        _env_file=None,
        spoonacular_api_key="test-key",
        spoonacular_base_url="https://api.spoonacular.test",
        open_food_facts_base_url="https://off.test",
        store_db=":memory:",
    )


@pytest.fixture
def fake_clock():
    return FakeClock()


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def store(backend):
    return PersistentStore(backend)


@pytest.fixture
def recipe_service(store):
    return SavedRecipeService(store)


@pytest.fixture
def plan_manager(store):
    return MealPlanManager(store, today=lambda: date(2026, 10, 19))


@pytest.fixture
def list_service(store):
    return GroceryListService(store)


# =============================================================================
# Catalog Fixtures
# =============================================================================


@pytest.fixture
def catalog_api(fake_clock, recipe_a, recipe_b):
    api = FakeCatalogAPI(fake_clock)
    api.details = {recipe_a["id"]: recipe_a, recipe_b["id"]: recipe_b}
    return api


@pytest.fixture
async def catalog(catalog_api, fake_clock, settings):
    http = httpx.AsyncClient(transport=httpx.MockTransport(catalog_api.handler))
    fetcher = ThrottledFetcher(
        http,
        min_interval=settings.spoonacular_min_interval,
        clock=fake_clock,
        sleep=fake_clock.sleep,
    )
    client = RecipeCatalogClient(fetcher, settings)
    yield client
    await client.close()


@pytest.fixture
def aggregator(plan_manager, recipe_service, catalog, list_service):
    return GroceryAggregator(plan_manager, recipe_service, catalog, list_service)


@pytest.fixture
def off_products():
    """Open Food Facts search response body."""
    return {
        "count": 2,
        "page_size": 5,
        "products": [
            {
                "code": "3017620422003",
                "product_name": "Greek Yogurt",
                "brands": "Fage",
                "nutriments": {"energy-kcal_100g": 97.4},
                "nutrition_grade_fr": "a",
            },
            {
                "code": "0000000000000",
                "brands": "",
                "nutriments": {},
            },
        ],
    }


@pytest.fixture
async def food_lookup_factory(settings, fake_clock):
    """Build a FoodLookupService answering with ``handler``."""
    services = []

    def _make(handler):
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        fetcher = ThrottledFetcher(
            http,
            min_interval=settings.open_food_facts_min_interval,
            clock=fake_clock,
            sleep=fake_clock.sleep,
        )
        service = FoodLookupService(fetcher, settings)
        services.append(service)
        return service

    yield _make

    for service in services:
        await service.close()


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def engine_factory(settings, catalog_api, fake_clock, off_products):
    """Build a MealPlannerEngine over ``backend`` (memory by default) and the fake APIs.

    "Today" is pinned to Monday 2026-10-19, i.e. period 2026-W43.
    """

    def _fetcher(handler, min_interval):
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return ThrottledFetcher(http, min_interval=min_interval, clock=fake_clock, sleep=fake_clock.sleep)

    def _make(backend=None) -> MealPlannerEngine:
        engine = MealPlannerEngine(
            settings=settings,
            backend=backend or MemoryBackend(),
            catalog=RecipeCatalogClient(
                _fetcher(catalog_api.handler, settings.spoonacular_min_interval), settings
            ),
            food_lookup=FoodLookupService(
                _fetcher(lambda request: httpx.Response(200, json=off_products),
                         settings.open_food_facts_min_interval),
                settings,
            ),
        )
        engine.plans.today = lambda: date(2026, 10, 19)
        return engine

    return _make


# =============================================================================
# Sample Data Fixtures
# =============================================================================


def ingredient(name, amount, unit, us_amount=None, us_unit=None):
    """Spoonacular-shaped extendedIngredients entry."""
    ing = {"name": name, "amount": amount, "unit": unit, "original": f"{amount} {unit} {name}".strip()}
    if us_amount is not None or us_unit is not None:
        ing["measures"] = {
            "us": {"amount": us_amount, "unitShort": us_unit, "unitLong": us_unit},
            "metric": {"amount": us_amount, "unitShort": us_unit, "unitLong": us_unit},
        }
    return ing


@pytest.fixture
def recipe_a():
    """Scrambled eggs: 2 eggs, 1 cup milk."""
    return {
        "id": 101,
        "title": "Scrambled Eggs",
        "image": "https://img.test/101.jpg",
        "readyInMinutes": 10,
        "servings": 2,
        "summary": "Soft <b>scrambled</b> eggs &amp; milk.",
        "extendedIngredients": [
            ingredient("eggs", 2, "", us_amount=2, us_unit=""),
            ingredient("milk", 1, "cup", us_amount=1, us_unit="cup"),
        ],
        "analyzedInstructions": [
            {"name": "", "steps": [
                {"number": 1, "step": "Whisk eggs with milk."},
                {"number": 2, "step": "Cook gently."},
            ]},
        ],
        "nutrition": {"nutrients": [
            {"name": "Calories", "amount": 210.4, "unit": "kcal"},
            {"name": "Fat", "amount": 14.2, "unit": "g"},
            {"name": "Sodium", "amount": 180, "unit": "mg"},
            {"name": "Protein", "amount": 15.1, "unit": "g"},
        ]},
    }


@pytest.fixture
def recipe_b():
    """Creamy pasta: 1 cup milk, 200 g pasta."""
    return {
        "id": 202,
        "title": "Creamy Pasta",
        "image": "https://img.test/202.jpg",
        "readyInMinutes": 25,
        "servings": 4,
        "extendedIngredients": [
            ingredient("Milk ", 1, "cup", us_amount=1, us_unit="cup"),
            ingredient("pasta", 200, "g", us_amount=200, us_unit="g"),
        ],
    }


@pytest.fixture
def summary_card():
    """A search result card without ingredient data."""
    return {
        "id": 101,
        "title": "Scrambled Eggs",
        "image": "https://img.test/101.jpg",
        "readyInMinutes": 10,
        "servings": 2,
    }
