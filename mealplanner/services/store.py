"""
Durable collection store.

Three named collections (saved recipes, meal plans, grocery lists) are each
kept as one JSON blob in a key-value backend. A write replaces the whole
collection in one backend call, so a collection is never partially written.
An absent collection reads back as an empty one.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

import aiosqlite
from pydantic import TypeAdapter, ValidationError

from mealplanner.errors import StorageError
from mealplanner.models.grocery import GroceryList
from mealplanner.models.planning import WeeklyPlan
from mealplanner.models.recipes import Recipe

logger = logging.getLogger(__name__)

SAVED_RECIPES = "saved_recipes"
MEAL_PLANS = "meal_plans"
GROCERY_LISTS = "grocery_lists"


# =============================================================================
# Backends
# =============================================================================


class KeyValueBackend(ABC):
    """Minimal async key -> text blob substrate."""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]: ...

    @abstractmethod
    async def set(self, key: str, value: str) -> None: ...

    @abstractmethod
    async def delete(self, key: str) -> None: ...

    async def init(self):
        pass

    async def close(self):
        pass


class MemoryBackend(KeyValueBackend):
    """In-process backend. Nothing survives the process."""

    def __init__(self):
        self.data: dict[str, str] = {}

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, key: str) -> None:
        self.data.pop(key, None)


class SQLiteBackend(KeyValueBackend):
    """SQLite file backend, one row per collection."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db: aiosqlite.Connection | None = None

    async def init(self):
        """Open the database and create the table if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.db = await aiosqlite.connect(self.db_path)
        self.db.row_factory = aiosqlite.Row

        await self.db.executescript("""
            CREATE TABLE IF NOT EXISTS collections (
                name TEXT PRIMARY KEY,
                payload TEXT NOT NULL,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            );
        """)
        await self.db.commit()

        logger.info(f"Store initialized at {self.db_path}")

    async def close(self):
        if self.db:
            await self.db.close()
            self.db = None

    def _conn(self) -> aiosqlite.Connection:
        if self.db is None:
            raise RuntimeError("SQLiteBackend used before init()")
        return self.db

    async def get(self, key: str) -> Optional[str]:
        cursor = await self._conn().execute(
            "SELECT payload FROM collections WHERE name = ?",
            (key,)
        )
        row = await cursor.fetchone()
        return row["payload"] if row else None

    async def set(self, key: str, value: str) -> None:
        db = self._conn()
        await db.execute(
            """
            INSERT OR REPLACE INTO collections (name, payload, updated_at)
            VALUES (?, ?, ?)
            """,
            (key, value, datetime.utcnow())
        )
        await db.commit()

    async def delete(self, key: str) -> None:
        db = self._conn()
        await db.execute("DELETE FROM collections WHERE name = ?", (key,))
        await db.commit()


# =============================================================================
# Typed Store
# =============================================================================


class PersistentStore:
    """Typed read/write access to the three collections."""

    _recipes = TypeAdapter(list[Recipe])
    _plans = TypeAdapter(dict[str, WeeklyPlan])
    _lists = TypeAdapter(dict[str, GroceryList])

    def __init__(self, backend: KeyValueBackend):
        self.backend = backend

    async def init(self):
        await self.backend.init()

    async def close(self):
        await self.backend.close()

    async def _read(self, name: str, adapter: TypeAdapter, default: Callable[[], Any]) -> Any:
        raw = await self.backend.get(name)
        if raw is None:
            return default()
        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Stored collection {name} is corrupt: {e}")
            raise StorageError(f"Collection {name} could not be decoded") from e

    async def _write(self, name: str, adapter: TypeAdapter, value: Any) -> None:
        await self.backend.set(name, adapter.dump_json(value).decode())
        logger.debug(f"Wrote collection {name}")

    async def read_saved_recipes(self) -> list[Recipe]:
        return await self._read(SAVED_RECIPES, self._recipes, list)

    async def write_saved_recipes(self, recipes: list[Recipe]) -> None:
        await self._write(SAVED_RECIPES, self._recipes, recipes)

    async def read_meal_plans(self) -> dict[str, WeeklyPlan]:
        return await self._read(MEAL_PLANS, self._plans, dict)

    async def write_meal_plans(self, plans: dict[str, WeeklyPlan]) -> None:
        await self._write(MEAL_PLANS, self._plans, plans)

    async def read_grocery_lists(self) -> dict[str, GroceryList]:
        return await self._read(GROCERY_LISTS, self._lists, dict)

    async def write_grocery_lists(self, lists: dict[str, GroceryList]) -> None:
        await self._write(GROCERY_LISTS, self._lists, lists)
