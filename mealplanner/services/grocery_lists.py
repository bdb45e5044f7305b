"""
Grocery lists persistence service.

Provides CRUD operations for grocery lists and their items. Every mutation
is a read-modify-write of the whole grocery lists collection.
"""

import logging
from typing import Optional

from mealplanner.errors import NotFoundError
from mealplanner.models.grocery import (
    GroceryCategory,
    GroceryItem,
    GroceryList,
    ItemSource,
)
from mealplanner.services.store import PersistentStore

logger = logging.getLogger(__name__)


class GroceryListService:
    """Grocery lists and the routine shopping operations on their items."""

    def __init__(self, store: PersistentStore):
        self.store = store

    async def _load(self, list_id: str) -> tuple[dict[str, GroceryList], GroceryList]:
        lists = await self.store.read_grocery_lists()
        grocery_list = lists.get(list_id)
        if grocery_list is None:
            raise NotFoundError(f"Grocery list {list_id} not found")
        return lists, grocery_list

    async def _commit(self, lists: dict[str, GroceryList], grocery_list: GroceryList) -> GroceryList:
        grocery_list.touch()
        await self.store.write_grocery_lists(lists)
        return grocery_list

    # =========================================================================
    # Lists
    # =========================================================================

    async def create_list(
        self,
        name: str = "Shopping List",
        period_id: Optional[str] = None,
    ) -> GroceryList:
        lists = await self.store.read_grocery_lists()
        grocery_list = GroceryList(name=name, period_id=period_id)
        lists[grocery_list.id] = grocery_list
        await self.store.write_grocery_lists(lists)

        logger.info(f"Created grocery list {grocery_list.id} ({name})")
        return grocery_list

    async def get_list(self, list_id: str) -> GroceryList:
        _, grocery_list = await self._load(list_id)
        return grocery_list

    async def get_lists(self) -> list[GroceryList]:
        """All lists, most recently updated first."""
        lists = await self.store.read_grocery_lists()
        return sorted(lists.values(), key=lambda gl: gl.updated_at, reverse=True)

    async def find_by_period(self, period_id: str) -> Optional[GroceryList]:
        """The most recently updated list generated from ``period_id``."""
        matches = [gl for gl in await self.get_lists() if gl.period_id == period_id]
        return matches[0] if matches else None

    async def delete_list(self, list_id: str) -> None:
        lists, _ = await self._load(list_id)
        del lists[list_id]
        await self.store.write_grocery_lists(lists)
        logger.info(f"Deleted grocery list {list_id}")

    async def replace_items(
        self,
        items: list[GroceryItem],
        list_id: Optional[str] = None,
        name: str = "Shopping List",
        period_id: Optional[str] = None,
    ) -> GroceryList:
        """
        Replace a list's items wholesale in a single collection write.

        With no ``list_id`` a new list is created in that same write. Other
        lists in the collection are left as they are.
        """
        lists = await self.store.read_grocery_lists()

        if list_id is None:
            grocery_list = GroceryList(name=name, period_id=period_id)
            lists[grocery_list.id] = grocery_list
        else:
            grocery_list = lists.get(list_id)
            if grocery_list is None:
                raise NotFoundError(f"Grocery list {list_id} not found")
            if period_id is not None:
                grocery_list.period_id = period_id

        grocery_list.items = list(items)
        await self._commit(lists, grocery_list)

        logger.info(f"Wrote {len(items)} items to grocery list {grocery_list.id}")
        return grocery_list

    # =========================================================================
    # Items
    # =========================================================================

    async def add_manual_item(
        self,
        list_id: str,
        name: str,
        quantity: Optional[float] = None,
        unit: Optional[str] = None,
        category: Optional[GroceryCategory] = None,
        notes: Optional[str] = None,
    ) -> GroceryItem:
        """Append an item as typed. Manual items are never merged."""
        if not name or not name.strip():
            raise ValueError("Item name is required")

        lists, grocery_list = await self._load(list_id)
        item = GroceryItem(
            name=name,
            quantity=quantity,
            unit=unit,
            category=category,
            notes=notes,
            source=ItemSource.MANUAL,
        )
        grocery_list.items.append(item)
        await self._commit(lists, grocery_list)
        return item

    async def toggle_checked(self, list_id: str, item_id: str) -> GroceryItem:
        lists, grocery_list = await self._load(list_id)
        item = grocery_list.find_item(item_id)
        if item is None:
            raise NotFoundError(f"Grocery list item {item_id} not found")

        item.checked = not item.checked
        await self._commit(lists, grocery_list)
        return item

    async def remove_item(self, list_id: str, item_id: str) -> None:
        lists, grocery_list = await self._load(list_id)
        if grocery_list.find_item(item_id) is None:
            raise NotFoundError(f"Grocery list item {item_id} not found")

        grocery_list.items = [i for i in grocery_list.items if i.id != item_id]
        await self._commit(lists, grocery_list)

    async def clear_list(self, list_id: str) -> GroceryList:
        """Remove every item but keep the list itself."""
        lists, grocery_list = await self._load(list_id)
        grocery_list.items = []
        return await self._commit(lists, grocery_list)

    async def uncheck_all(self, list_id: str) -> GroceryList:
        lists, grocery_list = await self._load(list_id)
        for item in grocery_list.items:
            item.checked = False
        return await self._commit(lists, grocery_list)
