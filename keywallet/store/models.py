"""In-memory wallet tree: Wallet -> Category -> Item -> entries.

Every level is a dict keyed by identifier. Iteration and serialization always
walk keys in ascending order so a saved wallet is byte-for-byte reproducible.
A node's dict key and its ``identifier`` attribute must always agree, so
renames go through ``rename_*`` (pop, set identifier, reinsert) rather than
touching either one directly.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Iterator

from keywallet.errors import DeletionError, InsertionError, MergeError, NotFoundError

logger = logging.getLogger(__name__)


class Item:
    """A named record holding string entries."""

    def __init__(self, identifier: str, entries: dict[str, str] | None = None):
        self.identifier = identifier
        self._entries: dict[str, str] = dict(entries or {})

    def __repr__(self) -> str:
        return f"Item({self.identifier!r}, {self.entries!r})"

    def __str__(self) -> str:
        from keywallet.store.persistence import dumps

        return dumps(self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Item):
            return NotImplemented
        return self._entries == other._entries

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    @property
    def entries(self) -> dict[str, str]:
        return {key: self._entries[key] for key in sorted(self._entries)}

    def size(self) -> int:
        return len(self._entries)

    def empty(self) -> bool:
        return not self._entries

    def add_entry(self, key: str, value: str) -> bool:
        """Insert an entry, overwriting any existing value under ``key``."""
        if key in self._entries:
            logger.debug("Overwriting entry '%s' in item '%s'", key, self.identifier)
        self._entries[key] = value
        return True

    def get_entry(self, key: str) -> str:
        try:
            return self._entries[key]
        except KeyError:
            raise NotFoundError(key, "entry") from None

    def delete_entry(self, key: str) -> bool:
        if key not in self._entries:
            raise DeletionError(key, "entry")
        del self._entries[key]
        logger.debug("Deleted entry '%s' from item '%s'", key, self.identifier)
        return True

    def merge_entries(self, other: Item) -> None:
        """Copy every entry of ``other`` into this item; ``other`` wins on collisions."""
        if other is self:
            raise MergeError(f"Cannot merge item '{self.identifier}' into itself.")
        for key, value in other.entries.items():
            self.add_entry(key, value)

    def to_dict(self) -> dict[str, str]:
        return self.entries


class Category:
    """A named group of items."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        self._items: dict[str, Item] = {}

    def __repr__(self) -> str:
        return f"Category({self.identifier!r}, items={sorted(self._items)!r})"

    def __str__(self) -> str:
        from keywallet.store.persistence import dumps

        return dumps(self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Category):
            return NotImplemented
        return self._items == other._items

    def __contains__(self, item_identifier: str) -> bool:
        return item_identifier in self._items

    def __iter__(self) -> Iterator[Item]:
        for key in sorted(self._items):
            yield self._items[key]

    def size(self) -> int:
        return len(self._items)

    def empty(self) -> bool:
        return not self._items

    def new_item(self, item_identifier: str) -> Item:
        """Return the item with this identifier, creating an empty one if needed."""
        item = self._items.get(item_identifier)
        if item is None:
            item = Item(item_identifier)
            self._items[item_identifier] = item
            logger.debug("Created item '%s' in category '%s'", item_identifier, self.identifier)
        return item

    def add_item(self, item: Item) -> bool:
        """Insert ``item`` under its identifier.

        Raises:
            InsertionError: If an item with the same identifier already exists.
        """
        if item.identifier in self._items:
            raise InsertionError(item.identifier, "item")
        self._items[item.identifier] = item
        return True

    def get_item(self, item_identifier: str) -> Item:
        try:
            return self._items[item_identifier]
        except KeyError:
            raise NotFoundError(item_identifier, "item") from None

    def delete_item(self, item_identifier: str) -> bool:
        if item_identifier not in self._items:
            raise DeletionError(item_identifier, "item")
        del self._items[item_identifier]
        logger.debug("Deleted item '%s' from category '%s'", item_identifier, self.identifier)
        return True

    def rename_item(self, old_identifier: str, new_identifier: str) -> Item:
        """Move an item to a new identifier, keeping its entries.

        Leaves the category untouched if ``new_identifier`` is already taken.
        """
        item = self.get_item(old_identifier)
        if new_identifier == old_identifier:
            return item
        if new_identifier in self._items:
            raise InsertionError(new_identifier, "item")
        del self._items[old_identifier]
        item.identifier = new_identifier
        self.add_item(item)
        logger.debug("Renamed item '%s' to '%s'", old_identifier, new_identifier)
        return item

    def merge_items(self, other: Category) -> None:
        if other is self:
            raise MergeError(f"Cannot merge category '{self.identifier}' into itself.")
        for item in other:
            if item.identifier in self._items:
                self._items[item.identifier].merge_entries(item)
            else:
                self._items[item.identifier] = copy.deepcopy(item)

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {item.identifier: item.to_dict() for item in self}


class Wallet:
    """Root of the tree: every category the database file holds."""

    def __init__(self):
        self._categories: dict[str, Category] = {}

    def __repr__(self) -> str:
        return f"Wallet(categories={sorted(self._categories)!r})"

    def __str__(self) -> str:
        from keywallet.store.persistence import dumps

        return dumps(self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Wallet):
            return NotImplemented
        return self._categories == other._categories

    def __contains__(self, category_identifier: str) -> bool:
        return category_identifier in self._categories

    def __iter__(self) -> Iterator[Category]:
        for key in sorted(self._categories):
            yield self._categories[key]

    def size(self) -> int:
        return len(self._categories)

    def empty(self) -> bool:
        return not self._categories

    def new_category(self, category_identifier: str) -> Category:
        """Return the category with this identifier, creating an empty one if needed."""
        category = self._categories.get(category_identifier)
        if category is None:
            category = Category(category_identifier)
            self._categories[category_identifier] = category
            logger.debug("Created category '%s'", category_identifier)
        return category

    def add_category(self, category: Category) -> bool:
        """Insert ``category`` under its identifier.

        Raises:
            InsertionError: If a category with the same identifier already exists.
        """
        if category.identifier in self._categories:
            raise InsertionError(category.identifier, "category")
        self._categories[category.identifier] = category
        return True

    def get_category(self, category_identifier: str) -> Category:
        try:
            return self._categories[category_identifier]
        except KeyError:
            raise NotFoundError(category_identifier, "category") from None

    def delete_category(self, category_identifier: str) -> bool:
        if category_identifier not in self._categories:
            raise DeletionError(category_identifier, "category")
        del self._categories[category_identifier]
        logger.debug("Deleted category '%s'", category_identifier)
        return True

    def rename_category(self, old_identifier: str, new_identifier: str) -> Category:
        """Move a category to a new identifier, keeping its items.

        Leaves the wallet untouched if ``new_identifier`` is already taken.
        """
        category = self.get_category(old_identifier)
        if new_identifier == old_identifier:
            return category
        if new_identifier in self._categories:
            raise InsertionError(new_identifier, "category")
        del self._categories[old_identifier]
        category.identifier = new_identifier
        self.add_category(category)
        logger.debug("Renamed category '%s' to '%s'", old_identifier, new_identifier)
        return category

    def merge(self, other: Wallet) -> None:
        if other is self:
            raise MergeError("Cannot merge a wallet into itself.")
        for category in other:
            if category.identifier in self._categories:
                self._categories[category.identifier].merge_items(category)
            else:
                self._categories[category.identifier] = copy.deepcopy(category)

    def to_dict(self) -> dict[str, dict[str, dict[str, str]]]:
        return {category.identifier: category.to_dict() for category in self}

    # ── Persistence ─────────────────────────────────────────

    def load(self, path: Path | str, **kwargs) -> bool:
        """Merge the contents of a wallet file into this wallet."""
        from keywallet.store.persistence import load_wallet

        self.merge(load_wallet(path, **kwargs))
        return True

    def save(self, path: Path | str) -> bool:
        from keywallet.store.persistence import save_wallet

        save_wallet(self, path)
        return True
