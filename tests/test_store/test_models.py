"""Tests for keywallet.store.models: Wallet/Category/Item CRUD."""

import pytest

from keywallet.errors import (
    DeletionError,
    InsertionError,
    MergeError,
    NotFoundError,
    RetrievalError,
)
from keywallet.store.models import Category, Item, Wallet


def _make_wallet() -> Wallet:
    wallet = Wallet()
    websites = wallet.new_category("Websites")
    google = websites.new_item("Google")
    google.add_entry("url", "https://www.google.com/")
    google.add_entry("username", "example@gmail.com")
    websites.new_item("Facebook").add_entry("url", "https://www.facebook.com/")
    wallet.new_category("Bank Accounts").new_item("Starling").add_entry("Sort Code", "12-34-56")
    return wallet


# ── Item ─────────────────────────────────────────────────


class TestItemEntries:
    def test_new_item_is_empty(self):
        item = Item("Google")
        assert item.size() == 0
        assert item.empty()

    def test_add_and_get(self):
        item = Item("Google")
        assert item.add_entry("url", "https://www.google.com/")
        assert item.get_entry("url") == "https://www.google.com/"
        assert item.size() == 1
        assert not item.empty()

    def test_add_existing_key_overwrites(self):
        item = Item("Google")
        item.add_entry("password", "old")
        assert item.add_entry("password", "new")
        assert item.get_entry("password") == "new"
        assert item.size() == 1

    def test_get_missing_raises(self):
        with pytest.raises(NotFoundError, match="entry 'nope'"):
            Item("Google").get_entry("nope")

    def test_retrieval_error_alias(self):
        with pytest.raises(RetrievalError):
            Item("Google").get_entry("nope")

    def test_delete(self):
        item = Item("Google", {"url": "x", "username": "y"})
        assert item.delete_entry("url")
        assert "url" not in item
        assert item.size() == 1

    def test_delete_missing_leaves_size(self):
        item = Item("Google", {"url": "x"})
        with pytest.raises(DeletionError):
            item.delete_entry("password")
        assert item.size() == 1

    def test_deletion_error_is_not_found(self):
        with pytest.raises(NotFoundError):
            Item("Google").delete_entry("password")

    def test_entries_sorted(self):
        item = Item("Google", {"username": "u", "password": "p", "url": "x"})
        assert list(item.entries) == ["password", "url", "username"]
        assert list(item) == ["password", "url", "username"]

    def test_equality_ignores_identifier(self):
        assert Item("A", {"k": "v"}) == Item("B", {"k": "v"})
        assert Item("A", {"k": "v"}) != Item("A", {"k": "w"})


class TestItemMerge:
    def test_merge_entries_overwrites(self):
        target = Item("Google", {"url": "old", "username": "me"})
        target.merge_entries(Item("Google", {"url": "new", "password": "p"}))
        assert target.entries == {"password": "p", "url": "new", "username": "me"}

    def test_merge_into_self_raises(self):
        item = Item("Google", {"url": "x"})
        with pytest.raises(MergeError):
            item.merge_entries(item)


# ── Category ─────────────────────────────────────────────


class TestCategoryItems:
    def test_new_item_get_or_create(self):
        category = Category("Websites")
        first = category.new_item("Google")
        first.add_entry("url", "x")
        second = category.new_item("Google")
        assert second is first
        assert category.size() == 1

    def test_add_item(self):
        category = Category("Websites")
        item = Item("Google")
        assert category.add_item(item)
        assert category.get_item("Google") is item

    def test_add_duplicate_item_rejected(self):
        category = Category("Websites")
        original = Item("Google", {"url": "x"})
        category.add_item(original)
        with pytest.raises(InsertionError, match="item 'Google' already exists"):
            category.add_item(Item("Google", {"url": "y"}))
        assert category.size() == 1
        assert category.get_item("Google").get_entry("url") == "x"

    def test_get_missing_raises(self):
        with pytest.raises(NotFoundError):
            Category("Websites").get_item("Google")

    def test_delete_item_cascades_entries(self):
        category = Category("Websites")
        category.new_item("Google").add_entry("url", "x")
        category.new_item("Facebook")
        assert category.delete_item("Google")
        assert category.size() == 1
        assert "Google" not in category

    def test_delete_missing_item(self):
        category = Category("Websites")
        category.new_item("Facebook")
        with pytest.raises(DeletionError):
            category.delete_item("Google")
        assert category.size() == 1

    def test_iterates_in_key_order(self):
        category = Category("Websites")
        for name in ("Twitter", "Facebook", "Google"):
            category.new_item(name)
        assert [i.identifier for i in category] == ["Facebook", "Google", "Twitter"]


class TestCategoryRenameItem:
    def test_rename_moves_entries(self):
        category = Category("Bank Accounts")
        category.new_item("Starling").add_entry("Sort Code", "12-34-56")
        renamed = category.rename_item("Starling", "Santander")
        assert renamed.identifier == "Santander"
        assert "Starling" not in category
        assert category.get_item("Santander").get_entry("Sort Code") == "12-34-56"

    def test_rename_onto_existing_leaves_category_unchanged(self):
        category = Category("Websites")
        category.new_item("Google").add_entry("url", "g")
        category.new_item("Facebook").add_entry("url", "f")
        with pytest.raises(InsertionError):
            category.rename_item("Google", "Facebook")
        assert category.get_item("Google").identifier == "Google"
        assert category.get_item("Facebook").get_entry("url") == "f"

    def test_rename_missing_raises(self):
        with pytest.raises(NotFoundError):
            Category("Websites").rename_item("Google", "Alphabet")

    def test_rename_to_same_identifier(self):
        category = Category("Websites")
        category.new_item("Google")
        category.rename_item("Google", "Google")
        assert "Google" in category


class TestCategoryMerge:
    def test_merge_items(self):
        target = Category("Websites")
        target.new_item("Google").add_entry("url", "g")
        other = Category("Websites")
        other.new_item("Google").add_entry("username", "me")
        other.new_item("Twitter").add_entry("url", "t")

        target.merge_items(other)

        assert target.to_dict() == {
            "Google": {"url": "g", "username": "me"},
            "Twitter": {"url": "t"},
        }

    def test_merged_items_are_copies(self):
        target = Category("Websites")
        other = Category("Websites")
        other.new_item("Twitter").add_entry("url", "t")
        target.merge_items(other)
        other.get_item("Twitter").add_entry("url", "changed")
        assert target.get_item("Twitter").get_entry("url") == "t"

    def test_merge_into_self_raises(self):
        category = Category("Websites")
        with pytest.raises(MergeError):
            category.merge_items(category)


# ── Wallet ───────────────────────────────────────────────


class TestWalletCategories:
    def test_empty(self):
        wallet = Wallet()
        assert wallet.size() == 0
        assert wallet.empty()

    def test_add_categories(self):
        wallet = Wallet()
        first = Category("Test")
        assert wallet.add_category(first)
        assert wallet.size() == 1
        assert wallet.get_category("Test") == first

        with pytest.raises(InsertionError):
            wallet.add_category(Category("Test"))
        assert wallet.size() == 1

        assert wallet.add_category(Category("Test2"))
        assert wallet.size() == 2

    def test_new_category_get_or_create(self):
        wallet = Wallet()
        first = wallet.new_category("Websites")
        assert wallet.new_category("Websites") is first
        assert wallet.size() == 1

    def test_get_missing_raises(self):
        with pytest.raises(NotFoundError, match="category 'Nope'"):
            Wallet().get_category("Nope")

    def test_delete_cascades(self):
        wallet = _make_wallet()
        assert wallet.delete_category("Websites")
        assert wallet.size() == 1
        assert "Websites" not in wallet
        with pytest.raises(NotFoundError):
            wallet.get_category("Websites")

    def test_delete_missing_leaves_size(self):
        wallet = _make_wallet()
        with pytest.raises(DeletionError):
            wallet.delete_category("Nope")
        assert wallet.size() == 2


class TestWalletRenameCategory:
    @pytest.mark.parametrize("n_items", [0, 1, 5])
    def test_rename_preserves_items(self, n_items):
        wallet = Wallet()
        old = wallet.new_category("Old")
        for i in range(n_items):
            old.new_item(f"item{i}").add_entry("k", str(i))
        before = old.to_dict()

        wallet.rename_category("Old", "New")

        assert "Old" not in wallet
        renamed = wallet.get_category("New")
        assert renamed.identifier == "New"
        assert renamed.size() == n_items
        assert renamed.to_dict() == before

    def test_rename_onto_existing_raises(self):
        wallet = _make_wallet()
        with pytest.raises(InsertionError):
            wallet.rename_category("Websites", "Bank Accounts")
        assert wallet.get_category("Websites").size() == 2
        assert wallet.get_category("Bank Accounts").size() == 1


class TestWalletMerge:
    def test_merge_combines_tree(self):
        wallet = _make_wallet()
        other = Wallet()
        other.new_category("Websites").new_item("Google").add_entry("password", "p")
        other.new_category("Email").new_item("Work")

        wallet.merge(other)

        assert wallet.size() == 3
        google = wallet.get_category("Websites").get_item("Google")
        assert google.get_entry("password") == "p"
        assert google.get_entry("url") == "https://www.google.com/"

    def test_merge_into_self_raises(self):
        wallet = _make_wallet()
        with pytest.raises(MergeError):
            wallet.merge(wallet)

    def test_equality(self):
        assert _make_wallet() == _make_wallet()
        other = _make_wallet()
        other.new_category("Extra")
        assert _make_wallet() != other


class TestToDict:
    def test_nested_and_sorted(self):
        data = _make_wallet().to_dict()
        assert list(data) == ["Bank Accounts", "Websites"]
        assert list(data["Websites"]) == ["Facebook", "Google"]
        assert data["Websites"]["Google"] == {
            "url": "https://www.google.com/",
            "username": "example@gmail.com",
        }

    def test_str_is_compact_json(self):
        wallet = Wallet()
        wallet.new_category("A").new_item("B").add_entry("c", "d")
        assert str(wallet) == '{"A":{"B":{"c":"d"}}}'
        assert str(wallet.get_category("A")) == '{"B":{"c":"d"}}'
        assert str(wallet.get_category("A").get_item("B")) == '{"c":"d"}'
