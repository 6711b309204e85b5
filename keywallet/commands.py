"""Command dispatcher: runs one create/read/update/delete action on a wallet.

The flow for every invocation is:

    parse_action -> load_wallet -> execute_<action> -> save_wallet (not READ)

Argument grammar by action:

    create  -c CAT [-i ITEM [-e KEY[,VALUE]]]
    read    [-c CAT [-i ITEM [-e KEY]]]
    update  -c CAT[:NEW] [-i ITEM[:NEW] [-e ENTRY_UPDATE]]
    delete  -c CAT [-i ITEM [-e KEY]]

where ENTRY_UPDATE is one of ``key``, ``old:new``, ``old:new,value`` or
``old,value``.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from enum import Enum
from functools import partial

from keywallet.config import Config
from keywallet.errors import (
    InvalidActionError,
    InvalidCategoryError,
    InvalidEntryError,
    InvalidIdentifierError,
    InvalidItemError,
    MissingActionError,
    MissingCategoryError,
    MissingDatabaseError,
    MissingParentObjectError,
    NoObjectsSpecifiedError,
)
from keywallet.store.models import Category, Wallet
from keywallet.store.persistence import dumps, load_wallet, save_wallet

logger = logging.getLogger(__name__)

KEY_DELIMITER = ":"
VALUE_DELIMITER = ","


class Action(Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class CommandArgs:
    """The five command-line values; ``None`` means the flag was not given."""
    database: str | None = None
    action: str | None = None
    category: str | None = None
    item: str | None = None
    entry: str | None = None

    @classmethod
    def from_namespace(cls, ns: argparse.Namespace) -> CommandArgs:
        return cls(
            database=ns.database,
            action=ns.action,
            category=ns.category,
            item=ns.item,
            entry=ns.entry,
        )


@dataclass
class EntryUpdate:
    """Parsed form of the update action's entry argument."""
    key: str
    new_key: str | None = None
    new_value: str | None = None

    @property
    def is_selector(self) -> bool:
        return self.new_key is None and self.new_value is None


def parse_action(action: str | None) -> Action:
    if action is None:
        raise MissingActionError()
    try:
        return Action(action.lower())
    except ValueError:
        raise InvalidActionError(action) from None


def _check_parents(args: CommandArgs) -> None:
    """Reject an item without a category, or an entry without an item."""
    if args.category is None and (args.item is not None or args.entry is not None):
        child = "item" if args.item is not None else "entry"
        raise MissingParentObjectError(child, "category")
    if args.item is None and args.entry is not None:
        raise MissingParentObjectError("entry", "item")


def split_rename(argument: str) -> tuple[str, str | None]:
    """Split ``"current:new"`` on the first ':'.

    Returns (current, None) when there is no ':'. The new identifier is not
    validated here; each update stage does that when it runs.
    """
    if KEY_DELIMITER not in argument:
        return argument, None
    current, new = argument.split(KEY_DELIMITER, 1)
    return current, new


def _validate_new_identifier(new_identifier: str, error_cls: type[InvalidIdentifierError]) -> None:
    if not new_identifier:
        raise error_cls()
    if KEY_DELIMITER in new_identifier:
        raise error_cls(
            f"New {error_cls.level} identifier cannot contain '{KEY_DELIMITER}':"
            f" '{new_identifier}'."
        )


def parse_entry_update(argument: str) -> EntryUpdate:
    """Parse an update entry argument; the delimiters present pick the form.

        "key"             -> selector, no change
        "old:new"         -> rename, value kept
        "old:new,value"   -> rename and replace value
        "old,value"       -> replace value (value may contain ',')

    With both delimiters the ':' must come first. A value containing ':' is
    set with the rename form onto the same key, e.g. "url:url,https://x".

    Raises:
        InvalidEntryError: If ',' comes before ':', or the new key is empty
            or holds another ':'.
    """
    colon = argument.find(KEY_DELIMITER)
    comma = argument.find(VALUE_DELIMITER)

    if colon == -1 and comma == -1:
        return EntryUpdate(argument)

    if colon == -1:
        key, new_value = argument.split(VALUE_DELIMITER, 1)
        return EntryUpdate(key, None, new_value)

    if comma != -1 and comma < colon:
        raise InvalidEntryError(
            f"Ambiguous entry argument '{argument}': '{VALUE_DELIMITER}' before"
            f" '{KEY_DELIMITER}'. Use '<key>:<key>{VALUE_DELIMITER}<value>' to set"
            f" a value containing '{KEY_DELIMITER}'."
        )

    key, rest = argument.split(KEY_DELIMITER, 1)
    if VALUE_DELIMITER in rest:
        new_key, new_value = rest.split(VALUE_DELIMITER, 1)
    else:
        new_key, new_value = rest, None
    _validate_new_identifier(new_key, InvalidEntryError)
    return EntryUpdate(key, new_key, new_value)


# ── Actions ──────────────────────────────────────────────


def execute_create(args: CommandArgs, wallet: Wallet) -> None:
    """Get-or-create the category, then the item, then set the entry."""
    if args.category is None and args.item is None and args.entry is None:
        raise NoObjectsSpecifiedError()
    _check_parents(args)

    category = wallet.new_category(args.category)
    if args.item is None:
        return

    item = category.new_item(args.item)
    if args.entry is None:
        return

    key, _, value = args.entry.partition(VALUE_DELIMITER)
    item.add_entry(key, value)


def execute_read(args: CommandArgs, wallet: Wallet) -> str:
    """Return the JSON of the addressed node, or the raw value of an entry."""
    _check_parents(args)

    if args.category is None:
        return dumps(wallet)

    category = wallet.get_category(args.category)
    if args.item is None:
        return dumps(category)

    item = category.get_item(args.item)
    if args.entry is None:
        return dumps(item)

    return item.get_entry(args.entry)


def _update_entry(category: Category, item_identifier: str, argument: str) -> None:
    update = parse_entry_update(argument)
    item = category.get_item(item_identifier)

    if update.is_selector:
        item.get_entry(update.key)
        return

    if update.new_key is None:
        item.delete_entry(update.key)
        item.add_entry(update.key, update.new_value)
    elif update.new_value is None:
        value = item.get_entry(update.key)
        item.delete_entry(update.key)
        item.add_entry(update.new_key, value)
    else:
        item.delete_entry(update.key)
        item.add_entry(update.new_key, update.new_value)


def _update_item(category: Category, item_identifier: str, new_identifier: str | None) -> None:
    if new_identifier is None:
        category.get_item(item_identifier)
        return
    _validate_new_identifier(new_identifier, InvalidItemError)
    category.rename_item(item_identifier, new_identifier)


def _update_category(wallet: Wallet, category_identifier: str, new_identifier: str | None) -> None:
    if new_identifier is None:
        return
    _validate_new_identifier(new_identifier, InvalidCategoryError)
    wallet.rename_category(category_identifier, new_identifier)


def execute_update(args: CommandArgs, wallet: Wallet) -> None:
    """Apply the entry, item and category sub-updates, in that order.

    Each rename invalidates the key the shallower stage would look up by, so
    the stages run leaf to root. A failing stage leaves the stages before it
    applied in memory; the caller does not save in that case.
    """
    if args.category is None and args.item is None and args.entry is None:
        raise NoObjectsSpecifiedError()
    _check_parents(args)

    category_identifier, new_category_identifier = split_rename(args.category)
    category = wallet.get_category(category_identifier)

    stages = []
    if args.item is not None:
        item_identifier, new_item_identifier = split_rename(args.item)
        if args.entry is not None:
            stages.append(("entry", partial(_update_entry, category, item_identifier, args.entry)))
        stages.append(("item", partial(_update_item, category, item_identifier, new_item_identifier)))
    stages.append(
        ("category", partial(_update_category, wallet, category_identifier, new_category_identifier))
    )

    for name, stage in stages:
        logger.debug("Running %s update stage", name)
        stage()


def execute_delete(args: CommandArgs, wallet: Wallet) -> None:
    """Delete the deepest node addressed by the arguments, with everything it owns."""
    if args.category is None:
        raise MissingCategoryError()
    _check_parents(args)

    if args.item is None:
        wallet.delete_category(args.category)
        return

    category = wallet.get_category(args.category)
    if args.entry is None:
        category.delete_item(args.item)
        return

    category.get_item(args.item).delete_entry(args.entry)


_EXECUTORS = {
    Action.CREATE: execute_create,
    Action.READ: execute_read,
    Action.UPDATE: execute_update,
    Action.DELETE: execute_delete,
}


def run(args: CommandArgs, config: Config | None = None) -> str | None:
    """Run one action against the database file.

    Returns the READ output, or None for mutating actions. Mutating actions
    rewrite the file only when the action succeeds.

    Raises:
        WalletError: On any argument, lookup, load or save failure.
    """
    config = config or Config()
    action = parse_action(args.action)

    database = args.database or config.default_database
    if not database:
        raise MissingDatabaseError()

    wallet = load_wallet(
        database,
        unescape_values=config.unescape_values,
        create_missing=config.create_missing,
    )

    logger.info("Executing %s on %s", action.value, database)
    result = _EXECUTORS[action](args, wallet)

    if action is not Action.READ:
        save_wallet(wallet, database)
    return result
