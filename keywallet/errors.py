"""Exception hierarchy for keywallet.

Two families hang off WalletError:
  ArgumentError  - bad or inconsistent command-line arguments
  StoreError     - failures raised by the data model and persistence layer

The CLI catches WalletError at the top level and turns it into exit code 1.
"""

from __future__ import annotations


class WalletError(Exception):
    """Base class for every error keywallet raises on purpose."""


# ── Argument errors ──────────────────────────────────────


class ArgumentError(WalletError):
    pass


class MissingActionError(ArgumentError):
    def __init__(self):
        super().__init__("No action argument provided.")


class InvalidActionError(ArgumentError):
    def __init__(self, action: str):
        self.action = action
        super().__init__(f"Invalid action argument: '{action}'.")


class MissingDatabaseError(ArgumentError):
    def __init__(self):
        super().__init__("No database argument provided and no default_database configured.")


class MissingCategoryError(ArgumentError):
    def __init__(self, message: str = "No category argument provided."):
        super().__init__(message)


class MissingParentObjectError(ArgumentError):
    """An item was given without a category, or an entry without an item."""

    def __init__(self, child: str, parent: str):
        self.child = child
        self.parent = parent
        super().__init__(f"Cannot use {child} argument without a {parent} argument.")


class NoObjectsSpecifiedError(ArgumentError):
    def __init__(self):
        super().__init__("No category, item or entry argument provided.")


class InvalidIdentifierError(ArgumentError):
    level = "object"

    def __init__(self, message: str | None = None):
        super().__init__(message or f"New {self.level} identifier cannot be empty.")


class InvalidCategoryError(InvalidIdentifierError):
    level = "category"


class InvalidItemError(InvalidIdentifierError):
    level = "item"


class InvalidEntryError(InvalidIdentifierError):
    level = "entry"


# ── Store errors ─────────────────────────────────────────


class StoreError(WalletError):
    pass


class InsertionError(StoreError):
    """Raised when inserting a category or item under a key that is taken."""

    def __init__(self, key: str, kind: str = "object"):
        self.key = key
        self.kind = kind
        super().__init__(f"Failure adding to collection: {kind} '{key}' already exists.")


class NotFoundError(StoreError):
    def __init__(self, key: str, kind: str = "object", message: str | None = None):
        self.key = key
        self.kind = kind
        super().__init__(
            message or f"Failed to get data from collection: {kind} '{key}' not found."
        )


RetrievalError = NotFoundError


class DeletionError(NotFoundError):
    def __init__(self, key: str, kind: str = "object"):
        super().__init__(key, kind, f"Unable to delete {kind} '{key}': not found.")


class MergeError(StoreError):
    pass


class LoadError(StoreError):
    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to load wallet from {path}: {reason}")


class SaveError(StoreError):
    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to save wallet to {path}: {reason}")
