"""Wallet data model and its JSON file persistence."""

from keywallet.store.models import Category, Item, Wallet

__all__ = ["Category", "Item", "Wallet"]
