"""keywallet: a JSON-backed category/item/entry store driven from the command line."""

__version__ = "0.1.0"
