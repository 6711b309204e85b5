"""Wallet file persistence: JSON object of objects of objects of strings.

    {"category": {"item": {"entry key": "entry value", ...}, ...}, ...}

Output is compact (no whitespace), keys ascending, non-ASCII written as-is
and no trailing newline, so saving an unchanged wallet reproduces the file
byte for byte.
"""

from __future__ import annotations

import json
import logging
import os
import re
import stat
import tempfile
from pathlib import Path

from keywallet.errors import LoadError, SaveError
from keywallet.store.models import Category, Item, Wallet

logger = logging.getLogger(__name__)

_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)

_SIMPLE_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "'": "'",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
}


def unescape(value: str) -> str:
    """Resolve backslash escapes left in a decoded string value.

    Handles the JSON escapes plus ``\\'`` and ``\\0``. Unrecognized
    sequences such as ``\\q`` and a lone trailing backslash are kept as-is.
    """
    def _replace(match: re.Match) -> str:
        seq = match.group(1)
        if len(seq) == 5 and seq[0] == "u":
            return chr(int(seq[1:], 16))
        return _SIMPLE_ESCAPES.get(seq, match.group(0))

    return _ESCAPE_RE.sub(_replace, value)


def dumps(node: Wallet | Category | Item) -> str:
    """Canonical JSON text for any level of the tree."""
    return json.dumps(node.to_dict(), ensure_ascii=False, separators=(",", ":"))


def _expect_object(value, where: str) -> dict:
    if not isinstance(value, dict):
        raise ValueError(f"expected a JSON object at {where}, got {type(value).__name__}")
    return value


def wallet_from_dict(data, *, unescape_values: bool = True) -> Wallet:
    """Build a Wallet from decoded JSON, validating the three-level shape.

    Raises:
        ValueError: If the data is not an object of objects of objects of
            strings.
    """
    wallet = Wallet()
    for cat_ident, items in _expect_object(data, "top level").items():
        category = wallet.new_category(cat_ident)
        for item_ident, entries in _expect_object(items, f"'{cat_ident}'").items():
            item = category.new_item(item_ident)
            where = f"'{cat_ident}' / '{item_ident}'"
            for key, value in _expect_object(entries, where).items():
                if not isinstance(value, str):
                    raise ValueError(
                        f"expected a string value at {where} / '{key}',"
                        f" got {type(value).__name__}"
                    )
                item.add_entry(key, unescape(value) if unescape_values else value)
    return wallet


def load_wallet(
    path: Path | str,
    *,
    unescape_values: bool = True,
    create_missing: bool = False,
) -> Wallet:
    """Read a wallet file into a new Wallet.

    Raises:
        LoadError: If the file cannot be read, is not valid JSON, or does not
            have the wallet shape.
    """
    path = Path(path)
    if create_missing and not path.exists():
        logger.info("Wallet file %s does not exist, starting empty", path)
        return Wallet()

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise LoadError(path, str(e)) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(path, f"invalid JSON: {e}") from e

    try:
        wallet = wallet_from_dict(data, unescape_values=unescape_values)
    except ValueError as e:
        raise LoadError(path, str(e)) from e

    logger.info("Loaded %d categories from %s", wallet.size(), path)
    return wallet


def save_wallet(wallet: Wallet, path: Path | str) -> None:
    """Overwrite ``path`` with the wallet's canonical JSON.

    Writes to a temp file in the same directory and swaps it into place. An
    existing file keeps its permission bits.

    Raises:
        SaveError: If the file cannot be written.
    """
    path = Path(path)
    payload = dumps(wallet)
    directory = path.parent
    try:
        fd, tmp_path = tempfile.mkstemp(prefix=".wallet_", suffix=".json", dir=directory)
    except OSError as e:
        raise SaveError(path, str(e)) from e

    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            if path.exists():
                os.chmod(tmp_path, stat.S_IMODE(path.stat().st_mode))
            f.write(payload)
        os.replace(tmp_path, path)
    except (OSError, UnicodeEncodeError) as e:
        raise SaveError(path, str(e)) from e
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)

    logger.info("Saved %d categories to %s", wallet.size(), path)
