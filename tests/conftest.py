"""Shared test fixtures."""

import shutil
from pathlib import Path

import pytest

FIXTURE_DIR = Path(__file__).parent / "fixtures"

# Sample wallet: two categories, four items. Compact, keys ascending.
FIXTURE_WALLET = FIXTURE_DIR / "wallet.json"
FIXTURE_CONFIG = FIXTURE_DIR / "config.yaml"

SAMPLE_WALLET_JSON = FIXTURE_WALLET.read_text(encoding="utf-8")


@pytest.fixture
def wallet_file(tmp_path):
    """A writable copy of the sample wallet."""
    path = tmp_path / "wallet.json"
    shutil.copy(FIXTURE_WALLET, path)
    return path


@pytest.fixture
def empty_wallet_file(tmp_path):
    path = tmp_path / "empty.json"
    path.write_text("{}", encoding="utf-8")
    return path
