import os
from pathlib import Path

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.rules.loader import load_rules
from src.rules.models import Rules


@pytest.fixture
def test_data_dir(tmp_path):
    return str(tmp_path)


@pytest.fixture
def db_path(test_data_dir) -> str:
    """A fresh SQLite database with every migration applied."""
    path = os.path.join(test_data_dir, "blog.db")
    SQLiteMigrator(path, "migrations").run_migrations()
    return path


@pytest.fixture
def rules() -> Rules:
    # Load REAL rules from project root
    rules_path = Path("rules.yaml").resolve()
    if not rules_path.exists():
        raise FileNotFoundError(f"Rules not found at {rules_path}")
    return load_rules(rules_path)
