from datetime import datetime
from pathlib import Path

import pytest

from techmaintain.adapters.clock import FixedClock
from techmaintain.adapters.dev_email import DevEmailAdapter
from techmaintain.adapters.store import Store, create_memory_store, create_sqlite_store
from techmaintain.app_shell.container import Services, build_services
from techmaintain.domain.entities import User
from techmaintain.rules.loader import load_rules
from techmaintain.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def migrations_dir() -> str:
    return str(PROJECT_ROOT / "migrations")


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "test.db")


@pytest.fixture
def rules() -> Rules:
    """The real rules.yaml from the project root."""
    return load_rules(PROJECT_ROOT / "rules.yaml")


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 5, 31, 0, 1))


@pytest.fixture
def sender() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def memory_store() -> Store:
    store = create_memory_store()
    seed_users(store)
    return store


@pytest.fixture
def sqlite_store(db_path: str, migrations_dir: str) -> Store:
    store = create_sqlite_store(db_path, migrations_dir)
    seed_users(store)
    return store


@pytest.fixture
def services(
    memory_store: Store, rules: Rules, clock: FixedClock, sender: DevEmailAdapter
) -> Services:
    return build_services(memory_store, rules, clock, sender)


def seed_users(store: Store) -> None:
    for user in (
        User(
            id="u-admin",
            name="Ada",
            email="ada@example.com",
            role="admin",
            approval_limits={"": 1000, "hall-a": 5000},
        ),
        User(
            id="u-tech",
            name="Tom",
            email="tom@example.com",
            role="maintenance",
            approval_limits={"": 200},
        ),
        User(id="u-op", name="Olga", email="olga@example.com", role="operator"),
    ):
        store.users.save(user)
